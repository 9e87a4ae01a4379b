"""MongoDB data seeder for users and posts using Faker.

Generates documents shaped like the ones the API stores.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from faker import Faker
from pymongo import MongoClient


def generate_user_document(fake: Optional[Faker] = None) -> Dict[str, Any]:
    """Generate a realistic user document.

    Args:
        fake: Faker instance (creates new one if not provided)

    Returns:
        User document dictionary
    """
    if fake is None:
        fake = Faker()

    created_at = fake.date_time_between(start_date="-1y", end_date="now", tzinfo=timezone.utc)
    return {
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "email": fake.unique.email(),
        "createdAt": created_at,
        "updatedAt": created_at,
    }


def generate_post_document(
    user_id: ObjectId,
    fake: Optional[Faker] = None,
    description: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Generate a post document owned by ``user_id``.

    Args:
        user_id: Owning user's id (need not exist)
        fake: Faker instance (creates new one if not provided)
        description: Fixed description; a random number as text by default
        created_at: Fixed creation time

    Returns:
        Post document dictionary
    """
    if fake is None:
        fake = Faker()

    if created_at is None:
        created_at = fake.date_time_between(start_date="-1y", end_date="now", tzinfo=timezone.utc)

    return {
        "title": fake.sentence(nb_words=4),
        "description": description if description is not None else str(random.randint(0, 100)),
        "photo": fake.image_url(),
        "userId": user_id,
        "createdAt": created_at,
        "updatedAt": created_at,
    }


class BlogSeeder:
    """Seeds the users and posts collections."""

    def __init__(
        self,
        connection_string: str,
        database: str,
        users_collection: str = "users",
        posts_collection: str = "posts",
        seed: Optional[int] = None,
    ) -> None:
        """Initialize the seeder.

        Args:
            connection_string: MongoDB connection string
            database: Database name
            users_collection: Users collection name
            posts_collection: Posts collection name
            seed: Random seed for reproducible data
        """
        self.client = MongoClient(connection_string)
        self.db = self.client[database]
        self.users = self.db[users_collection]
        self.posts = self.db[posts_collection]

        self.fake = Faker()
        if seed is not None:
            Faker.seed(seed)
            random.seed(seed)

    def seed_users(self, count: int) -> List[ObjectId]:
        """Insert ``count`` users and return their ids."""
        batch = [generate_user_document(self.fake) for _ in range(count)]
        result = self.users.insert_many(batch)
        return list(result.inserted_ids)

    def seed_posts(self, user_ids: List[ObjectId], count: int) -> List[ObjectId]:
        """Insert ``count`` posts spread over ``user_ids`` with increasing ``createdAt``.

        Returns:
            Ids in creation order
        """
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        batch = [
            generate_post_document(
                user_ids[i % len(user_ids)],
                self.fake,
                created_at=start + timedelta(minutes=i),
            )
            for i in range(count)
        ]
        result = self.posts.insert_many(batch)
        return list(result.inserted_ids)

    def clear(self) -> None:
        """Remove all users and posts."""
        self.users.delete_many({})
        self.posts.delete_many({})

    def close(self) -> None:
        """Close MongoDB connection."""
        self.client.close()

    def __enter__(self) -> "BlogSeeder":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
