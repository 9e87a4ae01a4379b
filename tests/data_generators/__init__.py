"""Data generators for integration tests."""

from .blog_seeder import BlogSeeder, generate_post_document, generate_user_document

__all__ = [
    "BlogSeeder",
    "generate_post_document",
    "generate_user_document",
]
