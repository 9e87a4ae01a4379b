"""Common Pydantic models shared across services."""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


class MongoDBConfig(BaseModel):
    """MongoDB connection configuration."""

    model_config = ConfigDict(frozen=True)

    connection_string: str = Field(..., description="MongoDB connection string")
    database: str = Field(..., description="Database name")
    users_collection: str = Field("users", description="Users collection name")
    posts_collection: str = Field("posts", description="Posts collection name")
    server_selection_timeout_ms: int = Field(
        5000, description="How long the driver waits for a reachable server"
    )
    max_pool_size: int = Field(100, description="Maximum pooled connections")

    @field_validator("connection_string")
    @classmethod
    def validate_connection_string(cls, v: str) -> str:
        """Validate the connection string uses a MongoDB scheme."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("connection_string must start with mongodb:// or mongodb+srv://")
        return v


class ServiceInfo(BaseModel):
    """Service information model."""

    model_config = ConfigDict(use_enum_values=True)

    service_name: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Deployment environment")
    status: HealthStatus = Field(..., description="Service health status")
    dependencies: Dict[str, HealthStatus] = Field(
        default_factory=dict, description="Dependency health status"
    )
