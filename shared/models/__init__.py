"""Shared Pydantic models for the posts API."""

from .common import (
    HealthStatus,
    MongoDBConfig,
    ServiceInfo,
)

__all__ = [
    "HealthStatus",
    "MongoDBConfig",
    "ServiceInfo",
]
