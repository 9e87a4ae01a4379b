"""FastAPI service exposing users and posts stored in MongoDB.

This package provides REST API endpoints for creating users and for
creating, listing, updating and deleting posts enriched with their users.
"""

__version__ = "1.0.0"
