"""API routers for users and posts."""
