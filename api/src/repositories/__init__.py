"""MongoDB repositories for users and posts."""
