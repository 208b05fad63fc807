# API module
# REST API for the web frontend:
# - Image upload and conversion endpoint
# - Health check

from .server import create_app

__all__ = ["create_app"]
