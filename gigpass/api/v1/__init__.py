"""
API v1 package.

Contains versioned API routes for the gigpass account API.
"""

from gigpass.api.v1.routes import router

__all__ = ["router"]
