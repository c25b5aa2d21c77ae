"""
API layer.

FastAPI application factory, routers and dependency container.
"""
