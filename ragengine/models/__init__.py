"""
Domain models and API schemas (pydantic).
"""
