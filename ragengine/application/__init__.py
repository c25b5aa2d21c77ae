"""
Application layer: service orchestrators, adapters and the composition root.
"""
