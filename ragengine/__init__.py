"""
Grounded retrieval-augmented generation engine.
"""

__version__ = "0.1.0"
