"""
ShokoBridge - Shoko anime catalog to media library season bridge
"""

__version__ = "0.1.0"
