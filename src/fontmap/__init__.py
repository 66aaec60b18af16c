"""Interactive explorer for font samples laid out in a 2D embedding space."""
__version__ = "0.1.0"
