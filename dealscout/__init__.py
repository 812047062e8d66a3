"""
DealScout - persona-based preference learning and candidate scoring.
"""
__version__ = "1.0.0"
