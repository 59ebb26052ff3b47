"""
Security delivery scheduling and resource-allocation engine.
"""

__version__ = "1.0.0"
