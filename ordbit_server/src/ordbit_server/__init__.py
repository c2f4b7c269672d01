"""
ordbit-server - HTTP surface for the CAT-20 token engine.
"""

__version__ = "0.3.0"
