"""
AgriHub: farm analysis tools, marketplace listings and farmer support services.
"""

__version__ = "1.0.0"
