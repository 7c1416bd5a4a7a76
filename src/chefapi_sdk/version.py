"""Version information for Chef API Python SDK"""

__version__ = "0.1.0"
