"""Build cloud resource graphs for an external reconciler"""

__version__ = "0.3.0"
