"""cloudnuke - remove cloud resources across regions in bulk."""

__version__ = "0.1.0"
