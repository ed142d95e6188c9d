"""Presigned firmware upload client."""

__version__ = "0.1.0"
