"""GMN API - article listing proxy and reader service."""

__version__ = "1.0.0"
