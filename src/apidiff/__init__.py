"""apidiff - API surface comparison and breaking-change detection."""

__version__ = "0.1.0"
