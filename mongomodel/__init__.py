"""Model declaration checks, concern and index parsing, and index sync for MongoDB."""

__version__ = "0.1.0"
__all__ = ["common", "concerns", "errors", "indexes", "schema"]