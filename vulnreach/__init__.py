"""OSV records, file URL conversion, vulnerability lookup and reachability witnesses."""

__version__ = "0.1.0"
__all__ = ["osv", "fileurl", "vulncheck", "witness"]