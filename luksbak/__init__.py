"""
luksbak package
- Discover LUKS volumes, back up their headers, and replicate them to local and remote destinations.
"""
__all__ = ["cli", "config", "orchestrator", "discover", "artifacts", "replicator", "util", "types", "errors", "logging"]
__version__ = "0.1.0"
