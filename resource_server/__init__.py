"""Image resource delivery service.

Resolves a resource directory from a prioritized chain of configuration
sources and serves individual files from it with HTTP caching headers.
"""

__version__ = "0.1.0"
