"""API routers package.

- stremio: Stremio addon routes (manifest, stream)
"""

# Note: Routers are imported directly in api/app.py to avoid circular imports

__all__ = ["stremio"]
