"""CLI command modules.

Command Groups:
- serve: Run the HTTP API
- release: Release lifecycle operations against the configured cluster
"""

from .release import release_app
from .serve import serve

__all__ = [
    "release_app",
    "serve",
]
