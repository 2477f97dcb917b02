"""
API route modules.
"""

from .brief import router as brief_router
from .misc import router as misc_router
from .sources import router as sources_router

__all__ = [
    "brief_router",
    "misc_router",
    "sources_router",
]
