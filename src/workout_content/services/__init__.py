"""
Services layer: search orchestration and media resolution.
"""

from .media_service import MediaRequest, MediaResolver, MediaStream
from .search_service import SearchService

__all__ = ["MediaRequest", "MediaResolver", "MediaStream", "SearchService"]
