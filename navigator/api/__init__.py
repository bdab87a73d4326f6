"""API routes package"""

from navigator.api import search, videos, trends, catalog, conversation

__all__ = ["search", "videos", "trends", "catalog", "conversation"]
