"""
Background services for the game client.
"""

from .async_service import AsyncService, get_async_service

__all__ = ['AsyncService', 'get_async_service']
