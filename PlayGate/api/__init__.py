"""
Client side of the user service HTTP API.
"""

from .client import UserServiceAPIClient, parse_json_object

__all__ = ['UserServiceAPIClient', 'parse_json_object']
