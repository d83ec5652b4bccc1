"""
Development user service: users, login, connect.
"""

from .app import create_app, run
from .store import UserStore, compute_token

__all__ = ['create_app', 'run', 'UserStore', 'compute_token']
