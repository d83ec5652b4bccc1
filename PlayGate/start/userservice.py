"""
User service startup module for PlayGate application.
"""

import PlayGate.userservice as _userservice

__all__ = ['userservice']


def userservice(host=None, port=None):
    """
    Start the development user service.

    Args:
        host (str): Interface to bind (default from config)
        port (int): Port number (default from config, 3100)
    """
    _userservice.run(host=host, port=port)
