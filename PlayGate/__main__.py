"""
Entry point for PlayGate application.
This module provides a command-line interface to log in, register an
account, or run the development user service.
"""

import argparse
import sys

from PlayGate.config import config
from PlayGate.core.logging import auto_configure, get_logging_manager
from PlayGate.start import client, userservice


def parse(argv=None):
    parser = argparse.ArgumentParser(prog='PlayGate', description='PlayGate starter')
    parser.add_argument('--env', default=None,
                        help='Logging environment: development, production, testing '
                             '(default: $PLAYGATE_ENV or development)')
    parser.add_argument('--log-level', default=None, type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the level chosen by --env')
    subparsers = parser.add_subparsers(dest='command', required=True, help='Available commands')

    login_parser = subparsers.add_parser('login', help='Log in and fetch game connection data')
    login_parser.add_argument('--url', default=config.USER_SERVICE_URL,
                              help=f'User service URL (default: {config.USER_SERVICE_URL})')
    login_parser.add_argument('--username', required=True, help='Account name')
    login_parser.add_argument('--password', required=True, help='Account password')
    login_parser.add_argument('--game-type', default=config.DEFAULT_GAME_TYPE,
                              help=f'Game mode (default: {config.DEFAULT_GAME_TYPE})')

    register_parser = subparsers.add_parser('register', help='Create an account')
    register_parser.add_argument('--url', default=config.USER_SERVICE_URL,
                                 help=f'User service URL (default: {config.USER_SERVICE_URL})')
    register_parser.add_argument('--username', required=True, help='Account name')
    register_parser.add_argument('--password', required=True, help='Account password')
    register_parser.add_argument('--avatar', default='', help='Avatar name')

    service_parser = subparsers.add_parser('userservice', help='Startup development user service')
    service_parser.add_argument('--host', default=config.USER_SERVICE_HOST,
                                help=f'Listening address (default: {config.USER_SERVICE_HOST})')
    service_parser.add_argument('--port', type=int, default=config.USER_SERVICE_PORT,
                                help=f'Listening port (default: {config.USER_SERVICE_PORT})')

    return parser.parse_args(argv)


def main(argv=None):
    args = parse(argv)
    auto_configure(args.env)
    manager = get_logging_manager()
    if args.log_level:
        manager.set_level(args.log_level)

    try:
        return run(args)
    finally:
        manager.shutdown()


def run(args):
    if args.command == 'login':
        outcome = client.login(args.url, args.username, args.password, args.game_type)
        return 0 if outcome.succeeded else 1
    elif args.command == 'register':
        return 0 if client.register(args.url, args.username, args.password, args.avatar) else 1
    elif args.command == 'userservice':
        userservice.userservice(host=args.host, port=args.port)
        return 0
    else:
        raise Exception('Unknown command')


if __name__ == '__main__':
    sys.exit(main())
