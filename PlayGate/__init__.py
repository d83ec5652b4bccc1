r"""
    ____  __            ______      __
   / __ \/ /___ ___  __/ ____/___ _/ /____
  / /_/ / / __ `/ / / / / __/ __ `/ __/ _ \
 / ____/ / /_/ / /_/ / /_/ / /_/ / /_/  __/
/_/   /_/\__,_/\__, /\____/\__,_/\__/\___/
              /____/

PlayGate Project - Non-blocking login handshake for networked game clients.

A client logs in to the user service, forwards the issued session together
with its game type to the connect endpoint, and receives the avatar, token
and game port it needs to join a game server.
"""

__version__ = "1.0.0"
