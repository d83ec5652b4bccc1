"""
Core components of PlayGate: logging and the client-side handshake.
"""
