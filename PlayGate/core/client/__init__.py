"""
Client side of PlayGate.

Import the handshake from ``PlayGate.core.client.handshake``; this package
stays import-light so the API client can use the shared utils without a cycle.
"""
