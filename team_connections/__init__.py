"""
Team Connections: real-time team introduction sessions.

Participants join a session by code, register, mark who they already know,
and watch the resulting connection map. The server holds the authoritative
session state and keeps every attached browser in sync over WebSockets.
"""

__version__ = "0.1.0"
