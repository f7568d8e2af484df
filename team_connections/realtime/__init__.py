"""WebSocket session synchronization protocol."""
