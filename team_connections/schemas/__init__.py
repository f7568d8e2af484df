"""Wire schemas: WebSocket command payloads, broadcasts and HTTP responses."""
