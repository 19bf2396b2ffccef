"""ASGI request dispatch and everything around serving it."""
