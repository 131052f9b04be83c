"""FastAPI adapter that drives flood-it sessions over HTTP and WebSockets."""
