"""Core infrastructure: configuration, logging, security and request context."""
