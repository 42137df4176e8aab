"""Core infrastructure: configuration, dependencies, security."""
