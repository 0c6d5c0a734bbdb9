"""Core infrastructure: configuration, logging, errors, storage, events."""
