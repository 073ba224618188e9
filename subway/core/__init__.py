"""Core infrastructure: configuration, logging, tracing, database."""
