"""Persistence layer: SQLAlchemy models, storage engine and the credential store adapter."""
