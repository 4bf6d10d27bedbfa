#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixins.

- Integer autoincrement primary key (user ids are numeric and stable)
- created_at / updated_at timestamps with server-side defaults
- kwargs constructor so models can be built without a session

Notes:
- For SQLite, func.now() maps to CURRENT_TIMESTAMP.
- Persistence goes through models.user_store.UserStore; models carry no
  session handling of their own.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


class BaseModel:
    """Base mixin for all persistent models."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        created_at/updated_at are left to DB defaults unless passed explicitly.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"
