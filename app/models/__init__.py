"""
SQLAlchemy models for the humanizer API.
"""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Text, false
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    is_subscribed = Column(Boolean, nullable=False, default=False, server_default=false())
    subscription_id = Column(Text)
