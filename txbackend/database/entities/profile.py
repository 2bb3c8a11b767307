"""
User Profile ORM Model
======================

The ``UserProfile`` ORM model holds the public profile created together with
every user. It maps to the ``user_profile`` table and references its owner
through ``user_id``.

The ``display_name`` column is unique, so registering two users with the
same display name fails on the profile insert, after the user row was
already written in the same transaction.
"""

import uuid
from typing import Optional
from uuid import UUID

from sqlalchemy import TEXT, VARCHAR, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from txbackend.database.config.connection_engine import declarativeBase


class UserProfile(declarativeBase):
    """
    ORM model for the `user_profile` table.

    Attributes
    ----------
    id : UUID
        Primary key of the profile.
    user_id : UUID
        Foreign key reference to the owning `app_user` row.
    display_name : str
        Public name shown to other users (unique).
    bio : str | None
        Optional free-text biography.
    """

    __tablename__ = "user_profile"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    """Primary key. UUID of the profile."""

    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    """Foreign key reference to the `app_user` table (owner)."""

    display_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Public display name (unique across profiles)."""

    bio: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    """Optional biography."""
