"""
User ORM Model
==============

The ``User`` ORM model represents a registered user. It maps to the
``app_user`` table.

Key features
~~~~~~~~~~~~
- Portable UUID primary key (``id``)
- Unique username and email
- bcrypt password hash
- Role tracking (e.g., ``admin``, ``member``)
- Timezone-aware creation timestamp (UTC)

"""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import TEXT, VARCHAR, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from txbackend.database.config.connection_engine import declarativeBase


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    user_name : str
        Username chosen by the user (max 255 chars, unique).
    email : str
        Email address of the user (max 255 chars, unique).
    password : str
        bcrypt hash of the user's password.
    role : str
        Role of the user (e.g., "admin", "member").
    created_on : datetime
        Timestamp when the user registered.
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    """Primary key. UUID of the user."""

    user_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Username of the user (max length 255)."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Email address of the user (max length 255)."""

    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """bcrypt hash of the password. Never returned by the DAO's read methods."""

    role: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Role assigned to the user (e.g., admin, member)."""

    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    """Datetime when the user registered. Defaults to current UTC time."""

    def __str__(self) -> str:
        return f"User: id:{self.id}, username: {self.user_name}, email: {self.email}"
