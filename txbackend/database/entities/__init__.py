"""
Entities Package: SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the tables of the application as SQLAlchemy
2.0-typed declarative models. DAOs build Core statements against their
tables and run them through the `SqlExecutor`, so every statement joins the
transaction that is active in the current call chain.

Contents
--------
- User
    A registered user (`app_user`).
    * Unique `user_name` and `email`
    * `role` and UTC `created_on`

- UserProfile
    The public profile created together with a user (`user_profile`).
    * `user_id` (FK → app_user.id)
    * Unique `display_name`, optional `bio`
"""

from txbackend.database.entities.profile import UserProfile
from txbackend.database.entities.user import User

__all__ = ["User", "UserProfile"]
