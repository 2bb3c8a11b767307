"""
DAOs Package: Data Access Layer (SQLAlchemy 2.0 Core)
======================================================

The `daos` package provides the Data Access Layer for the application.
It encapsulates the statements run against the entity tables, providing
clean CRUD APIs for the service layer while hiding direct query details.

Conventions
-----------
- Statements are SQLAlchemy Core constructs built on the entity tables
- Statements run through `SqlExecutor`, which joins the transaction active
  in the current call chain; DAOs never commit or roll back
- DAOs surface exceptions so upper layers decide error policy

Contents
--------
- UserDao
    * Creates users
    * Fetches users by username or id, lists and counts them

- UserProfileDao
    * Creates the profile row of a user
    * Fetches a profile by owner
"""

from txbackend.database.daos.profile_dao import UserProfileDao
from txbackend.database.daos.user_dao import UserDao

__all__ = ["UserDao", "UserProfileDao"]
