"""
User DAO

Purpose
-------
Thin data-access layer for the `User` entity. Provides:
- Creation of a user row
- Lookup by username
- Listing users
- Reading the stored password hash for credential checks

Design
------
- The DAO never opens, commits or rolls back anything. Statements go through
  the `SqlExecutor`, which runs them on the connection of the transaction
  active in the current call chain (or on an ad-hoc auto-committing
  connection when there is none).
- Business logic (validation, transaction boundaries) lives in the
  transactional services of `txbackend.database.core.services`.

Usage
-----
.. code-block:: python

    executor = SqlExecutor(EngineConnectionSource(connection_engine))
    dao = UserDao(executor)
    dao.createUser(uuid.uuid4(), "roman", "roman@tribalchief.com", password_hash, "member")
    row = dao.fetchUser("roman")

Error Handling
--------------
- Write methods log the failure and re-raise; SQLAlchemy errors such as
  `IntegrityError` reach the service layer unchanged.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.engine import Row

from txbackend.database.entities.user import User
from txbackend.database.helpers.sql_executor import SqlExecutor

logger = logging.getLogger(__name__)

users = User.__table__

PUBLIC_COLUMNS = (users.c.id, users.c.user_name, users.c.email, users.c.role, users.c.created_on)
"""Columns returned by the read methods; the password hash is only read by `fetchPasswordHash`."""


class UserDao:
    """
    Data Access Object (DAO) for the `app_user` table.

    Parameters
    ----------
    executor : SqlExecutor
        Statement executor bound to the application's connection source.
    """

    def __init__(self, executor: SqlExecutor):
        self.executor = executor

    def createUser(self, user_id: UUID, username: str, email: str, password_hash: str, role: str) -> UUID:
        """
        Insert a new user row.

        Parameters
        ----------
        user_id : UUID
            Primary key of the new user.
        username : str
            Unique username.
        email : str
            Unique email address.
        password_hash : str
            bcrypt hash of the password.
        role : str
            Role of the user.

        Returns
        -------
        UUID
            The id of the inserted user.

        Raises
        ------
        sqlalchemy.exc.IntegrityError
            If the username or email is already taken.
        """
        try:
            self.executor.execute(
                insert(users).values(
                    id=user_id, user_name=username, email=email, password=password_hash, role=role
                )
            )
            return user_id
        except Exception as e:
            logger.error("Error in UserDao.createUser. Error Message: %s", e)
            raise

    def fetchUser(self, username: str) -> Optional[Row]:
        """
        Fetch a user by username.

        Returns
        -------
        Row | None
            The matching row, or None.
        """
        return self.executor.fetch_one(select(*PUBLIC_COLUMNS).where(users.c.user_name == username))

    def fetchUsers(self) -> List[Row]:
        """Fetch every user, oldest registration first."""
        return self.executor.fetch_all(select(*PUBLIC_COLUMNS).order_by(users.c.created_on, users.c.user_name))

    def fetchPasswordHash(self, username: str) -> Optional[str]:
        return self.executor.scalar(select(users.c.password).where(users.c.user_name == username))
