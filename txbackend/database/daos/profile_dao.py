"""
User Profile DAO

Purpose
-------
Data-access layer for the `UserProfile` entity:
- Create the profile row of a user
- Fetch a profile by its owner

Like every DAO here it issues statements through the `SqlExecutor` and never
controls transaction boundaries itself.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.engine import Row

from txbackend.database.entities.profile import UserProfile
from txbackend.database.helpers.sql_executor import SqlExecutor

logger = logging.getLogger(__name__)

profiles = UserProfile.__table__


class UserProfileDao:
    """Data Access Object (DAO) for the `user_profile` table."""

    def __init__(self, executor: SqlExecutor):
        self.executor = executor

    def createProfile(self, profile_id: UUID, user_id: UUID, display_name: str, bio: Optional[str] = None) -> UUID:
        """
        Insert the profile row of a user.

        Raises
        ------
        sqlalchemy.exc.IntegrityError
            If `display_name` is already used by another profile.
        """
        try:
            self.executor.execute(
                insert(profiles).values(id=profile_id, user_id=user_id, display_name=display_name, bio=bio)
            )
            return profile_id
        except Exception as e:
            logger.error("Error in UserProfileDao.createProfile. Error Message: %s", e)
            raise

    def fetchProfileByUserId(self, user_id: UUID) -> Optional[Row]:
        return self.executor.fetch_one(select(profiles).where(profiles.c.user_id == user_id))
