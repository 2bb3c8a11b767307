"""
Service-layer operations for user registration and profiles.

Both service classes are marked with ``@transactional``. Once the composition
root has scanned this module and handed out proxies, every public method call
runs inside a transaction: the outermost call opens and finishes it, nested
calls (such as ``RegistrationService.register`` calling
``ProfileService.create_profile``) join it and share its connection.

A failure anywhere in ``register`` therefore rolls back both the user row and
the profile row.
"""

import logging
import re
import uuid
from typing import List, Optional
from uuid import UUID

from txbackend.crypt.passwords import PasswordHasher
from txbackend.database.daos.profile_dao import UserProfileDao
from txbackend.database.daos.user_dao import UserDao
from txbackend.database.helpers.marker import transactional

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,64}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ROLES = ("member", "admin")


@transactional
class ProfileService:
    """
    Creates and reads user profiles.

    Parameters
    ----------
    profile_dao : UserProfileDao
        DAO for the `user_profile` table.
    """

    def __init__(self, profile_dao: UserProfileDao):
        self.profile_dao = profile_dao

    def create_profile(self, user_id: UUID, display_name: str, bio: Optional[str] = None) -> UUID:
        """
        Create the profile of `user_id`.

        Parameters
        ----------
        user_id : UUID
            Owner of the profile.
        display_name : str
            Public name; must be non-empty and unique.
        bio : str, optional
            Free-text biography.

        Returns
        -------
        UUID
            Id of the new profile.

        Raises
        ------
        ValueError
            If `display_name` is blank.
        sqlalchemy.exc.IntegrityError
            If `display_name` is taken.
        """
        display_name = display_name.strip()
        if not display_name:
            raise ValueError("Display name must not be empty")
        return self.profile_dao.createProfile(uuid.uuid4(), user_id, display_name, bio)

    def fetch_profile(self, user_id: UUID) -> Optional[dict]:
        row = self.profile_dao.fetchProfileByUserId(user_id)
        return dict(row._mapping) if row is not None else None


@transactional
class RegistrationService:
    """
    Registers users together with their profile.

    Parameters
    ----------
    user_dao : UserDao
        DAO for the `app_user` table.
    profile_service : ProfileService
        The (proxied) profile service.
    hasher : PasswordHasher
        Hashes and verifies passwords.
    """

    def __init__(self, user_dao: UserDao, profile_service: ProfileService, hasher: PasswordHasher):
        self.user_dao = user_dao
        self.profile_service = profile_service
        self.hasher = hasher

    def register(
        self,
        username: str,
        password: str,
        email: str,
        display_name: str,
        role: str = "member",
        bio: Optional[str] = None,
    ) -> UUID:
        """
        Insert a user and its profile as one unit of work.

        Parameters
        ----------
        username : str
            Unique username (3-64 chars of letters, digits, ``_.-``).
        password : str
            Plaintext password; must pass `PasswordHasher.is_valid_password`.
            Only its bcrypt hash is stored.
        email : str
            Unique email address.
        display_name : str
            Unique public name stored on the profile.
        role : str, optional
            One of ``ROLES``. Default ``"member"``.
        bio : str, optional
            Profile biography.

        Returns
        -------
        UUID
            Id of the new user.

        Raises
        ------
        ValueError
            If the input is invalid.
        sqlalchemy.exc.IntegrityError
            If the username, email or display name is taken. Neither row is
            kept.
        """
        self._validate(username, password, email, role)
        password_hash = self.hasher.hash_password(password)
        user_id = self.user_dao.createUser(uuid.uuid4(), username, email, password_hash, role)
        self.profile_service.create_profile(user_id, display_name, bio)
        logger.info("Registered user '%s' (%s)", username, user_id)
        return user_id

    def fetch_user(self, username: str) -> Optional[dict]:
        """
        Fetch a user and its profile.

        Returns
        -------
        dict | None
            The user's columns plus a ``profile`` key, or None if unknown.
        """
        row = self.user_dao.fetchUser(username)
        if row is None:
            return None
        user = dict(row._mapping)
        user["profile"] = self.profile_service.fetch_profile(user["id"])
        return user

    def list_users(self) -> List[dict]:
        return [dict(row._mapping) for row in self.user_dao.fetchUsers()]

    def check_credentials(self, username: str, password: str) -> bool:
        """Return True if `username` exists and `password` matches its stored hash."""
        password_hash = self.user_dao.fetchPasswordHash(username)
        return password_hash is not None and self.hasher.check_password(password, password_hash)

    def _validate(self, username: str, password: str, email: str, role: str) -> None:
        if not USERNAME_PATTERN.match(username):
            raise ValueError(f"Invalid username: {username!r}")
        if not self.hasher.is_valid_password(password):
            raise ValueError(
                "Invalid password: use at least 8 characters with lowercase, uppercase, digit and special character"
            )
        if not EMAIL_PATTERN.match(email):
            raise ValueError(f"Invalid email address: {email!r}")
        if role not in ROLES:
            raise ValueError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")
