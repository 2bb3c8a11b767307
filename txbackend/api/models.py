"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class UserData(BaseModel):
    """
    Represents data required to register a new user.
    """
    username: str = Field(..., description="Desired username.", examples=["roman"])
    password: str = Field(..., description="Plaintext password; only its bcrypt hash is stored.")
    email: str = Field(..., description="Email address of the user.", examples=["roman@tribalchief.com"])
    display_name: str = Field(..., description="Public, unique display name.", examples=["Roman"])
    role: str = Field("member", description="Role of the user (`member` or `admin`).")
    bio: Optional[str] = Field(None, description="Optional profile biography.")


class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    username: str
    """The username of the user"""
    password: str
    """The plaintext password provided for authentication."""


class RegistrationResult(BaseModel):
    """Response of a successful registration."""
    user_id: UUID
    """Id of the newly registered user."""


class ProfileDetails(BaseModel):
    """Public profile of a user."""
    display_name: str
    bio: Optional[str] = None


class UserDetails(BaseModel):
    """
    A registered user as returned by the API.
    """
    id: UUID
    user_name: str
    email: str
    role: str
    created_on: datetime
    profile: Optional[ProfileDetails] = None


class UserList(BaseModel):
    """All registered users."""
    users: List[UserDetails]
