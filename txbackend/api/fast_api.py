"""
FastAPI Router: User Registration
==================================

Purpose
-------
Defines the HTTP API over the transactional services:
- ``POST /register``: register a user and its profile in one transaction
- ``POST /login``: check a username / password pair
- ``GET /users``: list registered users
- ``GET /users/{username}``: fetch a user with its profile

Key Notes
---------
- Input validation via Pydantic models in `txbackend.api.models`.
- The wired services live on ``app.state.services`` (see `txbackend.main`).
- Transaction failures are mapped to status codes from their primary cause:
  invalid input → 400, uniqueness violation → 409, no connection → 503.
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from txbackend.api.models import RegistrationResult, UserCredentials, UserData, UserDetails, UserList
from txbackend.database.helpers.errors import ConnectionAcquisitionError, TransactionError

logger = logging.getLogger(__name__)

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


def _services(request: Request):
    return request.app.state.services


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, ConnectionAcquisitionError):
        return HTTPException(status_code=503, detail="Database unavailable, try again later")
    cause = e.cause if isinstance(e, TransactionError) else e
    if isinstance(cause, ValueError):
        return HTTPException(status_code=400, detail=str(cause))
    if isinstance(cause, IntegrityError):
        return HTTPException(status_code=409, detail="Username, email or display name already taken")
    logger.error("Unhandled transaction failure", exc_info=e)
    return HTTPException(status_code=500, detail="Internal error")


@router.post("/register", response_model=RegistrationResult, status_code=201)
def register(data: UserData, request: Request):
    """Register a new user account together with its profile.

    Either both rows are stored or neither is.
    """
    try:
        user_id = _services(request).registration.register(
            username=data.username,
            password=data.password,
            email=data.email,
            display_name=data.display_name,
            role=data.role,
            bio=data.bio,
        )
    except (TransactionError, ConnectionAcquisitionError) as e:
        raise _http_error(e) from e
    return {"user_id": user_id}


@router.post("/login", response_model=UserDetails)
def login(data: UserCredentials, request: Request):
    """Check a username / password pair.

    Response:
        200: the user with its profile
        401: unknown user or wrong password
    """
    registration = _services(request).registration
    try:
        if not registration.check_credentials(data.username, data.password):
            raise HTTPException(status_code=401, detail="Invalid username or password")
        return registration.fetch_user(data.username)
    except (TransactionError, ConnectionAcquisitionError) as e:
        raise _http_error(e) from e


@router.get("/users", response_model=UserList)
def list_users(request: Request):
    """Return every registered user (without profiles)."""
    try:
        users = _services(request).registration.list_users()
    except (TransactionError, ConnectionAcquisitionError) as e:
        raise _http_error(e) from e
    return {"users": users}


@router.get("/users/{username}", response_model=UserDetails)
def get_user(username: str, request: Request):
    """Fetch one user with its profile; 404 if unknown."""
    try:
        user = _services(request).registration.fetch_user(username)
    except (TransactionError, ConnectionAcquisitionError) as e:
        raise _http_error(e) from e
    if user is None:
        raise HTTPException(status_code=404, detail=f"No user named '{username}'")
    return user
