"""
API Package: FastAPI Router • Models
=====================================

This package defines the backend's HTTP interface over the transactional
services.

Contents
--------
- fast_api
    FastAPI router with endpoints for:
      • Registration: ``POST /register`` (user + profile in one transaction)
      • Login: ``POST /login`` (username / password check)
      • Users: ``GET /users``, ``GET /users/{username}``

- models
    Pydantic data contracts for request/response validation:
      • UserData (registration input), UserCredentials (login input)
      • RegistrationResult, UserDetails, ProfileDetails, UserList (responses)

Operational Notes
-----------------
- Route handlers are plain functions; FastAPI runs them in its threadpool,
  and each request's transaction lives in that worker's context only.
- Failures are reported through their primary cause: 400 invalid input,
  401 bad credentials, 409 uniqueness violation, 503 connection pool exhausted.
"""
