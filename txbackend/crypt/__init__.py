"""
The `crypt` package provides the password utilities used by user
registration.

Contents
--------
- passwords
    Module exposing the `PasswordHasher` class:
        * `hash_password`: hashes plaintext passwords using bcrypt
        * `check_password`: verifies a plaintext password against a hash
        * `is_valid_password`: validates password complexity rules
          (8+ characters with lowercase, uppercase, digit and special character)
"""

from txbackend.crypt.passwords import PasswordHasher

__all__ = ["PasswordHasher"]
