import re

import bcrypt

PASSWORD_SPECIALS = r"[!@#$%^&*(),.?\":{}|<>]"


class PasswordHasher:
    """
    Utility class for password hashing, validation and verification.

    Methods
    -------
    hash_password(text: str) -> str
        Hashes a plaintext password using bcrypt with a generated salt.
    check_password(plain_text: str, hashed: str) -> bool
        Verifies a plaintext password against a hashed password.
    is_valid_password(password: str) -> bool
        Validates that a password meets the complexity rules:
        - At least 8 characters
        - At least one lowercase letter
        - At least one uppercase letter
        - At least one digit
        - At least one special character
    """

    def __init__(self, rounds: int = 12):
        """
        Parameters
        ----------
        rounds : int, optional
            bcrypt work factor. Default is 12.
        """
        self.rounds = rounds

    def hash_password(self, text: str) -> str:
        """
        Hash a plaintext password using bcrypt.

        Parameters
        ----------
        text : str
            The plaintext password.

        Returns
        -------
        str
            The bcrypt-hashed password (UTF-8 decoded).
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(text.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def check_password(self, plain_text: str, hashed: str) -> bool:
        """Return True if `plain_text` matches the bcrypt hash `hashed`."""
        return bcrypt.checkpw(plain_text.encode("utf-8"), hashed.encode("utf-8"))

    def is_valid_password(self, password: str) -> bool:
        """
        Validate that a password meets the complexity rules.

        Notes
        -----
        - Minimum length: 8 characters
        - Must contain at least:
          - one lowercase letter
          - one uppercase letter
          - one digit
          - one special character (!@#$%^&*(),.?":{}|<>)
        """
        if len(password) < 8:
            return False

        has_lower = re.search(r"[a-z]", password)
        has_upper = re.search(r"[A-Z]", password)
        has_digit = re.search(r"\d", password)
        has_special = re.search(PASSWORD_SPECIALS, password)

        return all([has_lower, has_upper, has_digit, has_special])
