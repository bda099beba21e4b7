"""
Password hashing utilities using bcrypt
"""

from typing import Optional

import bcrypt

from ngo_portal.core.config_manager import settings

# bcrypt only reads the first 72 bytes
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Simple password hashing utility"""

    @staticmethod
    def hash_password(password: str, rounds: Optional[int] = None) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password
            rounds: Cost factor override (defaults to settings.bcrypt_rounds)

        Returns:
            Hashed password as string

        Raises:
            ValueError: If the password is longer than bcrypt accepts
        """
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Malformed hashes count as a mismatch.
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            return False
