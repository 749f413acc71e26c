# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""bcrypt hashing for user passwords.

Hashes are stored on the user row and checked at login. The cost factor
comes from SECURITY_BCRYPT_ROUNDS.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt ignores everything past the first 72 bytes.
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes | None:
    encoded = password.encode("utf-8")
    return encoded if len(encoded) <= MAX_PASSWORD_BYTES else None


class PasswordHasher:
    """Hashes and checks user passwords.

    Example:
        >>> hasher = PasswordHasher(rounds=4)
        >>> stored = hasher.hash("secret1")
        >>> hasher.verify("secret1", stored)
        True
    """

    def __init__(self, rounds: int = 12) -> None:
        """Initialize the hasher.

        Args:
            rounds: bcrypt cost factor. Tests run with 4.
        """
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a new password for storage.

        Raises:
            ValueError: If the password is empty or longer than 72 bytes.
        """
        if not password:
            raise ValueError("Password cannot be empty")
        encoded = _encode(password)
        if encoded is None:
            raise ValueError("Password must be at most 72 bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Return True when password matches the stored hash.

        An empty, overlong or unparseable input never matches.
        """
        encoded = _encode(password) if password else None
        if encoded is None or not password_hash:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Stored password hash is unreadable: %s", str(e))
            return False
