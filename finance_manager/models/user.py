"""
User model.

Passwords are stored only as bcrypt hashes. bcrypt embeds a random
per-user salt and the cost factor in the hash string itself, so the
stored value is all that is needed to verify a password later.
"""

from typing import Optional

import bcrypt

from finance_manager.exceptions import InvalidArgumentError
from finance_manager.models.wallet import Wallet


DEFAULT_HASH_ROUNDS = 12


def normalize_login(login: str) -> str:
    """Logins are case-insensitive: compare and store them trimmed + lowercase."""
    if login is None or not login.strip():
        raise InvalidArgumentError("Login cannot be empty")
    return login.strip().lower()


def hash_password(password: str, rounds: int = DEFAULT_HASH_ROUNDS) -> str:
    if not password:
        raise InvalidArgumentError("Password cannot be empty")
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")


class User:
    """An account holder. Owns exactly one wallet for its whole lifetime."""

    def __init__(
        self,
        login: str,
        password_hash: str,
        wallet: Optional[Wallet] = None,
    ):
        self._login = normalize_login(login)
        if not password_hash:
            raise InvalidArgumentError("Password hash cannot be empty")
        self._password_hash = password_hash
        self._wallet = wallet if wallet is not None else Wallet(self._login)

    @classmethod
    def register(
        cls,
        login: str,
        password: str,
        rounds: int = DEFAULT_HASH_ROUNDS,
    ) -> "User":
        """Create a brand-new user with an empty wallet."""
        return cls(login, hash_password(password, rounds))

    def verify_password(self, password: str) -> bool:
        if not password:
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                self._password_hash.encode("utf-8"),
            )
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False

    @property
    def login(self) -> str:
        return self._login

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def wallet(self) -> Wallet:
        return self._wallet

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._login == other._login

    def __hash__(self) -> int:
        return hash(self._login)

    def __repr__(self) -> str:
        return f"User(login={self._login!r})"
