"""Password hashing strategies."""

from __future__ import annotations

from functools import cached_property

from werkzeug.security import check_password_hash, generate_password_hash

from gym_backend.domain.auth.repositories import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted one-way hashing backed by werkzeug (scrypt by default).

    Every call to :meth:`hash` draws a fresh salt, so two hashes of the same
    password differ; compare them only through :meth:`verify`, which checks
    the digest with a constant-time comparison.
    """

    def __init__(self, method: str | None = None) -> None:
        self._method = method

    def hash(self, password: str) -> str:
        if self._method:
            return str(generate_password_hash(password, method=self._method))
        return str(generate_password_hash(password))

    def verify(self, password: str, hashed: str | None) -> bool:
        if not hashed:
            # Unknown principals still pay for one full hash check.
            check_password_hash(self._dummy_hash, password)
            return False
        return bool(check_password_hash(hashed, password))

    @cached_property
    def _dummy_hash(self) -> str:
        return self.hash("gym-backend-dummy-password")
