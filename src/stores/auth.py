"""
Demo admin login.

This is NOT a security model: one hard-coded credential, compared in plain
text, with no token behind it. Keep real authentication behind AuthBackend.
"""
from __future__ import annotations

from typing import Optional, Protocol

from db.models import SessionUser
from utils.config import Config
from utils.exceptions import InvalidCredentials
from utils.logger import get_logger

_logger = get_logger(__name__)


class AuthBackend(Protocol):
    def authenticate(self, username: str, password: str) -> SessionUser:
        """Return the session user, or raise InvalidCredentials."""
        ...


class DemoAuthBackend:
    def __init__(
        self,
        username: str = Config.DEMO_USERNAME,
        password: str = Config.DEMO_PASSWORD,
    ):
        self._username = username
        self._password = password

    def authenticate(self, username: str, password: str) -> SessionUser:
        if username == self._username and password == self._password:
            return SessionUser(id="1", username=self._username, role="admin")
        raise InvalidCredentials()


class AuthStore:
    def __init__(
        self,
        backend: Optional[AuthBackend] = None,
        user: Optional[SessionUser] = None,
    ):
        self.backend = backend or DemoAuthBackend()
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def login(self, username: str, password: str) -> SessionUser:
        try:
            user = self.backend.authenticate(username, password)
        except InvalidCredentials:
            self.user = None
            _logger.info("Login rejected.")
            raise
        self.user = user
        _logger.info(f"User '{user.username}' logged in.")
        return user

    def logout(self) -> None:
        if self.user:
            _logger.info(f"User '{self.user.username}' logged out.")
        self.user = None
