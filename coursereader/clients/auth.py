"""
Auth service client.

The reader only needs to know who is signed in. Sessions are cookie based
(the session keeps the cookie jar); a bearer token from login is attached
as well when the service returns one.
"""

import logging
from typing import Optional, Protocol

from coursereader.schemas import AuthData, User

from .http import ApiClient, RemoteError

logger = logging.getLogger(__name__)


class AuthService(Protocol):
    def current_user(self) -> Optional[User]: ...

    def login(self, email: str, password: str) -> User: ...

    def logout(self) -> None: ...


class AuthClient:
    """Auth service over HTTP (`/auth/login`, `/auth/verify`)."""

    def __init__(self, api: ApiClient):
        self.api = api
        self._user: Optional[User] = None

    def current_user(self) -> Optional[User]:
        """Signed-in user, verifying the stored session on first use."""
        if self._user is None:
            self._user = self.verify()
        return self._user

    def verify(self) -> Optional[User]:
        """Ask the service whether the session cookie/token is still valid."""
        try:
            data = self.api.get("/auth/verify")
        except RemoteError as e:
            logger.info(f"Session verification failed: {e}")
            return None
        try:
            return ApiClient.parse(AuthData, data).user
        except RemoteError as e:
            logger.warning(f"Session verification returned no user: {e}")
            return None

    def login(self, email: str, password: str) -> User:
        """
        Sign in with email and password.

        Raises:
            RemoteError: If the credentials are rejected or the service is unreachable
        """
        data = self.api.post("/auth/login", {"email": email, "password": password})
        auth = ApiClient.parse(AuthData, data)
        if auth.token:
            self.api.session.headers["Authorization"] = f"Bearer {auth.token}"
        self._user = auth.user
        logger.info(f"Signed in as {auth.user.email}")
        return auth.user

    def logout(self) -> None:
        """Forget the local session. The service keeps no server-side state to clear."""
        self._user = None
        self.api.session.cookies.clear()
        self.api.session.headers.pop("Authorization", None)
