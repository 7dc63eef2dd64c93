"""Authentication state.

Authenticated means the session holds both a token and a user object.
A token without a user is treated as a corrupt session and discarded.
Logging out only forgets the local session; the server is not told, so
the token stays valid there until it expires.
"""

from __future__ import annotations

import logging

from cmsdesk.api.client import ApiClient
from cmsdesk.errors import CmsError
from cmsdesk.models import LoginCredentials, LoginResponse, RegisterRequest, User
from cmsdesk.session import Session
from cmsdesk.validation import ensure_valid, validate_login, validate_registration

logger = logging.getLogger(__name__)


class AuthManager:
    """Login / logout state over an explicit ``Session``."""

    def __init__(self, api: ApiClient, session: Session) -> None:
        self.api = api
        self.session = session
        self.user: User | None = None
        self.is_authenticated = False
        self.is_loading = True
        self.error: str | None = None
        self._restore()

    def _restore(self) -> None:
        token = self.session.token
        user = self.session.user
        if token and user:
            self.user = user
            self.is_authenticated = True
        elif token:
            logger.warning("Session has a token but no user, discarding it")
            self.session.clear_token()
        self.is_loading = False

    def _accept(self, response: LoginResponse) -> None:
        self.session.save(response.access_token, response.user)
        self.user = response.user
        self.is_authenticated = True
        self.error = None

    def _reject(self, exc: CmsError) -> None:
        self.user = None
        self.is_authenticated = False
        self.error = exc.message

    def login(self, credentials: LoginCredentials) -> bool:
        """Sign in and persist the session.

        Raises:
            FormValidationError: Malformed email or short password; no
                request is made.

        Returns:
            True on success, False when the server rejected the login
            (the reason is left in ``error``).
        """
        ensure_valid(validate_login(credentials))
        self.is_loading = True
        self.error = None
        try:
            response = self.api.login(credentials)
        except CmsError as exc:
            logger.info("Login failed for %s: %s", credentials.email, exc.message)
            self._reject(exc)
            return False
        finally:
            self.is_loading = False
        self._accept(response)
        logger.info("Signed in as %s", response.user.email)
        return True

    def register(self, form: RegisterRequest) -> bool:
        """Create an account and sign in with it."""
        ensure_valid(validate_registration(form))
        self.is_loading = True
        self.error = None
        try:
            response = self.api.register(form)
        except CmsError as exc:
            logger.info("Registration failed for %s: %s", form.email, exc.message)
            self._reject(exc)
            return False
        finally:
            self.is_loading = False
        self._accept(response)
        return True

    def logout(self) -> None:
        self.user = None
        self.is_authenticated = False
        self.is_loading = False
        self.error = None
        self.session.clear()

    def clear_error(self) -> None:
        self.error = None
