# src/schedule_dashboard/auth/session.py

"""
Session store: the one owner of the authenticated identity and bearer credential.

States:
    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED -> UNAUTHENTICATED

Key invariants:
- only this object writes the credential (the HTTP layer reads it via bearer_token()),
- persisted token and identity are saved and cleared together,
- initialize() is the only path that downgrades silently (best-effort clearing),
- an exchange that completes after logout() is discarded (epoch check).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.errors import ApiError, AuthDenied, AuthExchangeFailed, DashboardError
from ..core.ports import CredentialStorage, IdentityApi
from . import roles
from .roles import AccountStatus, Role

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_ERROR = "Login failed. Please try again."


class AuthState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True, slots=True)
class Identity:
    email: str
    name: str
    picture: str | None = None


@dataclass(frozen=True, slots=True)
class Session:
    identity: Identity
    role: Role
    status: AccountStatus
    credential: str = field(repr=False)

    def profile(self) -> dict[str, Any]:
        """Serialized identity as persisted next to the credential."""
        return {
            "email": self.identity.email,
            "name": self.identity.name,
            "picture": self.identity.picture,
            "role": self.role.value,
            "status": self.status.value,
        }

    @classmethod
    def from_profile(cls, credential: str, profile: dict[str, Any]) -> Session:
        return cls(
            identity=Identity(
                email=str(profile.get("email") or ""),
                name=str(profile.get("name") or ""),
                picture=profile.get("picture") or None,
            ),
            role=Role.from_raw(profile.get("role")),
            status=AccountStatus.from_raw(profile.get("status")),
            credential=credential,
        )


@dataclass(frozen=True, slots=True)
class LoginResult:
    success: bool
    error: str | None = None


def _session_from_exchange(payload: dict[str, Any]) -> Session:
    token = payload.get("token")
    email = payload.get("email")
    if not isinstance(token, str) or not token or not email:
        raise AuthExchangeFailed("Login failed: incomplete response from server.")

    session = Session.from_profile(token, payload)
    if session.status != AccountStatus.ENABLED:
        raise AuthExchangeFailed("User account is disabled. Please contact administrator.")
    return session


class SessionStore:
    def __init__(self, storage: CredentialStorage, identity_api: IdentityApi) -> None:
        self._storage = storage
        self._identity_api = identity_api

        self._state = AuthState.UNAUTHENTICATED
        self._session: Session | None = None
        # Bumped whenever the user (or a denial) ends the session; in-flight
        # exchanges started under an older epoch must not publish.
        self._epoch = 0

    # ---- queries ----

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.AUTHENTICATED and self._session is not None

    @property
    def role(self) -> Role | None:
        return self._session.role if self._session is not None else None

    def bearer_token(self) -> str | None:
        return self._session.credential if self._session is not None else None

    def can_access(self, route: str) -> bool:
        return roles.can_access(self._session, route)

    # ---- transitions ----

    async def initialize(self) -> AuthState:
        """
        Restore a persisted session if the server still accepts its credential.

        Absent, partial, rejected or unverifiable data is cleared without
        surfacing an error.
        """
        stored = self._storage.load()
        if stored is None:
            self._clear()
            return self._state

        token, profile = stored
        self._state = AuthState.AUTHENTICATING
        epoch = self._epoch

        try:
            valid = await self._identity_api.validate(token)
        except DashboardError as e:
            logger.info("Stored credential could not be validated (%s); signing out.", e)
            valid = False

        if epoch != self._epoch:
            return self._state

        if not valid:
            logger.info("Stored credential rejected; starting signed out.")
            self._clear()
            return self._state

        self._session = Session.from_profile(token, profile)
        self._state = AuthState.AUTHENTICATED
        logger.info("Restored session for %s (%s)", self._session.identity.email, self._session.role.value)
        return self._state

    async def login(self, external_token: str) -> LoginResult:
        """Exchange an external identity credential for a local bearer credential."""
        if not (external_token or "").strip():
            return LoginResult(False, "Google token is required")
        if self._state == AuthState.AUTHENTICATING:
            return LoginResult(False, "Sign-in already in progress.")
        if self.is_authenticated:
            return LoginResult(False, "Already signed in. Sign out first.")

        self._state = AuthState.AUTHENTICATING
        epoch = self._epoch

        session: Session | None = None
        error = DEFAULT_LOGIN_ERROR
        try:
            payload = await self._identity_api.exchange(external_token.strip())
            session = _session_from_exchange(payload)
        except AuthExchangeFailed as e:
            error = str(e)
        except ApiError as e:
            error = e.message or DEFAULT_LOGIN_ERROR

        if epoch != self._epoch:
            logger.info("Discarding sign-in result: session was ended while it was in flight.")
            return LoginResult(False, "Sign-in was cancelled.")

        if session is None:
            self._state = AuthState.UNAUTHENTICATED
            logger.info("Login failed: %s", error)
            return LoginResult(False, error)

        self._storage.save(session.credential, session.profile())
        self._session = session
        self._state = AuthState.AUTHENTICATED
        logger.info("Signed in %s (%s)", session.identity.email, session.role.value)
        return LoginResult(True)

    async def refresh(self) -> bool:
        """Swap the current credential for a fresh one (role/status may change)."""
        current = self._session
        if current is None or not self.is_authenticated:
            return False

        epoch = self._epoch
        try:
            payload = await self._identity_api.refresh(current.credential)
        except AuthDenied:
            # transport already invalidated the session
            return False
        except ApiError as e:
            logger.warning("Credential refresh failed: %s", e.message)
            return False

        if epoch != self._epoch:
            return False

        token = payload.get("token")
        if not isinstance(token, str) or not token:
            logger.warning("Credential refresh returned no token; keeping current credential.")
            return False

        refreshed = Session(
            identity=current.identity,
            role=Role.from_raw(payload.get("role") or current.role.value),
            status=AccountStatus.from_raw(payload.get("status") or current.status.value),
            credential=token,
        )
        self._storage.save(refreshed.credential, refreshed.profile())
        self._session = refreshed
        logger.info("Refreshed credential for %s (%s)", refreshed.identity.email, refreshed.role.value)
        return True

    def logout(self) -> None:
        """Forget the session and its persisted data. Idempotent."""
        self._epoch += 1
        if self._session is not None:
            logger.info("Signed out %s", self._session.identity.email)
        self._clear()

    def invalidate(self, reason: str) -> None:
        """
        Forced sign-out after an authorization denial, from any component.

        An exchange still in flight (login/initialize) is left to report its
        own failure.
        """
        if self._state == AuthState.AUTHENTICATED:
            logger.warning("Session invalidated: %s", reason)
            self._epoch += 1
            self._clear()
        else:
            self._storage.clear()

    def _clear(self) -> None:
        self._storage.clear()
        self._session = None
        self._state = AuthState.UNAUTHENTICATED
