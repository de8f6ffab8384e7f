# console_api/services/session_manager.py

import logging
from datetime import timedelta

from console_api.core.clock import Clock, utcnow
from console_api.core.device import generate_session_id
from console_api.core.exceptions import (
    InvalidTokenError,
    NotFoundError,
    SessionInactiveError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
)
from console_api.entities.auth import (
    DeviceMetadata,
    LoginResult,
    RevocationResult,
    SessionInfo,
    TokenPair,
)
from console_api.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from console_api.infrastructure.database.models.session_model import SessionModel
from console_api.infrastructure.security.token_codec import TokenCodec, hash_token
from console_api.repositories.refresh_token_repository import RefreshTokenRepository
from console_api.repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)


def _event(name: str, **data) -> dict:
    return {"extra_data": {"event": name, **data}}


class SessionManager:
    """
    Owns the lifecycle of sessions and their refresh token chains.

    A session is created active with a fixed ``expires_at``. It stays usable
    until it is deactivated (terminal) or its expiry passes. Each active
    session has one live refresh token; exchanging it revokes it and appends
    a child to the chain within the same transaction.

    Every bulk operation revokes tokens before it deactivates sessions, so a
    partial failure leaves the user signed out rather than half signed in.
    """

    def __init__(
        self,
        *,
        sessions: SessionRepository,
        refresh_tokens: RefreshTokenRepository,
        codec: TokenCodec,
        session_lifetime_minutes: int,
        clock: Clock = utcnow,
    ) -> None:
        self._sessions = sessions
        self._refresh_tokens = refresh_tokens
        self._codec = codec
        self._session_lifetime = timedelta(minutes=session_lifetime_minutes)
        self._clock = clock

    # -------------------------
    # Sign in / rotation
    # -------------------------

    def _issue_pair(self, session: SessionModel, *, parent_id: int | None) -> TokenPair:
        now = self._clock()

        refresh = self._codec.issue_refresh_token(session.user_id, session.id, not_after=session.expires_at)
        self._refresh_tokens.add(
            RefreshTokenModel(
                user_id=session.user_id,
                session_id=session.id,
                token_hash=refresh.token_hash,
                parent_id=parent_id,
                expires_at=refresh.expires_at,
                is_revoked=False,
                revoked_at=None,
                reason=None,
                created_at=now,
            )
        )

        access = self._codec.issue_access_token(session.user_id, session.id)
        return TokenPair(session_id=session.id, access=access, refresh=refresh)

    def login(self, user_id: int, device: DeviceMetadata) -> LoginResult:
        now = self._clock()

        session = self._sessions.add(
            SessionModel(
                id=generate_session_id(),
                user_id=user_id,
                ip_address=device.ip_address,
                user_agent=device.user_agent,
                device_info=device.device_info,
                is_active=True,
                last_activity_at=now,
                expires_at=now + self._session_lifetime,
                created_at=now,
                updated_at=now,
            )
        )

        tokens = self._issue_pair(session, parent_id=None)

        logger.info(
            "Session created",
            extra=_event("session_created", user_id=user_id, session_id=session.id, device=device.device_info),
        )
        return LoginResult(session=SessionInfo.from_model(session), tokens=tokens)

    def refresh(self, raw_token: str) -> TokenPair:
        # store state decides between not found, revoked and expired
        claims = self._codec.verify_refresh_token(raw_token, verify_expiry=False)

        stored = self._refresh_tokens.get_by_hash(hash_token(raw_token))
        if stored is None:
            raise TokenNotFoundError()

        if stored.session_id != claims.sid or stored.user_id != claims.user_id:
            raise InvalidTokenError()

        if stored.is_revoked:
            logger.warning(
                "Refresh token reuse detected",
                extra=_event(
                    "refresh_reuse_detected",
                    user_id=stored.user_id,
                    session_id=stored.session_id,
                    token_id=stored.id,
                    revoked_reason=stored.reason,
                ),
            )
            raise TokenRevokedError(session_id=stored.session_id, reuse_detected=True)

        now = self._clock()
        if stored.is_expired(now):
            raise TokenExpiredError()

        session = self._sessions.get_by_id(stored.session_id)
        if session is None or not session.is_usable(now):
            raise SessionInactiveError()

        if not self._refresh_tokens.revoke_if_active(token_id=stored.id, now=now, reason="rotated"):
            logger.info(
                "Refresh token rotation lost to a concurrent request",
                extra=_event("refresh_race_lost", session_id=stored.session_id, token_id=stored.id),
            )
            raise TokenRevokedError(session_id=stored.session_id, reuse_detected=False)

        tokens = self._issue_pair(session, parent_id=stored.id)
        self._sessions.touch(session_id=session.id, now=now)

        logger.info(
            "Refresh token rotated",
            extra=_event("refresh_rotated", user_id=session.user_id, session_id=session.id, parent_id=stored.id),
        )
        return tokens

    # -------------------------
    # Revocation
    # -------------------------

    def _end_session(self, session_id: str, *, reason: str) -> tuple[int, int]:
        now = self._clock()
        revoked = self._refresh_tokens.revoke_for_session(session_id=session_id, now=now, reason=reason)
        deactivated = self._sessions.deactivate(session_id=session_id, now=now)
        return deactivated, revoked

    def logout(self, session_id: str) -> int:
        deactivated, revoked = self._end_session(session_id, reason="logout")
        logger.info(
            "Session logged out",
            extra=_event("logout", session_id=session_id, deactivated=deactivated, revoked_tokens=revoked),
        )
        return deactivated

    def revoke_session(self, user_id: int, session_id: str) -> int:
        if self._sessions.get_for_user(session_id=session_id, user_id=user_id) is None:
            raise NotFoundError("Session not found")

        deactivated, revoked = self._end_session(session_id, reason="logout")
        logger.info(
            "Session revoked",
            extra=_event(
                "session_revoked",
                user_id=user_id,
                session_id=session_id,
                deactivated=deactivated,
                revoked_tokens=revoked,
            ),
        )
        return deactivated

    def revoke_compromised_session(self, session_id: str) -> RevocationResult:
        deactivated, revoked = self._end_session(session_id, reason="reuse_detected")
        logger.warning(
            "Session revoked after refresh token reuse",
            extra=_event("session_compromised", session_id=session_id, deactivated=deactivated, revoked_tokens=revoked),
        )
        return RevocationResult(deactivated_sessions=deactivated, revoked_tokens=revoked)

    def deactivate_all_sessions(self, user_id: int, *, reason: str = "signout_all") -> RevocationResult:
        now = self._clock()
        revoked = self._refresh_tokens.revoke_for_user(user_id=user_id, now=now, reason=reason)
        deactivated = self._sessions.deactivate_all_for_user(user_id=user_id, now=now)

        logger.info(
            "All sessions signed out",
            extra=_event("signout_all", user_id=user_id, reason=reason, deactivated=deactivated, revoked_tokens=revoked),
        )
        return RevocationResult(deactivated_sessions=deactivated, revoked_tokens=revoked)

    def deactivate_other_sessions(self, user_id: int, except_session_id: str) -> RevocationResult:
        now = self._clock()
        revoked = self._refresh_tokens.revoke_for_user_except_session(
            user_id=user_id,
            except_session_id=except_session_id,
            now=now,
            reason="signout_others",
        )
        deactivated = self._sessions.deactivate_others_for_user(
            user_id=user_id, except_session_id=except_session_id, now=now
        )

        logger.info(
            "Other sessions signed out",
            extra=_event(
                "signout_others",
                user_id=user_id,
                kept_session_id=except_session_id,
                deactivated=deactivated,
                revoked_tokens=revoked,
            ),
        )
        return RevocationResult(deactivated_sessions=deactivated, revoked_tokens=revoked)

    # -------------------------
    # Queries
    # -------------------------

    def list_sessions(self, user_id: int) -> list[SessionInfo]:
        return [SessionInfo.from_model(m) for m in self._sessions.list_for_user(user_id)]
