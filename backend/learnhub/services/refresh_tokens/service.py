# learnhub/services/refresh_tokens/service.py
from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from uuid import uuid4

from learnhub.services._shared.base import BaseService
from learnhub.services._shared.errors import (
    InvalidTokenError,
    MalformedTokenError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
    UserNotFoundError,
)
from learnhub.services._shared.ports.access_token_issuer import AccessTokenIssuer
from learnhub.services._shared.ports.credential_hasher import CredentialHasher
from learnhub.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
    RevokeResult,
)
from learnhub.services._shared.ports.user_directory import UserDirectory
from learnhub.services.refresh_tokens.dto import (
    RefreshTokenConfig,
    RevokeOut,
    SessionMetadata,
    TokenPairOut,
)

log = logging.getLogger(__name__)

REVOKED_MESSAGE = "Session has been revoked successfully"


class RefreshTokenService(BaseService):
    """
    Lifecycle of opaque refresh tokens.

    A raw refresh token has the shape ``<id>.<secret>``. The id locates the
    stored record in a single lookup; the full raw string is hashed with the
    credential hasher and only the hash is persisted. Presenting a token
    that was already revoked is treated as evidence of theft and revokes
    every session of the owning account.

    Notes
    -----
    - The raw token is returned once by :meth:`issue` and never stored or
      logged.
    - Rotation revokes the old record *before* issuing the new one; if
      issuance then fails, the user is logged out rather than left with two
      live tokens.
    """

    def __init__(
        self,
        *,
        store: RefreshTokenStore,
        hasher: CredentialHasher,
        users: UserDirectory,
        access_tokens: AccessTokenIssuer,
        cfg: RefreshTokenConfig | None = None,
    ) -> None:
        super().__init__()
        self.store = store
        self.hasher = hasher
        self.users = users
        self.access_tokens = access_tokens
        self.cfg = cfg or RefreshTokenConfig()

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    @staticmethod
    def _new_id() -> str:
        return uuid4().hex

    @staticmethod
    def _new_secret() -> str:
        # uuid4 hex plus 128 extra random bits
        return f"{uuid4().hex}{secrets.token_hex(16)}"

    def issue(
        self,
        user_id: str,
        metadata: SessionMetadata | None = None,
        ttl_days: int | None = None,
    ) -> str:
        """
        Create a refresh token record and return the raw token.

        The record is written once with its final hash, so no reader can
        observe a record without one.

        :param user_id: Owning account id.
        :param metadata: Client provenance stored with the record.
        :param ttl_days: Lifetime override; defaults to the configured TTL.
        :returns: Raw token ``<id>.<secret>``.
        :raises ValueError: If ``ttl_days`` is not positive.
        :raises StoreUnavailableError: If the record cannot be written.
        """
        days = self.cfg.ttl_days if ttl_days is None else ttl_days
        if days <= 0:
            raise ValueError("ttl_days must be a positive number of days")

        meta = metadata or SessionMetadata()
        token_id = self._new_id()
        raw = f"{token_id}.{self._new_secret()}"

        record = RefreshTokenRecord(
            id=token_id,
            user_id=str(user_id),
            token_hash=self.hasher.hash(raw),
            expires_at=self.now_utc() + timedelta(days=days),
            user_agent=meta.user_agent,
            ip=meta.ip,
        )
        self.store.create(record)

        log.info(
            "refresh_token.issued",
            extra={"user_id": str(user_id), "token_id": token_id},
        )
        return raw

    # ------------------------------------------------------------------ #
    # Validate
    # ------------------------------------------------------------------ #

    @staticmethod
    def parse_id(raw: str | None) -> str:
        """
        Extract the record id from a raw token.

        :raises MalformedTokenError: If the token has no ``.`` separator or
            the id segment is empty.
        """
        if not raw or not isinstance(raw, str):
            raise MalformedTokenError()
        token_id, sep, _ = raw.partition(".")
        if not sep or not token_id:
            raise MalformedTokenError()
        return token_id

    def validate(self, raw: str) -> RefreshTokenRecord:
        """
        Validate a raw refresh token and return its record.

        Checks run in a fixed order: shape, existence, revocation, expiry,
        hash. A revoked token triggers revocation of all of the owner's
        sessions before the error is raised.

        :raises MalformedTokenError: Bad shape (no store access happens).
        :raises TokenNotFoundError: No record for the id.
        :raises TokenRevokedError: Record is revoked (reuse detected).
        :raises TokenExpiredError: Record is past ``expires_at``.
        :raises InvalidTokenError: Secret does not match the stored hash.
        """
        token_id = self.parse_id(raw)

        record = self.store.find_by_id(token_id)
        if record is None:
            log.info("refresh_token.not_found", extra={"token_id": token_id})
            raise TokenNotFoundError()

        if record.revoked:
            self.handle_reuse(record)
            raise TokenRevokedError()

        if record.is_expired(self.now_utc()):
            log.info(
                "refresh_token.expired",
                extra={"user_id": record.user_id, "token_id": record.id},
            )
            raise TokenExpiredError()

        if not self.hasher.compare(raw, record.token_hash):
            log.warning(
                "refresh_token.hash_mismatch",
                extra={"user_id": record.user_id, "token_id": record.id},
            )
            raise InvalidTokenError()

        return record

    def handle_reuse(self, record: RefreshTokenRecord) -> None:
        """Respond to a revoked token being presented: revoke every session of its owner."""
        log.warning(
            "refresh_token.reuse_detected",
            extra={"user_id": record.user_id, "token_id": record.id},
        )
        self.store.revoke_all_for_user(record.user_id)

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(self, raw: str, metadata: SessionMetadata | None = None) -> TokenPairOut:
        """
        Exchange a valid refresh token for a new token pair.

        The old record is revoked with a compare-and-set, so when two
        requests rotate the same token concurrently only one succeeds; the
        other is handled exactly like a reuse of a revoked token.

        :param raw: Presented refresh token.
        :param metadata: Provenance for the new record.
        :returns: New access token (current roles) and new refresh token.
        :raises InvalidTokenError: Any validation failure (see :meth:`validate`).
        :raises UserNotFoundError: The owning account no longer exists.
        """
        record = self.validate(raw)

        account = self.users.find_by_id(record.user_id)
        if account is None:
            log.warning(
                "refresh_token.orphaned",
                extra={"user_id": record.user_id, "token_id": record.id},
            )
            raise UserNotFoundError(record.user_id)

        outcome = self.store.revoke_if_active(record.id)
        if outcome is RevokeResult.ALREADY_REVOKED:
            self.handle_reuse(record)
            raise TokenRevokedError()

        new_raw = self.issue(account.id, metadata)
        access = self.access_tokens.issue(
            user_id=account.id,
            email=account.email,
            roles=[role.value for role in account.roles],
        )

        log.info(
            "refresh_token.rotated",
            extra={"user_id": account.id, "token_id": record.id},
        )
        return TokenPairOut(access_token=access, refresh_token=new_raw)

    # ------------------------------------------------------------------ #
    # Revoke / list
    # ------------------------------------------------------------------ #

    def revoke_by_id(self, token_id: str) -> RevokeOut:
        """
        Revoke one session.

        Idempotent: the same confirmation is returned whether the record
        existed, was already revoked, or was revoked by this call.
        """
        self.store.revoke_by_id(token_id)
        log.info("refresh_token.revoked", extra={"token_id": token_id})
        return RevokeOut(message=REVOKED_MESSAGE)

    def revoke_all_for_user(self, user_id: str) -> None:
        self.store.revoke_all_for_user(str(user_id))
        log.info("refresh_token.revoked_all", extra={"user_id": str(user_id)})

    def list_active_sessions(self, user_id: str) -> list[RefreshTokenRecord]:
        """Non-revoked sessions of the user; expired records are included."""
        return self.store.find_active_by_user(str(user_id))
