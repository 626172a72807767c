# learnhub/services/auth/service.py
from __future__ import annotations

import logging

from learnhub.models.enums import DEFAULT_LOCAL_ROLE, DEFAULT_OAUTH_ROLE, AuthProvider
from learnhub.services._shared.base import BaseService, ServiceContext
from learnhub.services._shared.errors import (
    DuplicateAccountError,
    EmailNotFoundError,
    IncorrectPasswordError,
    MalformedTokenError,
    PasswordLoginUnavailableError,
)
from learnhub.services._shared.ports.access_token_issuer import AccessTokenIssuer
from learnhub.services._shared.ports.credential_hasher import CredentialHasher
from learnhub.services._shared.ports.user_directory import AccountIdentity, UserDirectory
from learnhub.services.auth.dto import (
    LoginIn,
    LoginOut,
    OAuthProfileIn,
    RegisterIn,
    SessionMetadata,
    SessionOut,
    TokenPairOut,
)
from learnhub.services.identity.dto import UserOut
from learnhub.services.refresh_tokens.dto import RevokeOut
from learnhub.services.refresh_tokens.service import REVOKED_MESSAGE, RefreshTokenService

log = logging.getLogger(__name__)

ALL_REVOKED_MESSAGE = "All sessions have been revoked successfully"


class AuthService(BaseService):
    """
    Authentication use cases (register / login / refresh / logout).

    Composes the :class:`UserDirectory`, the credential hasher, the
    access-token issuer and :class:`RefreshTokenService`. Each successful
    login opens one refresh-token session; the access token always carries
    the roles the directory holds at that moment.
    """

    def __init__(
        self,
        *,
        users: UserDirectory,
        hasher: CredentialHasher,
        access_tokens: AccessTokenIssuer,
        refresh_tokens: RefreshTokenService,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param users: Account lookup and provisioning.
        :param hasher: Password hasher (shared with refresh tokens).
        :param access_tokens: Access token issuer.
        :param refresh_tokens: Refresh token lifecycle service.
        :param ctx: Request context; supplies default session metadata.
        """
        super().__init__(ctx=ctx)
        self.users = users
        self.hasher = hasher
        self.access_tokens = access_tokens
        self.refresh_tokens = refresh_tokens

    def _metadata(self, metadata: SessionMetadata | None) -> SessionMetadata:
        if metadata is not None:
            return metadata
        return SessionMetadata(user_agent=self.ctx.user_agent, ip=self.ctx.ip)

    def _open_session(self, account: AccountIdentity, metadata: SessionMetadata | None) -> LoginOut:
        refresh = self.refresh_tokens.issue(account.id, self._metadata(metadata))
        roles = tuple(sorted(role.value for role in account.roles))
        access = self.access_tokens.issue(user_id=account.id, email=account.email, roles=roles)
        return LoginOut(
            access_token=access,
            refresh_token=refresh,
            user_id=account.id,
            email=account.email,
            name=account.name,
            roles=roles,
        )

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Create a local account.

        :raises DuplicateAccountError: If the email is already registered.
        """
        if self.users.find_by_email(dto.email) is not None:
            raise DuplicateAccountError(dto.email)

        account = self.users.create(
            email=dto.email,
            name=dto.name,
            password_hash=self.hasher.hash(dto.password),
            provider=AuthProvider.LOCAL,
            roles=[DEFAULT_LOCAL_ROLE],
        )
        log.info("user.registered", extra={"user_id": account.id, "operation": "register"})
        return UserOut.from_account(account)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def authenticate(self, email: str, password: str) -> AccountIdentity:
        """
        Verify local credentials.

        :raises EmailNotFoundError: No account for the email.
        :raises PasswordLoginUnavailableError: Account signs in through OAuth.
        :raises IncorrectPasswordError: Password does not match.
        """
        account = self.users.find_by_email(email)
        if account is None:
            raise EmailNotFoundError()
        if account.provider is not AuthProvider.LOCAL or not account.password_hash:
            raise PasswordLoginUnavailableError()
        if not self.hasher.compare(password, account.password_hash):
            raise IncorrectPasswordError()
        return account

    def login(self, dto: LoginIn, metadata: SessionMetadata | None = None) -> LoginOut:
        """
        Authenticate credentials and open a new session.

        :param dto: Login input.
        :param metadata: Client provenance for the refresh token.
        :returns: Token pair and public identity.
        :raises InvalidCredentialsError: If credentials are invalid.
        """
        try:
            account = self.authenticate(dto.email, dto.password)
        except (EmailNotFoundError, PasswordLoginUnavailableError, IncorrectPasswordError) as exc:
            log.info("auth.login_failed", extra={"reason": exc.reason, "operation": "login"})
            raise

        out = self._open_session(account, metadata)
        log.info("auth.login", extra={"user_id": account.id, "operation": "login"})
        return out

    def login_oauth(self, profile: OAuthProfileIn, metadata: SessionMetadata | None = None) -> LoginOut:
        """
        Sign in with a verified OAuth profile.

        The account is looked up by email and created on first login with
        the ``google`` provider and the default OAuth role. An existing local
        account with the same email is signed in as-is.
        """
        account = self.users.find_by_email(profile.email)
        if account is None:
            account = self.users.create(
                email=profile.email,
                name=profile.name,
                password_hash=None,
                provider=AuthProvider.GOOGLE,
                roles=[DEFAULT_OAUTH_ROLE],
                provider_id=profile.provider_id,
                avatar_url=profile.avatar_url,
            )
            log.info("user.registered", extra={"user_id": account.id, "operation": "login_oauth"})

        out = self._open_session(account, metadata)
        log.info("auth.login", extra={"user_id": account.id, "operation": "login_oauth"})
        return out

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, raw: str, metadata: SessionMetadata | None = None) -> TokenPairOut:
        """Rotate the refresh token; see :meth:`RefreshTokenService.rotate`."""
        return self.refresh_tokens.rotate(raw, self._metadata(metadata))

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, raw: str | None) -> RevokeOut:
        """
        End the session the refresh token belongs to.

        Never fails visibly: a malformed, unknown or mismatching token yields
        the same confirmation and revokes nothing. A genuine token that is
        already revoked is a replay, so every session of its owner is revoked
        before the confirmation is returned.
        """
        try:
            token_id = self.refresh_tokens.parse_id(raw)
        except MalformedTokenError:
            return RevokeOut(message=REVOKED_MESSAGE)

        record = self.refresh_tokens.store.find_by_id(token_id)
        if record is None:
            return RevokeOut(message=REVOKED_MESSAGE)

        if not self.hasher.compare(raw, record.token_hash):
            log.warning(
                "auth.logout_hash_mismatch",
                extra={"user_id": record.user_id, "token_id": record.id},
            )
            return RevokeOut(message=REVOKED_MESSAGE)

        if record.revoked:
            self.refresh_tokens.handle_reuse(record)
            return RevokeOut(message=REVOKED_MESSAGE)

        return self.refresh_tokens.revoke_by_id(record.id)

    def logout_all(self, user_id: str) -> RevokeOut:
        self.refresh_tokens.revoke_all_for_user(user_id)
        return RevokeOut(message=ALL_REVOKED_MESSAGE)

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #

    def list_sessions(self, user_id: str) -> list[SessionOut]:
        """Active sessions of the user, oldest first, each flagged if expired."""
        now = self.now_utc()
        return [
            SessionOut(
                id=r.id,
                user_agent=r.user_agent,
                ip=r.ip,
                created_at=r.created_at,
                expires_at=r.expires_at,
                expired=r.is_expired(now),
            )
            for r in self.refresh_tokens.list_active_sessions(user_id)
        ]

    def revoke_session(self, actor_id: str, session_id: str) -> RevokeOut:
        """
        Revoke one of the actor's own sessions.

        An unknown id gets the usual confirmation.

        :raises AuthorizationError: If the session belongs to another account.
        """
        record = self.refresh_tokens.store.find_by_id(session_id)
        if record is None:
            return RevokeOut(message=REVOKED_MESSAGE)
        self.ensure_owner(actor_id, record.user_id)
        return self.refresh_tokens.revoke_by_id(record.id)
