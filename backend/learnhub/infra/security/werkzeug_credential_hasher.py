# learnhub/infra/security/werkzeug_credential_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from learnhub.services._shared.errors import HashingFailureError
from learnhub.services._shared.ports import CredentialHasher


@dataclass(slots=True)
class WerkzeugCredentialHasher(CredentialHasher):
    """
    Salted adaptive hashing through :mod:`werkzeug.security`.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:600000"``.
    """

    method: str = "scrypt"

    def hash(self, secret: str) -> str:
        try:
            return generate_password_hash(secret, method=self.method)
        except (ValueError, TypeError) as exc:
            raise HashingFailureError(str(exc)) from exc

    def compare(self, secret: str, digest: str) -> bool:
        if not digest:
            return False
        try:
            return check_password_hash(digest, secret)
        except (ValueError, TypeError) as exc:
            raise HashingFailureError(str(exc)) from exc
