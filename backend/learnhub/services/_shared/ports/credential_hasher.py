from __future__ import annotations

from typing import Protocol


class CredentialHasher(Protocol):
    """
    One-way adaptive hash used for account passwords and refresh tokens.

    Implementations raise
    :class:`~learnhub.services._shared.errors.HashingFailureError` when the
    underlying library fails.
    """

    def hash(self, secret: str) -> str: ...

    def compare(self, secret: str, digest: str) -> bool: ...
