"""
Unit of Work contract shared by the SQL-backed user directory and token store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from learnhub.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary around one account or session operation.

    ``users`` and ``refresh_tokens`` are bound to the same session, so a
    rotation (revoke old record, insert new one) commits or rolls back as a
    whole. Read-only variants must refuse :meth:`commit`.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
