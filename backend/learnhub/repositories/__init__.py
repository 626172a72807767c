"""Repository package exposing persistence-layer access for the account and session models."""

from __future__ import annotations

from learnhub.repositories import base as base_module
from learnhub.repositories.base import BaseRepository
from learnhub.repositories.refresh_token import RefreshTokenRepository
from learnhub.repositories.user import UserRepository

apply_sorting = base_module._apply_sorting

__all__ = [
    "BaseRepository",
    "apply_sorting",
    "UserRepository",
    "RefreshTokenRepository",
]
