"""Identity provider interface and models."""

from __future__ import annotations

import getpass
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from admitwriter.errors import AuthorizationError


class Identity(BaseModel):
    """The authenticated caller a generation runs on behalf of."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str | None = None


@runtime_checkable
class IdentityProvider(Protocol):
    """Answers "who is calling", or None when nobody is authenticated."""

    def current_identity(self) -> Identity | None: ...


class LocalIdentityProvider:
    """Treats the operating-system user as the authenticated caller."""

    def current_identity(self) -> Identity | None:
        try:
            user = getpass.getuser()
        except (KeyError, OSError):
            return None
        return Identity(user_id=user) if user else None


def require_identity(provider: IdentityProvider) -> Identity:
    """Return the current identity or raise AuthorizationError."""
    identity = provider.current_identity()
    if identity is None:
        raise AuthorizationError()
    return identity
