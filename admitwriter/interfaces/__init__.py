"""Interfaces to the collaborators the writer core depends on."""

from admitwriter.interfaces.identity import (
    Identity,
    IdentityProvider,
    LocalIdentityProvider,
    require_identity,
)
from admitwriter.interfaces.storage import DocumentStore, SavedDocument

__all__ = [
    "DocumentStore",
    "Identity",
    "IdentityProvider",
    "LocalIdentityProvider",
    "SavedDocument",
    "require_identity",
]
