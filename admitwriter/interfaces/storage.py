"""Document store interface and models."""

from __future__ import annotations

from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SavedDocument(BaseModel):
    """A finished document plus the metadata it is filed under."""

    model_config = ConfigDict(frozen=True)

    target_identity: str = Field(min_length=1)
    content: str
    word_count: int = Field(ge=0)
    title: str = ""
    kind: Literal["sop"] = "sop"
    owner: str | None = None

    @model_validator(mode="before")
    @classmethod
    def default_title(cls, data: Any) -> Any:
        if isinstance(data, dict) and not str(data.get("title") or "").strip():
            target = data.get("target_identity")
            if target:
                data = {**data, "title": f"SOP for {target}"}
        return data


@runtime_checkable
class DocumentStore(Protocol):
    """Persists finished documents. Listing and deletion live elsewhere."""

    def save(self, document: SavedDocument) -> str: ...
