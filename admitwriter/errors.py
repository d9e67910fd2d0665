"""Typed errors surfaced by the writer core."""

from __future__ import annotations


class AdmitWriterError(Exception):
    """Base class for every error the writer core raises."""


class ValidationError(AdmitWriterError, ValueError):
    """Malformed or missing input (profile or request fields)."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Missing or invalid field: {field}")


class UnknownSectionError(AdmitWriterError, KeyError):
    """A section id outside the fixed catalog was requested."""

    def __init__(self, section_id: object) -> None:
        self.section_id = section_id
        super().__init__(section_id)

    def __str__(self) -> str:
        return f"Unknown section: {self.section_id!r}"


class GenerationFailedError(AdmitWriterError):
    """The text-generation service errored or timed out.

    ``section_id`` is None for full-document and review calls.
    """

    def __init__(self, section_id: str | None, cause: BaseException) -> None:
        self.section_id = section_id
        self.cause = cause
        self.retryable = bool(getattr(cause, "retryable", False))
        target = f"section {section_id!r}" if section_id else "document"
        super().__init__(f"Generation failed for {target}: {cause}")
        self.__cause__ = cause


class AssemblyNotReadyError(AdmitWriterError):
    """assemble() was called before enough sections hold text."""

    def __init__(self, completed: int, quorum: int) -> None:
        self.completed = completed
        self.quorum = quorum
        super().__init__(
            f"Need at least {quorum} written sections to assemble, have {completed}"
        )


class AuthorizationError(AdmitWriterError):
    """No authenticated caller is present."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
