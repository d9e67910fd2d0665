"""Section orchestrator: drives per-section and full-document generation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar

from admitwriter.config.models import AdmitWriterConfig
from admitwriter.errors import AssemblyNotReadyError, GenerationFailedError
from admitwriter.interfaces.identity import IdentityProvider, require_identity
from admitwriter.llm.base import LLMProvider
from admitwriter.profile.models import CandidateProfile
from admitwriter.profile.normalizer import ProfileNormalizer
from admitwriter.writer.models import (
    AssembledDocument,
    GeneratedSection,
    GenerationRequest,
    PromptPayload,
    SectionState,
)
from admitwriter.writer.prompts import PromptComposer
from admitwriter.writer.sections import SECTION_IDS, resolve_section_id
from admitwriter.writer.session import WriterSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProfileInput = CandidateProfile | Mapping[str, Any] | None
RequestInput = GenerationRequest | Mapping[str, Any]


class GenerationStream(Generic[T]):
    """Async iterator over generated text chunks with a final result.

    Iterating forwards chunks as the transport produces them. ``await
    result()`` drains whatever is left and returns the final value.
    Closing the stream before it finishes stores nothing. ``on_start`` runs
    once, when the first chunk is requested; a stream that is never
    iterated has no effect on the session.
    """

    def __init__(
        self,
        chunks: AsyncIterator[str],
        on_complete: Callable[[str], T],
        on_error: Callable[[Exception], Exception],
        on_cancel: Callable[[], None],
        on_start: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = chunks.__aiter__()
        self._on_start = on_start
        self._started = False
        self._on_complete = on_complete
        self._on_error = on_error
        self._on_cancel = on_cancel
        self._parts: list[str] = []
        self._done = False
        self._cancelled = False
        self._result: T | None = None
        self._error: Exception | None = None

    @property
    def text(self) -> str:
        """Text received so far."""
        return "".join(self._parts)

    @property
    def done(self) -> bool:
        return self._done

    def __aiter__(self) -> GenerationStream[T]:
        return self

    async def __anext__(self) -> str:
        if self._done:
            raise StopAsyncIteration
        if not self._started:
            self._started = True
            if self._on_start is not None:
                self._on_start()
        try:
            chunk = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._done = True
            self._result = self._on_complete(self.text)
            raise
        except asyncio.CancelledError:
            await self._abort()
            raise
        except Exception as e:
            self._done = True
            self._error = self._on_error(e)
            raise self._error from e
        self._parts.append(chunk)
        return chunk

    async def result(self) -> T:
        async for _ in self:
            pass
        if self._cancelled:
            raise RuntimeError("Generation stream was closed before completion")
        if self._error is not None:
            raise self._error
        return self._result  # type: ignore[return-value]

    async def aclose(self) -> None:
        if not self._done:
            await self._abort()

    async def _abort(self) -> None:
        self._done = True
        self._cancelled = True
        self._on_cancel()
        close = getattr(self._chunks, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> GenerationStream[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class SectionOrchestrator:
    """Coordinates normalizer, composer and transport for one writer.

    Pipeline:
        profile + request → NormalizedProfile → PromptPayload → LLM → session

    Session state is passed in per call; the orchestrator itself holds only
    collaborators and settings, so one instance can serve many sessions.
    """

    def __init__(
        self,
        llm: LLMProvider,
        composer: PromptComposer | None = None,
        normalizer: ProfileNormalizer | None = None,
        quorum: int = 3,
        identity: IdentityProvider | None = None,
        temperature: float | None = None,
    ) -> None:
        if not 1 <= quorum <= len(SECTION_IDS):
            raise ValueError(f"quorum must be between 1 and {len(SECTION_IDS)}, got {quorum}")
        self.llm = llm
        self.composer = composer or PromptComposer()
        self.normalizer = normalizer or ProfileNormalizer()
        self.quorum = quorum
        self.identity = identity
        self.temperature = temperature

    @classmethod
    def from_config(
        cls,
        llm: LLMProvider,
        config: AdmitWriterConfig,
        identity: IdentityProvider | None = None,
    ) -> SectionOrchestrator:
        composer = PromptComposer(
            full_max_tokens=config.llm.max_tokens,
            section_max_tokens=config.llm.section_max_tokens,
            opening_excerpt_chars=config.writer.opening_excerpt_chars,
        )
        return cls(
            llm,
            composer=composer,
            quorum=config.writer.quorum,
            identity=identity,
            temperature=config.llm.temperature,
        )

    # -- per-section generation ----------------------------------------------

    async def request_section(
        self,
        session: WriterSession,
        profile: ProfileInput,
        request: RequestInput,
        section_id: str,
    ) -> GeneratedSection:
        """Generate one section and store it in session.

        Raises GenerationFailedError when the transport fails; the section
        then returns to idle and every other section is left as it was.
        """
        section_id, payload = self._prepare_section(session, profile, request, section_id)
        try:
            response = await self.llm.generate(**self._call_args(payload))
        except asyncio.CancelledError:
            session._reset(section_id)
            raise
        except Exception as e:
            session._reset(section_id)
            logger.warning("Section %s generation failed: %s", section_id, e)
            raise GenerationFailedError(section_id, e) from e
        return self._store(session, section_id, response.content)

    async def request_sections(
        self,
        session: WriterSession,
        profile: ProfileInput,
        request: RequestInput,
        section_ids: Iterable[str] | None = None,
    ) -> list[GeneratedSection]:
        """Generate sections one after another, so each sees the ones before it."""
        ids = SECTION_IDS if section_ids is None else [resolve_section_id(s) for s in section_ids]
        return [await self.request_section(session, profile, request, sid) for sid in ids]

    def stream_section(
        self,
        session: WriterSession,
        profile: ProfileInput,
        request: RequestInput,
        section_id: str,
    ) -> GenerationStream[GeneratedSection]:
        """Stream one section into session.

        The section is marked dispatched when iteration begins, so a stream
        that is created and then dropped leaves the session as it was.
        """
        section_id, payload = self._prepare_section(
            session, profile, request, section_id, dispatch=False
        )
        try:
            chunks = self.llm.generate_stream(**self._call_args(payload))
        except Exception as e:
            session._reset(section_id)
            raise GenerationFailedError(section_id, e) from e

        def on_error(e: Exception) -> Exception:
            session._reset(section_id)
            logger.warning("Section %s stream failed: %s", section_id, e)
            return GenerationFailedError(section_id, e)

        return GenerationStream(
            chunks,
            on_complete=lambda text: self._store(session, section_id, text),
            on_error=on_error,
            on_cancel=lambda: session._reset(section_id),
            on_start=lambda: session._mark(section_id, SectionState.dispatched),
        )

    # -- full document -------------------------------------------------------

    async def request_full(
        self,
        profile: ProfileInput,
        request: RequestInput,
        word_limit: int | None = None,
    ) -> AssembledDocument:
        """Generate the whole document in one call, bypassing section tracking."""
        payload = self._prepare_full(profile, request)
        try:
            response = await self.llm.generate(**self._call_args(payload))
        except Exception as e:
            logger.warning("Full document generation failed: %s", e)
            raise GenerationFailedError(None, e) from e
        return self._full_document(response.content, word_limit)

    def stream_full(
        self,
        profile: ProfileInput,
        request: RequestInput,
        word_limit: int | None = None,
    ) -> GenerationStream[AssembledDocument]:
        payload = self._prepare_full(profile, request)
        try:
            chunks = self.llm.generate_stream(**self._call_args(payload))
        except Exception as e:
            raise GenerationFailedError(None, e) from e
        return GenerationStream(
            chunks,
            on_complete=lambda text: self._full_document(text, word_limit),
            on_error=lambda e: GenerationFailedError(None, e),
            on_cancel=lambda: None,
        )

    # -- assembly ------------------------------------------------------------

    def assemble(self, session: WriterSession, word_limit: int | None = None) -> AssembledDocument:
        return assemble_sections(session, self.quorum, word_limit)

    # -- internals -----------------------------------------------------------

    def _authorize(self) -> None:
        if self.identity is not None:
            require_identity(self.identity)

    @staticmethod
    def _request(request: RequestInput) -> GenerationRequest:
        if isinstance(request, GenerationRequest):
            return request
        return GenerationRequest.parse(request)

    def _prepare_section(
        self,
        session: WriterSession,
        profile: ProfileInput,
        request: RequestInput,
        section_id: str,
        dispatch: bool = True,
    ) -> tuple[str, PromptPayload]:
        self._authorize()
        section_id = resolve_section_id(section_id)
        session._mark(section_id, SectionState.composing)
        try:
            normalized = self.normalizer.normalize(profile)
            prior = session.prior_sections(exclude=section_id)
            section_request = self._request(request).for_section(section_id, prior)
            payload = self.composer.compose(normalized, section_request)
        except BaseException:
            session._reset(section_id)
            raise
        if dispatch:
            session._mark(section_id, SectionState.dispatched)
        else:
            session._reset(section_id)
        logger.debug(
            "Dispatching section %s (%d prior sections, %d chars of content)",
            section_id,
            len(prior),
            len(payload.content),
        )
        return section_id, payload

    def _prepare_full(self, profile: ProfileInput, request: RequestInput) -> PromptPayload:
        self._authorize()
        normalized = self.normalizer.normalize(profile)
        payload = self.composer.compose(normalized, self._request(request).as_full())
        logger.debug("Dispatching full document (%d max tokens)", payload.max_tokens)
        return payload

    def _call_args(self, payload: PromptPayload) -> dict[str, Any]:
        return {
            "system": payload.instructions,
            "user": payload.content,
            "max_tokens": payload.max_tokens,
            "temperature": self.temperature,
        }

    @staticmethod
    def _store(session: WriterSession, section_id: str, text: str) -> GeneratedSection:
        section = session.store(GeneratedSection(section_id=section_id, text=text.strip()))
        logger.info("Section %s completed (%d chars)", section_id, len(section.text))
        return section

    @staticmethod
    def _full_document(text: str, word_limit: int | None) -> AssembledDocument:
        document = AssembledDocument.from_text(text.strip(), [], word_limit)
        logger.info("Full document completed (%d words)", document.stats.word_count)
        return document


def assemble_sections(
    session: WriterSession, quorum: int = 3, word_limit: int | None = None
) -> AssembledDocument:
    """Join the non-empty sections in catalog order, separated by blank lines.

    Raises ValueError for a quorum outside 1..5 and AssemblyNotReadyError
    when fewer than quorum sections hold text.
    Calling it again without changes to session gives the same text.
    """
    if not 1 <= quorum <= len(SECTION_IDS):
        raise ValueError(f"quorum must be between 1 and {len(SECTION_IDS)}, got {quorum}")
    ids = session.completed_ids()
    if len(ids) < quorum:
        raise AssemblyNotReadyError(len(ids), quorum)
    text = "\n\n".join(session.text(sid).strip() for sid in ids)
    logger.info("Assembled %d sections (%d chars)", len(ids), len(text))
    return AssembledDocument.from_text(text, ids, word_limit)
