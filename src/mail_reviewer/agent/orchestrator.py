"""Question answering over the loaded corpus.

This module provides the orchestrator that turns a question plus the current
corpus snapshot into an answer, and the two interchangeable retrieval
strategies it can delegate to:

- ``MapReduceStrategy`` sends every chunk of the corpus, collects the relevant
  findings of each, and merges them in a final call.
- ``IndexSelectStrategy`` shows the model a compact index, lets it pick the
  relevant records, and answers from just those in a single call.

Calls are made one at a time. Rate-limited calls are retried with bounded
exponential backoff.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Protocol

import structlog

from mail_reviewer.agent import prompts
from mail_reviewer.config import RetrievalStrategyName, Settings
from mail_reviewer.corpus import CorpusRepository, CorpusSnapshot
from mail_reviewer.exceptions import (
    AuthError,
    ConfigurationError,
    EmptyCorpusError,
    SelectionParseError,
    UpstreamError,
    ValidationError,
)
from mail_reviewer.llm import LLMGateway, Message
from mail_reviewer.models import QueryAnswer, Record
from mail_reviewer.retrieval import (
    assemble_context,
    build_index,
    chunk_records,
    index_text,
    parse_selection,
    resolve_selection,
)
from mail_reviewer.utils import Sleep, retry_on_rate_limit

logger = structlog.get_logger()

Complete = Callable[[list[Message]], Awaitable[str]]


class RetrievalStrategy(Protocol):
    """Answers a question from a corpus snapshot."""

    name: str

    async def answer(self, question: str, snapshot: CorpusSnapshot) -> QueryAnswer: ...


class _ModelStrategy:
    name = ""

    def __init__(self, gateway: LLMGateway, settings: Settings, sleep: Sleep = asyncio.sleep) -> None:
        self.gateway = gateway
        self.settings = settings
        self._sleep = sleep

    def _session(self) -> Complete:
        """Return a completion function paced for one query.

        Successive successful requests are spaced out by request_delay_seconds
        to stay under upstream rate limits.
        """
        calls = 0

        async def complete(messages: list[Message]) -> str:
            nonlocal calls
            if calls and self.settings.request_delay_seconds:
                await self._sleep(self.settings.request_delay_seconds)
            result = await retry_on_rate_limit(
                lambda: self.gateway.complete(messages),
                max_attempts=self.settings.rate_limit_max_attempts,
                delay=self.settings.rate_limit_delay_seconds,
                backoff=self.settings.rate_limit_backoff,
                sleep=self._sleep,
            )
            calls += 1
            return result

        return complete


class MapReduceStrategy(_ModelStrategy):
    """Per-chunk extraction followed by one merging call."""

    name = RetrievalStrategyName.MAP_REDUCE.value

    async def answer(self, question: str, snapshot: CorpusSnapshot) -> QueryAnswer:
        complete = self._session()
        chunks = chunk_records(
            snapshot.records,
            self.settings.chunk_char_budget,
            self.settings.compact_body_chars if self.settings.compact_chunks else None,
        )
        total = len(chunks)
        logger.info("map_reduce_started", chunks=total, records=len(snapshot))

        partials: list[str] = []
        errors: list[str] = []
        sources: list[str] = []

        for chunk in chunks:
            tag = f"[Chunk {chunk.number}/{total}]"
            messages = prompts.chunk_extraction_messages(question, chunk.text, chunk.number, total)
            try:
                text = await complete(messages)
            except UpstreamError as e:
                logger.warning("chunk_failed", chunk=chunk.number, status=e.status, error=str(e))
                errors.append(f"{tag} Error: {e}")
                continue

            if prompts.is_no_relevant_info(text):
                logger.debug("chunk_not_relevant", chunk=chunk.number)
                continue

            partials.append(f"{tag}\n{text.strip()}")
            sources.extend(chunk.filenames)

        logger.info("map_reduce_chunks_done", partials=len(partials), errors=len(errors))

        if not partials:
            return QueryAnswer(
                answer=prompts.NOTHING_FOUND_ANSWER,
                strategy=self.name,
                errors=errors,
            )

        merged = await complete(prompts.merge_messages(question, partials))
        return QueryAnswer(
            answer=merged.strip() or prompts.NO_ANSWER_RETURNED,
            strategy=self.name,
            sources=list(dict.fromkeys(sources)),
            errors=errors,
        )


class IndexSelectStrategy(_ModelStrategy):
    """Select relevant records from a compact index, then answer once."""

    name = RetrievalStrategyName.INDEX_SELECT.value

    async def select(
        self,
        question: str,
        snapshot: CorpusSnapshot,
        complete: Optional[Complete] = None,
    ) -> list[Record]:
        """Pick the records to read in full.

        Falls back to the first records by id when the model's reply has no
        usable id list or the selection call fails.
        """

        complete = complete or self._session()
        entries = build_index(snapshot.records, self.settings.index_preview_chars)
        messages = prompts.selection_messages(
            question, index_text(entries), self.settings.select_max_ids
        )

        ids: list[int] = []
        try:
            ids = parse_selection(await complete(messages))
        except SelectionParseError as e:
            logger.info("selection_fallback", reason=str(e))
        except UpstreamError as e:
            logger.warning("selection_call_failed", status=e.status, error=str(e))

        selected = resolve_selection(
            ids,
            snapshot.records,
            max_ids=self.settings.select_max_ids,
            default_count=self.settings.select_default_count,
        )
        logger.info("records_selected", requested=len(ids), selected=len(selected))
        return selected

    async def answer(self, question: str, snapshot: CorpusSnapshot) -> QueryAnswer:
        complete = self._session()
        selected = await self.select(question, snapshot, complete)
        context = assemble_context(selected, self.settings.context_char_budget)
        if context.truncated:
            logger.info(
                "context_truncated",
                selected=len(selected),
                included=len(context.records),
            )

        text = await complete(prompts.answer_messages(question, context.text))
        return QueryAnswer(
            answer=text.strip() or prompts.NO_ANSWER_RETURNED,
            strategy=self.name,
            sources=context.filenames,
        )


def build_strategy(
    name: RetrievalStrategyName | str,
    gateway: LLMGateway,
    settings: Settings,
    sleep: Sleep = asyncio.sleep,
) -> RetrievalStrategy:
    """Instantiate the retrieval strategy selected by configuration."""

    try:
        key = RetrievalStrategyName(name)
    except ValueError as e:
        raise ConfigurationError(f"Unknown retrieval strategy: {name}") from e

    if key is RetrievalStrategyName.INDEX_SELECT:
        return IndexSelectStrategy(gateway, settings, sleep)
    return MapReduceStrategy(gateway, settings, sleep)


class QueryOrchestrator:
    """Answers questions about the corpus held by a repository.

    Without a usable model credential every operation returns a clearly
    labeled mock answer instead of failing.
    """

    def __init__(
        self,
        repository: CorpusRepository,
        gateway: Optional[LLMGateway] = None,
        settings: Optional[Settings] = None,
        strategy: Optional[RetrievalStrategy] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            repository: Corpus repository read at query time.
            gateway: Model gateway. If None, creates a new one.
            settings: Application settings. If None, uses default settings.
            strategy: Retrieval strategy. If None, built from settings.
            sleep: Awaitable sleep used for request pacing and backoff.
        """
        from mail_reviewer.config import get_settings

        self.settings = settings or get_settings()
        self.repository = repository
        self.gateway = gateway or LLMGateway(self.settings)
        self.strategy = strategy or build_strategy(
            self.settings.retrieval_strategy, self.gateway, self.settings, sleep
        )
        logger.info("query_orchestrator_initialized", strategy=self.strategy.name)

    def _snapshot(self) -> CorpusSnapshot:
        snapshot = self.repository.current
        if snapshot.is_empty:
            raise EmptyCorpusError("No records loaded.")
        return snapshot

    async def ask(self, question: str) -> QueryAnswer:
        """Answer a free-form question about the loaded corpus.

        Raises:
            ValidationError: If the question is empty.
            EmptyCorpusError: If no records are loaded.
            UpstreamError: If a non-recoverable model call fails.
        """

        question = (question or "").strip()
        if not question:
            raise ValidationError("No question provided.")
        snapshot = self._snapshot()

        logger.info("question_received", question_chars=len(question), records=len(snapshot))
        return await self._run(question, snapshot, self._mock_answer)

    async def review(self) -> QueryAnswer:
        """Summarize the corpus: topics, people, risks, timeline, next steps."""

        snapshot = self._snapshot()
        logger.info("review_requested", records=len(snapshot))
        return await self._run(prompts.REVIEW_QUESTION, snapshot, self._mock_review)

    async def _run(
        self,
        question: str,
        snapshot: CorpusSnapshot,
        mock: Callable[[CorpusSnapshot], QueryAnswer],
    ) -> QueryAnswer:
        if not self.gateway.has_credentials:
            return mock(snapshot)
        try:
            return await self.strategy.answer(question, snapshot)
        except AuthError as e:
            logger.warning("model_credential_rejected", error=str(e))
            return mock(snapshot)

    def _mock_answer(self, snapshot: CorpusSnapshot) -> QueryAnswer:
        return QueryAnswer(
            answer=(
                "Mock answer (no model API key configured).\n\n"
                f"{len(snapshot)} records loaded. "
                "Set MAIL_REVIEWER_OPENAI_API_KEY to query them."
            ),
            mode="mock",
            strategy=self.strategy.name,
        )

    def _mock_review(self, snapshot: CorpusSnapshot) -> QueryAnswer:
        subjects = "\n".join(
            f"  - {r.subject or '(no subject)'}" for r in snapshot.records[:10]
        )
        return QueryAnswer(
            answer=(
                "Mock review (no model API key configured).\n\n"
                f"Loaded {len(snapshot)} records.\n"
                "Set MAIL_REVIEWER_OPENAI_API_KEY to get a real analysis.\n\n"
                f"Top subjects:\n{subjects}"
            ),
            mode="mock",
            strategy=self.strategy.name,
        )
