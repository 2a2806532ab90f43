"""Provider fan-out: one generation task per (provider, model) pair.

Each task gets a per-call timeout and bounded retries. A global deadline stops
dispatching new tasks and stops further retries; tasks already running finish
under their own timeout. Tasks run one at a time (``sequential``) or under a
semaphore (``parallel``).

Provider calls block, so they run on a thread pool owned by the run and sized
to the number of calls allowed in flight. A call that times out keeps its
worker until the provider answers; the pool is shut down without waiting, so
an abandoned call never holds up the run itself.
"""

from __future__ import annotations

import asyncio
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)
from tenacity.stop import stop_base

from .config import FanoutConfig
from .errors import NoProvidersAvailable, classify_error, is_retryable
from .llm.client import GenerationClient, GenerationRequest
from .llm.providers import ProviderRegistry, expand_tasks
from .logging import TaskLogAdapter, get_logger, task_logger
from .models import DocumentationResult, GenerationTask, ProjectInfo, SourceFile
from .prompting import PromptBuilder

logger = get_logger("fanout")


@dataclass
class FanoutOutcome:
    """Merged results of one fan-out run."""

    results: List[DocumentationResult] = field(default_factory=list)
    attempted: int = 0
    skipped: int = 0
    deadline_reached: bool = False
    elapsed_ms: int = 0


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / 4)


class stop_at_deadline(stop_base):
    """Stop retrying once ``expired()`` reports the global deadline has passed."""

    def __init__(self, expired: Callable[[], bool]) -> None:
        self._expired = expired

    def __call__(self, retry_state: RetryCallState) -> bool:
        return self._expired()


class FanoutOrchestrator:
    """Dispatches generation tasks across every credentialed provider."""

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        client: GenerationClient | None = None,
        prompt_builder: PromptBuilder | None = None,
        config: FanoutConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.registry = registry
        self.client = client or GenerationClient()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.config = config or FanoutConfig()
        self._clock = clock
        self._sleep = sleep or asyncio.sleep
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def pool_size(self) -> int:
        """Upper bound on provider calls in flight at any moment."""
        return self.config.concurrency if self.config.mode == "parallel" else 1

    def tasks(self) -> List[GenerationTask]:
        return expand_tasks(self.registry)

    def run(self, project_info: ProjectInfo, files: Sequence[SourceFile]) -> FanoutOutcome:
        """Synchronous entry point; owns its own event loop."""
        return asyncio.run(self.run_async(project_info, files))

    async def run_async(
        self, project_info: ProjectInfo, files: Sequence[SourceFile]
    ) -> FanoutOutcome:
        if not len(self.registry):
            raise NoProvidersAvailable()
        tasks = self.tasks()
        started = self._clock()
        deadline_at = started + self.config.deadline if self.config.deadline is not None else None
        logger.info(
            "Dispatching %d tasks across %d providers (%s mode)",
            len(tasks),
            len(self.registry),
            self.config.mode,
        )

        executor = ThreadPoolExecutor(max_workers=self.pool_size, thread_name_prefix="docbench-fanout")
        self._executor = executor
        try:
            if self.config.mode == "parallel":
                outcome = await self._run_parallel(tasks, project_info, files, deadline_at)
            else:
                outcome = await self._run_sequential(tasks, project_info, files, deadline_at)
        finally:
            self._executor = None
            executor.shutdown(wait=False, cancel_futures=True)

        outcome.elapsed_ms = int((self._clock() - started) * 1000)
        if outcome.deadline_reached:
            logger.warning(
                "Global deadline of %ss reached; %d tasks were not dispatched",
                self.config.deadline,
                outcome.skipped,
            )
        return outcome

    async def _run_sequential(
        self,
        tasks: Sequence[GenerationTask],
        project_info: ProjectInfo,
        files: Sequence[SourceFile],
        deadline_at: Optional[float],
    ) -> FanoutOutcome:
        outcome = FanoutOutcome()
        for index, task in enumerate(tasks):
            if self._expired(deadline_at):
                outcome.deadline_reached = True
                outcome.skipped = len(tasks) - index
                break
            outcome.results.append(await self.execute(task, project_info, files, deadline_at=deadline_at))
            outcome.attempted += 1
            if self.config.request_interval > 0 and index < len(tasks) - 1:
                await self._sleep(self.config.request_interval)
        return outcome

    async def _run_parallel(
        self,
        tasks: Sequence[GenerationTask],
        project_info: ProjectInfo,
        files: Sequence[SourceFile],
        deadline_at: Optional[float],
    ) -> FanoutOutcome:
        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def _worker(task: GenerationTask) -> Optional[DocumentationResult]:
            async with semaphore:
                if self._expired(deadline_at):
                    return None
                return await self.execute(task, project_info, files, deadline_at=deadline_at)

        gathered = await asyncio.gather(*(_worker(task) for task in tasks))
        outcome = FanoutOutcome()
        for result in gathered:
            if result is None:
                outcome.skipped += 1
            else:
                outcome.results.append(result)
                outcome.attempted += 1
        outcome.deadline_reached = outcome.skipped > 0
        return outcome

    async def execute(
        self,
        task: GenerationTask,
        project_info: ProjectInfo,
        files: Sequence[SourceFile],
        *,
        deadline_at: Optional[float] = None,
    ) -> DocumentationResult:
        """Run one task to completion; failures become unsuccessful results."""
        log = task_logger(logger, task.provider, task.model)
        provider = self.registry.get(task.provider)
        model = self.registry.model(task.provider, task.model)
        started = self._clock()
        attempts = 0

        try:
            if provider is None or model is None:
                raise LookupError(f"Model {task.provider}/{task.model} does not exist in the registry")
            request = GenerationRequest(
                provider=task.provider,
                base_url=provider.spec.base_url,
                api_key=provider.api_key,
                model=task.model,
                prompt=self.prompt_builder.build(project_info, files, model),
                system=self.prompt_builder.SYSTEM_PROMPT,
                max_tokens=self.prompt_builder.output_tokens(task.max_tokens),
                timeout=self.config.call_timeout,
            )
            retrying = AsyncRetrying(
                stop=stop_after_attempt(self.config.max_attempts)
                | stop_at_deadline(lambda: self._expired(deadline_at)),
                wait=wait_incrementing(start=self.config.retry_delay, increment=self.config.retry_delay),
                retry=retry_if_exception(is_retryable),
                before_sleep=_log_retry(log),
                sleep=self._sleep,
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    log.debug("Attempt %d", attempts)
                    text = await self._call(request)
        except Exception as exc:  # noqa: BLE001 - every failure becomes a result
            kind = classify_error(exc)
            message = _describe(exc, self.config.call_timeout)
            log.warning("Failed after %d attempt(s) [%s]: %s", attempts, kind.value, message)
            return DocumentationResult(
                success=False,
                model_used=task.model,
                provider_used=task.provider,
                generation_time_ms=self._elapsed_ms(started),
                error=message,
                error_kind=kind.value,
                attempts=max(attempts, 1),
            )

        elapsed = self._elapsed_ms(started)
        log.info("Succeeded in %d ms", elapsed)
        return DocumentationResult(
            success=True,
            model_used=task.model,
            provider_used=task.provider,
            generation_time_ms=elapsed,
            documentation=text,
            token_count=estimate_tokens(text),
            attempts=attempts,
        )

    async def _call(self, request: GenerationRequest) -> str:
        # Queued calls count against call_timeout while an abandoned call still holds a worker.
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(self._executor, self.client.generate, request)
        if self.config.call_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.config.call_timeout)

    def _expired(self, deadline_at: Optional[float]) -> bool:
        return deadline_at is not None and self._clock() >= deadline_at

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))


def _log_retry(log: TaskLogAdapter) -> Callable[[RetryCallState], None]:
    def _before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        log.info("Retrying in %.1fs after attempt %d: %s", delay, retry_state.attempt_number, exc)

    return _before_sleep


def _describe(exc: BaseException, timeout: Optional[float]) -> str:
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)) and not str(exc):
        return f"Request timed out after {timeout}s"
    return str(exc) or exc.__class__.__name__


__all__ = ["FanoutOrchestrator", "FanoutOutcome", "estimate_tokens", "stop_at_deadline"]
