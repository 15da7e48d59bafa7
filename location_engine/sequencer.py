# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Query debouncer / sequencer.

Sits between free-text input and the resolver. Every input change is
stamped with a strictly increasing generation; a result is handed to the
UI only if its generation is still the current one when it arrives.

    Idle -> Pending(generation) -> Applied | Superseded

Superseded calls are not aborted at the transport level once their resolve
has started; their results are dropped at the generation check, so network
calls may still finish in the background.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, Optional, Set

from .config import settings
from .models import Coordinate, ResolvedSet, SearchQuery

MAX_TRACKED_GENERATIONS = 64


class QueryState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    APPLIED = "applied"
    SUPERSEDED = "superseded"


class QuerySequencer:
    """Debounces keystroke-driven queries and discards stale results."""

    def __init__(
        self,
        resolver,
        on_results: Callable[[ResolvedSet], None],
        debounce_seconds: Optional[float] = None,
        origin_hint: Optional[Coordinate] = None,
    ):
        self.resolver = resolver
        self.on_results = on_results
        self.debounce_seconds = debounce_seconds if debounce_seconds is not None else settings.debounce_seconds
        self.origin_hint = origin_hint
        self.logger = logging.getLogger(__name__)

        self._generation = 0
        self._states: "OrderedDict[int, QueryState]" = OrderedDict()
        # Tasks still sleeping out their quiet interval, by generation
        self._waiting: Dict[int, asyncio.Task] = {}
        self._tasks: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> QueryState:
        return self.state_of(self._generation)

    def state_of(self, generation: int) -> QueryState:
        if generation == 0:
            return QueryState.IDLE
        return self._states.get(generation, QueryState.SUPERSEDED)

    def set_origin_hint(self, origin_hint: Optional[Coordinate]) -> None:
        self.origin_hint = origin_hint

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def on_query_changed(self, text: str) -> int:
        """Keystroke entry point: resolve after the quiet interval."""
        return self._schedule(text, self.debounce_seconds)

    def submit(self, text: str) -> int:
        """Explicit search: no debounce, still generation-stamped."""
        return self._schedule(text, 0.0)

    def _schedule(self, text: str, delay: float) -> int:
        generation = self._next_generation()

        if not (text or "").strip():
            self._apply(generation, ResolvedSet(query="", generation=generation))
            return generation

        query = SearchQuery(text=text, generation=generation, origin_hint=self.origin_hint)
        task = asyncio.get_running_loop().create_task(self._run(query, delay))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        if delay > 0:
            self._waiting[generation] = task
        return generation

    def _next_generation(self) -> int:
        self._generation += 1
        generation = self._generation

        # Anything still waiting out its debounce belongs to an older generation
        for old_generation, task in list(self._waiting.items()):
            task.cancel()
            self._mark(old_generation, QueryState.SUPERSEDED)
        self._waiting.clear()

        for old_generation, state in list(self._states.items()):
            if state == QueryState.PENDING:
                self._states[old_generation] = QueryState.SUPERSEDED

        self._mark(generation, QueryState.PENDING)
        return generation

    def _mark(self, generation: int, state: QueryState) -> None:
        self._states[generation] = state
        self._states.move_to_end(generation)
        while len(self._states) > MAX_TRACKED_GENERATIONS:
            self._states.popitem(last=False)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _run(self, query: SearchQuery, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
            self._waiting.pop(query.generation, None)

        if query.generation != self._generation:
            return

        try:
            result = await self.resolver.resolve(query.text, query.origin_hint)
        except Exception as e:
            self.logger.error(f"❌ Resolve failed for '{query.text}' (generation {query.generation}): {e}")
            result = ResolvedSet(query=query.text.strip())

        self._apply(query.generation, replace(result, generation=query.generation))

    def _apply(self, generation: int, result: ResolvedSet) -> None:
        if generation != self._generation:
            self._mark(generation, QueryState.SUPERSEDED)
            self.logger.debug(
                f"Discarding stale results for generation {generation} (current {self._generation})"
            )
            return

        self._mark(generation, QueryState.APPLIED)
        self.on_results(result)

    async def wait_idle(self) -> None:
        """Wait for every scheduled and in-flight call to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()
        self._waiting.clear()
