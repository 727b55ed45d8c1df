"""Execution queue for the effect interpreter.

Effects produced by reactions and by other effects are pushed onto this
queue and resolved one at a time by the engine's drain loop.
``push_front`` lets an effect have its direct consequences resolved
*before* anything queued earlier, which gives effect trees depth-first
semantics.

Delayed effects live on a separate time-ordered timeline and only reach
the immediate queue through :meth:`EffectQueue.promote_due`.
"""

from __future__ import annotations

import heapq
import itertools
from collections import deque
from typing import Iterable, Optional

from pydantic import BaseModel

from effect_engine.ir.effects import Effect
from effect_engine.ir.roles import Faction
from effect_engine.sim.core.context import EffectContext


# ---------------------------------------------------------------------------
# QueuedEffect (value object)
# ---------------------------------------------------------------------------

class QueuedEffect(BaseModel):
    """One effect waiting to be resolved, with its own context snapshot.

    Parameters
    ----------
    effect:
        The effect tree node to process.
    context:
        The binding environment it is processed against.
    anchor:
        For time bombs: the (faction, slot) the target stood in when the
        bomb was planted.  The target is re-resolved from it on pop.
    """

    effect: Effect
    context: EffectContext
    anchor: Optional[tuple[Faction, int]] = None


# ---------------------------------------------------------------------------
# EffectQueue
# ---------------------------------------------------------------------------

class EffectQueue:
    """Double-ended queue of ``QueuedEffect`` objects plus a delayed timeline.

    This is a plain Python class (not a Pydantic model) because it holds
    mutable internal state that should not be serialized.
    """

    def __init__(self) -> None:
        self._queue: deque[QueuedEffect] = deque()
        # (due, seq, item); seq keeps equal deadlines FIFO.
        self._timeline: list[tuple[float, int, QueuedEffect]] = []
        self._seq = itertools.count()
        self._cursors: dict[str, float] = {}

    # -- mutations -----------------------------------------------------------

    def push_back(self, item: QueuedEffect) -> None:
        """Append *item*; it runs after everything already queued."""
        self._queue.append(item)

    def push_front(self, item: QueuedEffect) -> None:
        """Insert *item* at the front; it runs next."""
        self._queue.appendleft(item)

    def push_front_many(self, items: Iterable[QueuedEffect]) -> None:
        """Insert *items* at the front so that they run in the given order."""
        for item in reversed(list(items)):
            self._queue.appendleft(item)

    def pop(self) -> QueuedEffect | None:
        """Remove and return the next item, or ``None`` if the queue is empty."""
        if self._queue:
            return self._queue.popleft()
        return None

    def clear(self) -> None:
        """Discard every queued and scheduled item."""
        self.clear_immediate()
        self._timeline.clear()
        self._cursors.clear()

    def clear_immediate(self) -> None:
        """Discard queued items but keep the delayed timeline."""
        self._queue.clear()

    # -- delayed timeline ----------------------------------------------------

    def schedule(self, item: QueuedEffect, delay: float, now: float) -> float:
        """Put *item* on the timeline and return the time it becomes due.

        Items with a ``queue_id`` are serialised within their partition:
        the delay counts from the later of *now* and the partition's
        cursor, and the cursor moves to the new deadline.  Partitions
        never wait on each other.
        """
        queue_id = item.context.queue_id
        start = now
        if queue_id is not None:
            start = max(now, self._cursors.get(queue_id, now))
        due = start + delay
        if queue_id is not None:
            self._cursors[queue_id] = due
        heapq.heappush(self._timeline, (due, next(self._seq), item))
        return due

    def add_delay(self, queue_id: str, delay: float, now: float) -> float:
        """Push a partition's cursor *delay* further out (e.g. for a visual)."""
        due = max(now, self._cursors.get(queue_id, now)) + delay
        self._cursors[queue_id] = due
        return due

    def promote_due(self, now: float) -> int:
        """Move every item due at or before *now* to the back of the queue.

        Returns the number of items promoted.
        """
        promoted = 0
        while self._timeline and self._timeline[0][0] <= now:
            _, _, item = heapq.heappop(self._timeline)
            self._queue.append(item)
            promoted += 1
        for queue_id in [q for q, cursor in self._cursors.items() if cursor <= now]:
            del self._cursors[queue_id]
        return promoted

    @property
    def pending_delayed(self) -> int:
        return len(self._timeline)

    def next_due(self) -> float | None:
        return self._timeline[0][0] if self._timeline else None

    # -- queries -------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return len(self._queue) == 0

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"EffectQueue(length={len(self._queue)}, delayed={len(self._timeline)})"
