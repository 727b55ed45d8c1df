"""Tests for the effect queue and its delayed timeline."""

from effect_engine.ir.effects import MessageEffect
from effect_engine.ir.expressions import Str
from effect_engine.sim.core.context import EffectContext
from effect_engine.sim.core.effect_queue import EffectQueue, QueuedEffect


def _make_item(text: str, queue_id: str | None = None) -> QueuedEffect:
    return QueuedEffect(
        effect=MessageEffect(text=Str(value=text)),
        context=EffectContext(queue_id=queue_id),
    )


def _drain(queue: EffectQueue) -> list[str]:
    texts = []
    while (item := queue.pop()) is not None:
        texts.append(item.effect.text.value)
    return texts


class TestImmediateQueue:
    def test_fifo(self):
        queue = EffectQueue()
        for text in ("a", "b", "c"):
            queue.push_back(_make_item(text))
        assert len(queue) == 3
        assert _drain(queue) == ["a", "b", "c"]
        assert queue.is_empty

    def test_push_front_runs_next(self):
        queue = EffectQueue()
        queue.push_back(_make_item("later"))
        queue.push_front(_make_item("now"))
        assert _drain(queue) == ["now", "later"]

    def test_push_front_many_keeps_declared_order(self):
        queue = EffectQueue()
        queue.push_back(_make_item("queued"))
        queue.push_front_many([_make_item("e1"), _make_item("e2"), _make_item("e3")])
        assert _drain(queue) == ["e1", "e2", "e3", "queued"]

    def test_pop_empty(self):
        assert EffectQueue().pop() is None

    def test_clear(self):
        queue = EffectQueue()
        queue.push_back(_make_item("a"))
        queue.schedule(_make_item("b"), 1.0, 0.0)
        queue.clear()
        assert queue.is_empty
        assert queue.pending_delayed == 0

    def test_clear_immediate_keeps_timeline(self):
        queue = EffectQueue()
        queue.push_back(_make_item("a"))
        queue.schedule(_make_item("b1", "b"), 1.0, 0.0)
        queue.clear_immediate()
        assert queue.is_empty
        assert queue.pending_delayed == 1
        assert queue.schedule(_make_item("b2", "b"), 1.0, 0.0) == 2.0


class TestTimeline:
    def test_not_promoted_before_due(self):
        queue = EffectQueue()
        assert queue.schedule(_make_item("a"), 2.0, 0.0) == 2.0
        assert queue.promote_due(1.9) == 0
        assert queue.is_empty
        assert queue.next_due() == 2.0

    def test_promoted_to_back(self):
        queue = EffectQueue()
        queue.push_back(_make_item("immediate"))
        queue.schedule(_make_item("delayed"), 1.0, 0.0)
        assert queue.promote_due(1.0) == 1
        assert _drain(queue) == ["immediate", "delayed"]

    def test_same_deadline_is_fifo(self):
        queue = EffectQueue()
        queue.schedule(_make_item("first"), 1.0, 0.0)
        queue.schedule(_make_item("second"), 1.0, 0.0)
        queue.promote_due(1.0)
        assert _drain(queue) == ["first", "second"]

    def test_partition_serialises_delays(self):
        queue = EffectQueue()
        assert queue.schedule(_make_item("a1", "a"), 1.0, 0.0) == 1.0
        assert queue.schedule(_make_item("a2", "a"), 1.0, 0.0) == 2.0

    def test_partitions_are_independent(self):
        queue = EffectQueue()
        queue.schedule(_make_item("a1", "a"), 1.0, 0.0)
        queue.schedule(_make_item("a2", "a"), 1.0, 0.0)
        assert queue.schedule(_make_item("b1", "b"), 1.0, 0.0) == 1.0
        queue.promote_due(1.0)
        assert _drain(queue) == ["a1", "b1"]
        assert queue.pending_delayed == 1

    def test_unpartitioned_items_do_not_wait(self):
        queue = EffectQueue()
        queue.schedule(_make_item("a1", "a"), 5.0, 0.0)
        assert queue.schedule(_make_item("free"), 1.0, 0.0) == 1.0

    def test_add_delay_pushes_partition(self):
        queue = EffectQueue()
        assert queue.add_delay("a", 0.5, 0.0) == 0.5
        assert queue.schedule(_make_item("a1", "a"), 1.0, 0.0) == 1.5

    def test_cursor_resets_once_passed(self):
        queue = EffectQueue()
        queue.schedule(_make_item("a1", "a"), 1.0, 0.0)
        queue.promote_due(3.0)
        assert queue.schedule(_make_item("a2", "a"), 1.0, 3.0) == 4.0
