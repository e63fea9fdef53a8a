"""Tests for EventEmitter."""
from unittest.mock import Mock

from megagate.core.events import EventEmitter


class TestEventEmitter:
    """Test suite for EventEmitter."""

    def test_emit_calls_handlers_in_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on('progress', lambda value: calls.append(('a', value)))
        emitter.on('progress', lambda value: calls.append(('b', value)))

        assert emitter.emit('progress', 10) is True
        assert calls == [('a', 10), ('b', 10)]

    def test_emit_without_handlers(self):
        assert EventEmitter().emit('nothing') is False

    def test_on_returns_self(self):
        emitter = EventEmitter()

        assert emitter.on('x', Mock()) is emitter

    def test_once(self):
        emitter = EventEmitter()
        handler = Mock()
        emitter.once('done', handler)

        emitter.emit('done', 1)
        emitter.emit('done', 2)

        handler.assert_called_once_with(1)
        assert emitter.listener_count('done') == 0

    def test_off_single_handler(self):
        emitter = EventEmitter()
        keep, drop = Mock(), Mock()
        emitter.on('e', keep).on('e', drop)

        emitter.off('e', drop)
        emitter.emit('e')

        keep.assert_called_once()
        drop.assert_not_called()

    def test_off_all_handlers(self):
        emitter = EventEmitter()
        emitter.on('e', Mock()).on('e', Mock())

        emitter.off('e')

        assert emitter.listener_count('e') == 0

    def test_failing_handler_does_not_stop_others(self):
        """A raising observer is logged and the next handler still runs."""
        emitter = EventEmitter()
        after = Mock()
        emitter.on('progress', Mock(side_effect=RuntimeError("observer bug")))
        emitter.on('progress', after)

        emitter.emit('progress', 5)

        after.assert_called_once_with(5)
