import unittest

from pitch_scorer.core.events import EventEmitter, ScorerEventType


class TestEventEmitter(unittest.TestCase):
    def test_emit_to_listeners(self):
        emitter = EventEmitter()
        seen = []
        emitter.on(ScorerEventType.SCORE_CHANGED, seen.append)
        emitter.on(ScorerEventType.SCORE_CHANGED, seen.append)  # registered once
        emitter.emit(ScorerEventType.SCORE_CHANGED, 1)
        emitter.emit(ScorerEventType.LIVE_UPDATED, 2)
        self.assertEqual(seen, [1])

    def test_failing_listener_does_not_stop_others(self):
        emitter = EventEmitter()
        seen = []

        def broken(_):
            raise RuntimeError("boom")

        emitter.on(ScorerEventType.SAVE_ERROR, broken)
        emitter.on(ScorerEventType.SAVE_ERROR, seen.append)
        emitter.emit(ScorerEventType.SAVE_ERROR, "msg")
        self.assertEqual(seen, ["msg"])

    def test_off_and_clear(self):
        emitter = EventEmitter()
        seen = []
        emitter.on(ScorerEventType.SESSION_RESET, lambda: seen.append("a"))
        emitter.on(ScorerEventType.SONG_FINISHED, seen.append)
        emitter.off(ScorerEventType.SONG_FINISHED, seen.append)
        emitter.emit(ScorerEventType.SONG_FINISHED, "x")
        emitter.clear()
        emitter.emit(ScorerEventType.SESSION_RESET)
        self.assertEqual(seen, [])


if __name__ == "__main__":
    unittest.main()
