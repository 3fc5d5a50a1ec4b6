import threading
import unittest

from conftest import FakeClock, beat
from pitch_scorer.core.interfaces import IExpectationSource, IPitchSource
from pitch_scorer.note_types import PitchSample, Score, SessionState
from pitch_scorer.note_utils import midi_to_hz
from pitch_scorer.scoring_engine import ScoringEngine
from pitch_scorer.session import PlaybackSignal, ScoringSession
from pitch_scorer.session_gate import SessionGate


class MockPitchSource(IPitchSource):
    """Lets a test push pitch samples by hand."""

    def __init__(self, ok=True):
        self.callback = None
        self.is_running = False
        self.ok = ok

    def start(self, callback):
        self.callback = callback
        self.is_running = self.ok
        return self.ok

    def stop(self):
        self.is_running = False

    def emit(self, hz, t):
        self.callback(PitchSample(hz=hz, timestamp=t))


class MockExpectationSource(IExpectationSource):
    def __init__(self):
        self.callback = None
        self.is_running = False

    def start(self, callback):
        self.callback = callback
        self.is_running = True
        return True

    def stop(self):
        self.is_running = False


def make_session():
    clock = FakeClock(0.0)
    engine = ScoringEngine(clock=clock)
    return ScoringSession(engine=engine, gate=SessionGate(events=engine.events, clock=clock))


class TestScoringSession(unittest.TestCase):
    def setUp(self):
        self.session = make_session()
        self.pitch = MockPitchSource()
        self.playback = MockExpectationSource()
        self.session.start(self.pitch, self.playback)

    def test_events_are_applied_in_order(self):
        self.session.submit_signal(PlaybackSignal.STARTED, True)
        self.playback.callback(beat(0, [45], first=True))
        for i in range(6):
            self.pitch.emit(110.0, i * 0.01)
        self.assertEqual(self.session.engine.score, Score())
        self.assertEqual(self.session.process_events(), 8)
        self.assertEqual(self.session.engine.score, Score(hits=1, total=1))

    def test_reset_in_queue_prevents_later_award(self):
        self.playback.callback(beat(0, [45], first=True))
        for i in range(5):
            self.pitch.emit(110.0, i * 0.01)
        self.session.submit_signal(PlaybackSignal.RESET)
        self.pitch.emit(110.0, 0.05)
        self.session.process_events()
        self.assertEqual(self.session.engine.score, Score())
        self.assertEqual(self.session.engine.state, SessionState.IDLE)

    def test_finish_goes_through_gate(self):
        self.playback.callback(beat(0, [45], first=True))
        for i in range(6):
            self.pitch.emit(110.0, i * 0.01)
        self.session.submit_signal(
            PlaybackSignal.FINISHED,
            {"track_id": 2, "song_name": "Seven Nation Army", "instrument_name": "Bass"},
        )
        self.session.process_events()
        self.assertEqual(len(self.session.summaries), 1)
        self.assertEqual(len(self.session.offers), 1)
        self.assertEqual(self.session.offers[0].percentage, 100)
        self.assertEqual(self.session.engine.state, SessionState.VALID_COMPLETE)

    def test_paused_run_is_not_offered(self):
        self.playback.callback(beat(0, [45], first=True))
        self.session.submit_signal(PlaybackSignal.PAUSE)
        self.session.submit_signal(PlaybackSignal.FINISHED, {"track_id": 2})
        self.session.process_events()
        self.assertEqual(self.session.offers, [])
        self.assertEqual(self.session.engine.state, SessionState.INVALID_COMPLETE)

    def test_all_signals_reach_engine(self):
        self.playback.callback(beat(0, [45], first=True))
        for signal in (PlaybackSignal.SEEK, PlaybackSignal.TRACK_CHANGED):
            self.session.submit_signal(signal)
        self.session.process_events()
        validity = self.session.engine.validity
        self.assertTrue(validity.seeked and validity.track_changed)

        self.session.submit_signal(PlaybackSignal.MANUAL_STOP)
        self.session.process_events()
        self.assertTrue(self.session.engine.validity.manual_stop)
        self.assertFalse(self.session.engine.validity.seeked)

        self.session.submit_signal(PlaybackSignal.SONG_LOADED)
        self.session.process_events()
        self.assertFalse(self.session.engine.validity.manual_stop)

    def test_producers_on_other_threads(self):
        self.playback.callback(beat(0, [45], first=True))
        self.session.process_events()

        def produce():
            for i in range(6):
                self.pitch.emit(midi_to_hz(45), i * 0.01)

        worker = threading.Thread(target=produce)
        worker.start()
        worker.join()
        self.assertEqual(self.session.process_events(), 6)
        self.assertEqual(self.session.engine.score.hits, 1)

    def test_stop_drops_queued_events_and_stops_sources(self):
        self.pitch.emit(110.0, 0.0)
        self.session.stop()
        self.assertFalse(self.pitch.is_running)
        self.assertFalse(self.playback.is_running)
        self.assertEqual(self.session.process_events(), 0)
        self.session.submit_pitch(PitchSample(110.0, 0.1))
        self.assertEqual(self.session.process_events(), 0)


class TestSessionStartFailure(unittest.TestCase):
    def test_failing_source_raises(self):
        session = make_session()
        with self.assertRaises(RuntimeError):
            session.start(MockPitchSource(ok=False))
        self.assertFalse(session.running)


if __name__ == "__main__":
    unittest.main()
