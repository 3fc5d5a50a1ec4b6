"""Main entry point for the pitch-scorer CLI."""

import json
from typing import Any, Dict, Iterator, Optional

import click

from ..core.config import ConfigManager
from ..logging_config import get_logger, setup_logging
from ..note_types import ExpectedBeat, PitchSample
from ..expectation import ScoreNote, build_expected_beat
from ..scoring_engine import ScoringEngine
from ..session import PlaybackSignal, ScoringSession
from ..session_gate import SessionGate
from ..stats import JsonScoreStore

logger = get_logger(__name__)

SIGNALS = {signal.value: signal for signal in PlaybackSignal}


def read_events(path: str) -> Iterator[Dict[str, Any]]:
    """Yield one dict per non-empty line of a JSON-lines event log."""
    with open(path, "r") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                event = json.loads(line)
            except ValueError as e:
                raise click.ClickException(f"{path}:{lineno}: invalid JSON ({e})")
            if not isinstance(event, dict) or "type" not in event:
                raise click.ClickException(f"{path}:{lineno}: event needs a 'type'")
            event["_line"] = lineno
            yield event


def parse_beat(event: Dict[str, Any]) -> ExpectedBeat:
    """Build an ExpectedBeat from either raw score notes or explicit chords."""
    t = event.get("t")
    if "notes" in event:
        notes = [
            ScoreNote(
                pitch=n.get("pitch"),
                is_ghost=bool(n.get("ghost", False)),
                is_dead=bool(n.get("dead", False)),
            )
            for n in event["notes"]
        ]
        return build_expected_beat(event.get("bar", -1), event.get("beat", -1), notes, t)
    return ExpectedBeat(
        beat_id=int(event.get("beat_id", -1)),
        chords=tuple(tuple(int(p) for p in chord) for chord in event.get("chords", [])),
        is_first_beat=bool(event.get("first", False)),
        timestamp=t,
    )


def submit_event(session: ScoringSession, event: Dict[str, Any]) -> None:
    kind = event["type"]
    if kind == "pitch":
        session.submit_pitch(PitchSample(hz=float(event.get("hz", 0.0)), timestamp=event.get("t")))
    elif kind == "beat":
        session.submit_beat(parse_beat(event))
    elif kind == "finished":
        session.submit_signal(
            PlaybackSignal.FINISHED,
            {
                "track_id": event.get("track_id"),
                "song_name": event.get("song_name", ""),
                "instrument_name": event.get("instrument", ""),
            },
        )
    elif kind in SIGNALS:
        payload = event.get("from_beginning") if kind == PlaybackSignal.STARTED.value else None
        session.submit_signal(SIGNALS[kind], payload)
    else:
        raise click.ClickException(f"line {event['_line']}: unknown event type '{kind}'")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/pitch_scorer)",
)
@click.pass_context
def cli(ctx, debug, config_dir):
    """pitch-scorer - judge played pitches against a song's expected notes"""
    setup_logging(level="DEBUG" if debug else "WARNING")
    ctx.obj = ConfigManager(config_dir)


@cli.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--history",
    type=click.Path(dir_okay=False),
    default=None,
    help="Append an eligible result to this JSON score history",
)
@click.option("--show-beats", is_flag=True, help="Print the result of every beat")
@click.pass_obj
def replay(config: ConfigManager, events_file: str, history: Optional[str], show_beats: bool):
    """Replay a recorded JSON-lines event log through the scoring engine"""
    try:
        scorer_config = config.get_scorer_config()
        duplicate_window_s = config.get_duplicate_window()
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    logger.info("Replaying %s", events_file)
    engine = ScoringEngine(config=scorer_config)
    gate = SessionGate(
        events=engine.events,
        duplicate_window_s=duplicate_window_s,
    )
    session = ScoringSession(engine=engine, gate=gate)
    session.start()
    try:
        for event in read_events(events_file):
            submit_event(session, event)
            session.process_events()

        score = engine.score
        click.echo(f"Score: {score.hits}/{score.total} ({score.percentage}%)")
        click.echo(f"State: {engine.state.value}")
        validity = engine.validity
        flags = [name for name in ("paused", "track_changed", "manual_stop", "seeked") if getattr(validity, name)]
        click.echo(f"Started: {validity.started}  Invalidated by: {', '.join(flags) or 'nothing'}")

        if show_beats:
            for beat_id, notes in sorted(engine.results.items()):
                marks = " ".join(
                    f"{pitch}:{result.value}" for pitch, result in sorted(notes.items())
                )
                outcome = engine.beat_outcome(beat_id)
                click.echo(f"  beat {beat_id:>6}: {marks}  -> {outcome.value if outcome else '-'}")

        if not session.offers:
            click.echo("Result not eligible for saving")
        elif history:
            store = JsonScoreStore(history)
            for offer in session.offers:
                if gate.confirm_save(offer, store):
                    click.echo(f"Saved {offer.percentage}% to {history}")
                else:
                    raise click.ClickException(f"Could not save result to {history}")
        else:
            click.echo(f"Eligible for saving: {session.offers[-1].percentage}%")
    finally:
        session.stop()


def main(args=None):
    """Console script entry point."""
    return cli(args=args, prog_name="pitch-scorer")


if __name__ == "__main__":
    main()
