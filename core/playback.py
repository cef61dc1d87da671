"""
core/playback.py — Output boundary towards an external synthesizer.

The engine only emits symbolic notes; rendering them to sound belongs to
a playback collaborator whose whole contract is:

    schedule(phrase, kind)

MidoScheduler is the reference collaborator. It turns a phrase into
time-ordered mido note_on / note_off messages and sends them to any mido
output port (hardware synth, virtual port, soft synth). Nothing is written
to disk.

MIDI structure:
    melody   → channel 0
    harmony  → channel 1
    texture  → channel 2
    rhythm   → channel 9 (GM percussion)

Timing:
    Note times are in beats; seconds = beats * 60 / tempo. Each event
    carries its absolute time in seconds so the caller can dispatch it on
    its own clock. At equal times note_off sorts before note_on.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import mido

from core.music_theory.scales import midi_to_frequency
from core.music_theory.types import MusicalPhrase, PhraseKind

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DRUM_CHANNEL: int = 9
"""GM standard MIDI channel for percussion (0-indexed = channel 10 in DAW)."""

KIND_CHANNELS: dict[PhraseKind, int] = {
    PhraseKind.MELODY: 0,
    PhraseKind.HARMONY: 1,
    PhraseKind.TEXTURE: 2,
    PhraseKind.RHYTHM: DRUM_CHANNEL,
}


@runtime_checkable
class PhraseScheduler(Protocol):
    """Anything that can play a phrase for a given layer."""

    def schedule(self, phrase: MusicalPhrase, kind: PhraseKind) -> None: ...


@dataclass(frozen=True)
class ScheduledEvent:
    """A MIDI message pinned to an absolute time (seconds from phrase start)."""

    at_seconds: float
    message: mido.Message
    frequency: float
    """Equal-temperament frequency of the note, for frequency-driven synths."""


def velocity_to_midi(velocity: float) -> int:
    """Map normalized velocity (0–1) to MIDI velocity (1–127)."""
    return max(1, min(127, round(velocity * 127)))


def beats_to_seconds(beats: float, tempo: float) -> float:
    """Convert a beat position to seconds at the given tempo (BPM)."""
    if not (math.isfinite(tempo) and tempo > 0):
        tempo = 120.0
    return beats * 60.0 / tempo


class MidoScheduler:
    """Sends phrases to a mido output port in real time.

    Args:
        port:  Any object with a mido-style ``send(message)`` method.
        sleep: Clock used to wait between events. Injected so tests can
               run without real delays.

    Example:
        >>> with mido.open_output() as port:  # doctest: +SKIP
        ...     MidoScheduler(port).schedule(phrase, PhraseKind.MELODY)
    """

    def __init__(self, port, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self.port = port
        self._sleep = sleep

    @staticmethod
    def events_for(phrase: MusicalPhrase, kind: PhraseKind) -> list[ScheduledEvent]:
        """Build the time-ordered event list for a phrase (pure).

        Returns:
            note_on/note_off events sorted by time, note_off first on ties.
        """
        channel = KIND_CHANNELS[PhraseKind(kind)]
        raw: list[tuple[float, int, ScheduledEvent]] = []
        for note in phrase.notes:
            start = beats_to_seconds(note.start_time, phrase.tempo)
            end = beats_to_seconds(note.start_time + note.duration, phrase.tempo)
            freq = midi_to_frequency(note.pitch)
            on = mido.Message(
                "note_on", channel=channel, note=note.pitch, velocity=velocity_to_midi(note.velocity)
            )
            off = mido.Message("note_off", channel=channel, note=note.pitch, velocity=0)
            raw.append((start, 1, ScheduledEvent(start, on, freq)))
            raw.append((end, 0, ScheduledEvent(end, off, freq)))
        raw.sort(key=lambda item: (item[0], item[1]))
        return [event for _, _, event in raw]

    def schedule(self, phrase: MusicalPhrase, kind: PhraseKind) -> None:
        """Play a phrase, blocking until its last note_off has been sent."""
        events = self.events_for(phrase, kind)
        if not events:
            logger.debug("Nothing to schedule for empty %s phrase", PhraseKind(kind).value)
            return
        clock = 0.0
        for event in events:
            if event.at_seconds > clock:
                self._sleep(event.at_seconds - clock)
                clock = event.at_seconds
            self.port.send(event.message)
        logger.debug("Scheduled %d %s notes", len(phrase.notes), PhraseKind(kind).value)
