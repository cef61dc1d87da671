"""
Tests for core/music_theory/scales.py — static tables and pitch helpers.

Validates:
    - tables cover every ScaleType / Style and have the expected shapes
    - midi_to_note_name / note_name_to_midi: known values, round trip, errors
    - midi_to_frequency: A4 = 440, octave doubling
    - degree_to_semitones: in-scale degrees and octave wrapping
"""

from __future__ import annotations

import pytest

from core.music_theory.scales import (
    CHORD_PROGRESSIONS,
    MELODY_RHYTHM_TEMPLATES,
    PERCUSSION_TEMPLATES,
    SCALE_INTERVALS,
    TEMPLATE_SLOTS,
    clamp_pitch,
    degree_to_semitones,
    midi_to_frequency,
    midi_to_note_name,
    normalize_note,
    note_name_to_midi,
    note_to_pitch_class,
)
from core.music_theory.types import ScaleType, Style

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestTables:
    def test_every_scale_has_intervals(self):
        assert set(SCALE_INTERVALS) == set(ScaleType)

    @pytest.mark.parametrize("scale", list(ScaleType))
    def test_intervals_start_at_root_and_ascend(self, scale):
        intervals = SCALE_INTERVALS[scale]
        assert intervals[0] == 0
        assert list(intervals) == sorted(set(intervals))
        assert intervals[-1] < 12

    def test_scale_sizes(self):
        assert len(SCALE_INTERVALS[ScaleType.MAJOR]) == 7
        assert len(SCALE_INTERVALS[ScaleType.PENTATONIC]) == 5
        assert len(SCALE_INTERVALS[ScaleType.BLUES]) == 6

    def test_every_style_has_four_chords(self):
        assert set(CHORD_PROGRESSIONS) == set(Style)
        for progression in CHORD_PROGRESSIONS.values():
            assert len(progression) == 4

    def test_ambient_chords_have_four_tones(self):
        assert all(len(chord) == 4 for chord in CHORD_PROGRESSIONS[Style.AMBIENT])

    def test_melody_templates(self):
        assert len(MELODY_RHYTHM_TEMPLATES) == 5
        for template in MELODY_RHYTHM_TEMPLATES:
            assert len(template) == TEMPLATE_SLOTS
            assert template[0] == 1

    def test_percussion_templates(self):
        assert set(PERCUSSION_TEMPLATES) == set(Style)
        for templates in PERCUSSION_TEMPLATES.values():
            assert len(templates) == 2
            for template in templates:
                assert len(template) == TEMPLATE_SLOTS
                assert all(0.0 <= v <= 1.0 for v in template)

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            SCALE_INTERVALS[ScaleType.MAJOR] = (0,)  # type: ignore[index]


# ---------------------------------------------------------------------------
# Note names
# ---------------------------------------------------------------------------


class TestNoteNames:
    @pytest.mark.parametrize(
        "pitch,name",
        [(60, "C4"), (69, "A4"), (0, "C-1"), (127, "G9"), (61, "C#4"), (47, "B2")],
    )
    def test_known_names(self, pitch, name):
        assert midi_to_note_name(pitch) == name

    def test_round_trip_every_midi_number(self):
        for pitch in range(128):
            assert note_name_to_midi(midi_to_note_name(pitch)) == pitch

    @pytest.mark.parametrize("name,pitch", [("Bb3", 58), ("eb4", 63), ("C#-1", 1), ("A0", 21)])
    def test_parse_flats_and_case(self, name, pitch):
        assert note_name_to_midi(name) == pitch

    @pytest.mark.parametrize("name", ["H4", "C", "C##4", ""])
    def test_unparseable_name(self, name):
        with pytest.raises(ValueError):
            note_name_to_midi(name)

    def test_name_outside_midi_range(self):
        with pytest.raises(ValueError, match="outside"):
            note_name_to_midi("C10")

    @pytest.mark.parametrize("pitch", [-1, 128])
    def test_pitch_outside_midi_range(self, pitch):
        with pytest.raises(ValueError):
            midi_to_note_name(pitch)

    def test_normalize_note(self):
        assert normalize_note("bb") == "A#"
        assert normalize_note("G") == "G"

    def test_pitch_class(self):
        assert note_to_pitch_class("C") == 0
        assert note_to_pitch_class("A") == 9
        assert note_to_pitch_class("Db") == 1


# ---------------------------------------------------------------------------
# Frequencies and degrees
# ---------------------------------------------------------------------------


class TestFrequency:
    def test_a4_is_440(self):
        assert midi_to_frequency(69) == pytest.approx(440.0)

    def test_octaves_double(self):
        assert midi_to_frequency(81) == pytest.approx(880.0)
        assert midi_to_frequency(57) == pytest.approx(220.0)

    def test_middle_c(self):
        assert midi_to_frequency(60) == pytest.approx(261.6256, rel=1e-6)


class TestDegreeToSemitones:
    def test_in_scale_degrees(self):
        major = [degree_to_semitones(d, ScaleType.MAJOR) for d in range(7)]
        assert major == [0, 2, 4, 5, 7, 9, 11]

    def test_wraps_into_next_octave(self):
        assert degree_to_semitones(7, ScaleType.MAJOR) == 12
        assert degree_to_semitones(9, ScaleType.MAJOR) == 16
        assert degree_to_semitones(5, ScaleType.PENTATONIC) == 12
        assert degree_to_semitones(11, ScaleType.BLUES) == 22

    def test_negative_degree_wraps_down(self):
        assert degree_to_semitones(-1, ScaleType.MAJOR) == -1
        assert degree_to_semitones(-7, ScaleType.MINOR) == -12

    def test_clamp_pitch(self):
        assert clamp_pitch(20, (24, 96)) == 24
        assert clamp_pitch(100, (24, 96)) == 96
        assert clamp_pitch(60, (24, 96)) == 60
