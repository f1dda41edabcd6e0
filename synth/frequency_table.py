"""
Frequency table for the synth voices.

Maps all 128 MIDI notes to Hz from a master set of ratios:
- Ratios are octave-reduced and sorted
- Note 60 sits on the first degree, at A4 * 2^(-9/12) (middle C in 12 ET)
- Degrees repeat every len(master_set) notes, one octave apart
"""
from typing import Optional, Sequence

import numpy as np

NOTE_COUNT = 128
MIDDLE_NOTE = 60
DEFAULT_REFERENCE_PITCH = 440.0


class FrequencyTable:
    """
    Lookup table consumed by the audio engine.

    Rebuilt whenever a new master set or reference pitch arrives.
    """

    def __init__(self, reference_pitch: float = DEFAULT_REFERENCE_PITCH):
        """
        Args:
            reference_pitch: Frequency of A4 in Hz
        """
        if reference_pitch <= 0:
            raise ValueError(f"Reference pitch must be positive, got {reference_pitch}")
        self.reference_pitch = float(reference_pitch)
        self.master_set = np.exp2(np.arange(12) / 12.0)
        self.table = np.zeros(NOTE_COUNT, dtype=np.float64)
        self._rebuild()

    @property
    def npo(self) -> int:
        return int(self.master_set.size)

    @property
    def middle_frequency(self) -> float:
        """Frequency of MIDDLE_NOTE (C4 when the reference is A4)."""
        return self.reference_pitch * 2.0 ** (-9.0 / 12.0)

    def tuning_table_from_frequencies(self, frequencies: Sequence[float]) -> Optional[int]:
        """
        Install a new master set.

        Args:
            frequencies: Ratios (any octave, any order)

        Returns:
            Notes per octave, or None if the input is empty or has
            non-positive values (table left unchanged)
        """
        ratios = np.asarray(frequencies, dtype=np.float64)
        if ratios.size == 0 or not np.all(np.isfinite(ratios)) or np.any(ratios <= 0):
            return None

        self.master_set = np.sort(np.exp2(np.mod(np.log2(ratios), 1.0)))
        self._rebuild()
        return self.npo

    def set_reference_pitch(self, frequency: float):
        """Retune the whole table to a new A4."""
        if frequency <= 0:
            raise ValueError(f"Reference pitch must be positive, got {frequency}")
        self.reference_pitch = float(frequency)
        self._rebuild()

    def frequency(self, note: int) -> float:
        """
        Frequency of a MIDI note.

        Raises:
            ValueError: If note is outside 0-127
        """
        if not 0 <= note < NOTE_COUNT:
            raise ValueError(f"MIDI note must be 0-127, got {note}")
        return float(self.table[note])

    def _rebuild(self):
        offsets = np.arange(NOTE_COUNT) - MIDDLE_NOTE
        octaves = np.floor_divide(offsets, self.npo)
        degrees = np.mod(offsets, self.npo)
        self.table = self.middle_frequency * np.exp2(octaves) * self.master_set[degrees]
