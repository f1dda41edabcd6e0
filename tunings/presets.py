"""
Factory tuning registry.

FACTORY_PRESETS is an ordered list of (display name, generator) pairs.
Each generator takes no arguments and returns raw ratios; factory_tunings()
evaluates them once, normalizes every set and builds the Curated bank
contents. 12 ET is never listed here: sorting pins it to every bank.
"""
import logging
from typing import Callable, List, Sequence, Tuple

from tunings.generators import (
    dekany,
    equal_temperament,
    harmonic_series,
    harmonic_subharmonic_series,
    hexany,
    moment_of_symmetry,
    normalize_scale,
    subharmonic_series,
)
from tunings.models import Tuning

logger = logging.getLogger(__name__)

TuningGenerator = Callable[[], Sequence[float]]

# Persian 17 tone Pythagorean gamut (chain of fifths -11 .. +5)
PERSIAN_17 = (
    1 / 1, 256 / 243, 65536 / 59049, 9 / 8, 32 / 27, 8192 / 6561, 81 / 64, 4 / 3, 1024 / 729,
    262144 / 177147, 3 / 2, 128 / 81, 32768 / 19683, 27 / 16, 16 / 9, 4096 / 2187, 243 / 128,
)

# North Indian ragas as degrees of PERSIAN_17
NORTH_INDIAN_RAGAS = {
    "Kafi": (0, 3, 4, 7, 10, 13, 14),
    "Bhairavi": (0, 1, 4, 7, 10, 11, 14),
    "Bhairav": (0, 1, 6, 7, 10, 11, 16),
    "Marwa": (0, 1, 6, 8, 13, 16),
    "Purvi": (0, 1, 6, 8, 10, 11, 16),
    "Todi": (0, 1, 4, 8, 10, 11, 16),
    "Madhubanti": (0, 3, 4, 8, 10, 13, 16),
    "AhirBhairav": (0, 1, 6, 7, 10, 13, 14),
    "ChandraKanada": (0, 4, 7, 11, 16),
    "BasantMukhari": (0, 1, 6, 7, 10, 11, 14),
    "Champakali": (0, 3, 6, 7, 10, 13, 14),
    "Patdeep": (0, 3, 4, 7, 10, 13, 16),
    "MohanKauns": (0, 6, 7, 11, 14),
}


def north_indian(raga: str) -> List[float]:
    """Raga scale picked from the Persian 17 tone gamut."""
    return [PERSIAN_17[i] for i in NORTH_INDIAN_RAGAS[raga]]


def highland_bagpipes() -> List[float]:
    """Wilson's analysis of the Highland bagpipe chanter."""
    return [32, 36, 39, 171, 48, 52, 57]


def _ratios(*values: float) -> TuningGenerator:
    return lambda: list(values)


FACTORY_PRESETS: List[Tuple[str, TuningGenerator]] = [
    ("Chain of pure fifths", _ratios(1, 3, 9, 27, 81, 243, 729, 2187, 6561, 19683, 59049, 177147)),

    # http://anaphoria.com/harm&Subharm.pdf
    ("Harmonic Series: Dyad", lambda: harmonic_series(2)),
    ("Subharmonic Series: Dyad", lambda: subharmonic_series(2)),
    ("Harmonic+Subharmonic Series: Dyad", lambda: harmonic_subharmonic_series(2)),
    ("Harmonic Series: Triad", lambda: harmonic_series(3)),
    ("Subharmonic Series: Triad", lambda: subharmonic_series(3)),
    ("Harmonic+Subharmonic Series: Triad", lambda: harmonic_subharmonic_series(3)),
    ("Harmonic Series: Tetrad", lambda: harmonic_series(4)),
    ("Subharmonic Series: Tetrad", lambda: subharmonic_series(4)),
    ("Harmonic+Subharmonic Series: Tetrad", lambda: harmonic_subharmonic_series(4)),
    ("Harmonic Series: Pentad", lambda: harmonic_series(5)),
    ("Subharmonic Series: Pentad", lambda: subharmonic_series(5)),
    ("Harmonic Series", lambda: harmonic_series(12)),
    ("Harmonic Series", lambda: harmonic_series(16)),
    ("Subharmonic Series", lambda: subharmonic_series(16)),
    ("Harmonic+Subharmonic Series", lambda: harmonic_subharmonic_series(16)),

    # Erv Wilson, http://anaphoria.com/genus.pdf
    ("Wilson Hexany(1, 3, 5, 7)", lambda: hexany([1, 3, 5, 7])),
    ("Wilson Hexany(1, 3, 5, 45)", lambda: hexany([1, 3, 5, 45])),
    ("Wilson Hexany(1, 3, 5, 9)", lambda: hexany([1, 3, 5, 9])),
    ("Wilson Hexany(1, 3, 5, 15)", lambda: hexany([1, 3, 5, 15])),
    ("Wilson Hexany(1, 3, 5, 81)", lambda: hexany([1, 3, 5, 81])),
    ("Wilson Dekany(1, 3, 5, 9, 81)", lambda: dekany([1, 3, 5, 9, 81])),
    ("Wilson Hexany(1, 3, 5, 121)", lambda: hexany([1, 3, 5, 121])),
    ("Wilson Hexany(1, 15, 45, 75)", lambda: hexany([1, 15, 45, 75])),
    ("Wilson Hexany(1, 17, 19, 23)", lambda: hexany([1, 17, 19, 23])),
    ("Wilson Hexany(1, 45, 135, 225)", lambda: hexany([1, 45, 135, 225])),
    ("Wilson Hexany(3, 5, 7, 9)", lambda: hexany([3, 5, 7, 9])),
    ("Wilson Hexany(3, 5, 15, 19)", lambda: hexany([3, 5, 15, 19])),
    ("Wilson Diaphonic", _ratios(1 / 1, 27 / 26, 9 / 8, 4 / 3, 18 / 13, 3 / 2, 27 / 16)),
    ("Wilson Hexany(3, 5, 15, 27)", lambda: hexany([3, 5, 15, 27])),
    ("Wilson Hexany(5, 7, 21, 35)", lambda: hexany([5, 7, 21, 35])),
    ("Wilson Highland Bagpipes", highland_bagpipes),
    ("Wilson MOS G:0.2641", lambda: moment_of_symmetry(0.2641, 5, 0)),

    # Wilson: proportional triads in MOS
    ("Wilson MOS G:0.292787", lambda: moment_of_symmetry(0.292787, 6, 0)),
    ("Wilson MOS G:0.405699", lambda: moment_of_symmetry(0.405699700117111, 5, 0)),
    ("Wilson MOS G:0.415226", lambda: moment_of_symmetry(0.415226, 5, 0)),
    ("Wilson MOS G:0.436385", lambda: moment_of_symmetry(0.436385, 5, 0)),
    ("Wilson MOS G:0.328173", lambda: moment_of_symmetry(0.328173, 7, 0)),
    ("Wilson Evangelina", _ratios(
        1 / 1, 135 / 128, 13 / 12, 10 / 9, 9 / 8, 7 / 6, 11 / 9, 5 / 4, 81 / 64, 4 / 3, 11 / 8,
        45 / 32, 17 / 12, 3 / 2, 19 / 12, 13 / 8, 5 / 3, 27 / 16, 7 / 4, 11 / 6, 15 / 8, 243 / 128)),
    ("Wilson North Indian:Kafi", lambda: north_indian("Kafi")),
    ("Wilson North Indian:Bhairavi", lambda: north_indian("Bhairavi")),
    ("Wilson North Indian:Bhairav", lambda: north_indian("Bhairav")),
    ("Wilson North Indian:Marwa", lambda: north_indian("Marwa")),
    ("Wilson North Indian:Purvi", lambda: north_indian("Purvi")),
    ("Wilson North Indian:Todi", lambda: north_indian("Todi")),
    ("Wilson North Indian:Madhubanti", lambda: north_indian("Madhubanti")),
    ("Wilson North Indian:AhirBhairav", lambda: north_indian("AhirBhairav")),
    ("Wilson North Indian:ChandraKanada", lambda: north_indian("ChandraKanada")),
    ("Wilson North Indian:BasantMukhair", lambda: north_indian("BasantMukhari")),
    ("Wilson North Indian:Champakali", lambda: north_indian("Champakali")),
    ("Wilson North Indian:Patdeep", lambda: north_indian("Patdeep")),
    ("Wilson North Indian:MohanKauns", lambda: north_indian("MohanKauns")),
    ("Wilson North Indian:17", lambda: list(PERSIAN_17)),

    # Jose Garcia
    ("Garcia: Meta Mavila (37-50-67-91)", _ratios(
        1 / 1, 1027 / 1024, 67 / 64, 559 / 512, 37 / 32, 153 / 128, 2539 / 2048, 167 / 128,
        1389 / 1024, 91 / 64, 189 / 128, 25 / 16, 415 / 256, 225 / 128, 937 / 512, 31 / 16)),
    ("Garcia: Wilson 7-limit marimba", _ratios(
        1 / 1, 28 / 27, 16 / 15, 10 / 9, 9 / 8, 7 / 6, 6 / 5, 5 / 4, 35 / 27, 4 / 3, 27 / 20,
        45 / 32, 35 / 24, 3 / 2, 14 / 9, 8 / 5, 5 / 3, 27 / 16, 7 / 4, 9 / 5, 15 / 8, 35 / 18)),
    ("Garcia: linear 15/13-52/45 alternating", _ratios(
        1 / 1, 40 / 39, 27 / 26, 16 / 15, 128 / 117, 9 / 8, 15 / 13, 32 / 27, 6 / 5, 16 / 13,
        81 / 64, 135 / 104, 4 / 3, 160 / 117, 18 / 13, 64 / 45, 512 / 351, 3 / 2, 20 / 13,
        81 / 52, 8 / 5, 64 / 39, 27 / 16, 45 / 26, 16 / 9, 9 / 5, 24 / 13, 256 / 135, 405 / 208)),

    # Kraig Grady
    ("Grady: S 7-limit Pentatonic", _ratios(1 / 1, 7 / 6, 4 / 3, 3 / 2, 7 / 4)),
    ("Grady: S Pentatonic 11-limit Scale 1", _ratios(1 / 1, 9 / 8, 11 / 8, 3 / 2, 7 / 4)),
    ("Grady: S Pentatonic 11-limit Scale 2", _ratios(1 / 1, 5 / 4, 11 / 8, 3 / 2, 7 / 4)),
    ("Grady: S Centaur 7-limit Minor", _ratios(1 / 1, 9 / 8, 7 / 6, 4 / 3, 3 / 2, 14 / 9, 7 / 4)),
    ("Grady: S Centaur Soft Major on E", _ratios(
        1 / 1, 28 / 25, 56 / 46, 4 / 3, 3 / 2, 42 / 25, 28 / 15)),
    ("Grady: A Centaur", _ratios(
        1 / 1, 21 / 20, 9 / 8, 7 / 6, 5 / 4, 4 / 3, 7 / 5, 3 / 2, 14 / 9, 5 / 3, 7 / 4, 15 / 8)),
    ("Grady: Double Dekany 14-tone", _ratios(
        1 / 1, 35 / 32, 9 / 8, 7 / 6, 5 / 4, 21 / 16, 45 / 32, 35 / 24, 3 / 2, 105 / 64, 5 / 3,
        7 / 4, 15 / 8, 63 / 32)),
    ("Grady: A-Narushima 19-tone 7-limit", _ratios(
        1 / 1, 21 / 20, 35 / 32, 9 / 8, 7 / 6, 6 / 5, 5 / 4, 21 / 16, 4 / 3, 7 / 5, 35 / 24,
        3 / 2, 14 / 9, 8 / 5, 5 / 3, 7 / 4, 9 / 5, 15 / 8, 63 / 32)),
    ("Grady: Sisiutl 12-tone", _ratios(
        1 / 1, 28 / 27, 9 / 8, 7 / 6, 14 / 11, 4 / 3, 11 / 8, 3 / 2, 14 / 9, 56 / 33, 7 / 4,
        11 / 6)),
    ("Grady: Wilson pre-Sisiutl 17", _ratios(
        1 / 1, 28 / 27, 9 / 8, 7 / 6, 14 / 11, 4 / 3, 11 / 8, 3 / 2, 14 / 9, 3 / 2, 14 / 9,
        56 / 33, 7 / 4, 11 / 6)),
    ("Grady: Beebalm 7-limit", _ratios(
        1 / 1, 17 / 16, 9 / 8, 7 / 6, 5 / 4, 4 / 3, 17 / 12, 3 / 2, 14 / 9, 5 / 3, 16 / 9,
        17 / 9)),
    ("Grady: Schulter Zeta Centauri 12 tone", _ratios(
        1 / 1, 13 / 12, 9 / 8, 7 / 6, 11 / 9, 4 / 3, 13 / 9, 3 / 2, 14 / 9, 13 / 8, 7 / 4,
        11 / 6)),
    ("Grady: Schulter Shur", _ratios(
        1 / 1, 27 / 26, 9 / 8, 27 / 22, 4 / 3, 18 / 13, 3 / 2, 18 / 11, 16 / 9, 24 / 13)),
    ("Grady: Poole 17", _ratios(
        1 / 1, 33 / 32, 13 / 12, 9 / 8, 7 / 6, 11 / 9, 14 / 11, 4 / 3, 11 / 8, 13 / 9, 3 / 2,
        14 / 9, 44 / 27, 27 / 16, 7 / 4, 11 / 6, 21 / 11)),
    ("Grady: 11-limit Helix Song", _ratios(
        1 / 1, 9 / 8, 7 / 6, 5 / 4, 4 / 3, 11 / 8, 3 / 2, 5 / 3, 7 / 4, 11 / 6)),
    ("David: Double 1-3-5-7 Hexany 12-Tone", _ratios(
        1 / 1, 16 / 15, 35 / 32, 7 / 6, 5 / 4, 4 / 3, 7 / 5, 35 / 24, 8 / 5, 5 / 3, 7 / 4,
        28 / 15)),
    ("Wilson Double Hexany+ 12 tone", _ratios(
        1 / 1, 49 / 48, 8 / 7, 7 / 6, 5 / 4, 4 / 3, 10 / 7, 35 / 24, 80 / 49, 5 / 3, 7 / 4,
        40 / 21)),
    ("Grady: Wilson Triple Hexany +", _ratios(
        1 / 1, 15 / 14, 9 / 8, 7 / 6, 5 / 4, 21 / 16, 10 / 7, 3 / 2, 45 / 28, 5 / 3, 7 / 4,
        15 / 8)),
    ("Grady: Wilson Super 7", _ratios(
        1 / 1, 35 / 32, 8 / 7, 5 / 4, 245 / 192, 10 / 7, 35 / 24, 3 / 2, 49 / 32, 12 / 7, 7 / 4,
        245 / 128)),
    ("David: Dual Harmonic Subharmonic", _ratios(
        1 / 1, 16 / 15, 9 / 8, 6 / 5, 9 / 7, 4 / 3, 7 / 5, 3 / 2, 8 / 5, 12 / 7, 9 / 5,
        28 / 15)),
    ("Wilson/David: Enharmonics", _ratios(
        1 / 1, 28 / 27, 9 / 8, 7 / 6, 6 / 5, 4 / 3, 35 / 24, 3 / 2, 14 / 9, 8 / 5, 7 / 4,
        25 / 18)),
    ("Grady: Wilson First Pelog", _ratios(
        1 / 1, 16 / 15, 64 / 55, 5 / 4, 4 / 3, 16 / 11, 8 / 5, 128 / 75, 20 / 11)),
    ("Grady: Wilson Meta-Pelog 1", _ratios(
        1 / 1, 571 / 512, 153 / 128, 41 / 32, 4 / 3, 11 / 8, 209 / 128, 7 / 4, 15 / 8)),
    ("Grady: Wilson Meta-Pelog 2", _ratios(
        1 / 1, 9 / 8, 19 / 16, 41 / 32, 11 / 8, 3 / 2, 13 / 8, 7 / 4, 15 / 8)),
    ("Grady: Wilson Meta-Ptolemy 10", _ratios(
        1 / 1, 33 / 32, 9 / 8, 73 / 64, 5 / 4, 11 / 8, 3 / 2, 49 / 32, 27 / 16, 15 / 8)),
    ("Grady: Olympos Staircase", _ratios(
        1 / 1, 28 / 27, 9 / 8, 7 / 6, 9 / 7, 4 / 3, 49 / 36, 3 / 2, 14 / 9, 12 / 7, 7 / 4,
        49 / 27)),

    # Marcus Hobbs (Wilsonic)
    ("Hobbs MOS G:0.238186", lambda: moment_of_symmetry(0.238186, 6, 0)),
    ("Hobbs Hexany(9, 25, 49, 81)", lambda: hexany([9, 25, 49, 81])),
    # Hexany Fibonacci triplets (X-3, 3, X, X+3)
    ("Hobbs Hexany(3, 2.111, 5.111, 8.111)", lambda: hexany([3, 2.111, 5.111, 8.111])),
    ("Hobbs Hexany(3, 1.346, 4.346, 7.346)", lambda: hexany([3, 1.346, 4.346, 7.346])),
    # H[n] = H[n-1] + H[n-7], seeds (2, 2, 2, 1, 1, 1, 1)
    ("Hobbs Recurrence Relation 01", _ratios(1, 19, 5, 3, 15)),
    ("Hobbs Recurrence Relation 02", _ratios(35, 74, 23, 51, 61)),
    ("Hobbs Recurrence Relation 03", _ratios(74, 150, 85, 106, 120, 61)),
    ("Hobbs Recurrence Relation 04", _ratios(1, 9, 5, 23, 48, 7)),
    ("Hobbs Recurrence Relation 05", _ratios(1, 9, 21, 3, 25, 15)),
    ("Hobbs Recurrence Relation 06", _ratios(1, 75, 19, 5, 3, 15)),
    ("Hobbs Recurrence Relation 07", _ratios(1, 17, 10, 47, 3, 13, 7)),
    ("Hobbs Recurrence Relation 08", _ratios(1, 9, 5, 21, 3, 27, 7)),
    ("Hobbs Recurrence Relation 09", _ratios(1, 9, 21, 3, 25, 15, 31)),
    ("Hobbs Recurrence Relation 10", _ratios(1, 75, 19, 5, 94, 3, 15)),
    ("Hobbs Recurrence Relation 11", _ratios(9, 40, 21, 25, 52, 15, 31)),
    ("Hobbs Recurrence Relation 12", _ratios(1, 18, 5, 21, 3, 25, 15)),
    ("Hobbs Recurrence Relation 13", _ratios(1, 65, 9, 37, 151, 21, 86, 12, 49, 200, 28, 114)),

    # Stephen Taylor
    ("Taylor MOS G: 0.855088", lambda: moment_of_symmetry(0.855088, 6, 0)),
    ("Taylor MOS G: 0.791400", lambda: moment_of_symmetry(0.7914, 5, 0)),
    ("Taylor MOS G: 0.78207964", lambda: moment_of_symmetry(0.78207964, 5, 0)),
    ("Taylor MOS G: 0.618033", lambda: moment_of_symmetry(0.618033, 4, 0)),
    ("Taylor MOS G: 0.232587", lambda: moment_of_symmetry(0.232587, 5, 0)),
    ("Taylor MOS G: 0.5757381", lambda: moment_of_symmetry(0.5757381, 6, 0)),
    ("Taylor Pasadena JI 27", _ratios(
        1 / 1, 81 / 80, 17 / 16, 16 / 15, 10 / 9, 9 / 8, 8 / 7, 7 / 6, 19 / 16, 6 / 5, 11 / 9,
        5 / 4, 9 / 7, 21 / 16, 4 / 3, 11 / 8, 7 / 5, 3 / 2, 11 / 7, 8 / 5, 5 / 3, 13 / 8, 27 / 16,
        7 / 4, 9 / 5, 11 / 6, 15 / 8)),

    # Harry Partch, 43 tone pure scale
    ("Partch", _ratios(
        1 / 1, 81 / 80, 33 / 32, 21 / 20, 16 / 15, 12 / 11, 11 / 10, 10 / 9, 9 / 8, 8 / 7, 7 / 6,
        32 / 27, 6 / 5, 11 / 9, 5 / 4, 14 / 11, 9 / 7, 21 / 16, 4 / 3, 27 / 20, 11 / 8, 7 / 5,
        10 / 7, 16 / 11, 40 / 27, 3 / 2, 32 / 21, 14 / 9, 11 / 7, 8 / 5, 18 / 11, 5 / 3, 27 / 16,
        12 / 7, 7 / 4, 16 / 9, 9 / 5, 20 / 11, 11 / 6, 15 / 8, 40 / 21, 64 / 33, 160 / 81)),

    ("Equal Temperament", lambda: equal_temperament(5)),
    ("Equal Temperament", lambda: equal_temperament(7)),
    ("Equal Temperament", lambda: equal_temperament(19)),
    ("Equal Temperament", lambda: equal_temperament(22)),
    ("Equal Temperament", lambda: equal_temperament(24)),
    ("Equal Temperament", lambda: equal_temperament(31)),
    ("Equal Temperament", lambda: equal_temperament(41)),
    ("Equal Temperament", lambda: equal_temperament(53)),
]


def factory_tunings() -> List[Tuning]:
    """
    Evaluate every factory preset.

    Master sets are normalized (octave-reduced, sorted, lowest = 1.0).
    Registry position is kept as Tuning.order.

    Returns:
        List of Tuning objects in registry order
    """
    tunings = []
    for order, (name, generator) in enumerate(FACTORY_PRESETS):
        master_set = normalize_scale(generator())
        tunings.append(Tuning(name=name, master_set=tuple(master_set), order=order))
    logger.debug("Generated %d factory tunings", len(tunings))
    return tunings
