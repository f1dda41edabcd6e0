"""
Scale generators.

Pure functions producing master sets (ordered frequency ratios, index 0 = 1.0):
- Harmonic / subharmonic series (see Wilson, "harm&Subharm")
- Combination product sets (hexany, dekany)
- Moment of symmetry scales from a single generator
- Equal temperaments
"""
import itertools
import math
from typing import Iterable, List, Sequence, Tuple

from tunings.constants import EPSILON, OCTAVE


def octave_reduce(ratio: float) -> float:
    """
    Fold a ratio into the octave [1, 2).

    Args:
        ratio: Positive frequency ratio

    Returns:
        Equivalent ratio within [1, 2)

    Raises:
        ValueError: If ratio is not positive
    """
    if ratio <= 0:
        raise ValueError(f"Ratio must be positive, got {ratio}")
    while ratio < 1.0:
        ratio *= OCTAVE
    while ratio >= OCTAVE:
        ratio /= OCTAVE
    return ratio


def normalize_scale(ratios: Iterable[float]) -> List[float]:
    """
    Octave-reduce, sort ascending and rescale so the lowest ratio is 1.0.

    Duplicates are kept, so the output length equals the input length.
    """
    reduced = sorted(octave_reduce(r) for r in ratios)
    if not reduced:
        return []
    lowest = reduced[0]
    return sorted(octave_reduce(r / lowest) for r in reduced)


def _dedupe(ratios: Sequence[float]) -> List[float]:
    """Drop neighbours closer than EPSILON from an ascending sequence."""
    result: List[float] = []
    for r in ratios:
        if not result or abs(r - result[-1]) >= EPSILON:
            result.append(r)
    return result


def harmonic_series(n: int) -> List[float]:
    """
    One octave of the harmonic series starting at harmonic n.

    harmonic_series(4) -> 4:5:6:7 -> [1.0, 1.25, 1.5, 1.75]

    Args:
        n: Number of pitches (2 = dyad, 3 = triad, ...)

    Returns:
        n ascending ratios starting at 1.0
    """
    if n < 1:
        raise ValueError(f"Series length must be positive, got {n}")
    return [(n + k) / n for k in range(n)]


def subharmonic_series(n: int) -> List[float]:
    """
    One octave of the subharmonic series, the mirror of harmonic_series.

    Terms n/k for k = n .. 2n-1 are octave-reduced and sorted, so
    subharmonic_series(2) -> [1.0, 4/3].
    """
    if n < 1:
        raise ValueError(f"Series length must be positive, got {n}")
    return sorted(octave_reduce(n / k) for k in range(n, 2 * n))


def harmonic_subharmonic_series(n: int) -> List[float]:
    """Union of the harmonic and subharmonic series of size n, deduplicated."""
    union = sorted(harmonic_series(n) + subharmonic_series(n))
    return normalize_scale(_dedupe(union))


def combination_product_set(generators: Sequence[float], choose: int = 2) -> List[float]:
    """
    Combination product set: every product of `choose` distinct generators.

    Products are divided by the smallest one and octave-reduced.

    Args:
        generators: Distinct positive generating numbers
        choose: How many generators are multiplied per product

    Returns:
        C(len(generators), choose) ascending ratios starting at 1.0

    Raises:
        ValueError: If generators are not distinct and positive
    """
    if any(g <= 0 for g in generators):
        raise ValueError(f"Generators must be positive, got {list(generators)}")
    if len(set(generators)) != len(generators):
        raise ValueError(f"Generators must be distinct, got {list(generators)}")
    if not 0 < choose <= len(generators):
        raise ValueError(f"Cannot choose {choose} of {len(generators)} generators")

    products = [math.prod(c) for c in itertools.combinations(generators, choose)]
    lowest = min(products)
    return sorted(octave_reduce(p / lowest) for p in products)


def hexany(generators: Sequence[float]) -> List[float]:
    """Wilson hexany: 2-of-4 combination product set (6 notes)."""
    if len(generators) != 4:
        raise ValueError(f"Hexany needs 4 generators, got {len(generators)}")
    return combination_product_set(generators, 2)


def dekany(generators: Sequence[float]) -> List[float]:
    """Wilson dekany: 2-of-5 combination product set (10 notes)."""
    if len(generators) != 5:
        raise ValueError(f"Dekany needs 5 generators, got {len(generators)}")
    return combination_product_set(generators, 2)


def _mediant_denominator(generator: float, level: int) -> int:
    """
    Walk the Stern-Brocot tree between 0/1 and 1/1 toward the generator.

    Returns the denominator of the mediant reached after `level` steps,
    which is the note count of the MOS at that level.
    """
    lo: Tuple[int, int] = (0, 1)
    hi: Tuple[int, int] = (1, 1)
    mediant = (1, 2)
    for _ in range(level):
        mediant = (lo[0] + hi[0], lo[1] + hi[1])
        if generator > mediant[0] / mediant[1]:
            lo = mediant
        else:
            hi = mediant
    return mediant[1]


def moment_of_symmetry(generator: float, level: int = 5, murchana: int = 0) -> List[float]:
    """
    Moment of symmetry scale built by stacking one generator in the octave.

    Args:
        generator: Generator as a fraction of the octave (0.585 ~ a fifth),
            clamped to [0, 1]
        level: Depth in the scale tree; higher levels give more notes
            (at least level + 1)
        murchana: Rotation selecting the starting degree

    Returns:
        Ascending ratios starting at 1.0
    """
    g = min(max(generator, 0.0), 1.0)
    level = max(level, 1)
    count = _mediant_denominator(g, level)

    stacked = sorted(octave_reduce(OCTAVE ** ((i * g) % 1.0)) for i in range(count))
    scale = _dedupe(stacked)

    # Murchana: rotate, then make the new starting degree the unison
    m = murchana % len(scale)
    pivot = scale[m]
    rotated = [octave_reduce(r / pivot) for r in scale[m:] + scale[:m]]
    return _dedupe(sorted(rotated))


def equal_temperament(notes_per_octave: int) -> List[float]:
    """
    Equal division of the octave.

    equal_temperament(12) -> [1.0, 2^(1/12), ..., 2^(11/12)]
    """
    if notes_per_octave < 1:
        raise ValueError(f"Notes per octave must be positive, got {notes_per_octave}")
    return [OCTAVE ** (k / notes_per_octave) for k in range(notes_per_octave)]
