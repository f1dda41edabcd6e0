"""
Tuning constants and utilities.

Filenames, bank topology, default tuning, cents conversions.
"""
import math

# On-disk schema generations (presence of v1 wins over v0)
TUNINGS_FILENAME_V0 = "tunings.json"
TUNINGS_FILENAME_V1 = "tunings_v1.json"
SETTINGS_FILENAME = "settings.json"
DEFAULT_DATA_DIR = "~/.tunings"

# Bank topology
CURATED_BANK_INDEX = 0
USER_BANK_INDEX = 1
CURATED_BANK_NAME = "Curated"
USER_BANK_NAME = "User"
BANK_COUNT = 2

# Canonical default tuning (always index 0 of a sorted bank)
DEFAULT_TUNING_NAME = "12 ET"
DEFAULT_NOTES_PER_OCTAVE = 12

# Ratios closer than this are treated as the same pitch
EPSILON = 1e-9

OCTAVE = 2.0


def ratio_to_cents(ratio: float) -> float:
    """
    Convert a frequency ratio to cents.

    Example:
        >>> ratio_to_cents(2.0)
        1200.0
    """
    if ratio <= 0:
        raise ValueError(f"Ratio must be positive, got {ratio}")
    return 1200.0 * math.log2(ratio)


def cents_to_ratio(cents: float) -> float:
    """
    Convert cents to a frequency ratio.

    Example:
        >>> cents_to_ratio(1200.0)
        2.0
    """
    return 2.0 ** (cents / 1200.0)
