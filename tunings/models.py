"""
Immutable tuning models.

Tunings and banks are frozen dataclasses so that:
- The store can share them with UI/audio code without copying
- Bank mutations are explicit (dataclasses.replace)
- Equality and hashing come for free
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from tunings.constants import DEFAULT_NOTES_PER_OCTAVE, DEFAULT_TUNING_NAME, ratio_to_cents
from tunings.generators import equal_temperament

logger = logging.getLogger(__name__)


class SortType(Enum):
    """Sort keys for the tunings of a bank."""
    NOTE_COUNT = "npo"
    NAME = "name"
    USER_ORDER = "order"


@dataclass(frozen=True)
class Tuning:
    """
    A named scale.

    Attributes:
        name: Display name (not unique)
        master_set: Ascending frequency ratios, index 0 conventionally 1.0
        order: Manual ordering key used by SortType.USER_ORDER
    """
    name: str
    master_set: Tuple[float, ...]
    order: int = 0

    def __post_init__(self):
        """Validate tuning and coerce the master set to a tuple of floats."""
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Tuning name must be a non-empty string, got {self.name!r}")
        if not self.master_set:
            raise ValueError(f"Tuning '{self.name}' has an empty master set")
        master_set = tuple(float(f) for f in self.master_set)
        for f in master_set:
            if f <= 0:
                raise ValueError(f"Tuning '{self.name}': ratios must be positive, got {f}")
        object.__setattr__(self, 'master_set', master_set)

    @classmethod
    def default(cls) -> "Tuning":
        """Canonical 12 tone equal temperament."""
        return cls(
            name=DEFAULT_TUNING_NAME,
            master_set=tuple(equal_temperament(DEFAULT_NOTES_PER_OCTAVE)),
        )

    @property
    def npo(self) -> int:
        """Notes per octave."""
        return len(self.master_set)

    @property
    def encoding(self) -> str:
        """Stable text form of the master set (shortest round-trip floats)."""
        return ",".join(repr(f) for f in self.master_set)

    @property
    def key(self) -> Tuple[str, str]:
        """Duplicate-detection key: same name and same master set."""
        return (self.name, self.encoding)

    def sort_key(self, sort_type: SortType) -> str:
        """
        Concatenated sort key.

        Note counts and orders are not zero padded, so "12" sorts before "9".
        """
        if sort_type == SortType.NOTE_COUNT:
            return str(self.npo) + self.name + self.encoding
        if sort_type == SortType.USER_ORDER:
            return str(self.order) + self.name + self.encoding
        return self.name + self.encoding

    def cents(self) -> List[float]:
        """Master set as cents above the first degree."""
        return [ratio_to_cents(f / self.master_set[0]) for f in self.master_set]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "name": self.name,
            "masterSet": list(self.master_set),
        }
        if self.order:
            result["order"] = self.order
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tuning":
        """Create Tuning from dictionary."""
        return cls(
            name=data["name"],
            master_set=tuple(data["masterSet"]),
            order=int(data.get("order", 0)),
        )


@dataclass(frozen=True)
class TuningBank:
    """
    Ordered, named collection of tunings.

    Attributes:
        name: Bank name ("Curated", "User")
        is_editable: Whether users may add tunings to the bank
        order: Position of the bank in the bank list
        tunings: Tuple of Tuning objects
    """
    name: str
    is_editable: bool = False
    order: int = 0
    tunings: Tuple[Tuning, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.tunings)

    def index_of(self, tuning: Tuning) -> Optional[int]:
        """Index of the first tuning with the same name and master set."""
        for i, t in enumerate(self.tunings):
            if t.key == tuning.key:
                return i
        return None

    def with_tunings(self, tunings) -> "TuningBank":
        """Copy of this bank holding `tunings`."""
        return replace(self, tunings=tuple(tunings))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "order": self.order,
            "isEditable": self.is_editable,
            "tunings": [t.to_dict() for t in self.tunings],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TuningBank":
        """
        Create TuningBank from dictionary.

        Malformed tuning entries are skipped so one bad entry does not
        cost the whole bank.

        Raises:
            ValueError: If the bank name or tunings list has the wrong type
        """
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValueError(f"Bank name must be a string, got {name!r}")
        entries = data.get("tunings", [])
        if not isinstance(entries, list):
            raise ValueError(f"Bank '{name}': tunings must be a list, got {type(entries).__name__}")

        tunings = []
        for entry in entries:
            try:
                tunings.append(Tuning.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed tuning in bank '%s': %s", name, e)
        try:
            order = int(data.get("order", 0))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Bank '{name}': invalid order: {e}") from e
        return cls(
            name=name,
            is_editable=bool(data.get("isEditable", False)),
            order=order,
            tunings=tuple(tunings),
        )


def sort_tunings(bank: TuningBank, sort_type: SortType) -> TuningBank:
    """
    Sort a bank and pin 12 ET to the top.

    Any copy of 12 ET is removed, the rest is stably sorted on
    Tuning.sort_key, then 12 ET is inserted at index 0.

    Args:
        bank: Bank to sort
        sort_type: Sort key

    Returns:
        Sorted copy of the bank
    """
    twelve = Tuning.default()
    rest = [t for t in bank.tunings if t.key != twelve.key]
    rest.sort(key=lambda t: t.sort_key(sort_type))
    return bank.with_tunings([twelve] + rest)
