"""
Synth parameters touched by the tunings subsystem.

Declarative ParameterSpec metadata (range, default, unit) plus a small
SynthParameters container with get/set/default and change listeners.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional


class ParameterType(Enum):
    """Types of synth parameters."""
    FLOAT = "float"
    INT = "int"


@dataclass
class ParameterSpec:
    """
    Declarative parameter specification.

    Attributes:
        name: Internal parameter name (snake_case)
        type: Parameter data type
        default: Factory default value
        min_val: Minimum value
        max_val: Maximum value
        display_name: UI label
        unit: Display unit (e.g., "Hz")
    """
    name: str
    type: ParameterType
    default: float
    min_val: float
    max_val: float
    display_name: Optional[str] = None
    unit: Optional[str] = None

    def __post_init__(self):
        """Validate parameter specification."""
        if not self.name:
            raise ValueError("Parameter name is required")

        if self.display_name is None:
            self.display_name = self.name.replace('_', ' ').title()

        if self.min_val >= self.max_val:
            raise ValueError(f"Parameter {self.name}: min_val must be < max_val")
        if not (self.min_val <= self.default <= self.max_val):
            raise ValueError(f"Parameter {self.name}: default must be within min/max range")

    def clamp(self, value: float) -> float:
        """Clamp a value into range (and to int for INT parameters)."""
        value = max(self.min_val, min(value, self.max_val))
        if self.type == ParameterType.INT:
            return int(round(value))
        return float(value)


FREQUENCY_A4 = ParameterSpec(
    name="frequency_a4",
    type=ParameterType.FLOAT,
    default=440.0,
    min_val=410.0,
    max_val=470.0,
    display_name="A4 Frequency",
    unit="Hz",
)

DEFAULT_SPECS = (FREQUENCY_A4,)

ParameterListener = Callable[[str, float], None]


class SynthParameters:
    """
    Current values of a set of synth parameters.

    Listeners are called with (name, value) after every set().
    """

    def __init__(self, specs=DEFAULT_SPECS):
        self._specs: Dict[str, ParameterSpec] = {s.name: s for s in specs}
        self._values: Dict[str, float] = {s.name: s.default for s in specs}
        self._listeners: List[ParameterListener] = []

    def _spec(self, name: str) -> ParameterSpec:
        spec = self._specs.get(name)
        if spec is None:
            raise KeyError(f"Unknown parameter: {name}")
        return spec

    def get_spec(self, name: str) -> ParameterSpec:
        return self._spec(name)

    def get(self, name: str) -> float:
        self._spec(name)
        return self._values[name]

    def get_default(self, name: str) -> float:
        return self._spec(name).default

    def set(self, name: str, value: float) -> float:
        """
        Set a parameter (clamped to its range).

        Returns:
            The value actually stored
        """
        value = self._spec(name).clamp(value)
        self._values[name] = value
        for listener in list(self._listeners):
            listener(name, value)
        return value

    def add_listener(self, listener: ParameterListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: ParameterListener):
        if listener in self._listeners:
            self._listeners.remove(listener)
