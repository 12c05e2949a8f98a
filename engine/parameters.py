from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Sequence
import math
import logging

logger = logging.getLogger(__name__)


class Parameter:
    """
    A named, bounded numeric input driven by a slider or toggle.

    The value is always clamped into [min_value, max_value]; writes outside the
    range are clamped, never rejected.
    """

    def __init__(
        self,
        name: str,
        min_value: float,
        max_value: float,
        value: float,
        step: float = 1.0,
        unit: str = "",
        label: Optional[str] = None,
        options: Optional[Sequence[str]] = None
    ):
        """
        Initialize a Parameter.

        Args:
            name (str): Identifier used by the owning store, e.g. "temperature".
            min_value (float): Lower bound (inclusive).
            max_value (float): Upper bound (inclusive).
            value (float): Initial value; clamped into range.
            step (float): Slider increment. Values snap to the grid anchored at min_value.
            unit (str): Display unit, e.g. "°C" or "mL".
            label (str, optional): Human readable label. Defaults to the name.
            options (Sequence[str], optional): Names of discrete choices. When given,
                the value is an index into this list.
        """
        if max_value < min_value:
            raise ValueError(f"Parameter {name}: max {max_value} < min {min_value}")
        if step <= 0:
            raise ValueError(f"Parameter {name}: step must be positive")
        self.name = name
        self.min = float(min_value)
        self.max = float(max_value)
        self.step = float(step)
        self.unit = unit
        self.label = label or name
        self.options: List[str] = list(options) if options else []
        self.default = self.clamp(value)
        self._value = self.default

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        self._value = self.clamp(new_value)

    def clamp(self, raw: float) -> float:
        """Clamp into range and snap to the step grid."""
        v = float(raw)
        if math.isnan(v):
            logger.warning("Parameter %s received NaN; keeping minimum", self.name)
            return self.min
        v = max(self.min, min(self.max, v))
        steps = round((v - self.min) / self.step)
        snapped = self.min + steps * self.step
        # rounding must not push the value back outside the range
        return max(self.min, min(self.max, round(snapped, 10)))

    @property
    def option(self) -> Optional[str]:
        """Name of the selected discrete option, if this parameter has options."""
        if not self.options:
            return None
        return self.options[int(self._value)]

    def reset(self) -> None:
        self._value = self.default

    def describe(self) -> Dict[str, object]:
        """Control-surface description for UI sliders/toggles."""
        return {
            "name": self.name,
            "label": self.label,
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "unit": self.unit,
            "value": self._value,
            "options": list(self.options),
        }

    def __repr__(self) -> str:
        return f"<Parameter {self.name}={self._value}{self.unit} [{self.min}, {self.max}]>"


def choice(name: str, options: Sequence[str], selected: int = 0, label: Optional[str] = None) -> Parameter:
    """Build a discrete-choice parameter whose value indexes into options."""
    return Parameter(name, 0, len(options) - 1, selected, step=1.0, label=label, options=options)


class ParameterStore:
    """
    Holds the named parameters of one simulation session. Pure data: user
    controls mutate values in place and the next tick picks them up.
    """

    def __init__(self, parameters: Optional[Sequence[Parameter]] = None):
        self._params: Dict[str, Parameter] = {}
        for p in parameters or []:
            self.add(p)

    def add(self, parameter: Parameter) -> None:
        if parameter.name in self._params:
            raise ValueError(f"Duplicate parameter: {parameter.name}")
        self._params[parameter.name] = parameter

    def __getitem__(self, name: str) -> float:
        return self._params[name].value

    def __setitem__(self, name: str, value: float) -> None:
        self.set(name, value)

    def __contains__(self, name: str) -> bool:
        return name in self._params

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._params.values())

    def __len__(self) -> int:
        return len(self._params)

    def get(self, name: str) -> Parameter:
        """Return the Parameter object. Raises KeyError for unknown names."""
        return self._params[name]

    def set(self, name: str, value: float) -> float:
        """
        Write a value, clamping it into range.

        Returns:
            float: The value actually stored.
        """
        param = self._params[name]
        param.value = value
        if param.value != float(value):
            logger.debug("Parameter %s clamped %s -> %s", name, value, param.value)
        return param.value

    def option(self, name: str) -> Optional[str]:
        return self._params[name].option

    def values(self) -> Dict[str, float]:
        return {name: p.value for name, p in self._params.items()}

    def reset(self) -> None:
        for p in self._params.values():
            p.reset()

    def describe(self) -> List[Dict[str, object]]:
        return [p.describe() for p in self._params.values()]
