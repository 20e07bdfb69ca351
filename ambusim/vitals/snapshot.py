"""Patient vital-sign snapshots.

A ``VitalsSnapshot`` is always complete: every metric has a value. Partial
updates from a crew member's form go through ``merge`` (or
``from_mapping``), which returns a new complete snapshot and leaves the
original untouched.

Metrics and their display units:

    heart_rate          bpm
    systolic/diastolic  mmHg (shown together as ``blood_pressure`` "120/80")
    oxygen_saturation   %
    temperature         °C
    respiratory_rate    breaths/min
    glucose             mg/dL
    consciousness       categorical ("Alert", "Voice", ...)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, fields, replace
from math import isfinite
from typing import Any


@dataclass(frozen=True)
class MetricSpec:
    """Display metadata for one metric.

    Attributes:
        name: Field name on ``VitalsSnapshot``.
        label: Human-readable label.
        unit: Display unit, empty for categorical metrics.
        band: Inclusive range the fleet random walk keeps the metric in,
            or None when the metric drifts freely or is not walked.
    """

    name: str
    label: str
    unit: str
    band: tuple[float, float] | None = None


METRICS: dict[str, MetricSpec] = {
    spec.name: spec
    for spec in (
        MetricSpec("heart_rate", "Heart Rate", "bpm", (60, 100)),
        MetricSpec("systolic", "Systolic Pressure", "mmHg", (100, 140)),
        MetricSpec("diastolic", "Diastolic Pressure", "mmHg", (60, 90)),
        MetricSpec("oxygen_saturation", "Oxygen Level", "%", (94, 100)),
        MetricSpec("temperature", "Temperature", "°C"),
        MetricSpec("respiratory_rate", "Respiratory Rate", "breaths/min", (12, 20)),
        MetricSpec("glucose", "Glucose Level", "mg/dL"),
        MetricSpec("consciousness", "Consciousness", ""),
    )
}

# Keys used by the presentation layer's vitals form.
FORM_ALIASES = {
    "heartRate": "heart_rate",
    "bloodPressure": "blood_pressure",
    "oxygenLevel": "oxygen_saturation",
    "temperature": "temperature",
    "respiratoryRate": "respiratory_rate",
    "glucoseLevel": "glucose",
    "consciousness": "consciousness",
}


def _to_number(value: Any) -> float:
    number = float(value)
    if not isfinite(number):
        msg = f"Expected a finite number, got {value!r}"
        raise ValueError(msg)
    return number


def _to_int(value: Any) -> int:
    return int(round(_to_number(value)))


def _to_decimal(value: Any) -> float:
    return round(_to_number(value), 1)


def _to_text(value: Any) -> str:
    text = str(value).strip()
    if not text:
        msg = "consciousness must not be empty"
        raise ValueError(msg)
    return text


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "heart_rate": _to_int,
    "systolic": _to_int,
    "diastolic": _to_int,
    "oxygen_saturation": _to_decimal,
    "temperature": _to_decimal,
    "respiratory_rate": _to_int,
    "glucose": _to_int,
    "consciousness": _to_text,
}


def parse_blood_pressure(value: str) -> tuple[int, int]:
    """Split a ``"systolic/diastolic"`` reading.

    Raises:
        ValueError: If the text is not two numbers separated by ``/``.
    """
    parts = str(value).split("/")
    if len(parts) != 2:
        msg = f"Blood pressure must look like '120/80', got {value!r}"
        raise ValueError(msg)
    return _to_int(parts[0]), _to_int(parts[1])


@dataclass(frozen=True)
class VitalsSnapshot:
    """Immutable record of a patient's vital signs.

    Defaults are the baseline assigned to a patient at dispatch time.
    """

    heart_rate: int = 85
    systolic: int = 120
    diastolic: int = 80
    oxygen_saturation: float = 98.0
    temperature: float = 37.2
    respiratory_rate: int = 16
    glucose: int = 90
    consciousness: str = "Alert"

    @property
    def blood_pressure(self) -> str:
        return f"{self.systolic}/{self.diastolic}"

    def merge(self, **changes: Any) -> VitalsSnapshot:
        """Return a copy with ``changes`` applied.

        Values are coerced to each field's type, so strings from a form are
        accepted. ``blood_pressure="130/85"`` sets both pressure fields.

        Raises:
            ValueError: On unknown metric names or unparseable values.
        """
        updates: dict[str, Any] = {}
        for name, value in changes.items():
            if value is None:
                continue
            if name == "blood_pressure":
                updates["systolic"], updates["diastolic"] = parse_blood_pressure(value)
                continue
            converter = _CONVERTERS.get(name)
            if converter is None:
                msg = f"Unknown vital sign {name!r}"
                raise ValueError(msg)
            updates[name] = converter(value)
        return replace(self, **updates)

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], base: VitalsSnapshot | None = None
    ) -> VitalsSnapshot:
        """Build a snapshot from form data merged over ``base``.

        Accepts both field names and the form's camelCase keys. Empty
        strings are treated as "not entered" and keep the base value.
        """
        base = base or BASELINE_VITALS
        changes: dict[str, Any] = {}
        for key, value in data.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            changes[FORM_ALIASES.get(key, key)] = value
        return base.merge(**changes)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["blood_pressure"] = self.blood_pressure
        return data

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


BASELINE_VITALS = VitalsSnapshot()
