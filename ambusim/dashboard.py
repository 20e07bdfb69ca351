"""Rich terminal rendering of the fleet.

Renderables are rebuilt from snapshots on every refresh, so they can be fed
straight into ``rich.live.Live.update``.
"""

from collections import Counter
from collections.abc import Iterable, Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ambusim.fleet import Unit, UnitStatus
from ambusim.unit import ClockTime
from ambusim.vitals import METRICS, LiveReading

CONSOLE = Console()

STATUS_STYLES: dict[UnitStatus, str] = {
    UnitStatus.AVAILABLE: "green",
    UnitStatus.DISPATCHED: "yellow",
    UnitStatus.ARRIVED_PICKUP: "cyan",
    UnitStatus.TRANSPORTING: "bold red",
    UnitStatus.ARRIVED_DESTINATION: "magenta",
}


def _vitals_cell(unit: Unit) -> str:
    if unit.vitals is None:
        return "-"
    v = unit.vitals
    return (
        f"HR {v.heart_rate} | BP {v.blood_pressure} | "
        f"SpO2 {v.oxygen_saturation:.1f}% | T {v.temperature:.1f}°C | RR {v.respiratory_rate}"
    )


def fleet_table(units: Iterable[Unit]) -> Table:
    """Table with one row per unit."""
    table = Table(expand=True)
    table.add_column("Unit", style="bold")
    table.add_column("Driver")
    table.add_column("Status")
    table.add_column("Location")
    table.add_column("ETA")
    table.add_column("Patient")
    table.add_column("Vitals")

    for unit in units:
        style = STATUS_STYLES.get(unit.status, "")
        table.add_row(
            unit.id,
            unit.operator_name,
            Text(unit.status.value, style=style),
            str(unit.location),
            unit.eta_display or "-",
            unit.assigned_patient_id or "-",
            _vitals_cell(unit),
        )
    return table


def status_counts(units: Iterable[Unit]) -> Table:
    counts = Counter(unit.status for unit in units)
    t = Table.grid(padding=(0, 2))
    for status in UnitStatus:
        t.add_row(f"[b]{status.name}[/b]: ", Text(str(counts.get(status, 0))))
    return t


def readings_table(key: str, readings: Sequence[LiveReading], limit: int = 5) -> Table:
    """Most recent live readings for one stream, newest last."""
    hr = METRICS["heart_rate"]
    spo2 = METRICS["oxygen_saturation"]
    table = Table(title=f"Live monitoring: {key}", expand=True)
    table.add_column("Time")
    table.add_column(f"{hr.label} ({hr.unit})", justify="right")
    table.add_column(f"{spo2.label} ({spo2.unit})", justify="right")
    for reading in list(readings)[-limit:]:
        table.add_row(
            reading.timestamp.strftime("%H:%M:%S"),
            str(reading.heart_rate),
            f"{reading.oxygen_saturation:.1f}",
        )
    return table


def render_fleet(
    units: Sequence[Unit],
    now: ClockTime | None = None,
    live: dict[str, Sequence[LiveReading]] | None = None,
) -> Panel:
    """Panel with the fleet table, state counts and any live streams."""
    parts = [fleet_table(units), status_counts(units)]
    for key, readings in (live or {}).items():
        parts.append(readings_table(key, readings))

    title = "Fleet" if now is None else f"Fleet - Simulation Time: {now}"
    return Panel(Group(*parts), title=title, padding=(1, 2))
