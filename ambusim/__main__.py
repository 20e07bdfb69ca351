"""Live terminal demo: ``python -m ambusim``.

Runs the default fleet in real time, dispatches a few patients and renders
the fleet with Rich until the last unit is back to ``available`` or the
duration runs out.
"""

import argparse
import time

from rich.live import Live
import structlog

from ambusim.config import EngineConfig
from ambusim.dashboard import CONSOLE, render_fleet
from ambusim.engine import TrackingEngine
from ambusim.errors import NoCapacity
from ambusim.geo import GeoPoint
from ambusim.log import configure_logging
from ambusim.unit import Second

logger = structlog.get_logger(__name__)

DEMO_PICKUP = GeoPoint.from_deg(40.7130, -74.0050)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ambulance fleet tracking demo")
    parser.add_argument("--patients", type=int, default=2, help="number of patients to dispatch")
    parser.add_argument("--duration", type=float, default=60.0, help="simulated seconds to run")
    parser.add_argument("--time-scale", type=float, default=1.0, help="simulated seconds per real second")
    parser.add_argument("--seed", type=int, default=None, help="seed for all random walks")
    parser.add_argument("--monitor", action="store_true", help="stream live vitals for the first patient")
    parser.add_argument("--log-level", default="WARNING", help="structlog level, e.g. INFO or DEBUG")
    parser.add_argument("--json-logs", action="store_true", help="render logs as JSON lines")
    return parser


def run(args: argparse.Namespace) -> None:
    configure_logging(args.log_level, json=args.json_logs)
    config = EngineConfig(seed=args.seed, time_scale=args.time_scale)

    with TrackingEngine(config) as engine:
        engine.start(realtime=True)

        patients = [f"patient-{i + 1}" for i in range(args.patients)]
        for patient_id in patients:
            try:
                engine.dispatch(patient_id, DEMO_PICKUP)
            except NoCapacity:
                logger.warning("Patient left waiting", patient_id=patient_id)
        if args.monitor and patients:
            engine.start_monitoring(patients[0])

        deadline = Second(args.duration)
        with Live(render_fleet(engine.list_units(), engine.now), console=CONSOLE, auto_refresh=True) as live:
            while engine.now < deadline:
                time.sleep(0.2)
                units = engine.list_units()
                readings = {key: engine.live_readings(key) for key in engine.monitor.keys()}
                live.update(render_fleet(units, engine.now, readings))
                if all(unit.is_available for unit in units) and float(engine.now) > 0:
                    break


def main(argv: list[str] | None = None) -> None:
    run(build_parser().parse_args(argv))


if __name__ == "__main__":
    main()
