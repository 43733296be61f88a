#!/usr/bin/env python3
"""Replay one day of scheduling ticks against the simulated equipment and print every change."""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path

_SRC = Path(__file__).resolve().parents[1] / "src"
if _SRC.exists() and str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from poolclock.config import get_settings
from poolclock.equipment import SimulatedEquipment
from poolclock.errors import ConfigurationInvalid
from poolclock.schedules import ScheduleCollection, build_schedule_days
from poolclock.service import build_sun_source
from poolclock.sources import resolve_timezone
from poolclock.store import ScheduleStore


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--schedules", type=Path, default=None, help="Schedule JSON file. Defaults to POOLCLOCK_SCHEDULES_PATH.")
    parser.add_argument("--equipment", type=Path, default=None, help="Equipment JSON file. Defaults to POOLCLOCK_EQUIPMENT_PATH.")
    parser.add_argument("--date", type=date.fromisoformat, default=date.today(), help="Day to simulate (YYYY-MM-DD).")
    parser.add_argument("--step", type=int, default=5, help="Minutes between ticks (default: 5).")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    if args.step <= 0:
        print("ERROR: --step must be positive", file=sys.stderr)
        return 2
    settings = get_settings()
    try:
        store = ScheduleStore.from_path(args.schedules or settings.schedules_path)
        equipment = SimulatedEquipment.from_file(args.equipment or settings.equipment_path)
        sun_source = build_sun_source(settings)
        days = build_schedule_days(settings.schedule_day_bits)
    except (ConfigurationInvalid, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    collection = ScheduleCollection(equipment, sun_source=sun_source, lookup=store.get, days=days)
    collection.initialize_from_config(store)

    sun = sun_source.sun_times(args.date)
    print(f"Simulating {args.date.isoformat()} (sunrise={sun.sunrise} sunset={sun.sunset})")
    tz = resolve_timezone(settings.timezone) or datetime.now().astimezone().tzinfo
    now = datetime.combine(args.date, time(), tzinfo=tz)
    end = now + timedelta(days=1)
    while now < end:
        report = collection.run_tick(now)
        for circuit_id, is_on in report.circuits.items():
            print(f"{now:%H:%M}  circuit {circuit_id:>3} -> {'ON' if is_on else 'off'}")
        for body_id, intent in report.heat_modes.items():
            print(f"{now:%H:%M}  body {body_id:>3} heat mode -> {intent.mode.value} ({intent.heat_setpoint}/{intent.cool_setpoint})")
        for failure in report.failures:
            print(f"{now:%H:%M}  FAILED {failure.action} {failure.target}: {failure.error}", file=sys.stderr)
        now += timedelta(minutes=args.step)
    collection.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
