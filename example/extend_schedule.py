#!/usr/bin/env python3
"""
Extend an on-call schedule document in place.

Intended to be run periodically (e.g. from cron) against a JSON schedule file.
"""

import argparse
import datetime
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path so we can import oncall
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oncall import dump_schedule, generate_schedule, load_schedule


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extend an on-call schedule so it covers its ScheduleFor horizon."
    )
    parser.add_argument(
        "schedule_file",
        type=Path,
        help="Path to the JSON schedule document.",
    )
    parser.add_argument(
        "--now",
        type=datetime.datetime.fromisoformat,
        help="Reference time as RFC 3339. Defaults to the current time.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="""
        If set, print the new schedule to stdout rather than overwriting the
        existing file.
        """,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    opts = parse_args(argv)

    logging.basicConfig(
        format=">> %(asctime)s: %(levelname)s: %(filename)s:%(lineno)d: %(message)s",
        level=logging.DEBUG if opts.debug else logging.INFO,
    )

    schedule_file: Path = opts.schedule_file
    try:
        schedule = load_schedule(schedule_file.read_bytes())
        new_schedule = generate_schedule(schedule, now=opts.now)
    except (OSError, ValueError) as e:
        logging.error("Could not extend %s: %s", schedule_file, e)
        return 1

    for rotation in new_schedule.rotations:
        logging.info("%s", rotation)
    logging.info("Next primary: %s", new_schedule.users[0])

    text = dump_schedule(new_schedule) + "\n"
    if opts.dry_run:
        logging.info("Dry-run mode enabled. Not writing to file; would've written:")
        print(text, end="")
        return 0

    logging.info("Writing new schedule to file: %s", schedule_file)
    # Rename over the original so readers never see a partial file.
    tmp_path = schedule_file.with_suffix(".tmp")
    try:
        with tmp_path.open("w") as f:
            f.write(text)
        tmp_path.replace(schedule_file)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        logging.error("Could not write %s: %s", schedule_file, e)
        return 1
    logging.info("New schedule written successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
