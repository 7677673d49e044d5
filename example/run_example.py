#!/usr/bin/env python3
"""
Simple example demonstrating on-call rotation generation.
Builds a weekly schedule from scratch, then extends it a week later.
"""

from datetime import datetime, timedelta, timezone
import sys
import os

# Add parent directory to path so we can import oncall
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oncall import Schedule, generate_schedule, dump_schedule


def main():
    # Alice, Bob, Charlie rotating weekly
    # Starting Friday Nov 7, 2025 at 5pm, scheduled three weeks out
    schedule = Schedule(
        users=["alice", "bob", "charlie"],
        start=datetime(2025, 11, 7, 17, 0, tzinfo=timezone.utc),
        rotation_length="168h",
        schedule_for="504h"
    )
    
    now = datetime(2025, 11, 7, 17, 0, tzinfo=timezone.utc)
    print(f"Generating schedule as of {now.strftime('%Y-%m-%d')}...")
    
    generated = generate_schedule(schedule, now=now)
    for rotation in generated.rotations:
        print(rotation)
    
    # A week and a day later the first rotation has elapsed
    later = now + timedelta(days=8)
    print(f"\nExtending schedule as of {later.strftime('%Y-%m-%d')}...")
    
    extended = generate_schedule(generated, now=later)
    for rotation in extended.rotations:
        print(rotation)
    
    print()
    print(dump_schedule(extended))


if __name__ == '__main__':
    main()
