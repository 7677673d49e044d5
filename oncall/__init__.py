"""On-call rotation schedule generation."""

from .durations import format_duration, parse_duration
from .schedule_utils import (
    Schedule,
    Rotation,
    validate_schedule,
    generate_schedule,
    add_rotation,
    rotate_users,
    truncate_rotations,
    num_rotations,
    load_schedule,
    dump_schedule,
    format_rfc3339
)

__all__ = [
    'Schedule',
    'Rotation',
    'validate_schedule',
    'generate_schedule',
    'add_rotation',
    'rotate_users',
    'truncate_rotations',
    'num_rotations',
    'load_schedule',
    'dump_schedule',
    'format_rfc3339',
    'parse_duration',
    'format_duration'
]
