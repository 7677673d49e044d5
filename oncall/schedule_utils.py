"""Utility functions for generating and extending on-call rotation schedules."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import pydantic
from pydantic.alias_generators import to_pascal

from .durations import format_duration, parse_duration

logger = logging.getLogger(__name__)


def format_rfc3339(ts: datetime, timespec: str = 'seconds') -> str:
    """Render a timestamp as RFC 3339, using 'Z' for UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.isoformat(timespec=timespec)
    if text.endswith('+00:00'):
        text = text[:-6] + 'Z'
    return text


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps are taken to be UTC so they compare with aware ones.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_users(users: list[str]) -> list[str]:
    if not users:
        raise ValueError('must provide at least 1 user')
    return users


def _check_rotation_length(rotation_length: timedelta) -> timedelta:
    if rotation_length <= timedelta(0):
        raise ValueError(
            f'cannot have nonpositive rotation_length (got {format_duration(rotation_length)})'
        )
    return rotation_length


class Rotation(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        alias_generator=to_pascal, populate_by_name=True, frozen=True
    )

    start: datetime
    primary: str
    secondary: str

    @pydantic.field_validator('start')
    @classmethod
    def validate_start(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @pydantic.field_serializer('start', when_used='json')
    def serialize_start(self, v: datetime) -> str:
        return format_rfc3339(v, timespec='auto')

    def __str__(self) -> str:
        return f'{format_rfc3339(self.start)} {self.primary} {self.secondary}'


class Schedule(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    # The first user is primary on the next generated rotation and the second
    # is secondary. Generation rotates this list to keep that true.
    users: list[str]
    # Start of the next rotation to generate.
    start: datetime
    rotation_length: timedelta
    # How far past "now" rotations must already be generated.
    schedule_for: timedelta
    # Generated, but may be edited by hand between generations.
    rotations: list[Rotation] = []
    # Reference instant for truncation; the wall clock when unset.
    now: Optional[datetime] = pydantic.Field(default=None, exclude=True)

    @pydantic.field_validator('users')
    @classmethod
    def validate_users(cls, v: list[str]) -> list[str]:
        return _check_users(v)

    @pydantic.field_validator('rotation_length', 'schedule_for', mode='before')
    @classmethod
    def parse_go_duration(cls, v):
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @pydantic.field_validator('rotations', mode='before')
    @classmethod
    def default_rotations(cls, v):
        # A document written with no rotations may carry null.
        if v is None:
            return []
        return v

    @pydantic.field_validator('rotation_length')
    @classmethod
    def validate_rotation_length(cls, v: timedelta) -> timedelta:
        return _check_rotation_length(v)

    @pydantic.field_validator('start', 'now')
    @classmethod
    def validate_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    @pydantic.field_serializer('start', when_used='json')
    def serialize_start(self, v: datetime) -> str:
        return format_rfc3339(v, timespec='auto')

    @pydantic.field_serializer('rotation_length', 'schedule_for', when_used='json')
    def serialize_duration(self, v: timedelta) -> str:
        return format_duration(v)


def validate_schedule(schedule: Schedule) -> None:
    """
    Check that a schedule can be generated from.

    Construction already runs these checks; this catches schedules whose
    attributes were reassigned afterwards.

    Raises:
        ValueError: if the roster is empty or the rotation length is not positive
    """
    _check_users(schedule.users)
    _check_rotation_length(schedule.rotation_length)


def rotate_users(users: list[str]) -> list[str]:
    """Return a copy of the roster with the head moved to the tail."""
    return users[1:] + users[:1]


def add_rotation(schedule: Schedule) -> None:
    """
    Append the next rotation to a working schedule and advance its state.

    Only call this on a schedule owned by the caller: it reassigns
    rotations, start and users on the given object.
    """
    users = schedule.users
    schedule.rotations = schedule.rotations + [
        Rotation(
            start=schedule.start,
            primary=users[0],
            secondary=users[1 % len(users)],
        )
    ]
    schedule.start = schedule.start + schedule.rotation_length
    schedule.users = rotate_users(users)


def truncate_rotations(rotations: list[Rotation], now: datetime) -> list[Rotation]:
    """
    Drop rotations that have elapsed.

    The latest rotation that started before now is the active one. It is kept
    along with the rotation right before it and everything after it. If no
    rotation past the first has started, the list is returned as is.

    Args:
        rotations: Rotations in ascending start order
        now: Reference instant

    Returns:
        The retained tail of rotations
    """
    trunc = len(rotations) - 1
    while trunc > 0:
        if rotations[trunc].start < now:
            # Keep the active rotation and the one before it.
            trunc -= 1
            break
        trunc -= 1
    return rotations[max(trunc, 0):]


def generate_schedule(schedule: Schedule, now: Optional[datetime] = None) -> Schedule:
    """
    Extend a schedule so it covers schedule_for past now.

    Algorithm:
    1. Seed a first rotation when there are none, otherwise resume right
       after the last existing rotation
    2. Truncate rotations that have elapsed
    3. Append rotations until the last one starts at or after now + schedule_for

    The input schedule is left unchanged.

    Args:
        schedule: Current schedule state
        now: Reference instant; defaults to schedule.now, then the wall clock

    Returns:
        A new schedule with the extended rotations and the roster rotated to
        whoever is primary next
    """
    validate_schedule(schedule)

    if now is None:
        now = schedule.now
    if now is None:
        now = datetime.now(timezone.utc)
    now = _as_utc(now)

    result = schedule.model_copy(update={
        'users': list(schedule.users),
        'rotations': list(schedule.rotations),
        'now': now,
    })

    if not result.rotations:
        # Generating from scratch: seed with an initial rotation.
        result.start = schedule.start
        add_rotation(result)
    else:
        result.start = result.rotations[-1].start + result.rotation_length

    before = len(result.rotations)
    result.rotations = truncate_rotations(result.rotations, now)
    dropped = before - len(result.rotations)

    appended = 0
    end = now + result.schedule_for
    while end > result.rotations[-1].start:
        add_rotation(result)
        appended += 1

    logger.debug(
        'Generated schedule: dropped %d elapsed rotations, appended %d, next primary %s',
        dropped, appended, result.users[0]
    )
    return result


def num_rotations(start: datetime, end: datetime, rotation_length: timedelta) -> int:
    """Count the rotations needed to cover start..end, rounding a partial one up."""
    span = end - start
    if span <= timedelta(0):
        return 0

    count, remainder = divmod(span, rotation_length)
    if remainder:
        count += 1
    return count


def load_schedule(text: str | bytes) -> Schedule:
    """
    Parse and validate a JSON schedule document.

    Raises:
        pydantic.ValidationError: on malformed JSON, unparseable durations or
            an invalid schedule
    """
    return Schedule.model_validate_json(text)


def dump_schedule(schedule: Schedule) -> str:
    """Serialize a schedule to the document format load_schedule reads."""
    return schedule.model_dump_json(by_alias=True, indent=2)
