"""Parse and format Go-style duration strings such as "168h" or "1h30m"."""

import re
from datetime import timedelta
from decimal import Decimal

# Microseconds per unit. timedelta cannot hold anything finer than 1us.
_UNITS = {
    'ns': Decimal('0.001'),
    'us': Decimal(1),
    'µs': Decimal(1),
    'μs': Decimal(1),
    'ms': Decimal(1_000),
    's': Decimal(1_000_000),
    'm': Decimal(60_000_000),
    'h': Decimal(3_600_000_000),
}

_COMPONENT_RE = re.compile(r'(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)')
_DURATION_RE = re.compile(r'([-+]?)((?:(?:\d+\.?\d*|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+)')


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration string like "168h", "1h30m" or "-1.5s".
    
    Args:
        text: Signed sequence of decimal numbers, each with a unit suffix
            (ns, us, ms, s, m, h). The bare string "0" is also accepted.
        
    Returns:
        The duration as a timedelta
    """
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        if text in ('0', '+0', '-0'):
            return timedelta(0)
        raise ValueError(f'invalid duration {text!r}')
    
    sign, body = match.groups()
    total = sum(
        (Decimal(number) * _UNITS[unit] for number, unit in _COMPONENT_RE.findall(body)),
        Decimal(0),
    )
    if sign == '-':
        total = -total
    return timedelta(microseconds=int(total))


def format_duration(delta: timedelta) -> str:
    """Format a timedelta in the compact form parse_duration reads back."""
    total = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    sign = '-' if total < 0 else ''
    total = abs(total)
    
    # Under a second uses the smallest fitting unit, like Go: "250ms", "1.5ms".
    if 0 < total < 1_000:
        return f'{sign}{total}µs'
    if 1_000 <= total < 1_000_000:
        millis, micros = divmod(total, 1_000)
        if micros:
            return sign + f'{millis}.{micros:03d}'.rstrip('0') + 'ms'
        return f'{sign}{millis}ms'
    
    hours, rest = divmod(total, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds, micros = divmod(rest, 1_000_000)
    
    parts = []
    if hours:
        parts.append(f'{hours}h')
    if minutes:
        parts.append(f'{minutes}m')
    if micros:
        parts.append(f'{seconds}.{micros:06d}'.rstrip('0') + 's')
    elif seconds:
        parts.append(f'{seconds}s')
    
    if not parts:
        return '0s'
    return sign + ''.join(parts)
