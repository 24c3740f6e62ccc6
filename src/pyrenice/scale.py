"""Mapping between *nix-style niceness values and priority classes."""

from pyrenice.errors import InvalidNiceness
from pyrenice.models import PriorityClass

MIN_NICENESS = -19
MAX_NICENESS = 19

# Inclusive niceness bounds covered by each class.
CLASS_RANGES: dict[PriorityClass, tuple[int, int]] = {
    PriorityClass.REALTIME: (-19, -19),
    PriorityClass.HIGH: (-18, -10),
    PriorityClass.ABOVE_NORMAL: (-9, -1),
    PriorityClass.NORMAL: (0, 0),
    PriorityClass.BELOW_NORMAL: (1, 10),
    PriorityClass.IDLE: (11, 19),
}

# Niceness used when a class has to be expressed as a single value.
REPRESENTATIVE_NICENESS: dict[PriorityClass, int] = {
    PriorityClass.REALTIME: -19,
    PriorityClass.HIGH: -10,
    PriorityClass.ABOVE_NORMAL: -8,
    PriorityClass.NORMAL: 0,
    PriorityClass.BELOW_NORMAL: 8,
    PriorityClass.IDLE: 19,
}

SYMBOLIC_NAMES: dict[str, PriorityClass] = {
    "realtime": PriorityClass.REALTIME,
    "real-time": PriorityClass.REALTIME,
    "rt": PriorityClass.REALTIME,
    "high": PriorityClass.HIGH,
    "abovenormal": PriorityClass.ABOVE_NORMAL,
    "above-normal": PriorityClass.ABOVE_NORMAL,
    "above": PriorityClass.ABOVE_NORMAL,
    "normal": PriorityClass.NORMAL,
    "belownormal": PriorityClass.BELOW_NORMAL,
    "below-normal": PriorityClass.BELOW_NORMAL,
    "below": PriorityClass.BELOW_NORMAL,
    "idle": PriorityClass.IDLE,
}


def _build_lookup(ranges: dict[PriorityClass, tuple[int, int]]) -> dict[int, PriorityClass]:
    """
    Invert class ranges into a value -> class table.

    Raises:
        ValueError: If the ranges overlap or leave a gap in MIN..MAX.
    """
    lookup: dict[int, PriorityClass] = {}
    for priority_class, (low, high) in ranges.items():
        for value in range(low, high + 1):
            if value in lookup:
                raise ValueError(
                    f"niceness {value} is claimed by both {lookup[value]} and {priority_class}"
                )
            lookup[value] = priority_class

    missing = set(range(MIN_NICENESS, MAX_NICENESS + 1)) - lookup.keys()
    if missing:
        raise ValueError(f"niceness values without a priority class: {sorted(missing)}")
    return lookup


_LOOKUP = _build_lookup(CLASS_RANGES)


def class_for(niceness: int) -> PriorityClass:
    """Return the priority class that a niceness value falls into."""
    try:
        return _LOOKUP[niceness]
    except KeyError:
        raise InvalidNiceness(
            f"Unable to set priority to {niceness}. "
            f"Try a value from {MAX_NICENESS} (lowest) to {MIN_NICENESS} (highest)"
        ) from None


def niceness_for(priority_class: PriorityClass) -> int:
    """Return the representative niceness of a priority class."""
    return REPRESENTATIVE_NICENESS[priority_class]


def parse_niceness(token: str) -> int:
    """
    Parse a niceness given either as an integer or as a symbolic name.

    Symbolic names are case-insensitive and resolve to the representative
    niceness of their class, e.g. "ABOVE" -> -8.

    Raises:
        InvalidNiceness: If the token is neither a known name nor an integer
            within MIN_NICENESS..MAX_NICENESS.
    """
    named = SYMBOLIC_NAMES.get(token.strip().lower())
    if named is not None:
        return REPRESENTATIVE_NICENESS[named]

    try:
        value = int(token)
    except ValueError:
        raise InvalidNiceness(
            f"-n requires an integer or one of {', '.join(SYMBOLIC_NAMES)} (got {token})"
        ) from None

    class_for(value)
    return value
