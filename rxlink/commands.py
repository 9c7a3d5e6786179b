"""Wire-format helpers for the dispenser peripheral.

Outbound, one ASCII command per order::

    SERVO1:2;SERVO3:1;MOTORS:10;

Inbound, telemetry lines such as ``ULTRASONIC:3`` reporting how many items
the peripheral has detected.
"""

from collections.abc import Sequence

ULTRASONIC_PREFIX = "ULTRASONIC:"
DEFAULT_MOTOR_RUNS = 10


def build_dispense_command(
    quantities: Sequence[int], motors: int = DEFAULT_MOTOR_RUNS
) -> str:
    """Build the command that dispenses ``quantities[i]`` items from slot ``i + 1``.

    Empty slots are skipped; ``MOTORS:<motors>;`` always closes the command.

    Raises:
        ValueError: if a quantity is negative or no item is requested.
    """
    if any(q < 0 for q in quantities):
        raise ValueError(f"Quantities must not be negative: {list(quantities)}")
    if sum(quantities) == 0:
        raise ValueError("No item selected")

    parts = [f"SERVO{slot}:{count};" for slot, count in enumerate(quantities, start=1) if count > 0]
    parts.append(f"MOTORS:{motors};")
    return "".join(parts)


def parse_ultrasonic(line: str) -> int | None:
    """Return the item count of an ``ULTRASONIC:<n>`` line, else None."""
    if not line.startswith(ULTRASONIC_PREFIX):
        return None
    try:
        return int(line[len(ULTRASONIC_PREFIX):].strip())
    except ValueError:
        return None


def order_ready(detected: int, quantities: Sequence[int]) -> bool:
    """True once the peripheral has detected every ordered item."""
    return detected >= sum(quantities)
