"""Research item identifiers of the form ``UOH_ASR_<time6>_<rand3>``.

The time part is the low six decimal digits of the wall clock in
milliseconds, the random part a zero-padded number in ``[0, 999]``.
There is no counter and no collision check.
"""

import random
import re
import time

UOH_PREFIX = "UOH_ASR"
UOH_ID_PATTERN = re.compile(r"^UOH_ASR_\d{6}_\d{3}$")


def generate_uoh_id(now_ms: int | None = None, rng: random.Random | None = None) -> str:
    """Mint a new identifier.

    Args:
        now_ms: Wall-clock time in milliseconds (current time if not provided).
        rng: Random source for the three-digit suffix.

    Returns:
        A string matching ``UOH_ID_PATTERN``.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = (rng or random).randrange(1000)
    return f"{UOH_PREFIX}_{now_ms % 1_000_000:06d}_{suffix:03d}"


def is_uoh_id(value: str) -> bool:
    return bool(UOH_ID_PATTERN.match(value))
