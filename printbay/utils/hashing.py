# printbay/utils/hashing.py

import random
import string
import time
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase


def js_string_hash(text: str) -> int:
    """
    32-bit rolling string hash (h = h*31 + code unit), wrapped to a signed int.

    Matches the hash browser clients compute, so a quote priced offline and
    one priced by the API agree for the same inputs.
    """
    h = 0
    units = text.encode("utf-16-le")
    for i in range(0, len(units), 2):
        h = (h * 31 + int.from_bytes(units[i:i + 2], "little")) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return h


def format_number(value: float) -> str:
    """Render a number the way a JS template string would (12.0 -> "12")."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def pricing_seed(volume: float, material: str, quality: str, color: str) -> int:
    return js_string_hash(f"{format_number(volume)}-{material}-{quality}-{color}")


def now_ms() -> int:
    return int(time.time() * 1000)


def random_suffix(length: int = 9, rng: Optional[random.Random] = None) -> str:
    r = rng or random
    return "".join(r.choice(_BASE36) for _ in range(length))


def generate_id(prefix: str, rng: Optional[random.Random] = None) -> str:
    """`<prefix>_<epoch ms>_<9 base-36 chars>`"""
    return f"{prefix}_{now_ms()}_{random_suffix(rng=rng)}"
