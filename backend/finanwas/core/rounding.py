"""Half-Up Rounding — ties go towards positive infinity, never to the even neighbour.

Invariants:
    - round_half_up(22.5) == 23 and round_half_up(-2.5) == -2
    - decimals=0 returns an int; otherwise a float with that many places

Design Decisions:
    - builtin round() is banker's rounding (22.5 -> 22); displayed scores
      must not depend on the parity of the integer part
"""

import math


def round_half_up(value: float, decimals: int = 0) -> float:
    factor = 10 ** decimals
    scaled = math.floor(value * factor + 0.5)
    return scaled if decimals == 0 else scaled / factor
