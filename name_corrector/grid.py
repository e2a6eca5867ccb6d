import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .chaldean import reduce_number

logger = logging.getLogger(__name__)

GRID_DIGITS = range(1, 10)

MISSING_IMPACT = {
    1: "Challenges with independence or self-assertion. Needs to develop leadership.",
    2: "Difficulties with cooperation or sensitivity. Needs to foster diplomacy.",
    3: "Challenges in self-expression or creativity. Needs to communicate more.",
    4: "Potential issues with stability, discipline, or practical matters. Needs structure.",
    5: "Lack of grounding, adaptability, or a need for more freedom. Needs versatility.",
    6: "Harmony issues, challenges with responsibility or nurturing. Needs to serve and care.",
    7: "May indicate a need for deeper introspection or spiritual understanding. Needs wisdom.",
    8: "Potential struggles with material abundance or executive ability. Needs power and organization.",
    9: "Challenges with humanitarianism, compassion, or completion. Needs universal love.",
}


@dataclass(frozen=True)
class Grid:
    counts: Dict[int, int]
    missing: Tuple[int, ...]
    updated_by_name: bool = False

    def has(self, digit: int) -> bool:
        return self.counts.get(digit, 0) > 0


def build_grid(birth_date_str: str, name_number: Optional[int] = None) -> Grid:
    """
    Tallies the Lo Shu Grid from the digits 1-9 of a birth date.

    A name-derived number (usually the Expression Number) is reduced with
    ``preserve_masters=False`` and, if it lands on 1-9, adds one to that slot.
    Zeros and non-digit characters are ignored.
    """
    tally = Counter(int(d) for d in (birth_date_str or '') if d in '123456789')

    if name_number is not None:
        grid_friendly = reduce_number(name_number, preserve_masters=False)
        if 1 <= grid_friendly <= 9:
            tally[grid_friendly] += 1
            logger.info(f"Lo Shu Grid updated with name number: {grid_friendly}")

    counts = {digit: tally.get(digit, 0) for digit in GRID_DIGITS}
    missing = tuple(digit for digit in GRID_DIGITS if counts[digit] == 0)
    return Grid(counts=counts, missing=missing, updated_by_name=name_number is not None)


def calculate_lo_shu_grid_with_details(birth_date_str: str, suggested_name_expression_num: Optional[int] = None) -> Dict:
    """Lo Shu Grid in the service's JSON form, with the lessons of the missing numbers."""
    grid = build_grid(birth_date_str, suggested_name_expression_num)

    return {
        "grid_counts": {digit: count for digit, count in grid.counts.items() if count},
        "missing_numbers": list(grid.missing),
        "missing_lessons": [
            {"number": num, "impact": MISSING_IMPACT[num]} for num in grid.missing
        ],
        "has_3": grid.has(3),
        "has_5": grid.has(5),
        "has_6": grid.has(6),
        "has_8": grid.has(8),
        "grid_updated_by_name": grid.updated_by_name,
    }
