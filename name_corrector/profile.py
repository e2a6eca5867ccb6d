import hashlib
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .astro import check_planetary_compatibility, get_conceptual_astrological_data
from .grid import Grid, build_grid, calculate_lo_shu_grid_with_details
from .metrics import (
    birth_day_number,
    calculate_birth_day_number_with_details,
    calculate_expression_number_with_details,
    calculate_life_path_number_with_details,
    calculate_personality_number_with_details,
    calculate_soul_urge_number_with_details,
    expression_number,
    life_path_number,
    personality_number,
    soul_urge_number,
)
from .phonetics import get_phonetic_vibration_analysis
from .rules import analyze_edge_cases, calculate_number_compatibility

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NumericProfile:
    name: str
    birth_date: str
    expression_number: int
    soul_urge_number: int
    personality_number: int
    life_path_number: int
    birth_day_number: int
    grid: Grid


def build_numeric_profile(name: str, birth_date: str, fold_name_number: bool = False) -> NumericProfile:
    """
    Computes every local index for a name and birth date.

    With ``fold_name_number`` the Expression Number is folded into the grid,
    which is how a candidate name is judged against the birth date.
    """
    expression = expression_number(name)
    return NumericProfile(
        name=name,
        birth_date=birth_date,
        expression_number=expression,
        soul_urge_number=soul_urge_number(name),
        personality_number=personality_number(name),
        life_path_number=life_path_number(birth_date),
        birth_day_number=birth_day_number(birth_date),
        grid=build_grid(birth_date, expression if fold_name_number else None),
    )


def get_comprehensive_numerology_profile(full_name: str, birth_date: str, birth_time: Optional[str] = None,
                                         birth_place: Optional[str] = None, desired_outcome: Optional[str] = None,
                                         suggested_name_expression_num: Optional[int] = None) -> Dict:
    """
    Full profile as served by the numerology service: core numbers with details,
    Lo Shu Grid, conceptual astro data, phonetic vibration, edge cases and compatibility.
    """
    expression_num, expression_details = calculate_expression_number_with_details(full_name)
    life_path_num, life_path_details = calculate_life_path_number_with_details(birth_date)
    soul_urge_num, soul_urge_details = calculate_soul_urge_number_with_details(full_name)
    personality_num, personality_details = calculate_personality_number_with_details(full_name)
    birth_day_num, birth_day_details = calculate_birth_day_number_with_details(birth_date)

    lo_shu_grid = calculate_lo_shu_grid_with_details(birth_date, suggested_name_expression_num)

    astro_info = get_conceptual_astrological_data(birth_date, birth_time, birth_place)
    astro_info['planetary_compatibility'] = check_planetary_compatibility(expression_num, astro_info)

    edge_cases = analyze_edge_cases({
        "expression_number": expression_num,
        "life_path_number": life_path_num,
        "birth_day_number": birth_day_num,
        "lo_shu_grid": lo_shu_grid,
        "life_path_details": life_path_details,
        "expression_details": expression_details,
    })

    logger.info(f"Computed profile for '{full_name}' ({birth_date}): expression={expression_num} life_path={life_path_num}")

    return {
        "full_name": full_name,
        "birth_date": birth_date,
        "birth_time": birth_time,
        "birth_place": birth_place,
        "desired_outcome": desired_outcome,
        "expression_number": expression_num,
        "expression_details": expression_details,
        "life_path_number": life_path_num,
        "life_path_details": life_path_details,
        "birth_day_number": birth_day_num,
        "birth_day_details": birth_day_details,
        "soul_urge_number": soul_urge_num,
        "soul_urge_details": soul_urge_details,
        "personality_number": personality_num,
        "personality_details": personality_details,
        "lo_shu_grid": lo_shu_grid,
        "astro_info": astro_info,
        "phonetic_vibration": get_phonetic_vibration_analysis(full_name),
        "edge_cases": edge_cases,
        "compatibility_insights": calculate_number_compatibility(expression_num, life_path_num),
        "profile_hash": hashlib.md5(f"{full_name}{birth_date}{birth_time}{birth_place}".encode()).hexdigest(),
    }
