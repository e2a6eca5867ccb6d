import re
import logging
from typing import Dict, List, Optional, Tuple

from .chaldean import (
    CHALDEAN_MAP,
    KARMIC_DEBT_NUMBERS,
    MASTER_NUMBERS,
    NUMBER_TO_PLANET_MAP,
    VOWELS,
    clean_name,
    get_chaldean_value,
    reduce_number,
)

logger = logging.getLogger(__name__)


# --- Name Metrics ---

def calculate_expression_number_with_details(full_name: str) -> Tuple[int, Dict]:
    """Calculates the Expression Number (all letters) with a letter breakdown and planetary ruler."""
    total = 0
    letter_breakdown = {}

    for letter in clean_name(full_name):
        value = get_chaldean_value(letter)
        if not value:
            continue
        total += value
        if letter not in letter_breakdown:
            letter_breakdown[letter] = {"value": value, "planet": NUMBER_TO_PLANET_MAP[value], "count": 0}
        letter_breakdown[letter]["count"] += 1

    reduced = reduce_number(total, preserve_masters=True)

    return reduced, {
        "total_before_reduction": total,
        "letter_breakdown": letter_breakdown,
        "is_master_number": reduced in MASTER_NUMBERS,
        "karmic_debt": total in KARMIC_DEBT_NUMBERS,
        "planetary_ruler": NUMBER_TO_PLANET_MAP.get(reduced, 'N/A'),
    }


def calculate_soul_urge_number_with_details(name: str) -> Tuple[int, Dict]:
    """Calculate soul urge (vowels only) using Chaldean map."""
    total = 0
    vowel_breakdown = {}

    for letter in clean_name(name):
        if letter in VOWELS:
            value = get_chaldean_value(letter)
            total += value
            vowel_breakdown[letter] = vowel_breakdown.get(letter, 0) + value

    reduced = reduce_number(total, preserve_masters=True)

    return reduced, {
        "total_before_reduction": total,
        "vowel_breakdown": vowel_breakdown,
        "is_master_number": reduced in MASTER_NUMBERS,
    }


def calculate_personality_number_with_details(name: str) -> Tuple[int, Dict]:
    """Calculate personality number (mapped consonants only) using Chaldean map."""
    total = 0
    consonant_breakdown = {}

    for letter in clean_name(name):
        if letter not in VOWELS and letter in CHALDEAN_MAP:
            value = CHALDEAN_MAP[letter]
            total += value
            consonant_breakdown[letter] = consonant_breakdown.get(letter, 0) + value

    reduced = reduce_number(total, preserve_masters=True)

    return reduced, {
        "total_before_reduction": total,
        "consonant_breakdown": consonant_breakdown,
        "is_master_number": reduced in MASTER_NUMBERS,
    }


def expression_number(name: str) -> int:
    return calculate_expression_number_with_details(name)[0]


def soul_urge_number(name: str) -> int:
    return calculate_soul_urge_number_with_details(name)[0]


def personality_number(name: str) -> int:
    return calculate_personality_number_with_details(name)[0]


def first_name_value(name: str) -> int:
    """Value of the first word of the name, reduced without master preference."""
    words = clean_name(name).split()
    if not words:
        return 0
    return reduce_number(sum(get_chaldean_value(char) for char in words[0]), preserve_masters=False)


def check_karmic_debt(full_name: str) -> List[int]:
    """
    Checks for karmic debt numbers based on the unreduced sum of the name's Chaldean values.
    Returns a list of karmic debt numbers found.
    """
    total_unreduced = sum(get_chaldean_value(char) for char in clean_name(full_name))
    return [total_unreduced] if total_unreduced in KARMIC_DEBT_NUMBERS else []


# --- Date Metrics ---

def _date_parts(birth_date_str: str) -> Optional[Tuple[int, int, int]]:
    try:
        year, month, day = (int(part) for part in (birth_date_str or '').split('-'))
    except ValueError:
        return None
    return year, month, day


def calculate_life_path_number_with_details(birth_date_str: str) -> Tuple[int, Dict]:
    """
    Calculate Life Path Number by adding all digits of the complete birth date.
    Master Numbers (11, 22, 33) are NOT reduced. Returns 0 when the date has no digits.
    """
    digits = re.sub(r'[^0-9]', '', birth_date_str or '')
    total_sum_all_digits = sum(int(d) for d in digits)
    final_number = reduce_number(total_sum_all_digits, preserve_masters=True)

    details = {
        "total_sum_all_digits_before_reduction": total_sum_all_digits,
        "is_master_number": final_number in MASTER_NUMBERS,
    }

    parts = _date_parts(birth_date_str)
    if parts is None:
        logger.warning(f"Birth date '{birth_date_str}' is not in YYYY-MM-DD form; karmic components skipped.")
        details["karmic_debt_in_components"] = []
        if not digits:
            details["error"] = "Invalid birth date format. Please use YYYY-MM-DD."
        return final_number, details

    year, month, day = parts
    details.update({
        "original_month": month,
        "original_day": day,
        "original_year": year,
        "karmic_debt_in_components": sorted({n for n in (month, day) if n in KARMIC_DEBT_NUMBERS}),
    })
    return final_number, details


def calculate_birth_day_number_with_details(birth_date_str: str) -> Tuple[int, Dict]:
    """
    Calculates the Birth Day Number from the day of birth.
    Master Numbers (11, 22, 33) are NOT reduced.
    Example: 25th = 2+5=7. 11th = 11.
    """
    if not birth_date_str:
        return 0, {"error": "No birth date provided."}
    try:
        day = int(birth_date_str.split('-')[2])
        if not (1 <= day <= 31):
            raise ValueError("Day must be between 1 and 31.")
    except (ValueError, IndexError) as e:
        logger.error(f"Error calculating Birth Day Number for {birth_date_str}: {e}")
        return 0, {"error": f"Invalid birth day: {e}"}

    reduced_day = reduce_number(day, preserve_masters=True)
    return reduced_day, {
        "original_day": day,
        "is_master_number": reduced_day in MASTER_NUMBERS,
    }


def life_path_number(birth_date_str: str) -> int:
    return calculate_life_path_number_with_details(birth_date_str)[0]


def birth_day_number(birth_date_str: str) -> int:
    return calculate_birth_day_number_with_details(birth_date_str)[0]
