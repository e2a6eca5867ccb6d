"""
Chaldean name-correction rules used by the numerology service.

The strict filter decides which model suggestions reach the client; the
rule-based validator produces the authoritative YES/NO and rationale for a
single (possibly user-edited) name.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from .astro import check_planetary_compatibility
from .chaldean import KARMIC_DEBT_NUMBERS, MASTER_NUMBERS, NUMBER_TO_PLANET_MAP
from .grid import calculate_lo_shu_grid_with_details
from .metrics import calculate_expression_number_with_details
from .phonetics import get_phonetic_vibration_analysis

logger = logging.getLogger(__name__)

LUCKY_NAME_NUMBERS = frozenset({1, 3, 5, 6, 9, 11, 22, 33})
UNLUCKY_NAME_NUMBERS = frozenset({4, 8})

EXPRESSION_COMPATIBILITY_MAP = {
    1: [1, 3, 5, 6],
    2: [2, 4, 6, 9],
    3: [1, 3, 5, 6, 9],
    4: [1, 5, 6],
    5: [1, 3, 5, 6, 9],
    6: [3, 5, 6, 9],
    7: [1, 5, 6, 9],
    8: [1, 3, 5, 6],
    9: [3, 6, 9],
    11: [2, 6, 11, 22],
    22: [4, 6, 8, 22],
    33: [6, 9, 33],
}

# Master expression -> the single digit that grounds it.
MASTER_GROUNDING = {11: 2, 22: 4, 33: 6}

COMPATIBILITY_SCORES = {
    (1, 1): 0.9, (1, 2): 0.6, (1, 3): 0.9, (1, 4): 0.5, (1, 5): 0.8,
    (1, 6): 0.7, (1, 7): 0.4, (1, 8): 0.9, (1, 9): 0.7, (1, 11): 0.85, (1, 22): 0.8, (1, 33): 0.75,
    (2, 2): 0.9, (2, 3): 0.7, (2, 4): 0.8, (2, 5): 0.5, (2, 6): 0.9,
    (2, 7): 0.8, (2, 8): 0.6, (2, 9): 0.8, (2, 11): 0.95, (2, 22): 0.85, (2, 33): 0.9,
    (3, 3): 0.9, (3, 4): 0.6, (3, 5): 0.9, (3, 6): 0.8, (3, 7): 0.7,
    (3, 8): 0.7, (3, 9): 0.9, (3, 11): 0.75, (3, 22): 0.65, (3, 33): 0.85,
    (4, 4): 0.9, (4, 5): 0.6, (4, 6): 0.8, (4, 7): 0.9, (4, 8): 0.7,
    (4, 9): 0.6, (4, 11): 0.7, (4, 22): 0.95, (4, 33): 0.75,
    (5, 5): 0.9, (5, 6): 0.6, (5, 7): 0.8, (5, 8): 0.7, (5, 9): 0.7,
    (5, 11): 0.8, (5, 22): 0.7, (5, 33): 0.6,
    (6, 6): 0.9, (6, 7): 0.7, (6, 8): 0.8, (6, 9): 0.9, (6, 11): 0.9,
    (6, 22): 0.8, (6, 33): 0.95,
    (7, 7): 0.9, (7, 8): 0.6, (7, 9): 0.8, (7, 11): 0.95, (7, 22): 0.85, (7, 33): 0.9,
    (8, 8): 0.9, (8, 9): 0.7, (8, 11): 0.7, (8, 22): 0.95, (8, 33): 0.8,
    (9, 9): 0.9, (9, 11): 0.8, (9, 22): 0.7, (9, 33): 0.95,
    (11, 11): 0.95, (11, 22): 0.85, (11, 33): 0.9,
    (22, 22): 0.95, (22, 33): 0.9,
    (33, 33): 0.95,
}


def is_lucky_number(num: int) -> bool:
    return num in LUCKY_NAME_NUMBERS


def is_karmic_debt_number(num: int) -> bool:
    return num in KARMIC_DEBT_NUMBERS


def _suggestion_name(suggestion: Union[str, Mapping[str, Any]]) -> str:
    if isinstance(suggestion, str):
        return suggestion
    return suggestion.get('name', '')


def filter_strictly_valid_suggestions(suggestions: Iterable, life_path_number: int, birth_day_number: int) -> List:
    """
    Keeps the suggestions (names or dicts with a 'name') whose Expression Number
    is lucky, not a karmic debt total, and compatible with the Life Path or Birth Day.
    """
    filtered = []
    for suggestion in suggestions:
        expression, details = calculate_expression_number_with_details(_suggestion_name(suggestion))
        if not expression:
            continue

        is_compatible = (
            expression in EXPRESSION_COMPATIBILITY_MAP.get(life_path_number, []) or
            expression in EXPRESSION_COMPATIBILITY_MAP.get(birth_day_number, [])
        )
        if is_lucky_number(expression) and not is_karmic_debt_number(details['total_before_reduction']) and is_compatible:
            filtered.append(suggestion)

    logger.info(f"Strict filter kept {len(filtered)} suggestion(s).")
    return filtered


def calculate_number_compatibility(expression: int, life_path: int) -> Dict:
    """Calculate compatibility between expression and life path numbers"""
    key = tuple(sorted((expression, life_path)))
    score = COMPATIBILITY_SCORES.get(key, 0.6)

    if score > 0.85:
        label, synergy_areas = 'highly harmonious', ["Exceptional harmony", "Powerful synergy", "Accelerated growth"]
    elif score > 0.7:
        label, synergy_areas = 'strong', ["Strong compatibility", "Complementary strengths", "Mutual support"]
    elif score > 0.5:
        label, synergy_areas = 'moderate', ["Moderate compatibility", "Growth opportunities", "Dynamic balance"]
    else:
        label, synergy_areas = 'challenging', ["Learning experiences", "Character building", "Potential friction points"]

    return {
        "compatibility_score": score,
        "synergy_areas": synergy_areas,
        "description": f"Your Expression Number {expression} and Life Path {life_path} create a {label} compatibility.",
    }


def analyze_edge_cases(profile_data: Dict) -> List[Dict]:
    """Identifies challenging numerological combinations in a computed profile."""
    edge_cases = []

    expression_number = profile_data.get('expression_number')
    life_path_number = profile_data.get('life_path_number')
    birth_day_number = profile_data.get('birth_day_number')
    lo_shu_grid = profile_data.get('lo_shu_grid', {})

    if expression_number == 8 and life_path_number == 1:
        edge_cases.append({
            "type": "Expression 8 / Life Path 1 Conflict (Saturn vs. Sun)",
            "description": "Saturn's discipline (8) can clash with the Sun's leadership (1), bringing delays to authority and recognition.",
            "resolution_guidance": "A name with Expression 1, 3, 5, or 6 harmonizes better with Life Path 1.",
        })

    if expression_number in MASTER_NUMBERS and life_path_number == 4:
        edge_cases.append({
            "type": f"Master Expression {expression_number} / Life Path 4 Challenge (Vision vs. Structure)",
            "description": f"The visionary energy of Master Number {expression_number} can feel constrained by the structured Life Path 4.",
            "resolution_guidance": "Ground large goals into small, actionable steps.",
        })

    if expression_number == 4 and birth_day_number == 4:
        edge_cases.append({
            "type": "Double 4 (Expression & Birth Day Number - Amplified Karma)",
            "description": "Both numbers at 4 amplify lessons of hard work and rigidity.",
            "resolution_guidance": "Astrological validation is recommended before adopting this name.",
        })

    for digit, quality in ((5, "adaptability"), (6, "harmony and responsibility")):
        if expression_number == digit and not lo_shu_grid.get(f'has_{digit}'):
            edge_cases.append({
                "type": f"Expression {digit} with Missing {digit} in Lo Shu Grid",
                "description": f"The birth date lacks {digit}, so the {quality} of Expression {digit} takes conscious effort to integrate.",
                "resolution_guidance": f"Work deliberately on {quality}; the name supports but does not replace it.",
            })

    karmic_debts = set(profile_data.get('life_path_details', {}).get('karmic_debt_in_components', []))
    expression_total = profile_data.get('expression_details', {}).get('total_before_reduction')
    if expression_total in KARMIC_DEBT_NUMBERS:
        karmic_debts.add(expression_total)
    if karmic_debts:
        edge_cases.append({
            "type": f"Karmic Debt Numbers Present: {', '.join(map(str, sorted(karmic_debts)))}",
            "description": "These numbers indicate recurring lessons until they are learned.",
            "resolution_guidance": "13 asks for hard work, 14 for adaptability, 16 for humility, 19 for independence.",
        })

    return edge_cases


def _is_master_supported(expression: int, life_path: Any, birth_day: Any) -> bool:
    grounding = MASTER_GROUNDING.get(expression)
    return any(core in MASTER_NUMBERS or core == grounding for core in (life_path, birth_day))


def validate_suggested_name_rules(suggested_name: str, client_profile: Dict) -> Tuple[bool, str]:
    """
    Performs a rule-based validation for a single suggested name.
    Returns (is_valid: bool, rationale: str).
    """
    is_valid = True
    reasons = []

    suggested_exp_num, suggested_exp_details = calculate_expression_number_with_details(suggested_name)
    life_path_num = client_profile.get('life_path_number')
    birth_day_num = client_profile.get('birth_day_number')

    # Birth-date grid only: folding the candidate's own number in would hide the gap it is meant to fill.
    lo_shu_grid_data = calculate_lo_shu_grid_with_details(client_profile.get('birth_date', ''))
    planetary_compatibility = check_planetary_compatibility(suggested_exp_num, client_profile.get('astro_info', {}) or {})

    # Rule 1: Master Numbers need a supporting Life Path or Birth Day
    if suggested_exp_num in MASTER_NUMBERS:
        if _is_master_supported(suggested_exp_num, life_path_num, birth_day_num):
            reasons.append(f"Master Expression {suggested_exp_num} is well-supported by your core numbers.")
        else:
            is_valid = False
            reasons.append(f"Master Expression {suggested_exp_num} is hard to embody without a supporting Master Life Path or Birth Day.")

    # Rule 2: Karmic Debt totals are avoided
    total = suggested_exp_details['total_before_reduction']
    if total in KARMIC_DEBT_NUMBERS:
        is_valid = False
        reasons.append(f"The unreduced total ({total}) is a Karmic Debt Number and should be avoided as an Expression.")

    # Rule 3: Lo Shu Grid balance
    if suggested_exp_num in lo_shu_grid_data['missing_numbers']:
        reasons.append(f"Expression {suggested_exp_num} balances the missing {suggested_exp_num} in your Lo Shu Grid.")
    if suggested_exp_num == 8 and not lo_shu_grid_data['has_8']:
        is_valid = False
        reasons.append("Expression 8 is problematic when 8 is missing from your Lo Shu Grid.")

    # Rule 4: Astrological compatibility (conceptual)
    for flag in planetary_compatibility['compatibility_flags']:
        lowered = flag.lower()
        if "conflict" in lowered or "caution" in lowered:
            is_valid = False
            reasons.append(f"Astrological concern: {flag}")
        elif "strong alignment" in lowered or "harmonizes well" in lowered:
            reasons.append(f"Astrological alignment: {flag}")

    # Rule 5: Phonetic vibration
    phonetic_analysis = get_phonetic_vibration_analysis(suggested_name)
    if phonetic_analysis['is_harmonious']:
        reasons.append(f"Phonetic vibration is harmonious. {phonetic_analysis['qualitative_description']}")
    else:
        is_valid = False
        reasons.append(f"Phonetic vibration concern: {phonetic_analysis['qualitative_description']}")

    if is_valid:
        planet = NUMBER_TO_PLANET_MAP.get(suggested_exp_num, 'N/A')
        reasons.insert(0, f"Expression {suggested_exp_num} ({planet}) is numerologically sound for this profile.")

    logger.info(f"Validated '{suggested_name}': expression={suggested_exp_num} valid={is_valid}")
    return is_valid, " ".join(reasons).strip()
