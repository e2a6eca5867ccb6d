import random
import hashlib
import logging
from typing import Any, Dict, Optional

from .chaldean import NUMBER_TO_PLANET_MAP

logger = logging.getLogger(__name__)

PLANETS = ['Sun (☉)', 'Moon (☽)', 'Mars (♂)', 'Mercury (☿)', 'Jupiter (♃)', 'Venus (♀)', 'Saturn (♄)', 'Rahu (☊)', 'Ketu (☋)']

# Birth hour (closest even hour) -> Ascendant sign and ruler.
ASCENDANT_BY_HOUR = {
    0: ("Capricorn", "Saturn (♄)"), 2: ("Aquarius", "Saturn (♄)"),
    4: ("Pisces", "Jupiter (♃)"), 6: ("Aries", "Mars (♂)"),
    8: ("Taurus", "Venus (♀)"), 10: ("Gemini", "Mercury (☿)"),
    12: ("Cancer", "Moon (☽)"), 14: ("Leo", "Sun (☉)"),
    16: ("Virgo", "Mercury (☿)"), 18: ("Libra", "Venus (♀)"),
    20: ("Scorpio", "Mars (♂)"), 22: ("Sagittarius", "Jupiter (♃)"),
}

MOON_SIGN_BY_INDEX = {
    1: ("Aries", "Mars (♂)"), 2: ("Taurus", "Venus (♀)"), 3: ("Gemini", "Mercury (☿)"),
    4: ("Cancer", "Moon (☽)"), 5: ("Leo", "Sun (☉)"), 6: ("Virgo", "Mercury (☿)"),
    7: ("Libra", "Venus (♀)"), 8: ("Scorpio", "Mars (♂)"), 9: ("Sagittarius", "Jupiter (♃)"),
    10: ("Capricorn", "Saturn (♄)"), 11: ("Aquarius", "Saturn (♄)"), 12: ("Pisces", "Jupiter (♃)"),
}

FAVORABLE_BY_ASCENDANT_RULER = {
    'Sun (☉)': [1], 'Moon (☽)': [2], 'Jupiter (♃)': [3], 'Rahu (☊)': [4],
    'Mercury (☿)': [5], 'Venus (♀)': [6], 'Ketu / Neptune (☋)': [7],
    'Saturn (♄)': [8], 'Mars (♂)': [9],
}

# (ascendant ruler, expression numbers, severity)
ASCENDANT_CONFLICTS = [
    ('Sun (☉)', {4, 8}, "Conflict"),
    ('Moon (☽)', {8}, "Conflict"),
    ('Jupiter (♃)', {4, 8}, "Caution"),
    ('Mercury (☿)', {4, 8}, "Caution"),
    ('Venus (♀)', {8}, "Caution"),
    ('Ketu / Neptune (☋)', {9}, "Caution"),
]

# Expression number -> (chart planet, positive note, cautionary note)
PLANET_INFLUENCES = {
    1: ('Sun (☉)', "enhancing leadership and vitality", "ego challenges or difficulties in asserting yourself"),
    2: ('Moon (☽)', "enhancing intuition and emotional balance", "emotional volatility"),
    3: ('Jupiter (♃)', "enhancing creativity and wisdom", None),
    5: ('Mercury (☿)', "enhancing communication and adaptability", "instability or communication issues"),
    6: ('Venus (♀)', "enhancing harmony, love, and artistic expression", "challenges in relationships or domestic life"),
    7: ('Moon (☽)', "enhancing intuition and spiritual insight", "emotional volatility"),
    8: ('Saturn (♄)', None, "amplified delays and obstacles"),
    9: ('Mars (♂)', "enhancing courage and drive for humanitarian action", "aggressive or conflict-prone energy"),
}


def _chart_rng(birth_date: str, birth_time: Optional[str], birth_place: Optional[str]) -> random.Random:
    seed = hashlib.md5(f"{birth_date}|{birth_time}|{birth_place}".encode()).hexdigest()
    return random.Random(seed)


def get_conceptual_astrological_data(birth_date: str, birth_time: Optional[str], birth_place: Optional[str]) -> Dict[str, Any]:
    """
    Generates conceptual astrological data.
    The planetary lords are simulated from a seed derived from the birth data,
    so the same person always gets the same chart.
    """
    logger.warning("Astrological integration is conceptual. Providing simplified data.")

    ascendant_sign, ascendant_ruler = "Not Calculated", "N/A"
    moon_sign, moon_ruler = "Not Calculated", "N/A"

    if birth_time:
        try:
            birth_hour = int(birth_time.split(':')[0])
            closest_hour = min(ASCENDANT_BY_HOUR, key=lambda h: abs(h - birth_hour))
            ascendant_sign, ascendant_ruler = ASCENDANT_BY_HOUR[closest_hour]
        except (ValueError, IndexError):
            pass  # Keep defaults if parsing fails

    try:
        month = int(birth_date.split('-')[1])
        moon_sign, moon_ruler = MOON_SIGN_BY_INDEX[month % 12 + 1]
    except (ValueError, IndexError, AttributeError):
        pass

    rng = _chart_rng(birth_date, birth_time, birth_place)
    planetary_lords = [
        {
            "planet": planet,
            "nature": rng.choice(['Benefic', 'Malefic', 'Neutral']),
            "degree": f"{rng.randint(0, 29)}° {rng.randint(0, 59)}'",
        }
        for planet in PLANETS
    ]

    return {
        "ascendant_info": {
            "sign": ascendant_sign,
            "ruler": ascendant_ruler,
            "notes": "Conceptual calculation based on birth hour. For precise astrological readings, consult a professional astrologer.",
        },
        "moon_sign_info": {
            "sign": moon_sign,
            "ruler": moon_ruler,
            "notes": "Conceptual calculation based on birth month. For precise astrological readings, consult a professional astrologer.",
        },
        "planetary_lords": planetary_lords,
        "planetary_compatibility": {
            "expression_planet": "N/A",
            "compatibility_flags": [],
        },
    }


def _has_lord(planetary_lords, planet: str, nature: str) -> bool:
    return any(p.get('planet') == planet and p.get('nature') == nature for p in planetary_lords)


def check_planetary_compatibility(expression_number: int, astro_info: Dict) -> Dict:
    """Checks the expression number's planetary ruler against the conceptual chart."""
    expression_planet = NUMBER_TO_PLANET_MAP.get(expression_number)
    ascendant_info = astro_info.get('ascendant_info', {}) or {}
    planetary_lords = astro_info.get('planetary_lords', []) or []
    ascendant_ruler = ascendant_info.get('ruler')
    ascendant_sign = ascendant_info.get('sign', 'N/A')

    flags = []

    if ascendant_ruler and ascendant_ruler not in ("Not Calculated", "N/A"):
        if expression_number in FAVORABLE_BY_ASCENDANT_RULER.get(ascendant_ruler, []):
            if expression_number in (4, 8, 9):
                flags.append(f"Expression {expression_number} ({expression_planet}) aligns with {ascendant_ruler}-ruled Ascendant ({ascendant_sign}), but requires careful consideration or strong chart support.")
            else:
                flags.append(f"Expression {expression_number} ({expression_planet}) harmonizes well with your Ascendant ruler ({ascendant_ruler}), amplifying positive traits.")

        for ruler, numbers, severity in ASCENDANT_CONFLICTS:
            if ascendant_ruler == ruler and expression_number in numbers:
                flags.append(f"{severity}: Expression {expression_number} ({expression_planet}) may conflict with a {ruler}-ruled Ascendant ({ascendant_sign}).")

    influence = PLANET_INFLUENCES.get(expression_number)
    if influence:
        planet, positive, negative = influence
        if positive and _has_lord(planetary_lords, planet, 'Benefic'):
            flags.append(f"Strong alignment: Expression {expression_number} is amplified by a favored {planet}, {positive}.")
        if negative and _has_lord(planetary_lords, planet, 'Malefic'):
            flags.append(f"Caution: Expression {expression_number} may bring {negative} if your conceptual chart indicates a malefic {planet}.")

    return {
        "expression_planet": expression_planet,
        "compatibility_flags": flags,
    }
