import re
from types import MappingProxyType

# Chaldean letter values. 9 is sacred and never assigned to a letter.
CHALDEAN_MAP = MappingProxyType({
    'A': 1, 'I': 1, 'J': 1, 'Q': 1, 'Y': 1,
    'B': 2, 'K': 2, 'R': 2,
    'C': 3, 'G': 3, 'L': 3, 'S': 3,
    'D': 4, 'M': 4, 'T': 4,
    'E': 5, 'H': 5, 'N': 5, 'X': 5,
    'U': 6, 'V': 6, 'W': 6,
    'O': 7, 'Z': 7,
    'F': 8, 'P': 8,
})

MASTER_NUMBERS = frozenset({11, 22, 33})
KARMIC_DEBT_NUMBERS = frozenset({13, 14, 16, 19})
VOWELS = frozenset('AEIOU')

NUMBER_TO_PLANET_MAP = {
    1: 'Sun (☉)', 2: 'Moon (☽)', 3: 'Jupiter (♃)', 4: 'Rahu (☊)',
    5: 'Mercury (☿)', 6: 'Venus (♀)', 7: 'Ketu / Neptune (☋)', 8: 'Saturn (♄)',
    9: 'Mars (♂)',
    11: 'Higher Moon / Spiritual Insight', 22: 'Higher Rahu / Master Builder', 33: 'Higher Jupiter / Master Healer',
}


def clean_name(name: str) -> str:
    """Removes non-alphabetic characters (spaces are kept) and converts to uppercase."""
    return re.sub(r'[^a-zA-Z\s]', '', name or '').upper()


def get_chaldean_value(char: str) -> int:
    """Returns the Chaldean value for a single character, 0 when it has none."""
    return CHALDEAN_MAP.get(char.upper(), 0)


def digit_sum(number: int) -> int:
    return sum(int(digit) for digit in str(number))


def reduce_number(number: int, preserve_masters: bool = True) -> int:
    """
    Reduces a number to a single digit, keeping Master Numbers (11, 22, 33).

    The loop always stops on a Master Number, so ``preserve_masters=False``
    does not force a single digit: 29 reduces to 11 and 11 stays 11 either
    way. Lo Shu Grid folding depends on this behaviour; a master value it
    receives is simply not tallied.
    """
    if preserve_masters and number in MASTER_NUMBERS:
        return number

    while number > 9 and number not in MASTER_NUMBERS:
        number = digit_sum(number)
    return number
