import re
import logging
from typing import Any, Dict

from .chaldean import VOWELS, clean_name

logger = logging.getLogger(__name__)

HARSH_COMBINATIONS = ["TH", "SH", "CH", "GH", "PH", "CK", "TCH", "DGE", "GHT", "STR", "SCR", "SPL"]


def get_phonetic_vibration_analysis(full_name: str) -> Dict[str, Any]:
    """
    Performs a conceptual phonetic vibration analysis.
    Scores vowel balance and harsh consonant clusters; 0.65 is the harmony threshold.
    """
    cleaned_name = clean_name(full_name).replace(" ", "")

    vowel_count = sum(1 for char in cleaned_name if char in VOWELS)

    vibration_score = 0.7
    vibration_notes = []
    description = []

    if len(cleaned_name) < 4:
        vibration_notes.append("Very short names may have less complex vibrational patterns.")
        description.append("The name is concise and direct.")

    if cleaned_name:
        vowel_ratio = vowel_count / len(cleaned_name)
        if vowel_ratio < 0.3 or vowel_ratio > 0.6:
            vibration_notes.append(f"Vowel-to-consonant balance ({vowel_ratio:.2f} vowel ratio) might affect the pleasantness of the flow.")
            vibration_score -= 0.1
            if vowel_ratio < 0.3:
                description.append("Its sound is more consonant-heavy, lending it a grounded and perhaps assertive quality.")
            else:
                description.append("Its sound is more vowel-heavy, giving it a flowing and open quality.")

    harsh_flags = [combo for combo in HARSH_COMBINATIONS if combo in cleaned_name]
    if harsh_flags:
        vibration_notes.append(f"Contains potentially harsh consonant combinations: {', '.join(harsh_flags)}.")
        vibration_score -= 0.2
        description.append("Some phonetic combinations might create a strong or slightly abrupt impression.")

    if re.search(r'(AA|EE|II|OO|UU)', cleaned_name):
        vibration_notes.append("Repeated consecutive vowels might create a drawn-out or emphasized sound.")
        description.append("The repeated vowels give it a sustained and perhaps melodious feel.")
        vibration_score -= 0.05

    if not vibration_notes:
        description = ["The name appears to have a harmonious and balanced phonetic vibration with a pleasant flow."]
        vibration_score = 0.9

    return {
        "score": round(max(0.1, min(1.0, vibration_score)), 2),
        "notes": vibration_notes,
        "is_harmonious": vibration_score > 0.65,
        "qualitative_description": " ".join(description),
    }
