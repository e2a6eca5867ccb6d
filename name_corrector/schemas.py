from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Pydantic Schemas for Output Parsing ---
class NameSuggestion(BaseModel):
    name: str = Field(description="The suggested full name variation.")
    rationale: str = Field(description="Detailed explanation for the suggested name, including numerological advantages and energetic transformation.")
    expression_number: int = Field(description="The calculated Expression Number for the suggested name.")


class NameSuggestionsOutput(BaseModel):
    suggestions: List[NameSuggestion] = Field(description="A list of suggested name variations.")
    reasoning: str = Field(description="Overall reasoning for the name suggestion strategy.")


# --- Wire Schemas ---
class ClientProfile(BaseModel):
    """
    Profile returned by ``/initial_suggestions``.

    Only the identity fields are required. Astrological, phonetic and other
    annotations are kept as extra fields and sent back to the service as-is.
    """
    model_config = ConfigDict(extra='allow')

    full_name: str
    birth_date: str
    birth_time: Optional[str] = None
    birth_place: Optional[str] = None
    desired_outcome: Optional[str] = None
    expression_number: Optional[int] = None
    life_path_number: Optional[int] = None
    birth_day_number: Optional[int] = None
    soul_urge_number: Optional[int] = None
    personality_number: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')


class InitialSuggestionsResult(BaseModel):
    profile_data: ClientProfile
    suggestions: List[NameSuggestion] = Field(default_factory=list)
    reasoning: str = ''


class NameValidationResult(BaseModel):
    suggested_name: str
    is_valid: bool
    rationale: str
    expression_number: Optional[int] = None
    first_name_value: Optional[int] = None
    soul_urge_number: Optional[int] = None
    personality_number: Optional[int] = None
    karmic_debt_present: bool = False
