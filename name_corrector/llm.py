import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI

from .config import Settings
from .errors import LLMUnavailableError, SuggestionGenerationError
from .metrics import calculate_expression_number_with_details
from .prompts import (
    ADVANCED_REPORT_HUMAN_PROMPT,
    ADVANCED_REPORT_SYSTEM_PROMPT,
    GENERAL_CHAT_SYSTEM_PROMPT,
    NAME_SUGGESTION_HUMAN_PROMPT,
    NAME_SUGGESTION_SYSTEM_PROMPT,
    NAME_VALIDATION_CHAT_SYSTEM_PROMPT,
)
from .schemas import NameSuggestionsOutput

logger = logging.getLogger(__name__)


# --- LLM Manager ---
class LLMManager:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.llm = None
        self.creative_llm = None
        self._initialize_llms()

    def _initialize_llms(self):
        google_api_key = self.settings.google_api_key

        if not google_api_key:
            logger.error("GOOGLE_API_KEY environment variable not set.")
            raise LLMUnavailableError("GOOGLE_API_KEY is not set. Please set it to use the Generative AI models.")

        try:
            model = self.settings.gemini_model
            self.llm = ChatGoogleGenerativeAI(model=model, google_api_key=google_api_key, temperature=0.7)
            self.creative_llm = ChatGoogleGenerativeAI(model=model, google_api_key=google_api_key, temperature=0.9)
            logger.info(f"All LLM instances initialized successfully ({model}).")
        except Exception as e:
            logger.error(f"Failed to initialize LLM instances: {e}")
            raise LLMUnavailableError(f"Failed to initialize LLM instances: {e}") from e


def _message_text(message: Any) -> str:
    content = getattr(message, 'content', message)
    if isinstance(content, list):
        return "".join(part if isinstance(part, str) else part.get('text', '') for part in content)
    return str(content)


# --- Name Suggestion Engine ---
class NameSuggestionEngine:
    OUTCOME_TARGETS = {
        'career': [1, 3, 5, 8, 22],
        'success': [1, 3, 5, 8, 22],
        'wealth': [5, 6, 8, 22],
        'love': [2, 6, 9, 33],
        'relationship': [2, 6, 9, 33],
        'health': [3, 5, 6, 9],
        'spiritual': [7, 9, 11, 33],
    }

    @staticmethod
    def determine_target_numbers_for_outcome(desired_outcome: Optional[str] = None) -> List[int]:
        """
        Optimal Expression Numbers for the desired outcome; without a recognised
        outcome, the set for general well-being and balance.
        """
        outcome = (desired_outcome or '').lower()
        targets = set()
        for keyword, numbers in NameSuggestionEngine.OUTCOME_TARGETS.items():
            if keyword in outcome:
                targets.update(numbers)
        return sorted(targets or {1, 3, 5, 6, 8, 9, 11, 22, 33})

    @staticmethod
    async def generate_name_suggestions(llm_instance, original_full_name: str, target_expression_numbers: List[int],
                                        desired_outcome: Optional[str] = None) -> NameSuggestionsOutput:
        """
        Generates name suggestions using the LLM and then recalculates Expression Numbers
        using the backend's numerology logic for accuracy.
        """
        pydantic_parser = PydanticOutputParser(pydantic_object=NameSuggestionsOutput)

        prompt = ChatPromptTemplate.from_messages([
            SystemMessage(content=NAME_SUGGESTION_SYSTEM_PROMPT.format(parser_instructions=pydantic_parser.get_format_instructions())),
            HumanMessage(content=NAME_SUGGESTION_HUMAN_PROMPT.format(
                original_full_name=original_full_name,
                target_expression_numbers=target_expression_numbers,
                desired_outcome=desired_outcome or "General well-being and balance",
            )),
        ])
        chain = prompt | llm_instance | pydantic_parser

        try:
            logger.info("Generating name suggestions.")
            output = await chain.ainvoke({})
        except Exception as e:
            logger.error(f"LLM Name Suggestion Generation Error: {e}", exc_info=True)
            raise SuggestionGenerationError(f"Failed to generate name suggestions: {e}") from e

        # The model's arithmetic is never trusted.
        for suggestion in output.suggestions:
            suggestion.expression_number, _ = calculate_expression_number_with_details(suggestion.name)

        logger.info(f"Generated {len(output.suggestions)} name suggestion(s).")
        return output


async def generate_report_markdown(llm_instance, profile_details: Mapping[str, Any]) -> str:
    """Asks the model for the full report in Markdown."""
    llm_input_data = json.dumps(profile_details, indent=2, default=str)
    report_prompt = ChatPromptTemplate.from_messages([
        SystemMessage(content=ADVANCED_REPORT_SYSTEM_PROMPT),
        HumanMessage(content=ADVANCED_REPORT_HUMAN_PROMPT.format(llm_input_data=llm_input_data)),
    ])
    report_chain = report_prompt | llm_instance

    logger.info("Calling LLM for report generation...")
    response = await report_chain.ainvoke({})
    logger.info("LLM report generation complete.")
    return _message_text(response)


def build_chat_messages(mode: str, message: str, client_profile: Optional[Dict[str, Any]] = None,
                        target_name: Optional[str] = None, history: Iterable[Mapping[str, str]] = (),
                        window: int = 5) -> List[BaseMessage]:
    """System prompt, the last ``window`` exchanges of history, then the new message."""
    if mode == 'name_validation':
        target_expression, _ = calculate_expression_number_with_details(target_name or '')
        system = NAME_VALIDATION_CHAT_SYSTEM_PROMPT.format(
            client_profile=json.dumps(client_profile or {}, indent=2, default=str),
            target_name=target_name,
            target_expression_number=target_expression,
        )
    else:
        system = GENERAL_CHAT_SYSTEM_PROMPT

    messages: List[BaseMessage] = [SystemMessage(content=system)]
    recent = list(history)[-2 * window:] if window > 0 else []
    for turn in recent:
        if turn.get('role') == 'assistant':
            messages.append(AIMessage(content=turn.get('content', '')))
        else:
            messages.append(HumanMessage(content=turn.get('content', '')))
    messages.append(HumanMessage(content=message))
    return messages


async def generate_chat_response(llm_instance, messages: List[BaseMessage]) -> str:
    response = await llm_instance.ainvoke(messages)
    return _message_text(response)
