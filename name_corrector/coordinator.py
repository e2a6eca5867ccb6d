"""
Candidate-name editing and validation.

A ``ValidationSession`` owns the client profile, the candidate entries and the
confirmed names. Every keystroke recomputes the local numbers at once; the
authoritative YES/NO comes from the numerology service after a quiet period.
Each entry carries a request token, and a response is only written if the
token it was sent with is still current.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, List, Optional, Protocol, Set, Union

from .config import Settings
from .metrics import expression_number
from .profile import NumericProfile, build_numeric_profile
from .schemas import ClientProfile, NameSuggestion

logger = logging.getLogger(__name__)

CUSTOM_NAME_RATIONALE = "Custom name, rationale will be generated with report if confirmed."
CUSTOM_FIELD_KEY = 'custom'


class NameValidator(Protocol):
    async def validate_name(self, suggested_name: str, client_profile: Dict[str, Any]) -> Any:
        """Returns an object with ``is_valid`` and ``rationale`` attributes."""


@dataclass(frozen=True)
class ValidationOutcome:
    is_valid: bool
    rationale: str


@dataclass(frozen=True)
class ConfirmedName:
    name: str
    expression_number: int
    rationale: str
    is_valid: bool

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "expression_number": self.expression_number,
            "rationale": self.rationale,
            "is_valid": self.is_valid,
        }


@dataclass(frozen=True)
class Notice:
    kind: str
    message: str


@dataclass
class CandidateEntry:
    original_name: str
    name: str
    expression_number: int
    rationale: str
    edited_name: str = ''
    is_editing: bool = False
    local_metrics: Optional[NumericProfile] = None
    remote_validation: Optional[ValidationOutcome] = None
    is_valid: Optional[bool] = None
    confirmed: bool = False
    token: int = field(default=0, repr=False)
    in_flight_token: Optional[int] = field(default=None, repr=False)


class Debouncer:
    """Coalesces bursts of calls per key into one trailing call after ``delay`` seconds."""

    def __init__(self, delay: float):
        self.delay = delay
        self._pending: Dict[Hashable, asyncio.Task] = {}
        self._running: Set[asyncio.Task] = set()

    def schedule(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> None:
        """Must be called from a running event loop."""
        self.cancel(key)
        self._pending[key] = asyncio.get_running_loop().create_task(self._fire(key, factory))

    async def _fire(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.current_task()
        if self._pending.get(key) is task:
            del self._pending[key]
        # Once fired, a call is no longer cancellable.
        self._running.add(task)
        try:
            await factory()
        finally:
            self._running.discard(task)

    def fire_now(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> None:
        """Drops a pending call for ``key`` and starts ``factory`` at once. Must be called from a running event loop."""
        self.cancel(key)
        task = asyncio.get_running_loop().create_task(factory())
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    def cancel(self, key: Hashable) -> None:
        task = self._pending.pop(key, None)
        if task is not None:
            task.cancel()

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    async def drain(self) -> None:
        """Waits until no call is pending or running."""
        while self._pending or self._running:
            await asyncio.gather(*self._pending.values(), *self._running, return_exceptions=True)


class CustomNameField:
    """A free-standing name input validated the same way as a candidate entry."""

    def __init__(self, session: 'ValidationSession'):
        self._session = session
        self.text = ''
        self.local_metrics: Optional[NumericProfile] = None
        self.remote_validation: Optional[ValidationOutcome] = None
        self._token = 0

    def edit(self, text: str) -> int:
        """Updates the field and returns the locally computed Expression Number."""
        self.text = text
        self.local_metrics = self._session.local_metrics(text)
        self.remote_validation = None
        self._token += 1
        token = self._token
        self._session.debouncer.schedule(CUSTOM_FIELD_KEY, lambda: self._validate(token, text))
        return self.local_metrics.expression_number

    async def validate_now(self) -> Optional[ValidationOutcome]:
        self._session.debouncer.cancel(CUSTOM_FIELD_KEY)
        self._token += 1
        return await self._validate(self._token, self.text)

    async def _validate(self, token: int, text: str) -> Optional[ValidationOutcome]:
        outcome = await self._session.request_validation(text)
        if token != self._token:
            logger.debug(f"Discarding stale validation for custom name '{text}'")
            return None
        self.remote_validation = outcome
        return outcome

    def clear(self) -> None:
        self._session.debouncer.cancel(CUSTOM_FIELD_KEY)
        self._token += 1
        self.text = ''
        self.local_metrics = None
        self.remote_validation = None


class ValidationSession:
    """State of one name-correction session: profile, candidate entries and confirmed names."""

    def __init__(self, validator: NameValidator, debounce_seconds: float = 0.5):
        self.validator = validator
        self.debouncer = Debouncer(debounce_seconds)
        self.profile: Optional[ClientProfile] = None
        self.entries: List[CandidateEntry] = []
        self.confirmed: List[ConfirmedName] = []
        self.notices: List[Notice] = []
        self.custom = CustomNameField(self)
        self._generation = 0

    @classmethod
    def from_settings(cls, validator: NameValidator, settings: Settings) -> 'ValidationSession':
        return cls(validator, debounce_seconds=settings.validation_debounce_seconds)

    # --- Helpers ---

    def local_metrics(self, name: str) -> NumericProfile:
        birth_date = self.profile.birth_date if self.profile else ''
        return build_numeric_profile(name, birth_date, fold_name_number=True)

    def _notify(self, kind: str, message: str) -> None:
        logger.info(f"Notice ({kind}): {message}")
        self.notices.append(Notice(kind, message))

    def _is_confirmed(self, name: str) -> bool:
        return any(c.name == name for c in self.confirmed)

    @property
    def editing_index(self) -> Optional[int]:
        return next((i for i, entry in enumerate(self.entries) if entry.is_editing), None)

    def _leave_edit(self, index: int) -> CandidateEntry:
        entry = self.entries[index]
        self.debouncer.cancel(('entry', index))
        entry.token += 1
        entry.is_editing = False
        entry.edited_name = entry.name
        entry.local_metrics = self.local_metrics(entry.name)
        return entry

    # --- Suggestions ---

    def load_suggestions(self, profile: ClientProfile, suggestions: Iterable[Union[NameSuggestion, Dict[str, Any]]]) -> List[CandidateEntry]:
        """Replaces the entry set. Suggestions already passed the service's strict filter."""
        self.debouncer.cancel_all()
        self._generation += 1
        self.profile = profile
        self.confirmed = []
        self.entries = []
        for suggestion in suggestions:
            if isinstance(suggestion, dict):
                suggestion = NameSuggestion.model_validate(suggestion)
            self.entries.append(CandidateEntry(
                original_name=suggestion.name,
                name=suggestion.name,
                edited_name=suggestion.name,
                expression_number=expression_number(suggestion.name),
                rationale=suggestion.rationale,
                local_metrics=self.local_metrics(suggestion.name),
                is_valid=True,
            ))
        logger.info(f"Loaded {len(self.entries)} candidate name(s) for '{profile.full_name}'")
        return self.entries

    # --- Editing lifecycle ---

    def start_edit(self, index: int) -> CandidateEntry:
        target = self.entries[index]
        for i, entry in enumerate(self.entries):
            if i != index and entry.is_editing:
                self.cancel_edit(i)

        self.debouncer.cancel(('entry', index))
        target.token += 1
        target.is_editing = True
        target.edited_name = target.name
        target.remote_validation = None
        target.local_metrics = self.local_metrics(target.name)
        return target

    def edit_name(self, index: int, text: str) -> int:
        """Records a keystroke; returns the locally computed Expression Number."""
        entry = self.entries[index]
        if not entry.is_editing:
            self.start_edit(index)

        entry.edited_name = text
        entry.local_metrics = self.local_metrics(text)
        entry.remote_validation = None
        entry.token += 1
        token, generation = entry.token, self._generation
        self.debouncer.schedule(('entry', index), lambda: self._validate_entry(index, token, generation, text))
        return entry.local_metrics.expression_number

    def save_edit(self, index: int) -> bool:
        entry = self.entries[index]
        if not entry.is_editing:
            return False
        new_name = entry.edited_name.strip()
        if not new_name:
            self._notify('empty_name', "A name cannot be empty. Edit it or cancel.")
            return False

        key = ('entry', index)
        outcome = entry.remote_validation
        renamed = new_name != entry.name
        was_pending = self.debouncer.is_pending(key)
        in_flight = entry.in_flight_token == entry.token

        self.debouncer.cancel(key)
        entry.is_editing = False
        entry.name = new_name
        entry.edited_name = new_name
        entry.expression_number = expression_number(new_name)
        entry.local_metrics = self.local_metrics(new_name)
        if renamed:
            entry.confirmed = False

        if outcome is not None:
            entry.token += 1
            entry.rationale = outcome.rationale
            entry.is_valid = outcome.is_valid
            return True

        if not (renamed or was_pending or in_flight):
            # Unchanged name with nothing outstanding keeps its last verdict.
            entry.token += 1
            return True

        # No verdict yet: treat the name as valid until the service answers for it.
        entry.is_valid = True
        if in_flight:
            # The request for this text is still current and will land on the saved entry.
            return True
        entry.token += 1
        token, generation = entry.token, self._generation
        self.debouncer.fire_now(key, lambda: self._validate_entry(index, token, generation, new_name))
        return True

    def cancel_edit(self, index: int) -> CandidateEntry:
        entry = self._leave_edit(index)
        entry.remote_validation = None
        return entry

    # --- Remote validation ---

    async def request_validation(self, name: str) -> ValidationOutcome:
        """Asks the service for a verdict. Failures become an invalid outcome carrying the error."""
        if self.profile is None:
            return ValidationOutcome(False, "Client profile not loaded. Please get initial suggestions first.")
        try:
            result = await self.validator.validate_name(name, self.profile.to_payload())
        except Exception as exc:
            logger.error(f"Validation of '{name}' failed: {exc}", exc_info=True)
            return ValidationOutcome(False, f"Failed to validate name: {exc}")
        return ValidationOutcome(bool(result.is_valid), result.rationale)

    def _is_current(self, index: int, token: int, generation: int) -> bool:
        return generation == self._generation and index < len(self.entries) and self.entries[index].token == token

    async def _validate_entry(self, index: int, token: int, generation: int, name: str) -> Optional[ValidationOutcome]:
        if self._is_current(index, token, generation):
            self.entries[index].in_flight_token = token
        outcome = await self.request_validation(name)
        if not self._is_current(index, token, generation):
            logger.debug(f"Discarding stale validation for '{name}' at position {index}")
            return None

        entry = self.entries[index]
        entry.in_flight_token = None
        entry.remote_validation = outcome
        if not entry.is_editing:
            entry.is_valid = outcome.is_valid
            if entry.name != entry.original_name or not entry.rationale or entry.rationale == CUSTOM_NAME_RATIONALE:
                entry.rationale = outcome.rationale
            if not outcome.is_valid and entry.confirmed:
                self.unconfirm(entry.name)
                self._notify('invalid_name', f"'{entry.name}' was rejected and removed from the report.")
        return outcome

    async def validate_now(self, index: int) -> Optional[ValidationOutcome]:
        """Validates the entry's current (edited or committed) name without waiting for the debounce."""
        entry = self.entries[index]
        self.debouncer.cancel(('entry', index))
        entry.token += 1
        name = entry.edited_name if entry.is_editing else entry.name
        return await self._validate_entry(index, entry.token, self._generation, name)

    async def add_custom_name(self) -> Optional[int]:
        """Moves the custom field's name into the candidate list; returns its position."""
        name = self.custom.text.strip()
        if not name:
            self._notify('empty_name', "Enter a name before adding it.")
            return None

        outcome = self.custom.remote_validation
        self.entries.append(CandidateEntry(
            original_name=name,
            name=name,
            edited_name=name,
            expression_number=expression_number(name),
            rationale=CUSTOM_NAME_RATIONALE,
            local_metrics=self.local_metrics(name),
        ))
        index = len(self.entries) - 1
        self.custom.clear()

        if outcome is not None:
            entry = self.entries[index]
            entry.remote_validation = outcome
            entry.is_valid = outcome.is_valid
        else:
            await self.validate_now(index)
        return index

    # --- Confirmation ---

    def confirm(self, index: int) -> bool:
        entry = self.entries[index]
        if entry.is_valid is None:
            self._notify('not_validated', f"Validate '{entry.name}' before confirming it.")
            return False
        if entry.is_valid is False:
            self._notify('invalid_name', "Cannot confirm an invalid name for the report.")
            return False
        if self._is_confirmed(entry.name):
            self._notify('duplicate_name', f"'{entry.name}' is already confirmed for the report.")
            return False

        self.confirmed.append(ConfirmedName(
            name=entry.name,
            expression_number=entry.expression_number,
            rationale=entry.rationale,
            is_valid=entry.is_valid,
        ))
        entry.confirmed = True
        return True

    def unconfirm(self, name: str) -> bool:
        if not self._is_confirmed(name):
            return False
        self.confirmed = [c for c in self.confirmed if c.name != name]
        for entry in self.entries:
            if entry.name == name:
                entry.confirmed = False
        return True

    def report_request(self) -> Dict[str, Any]:
        return {
            "client_profile": self.profile.to_payload() if self.profile else {},
            "confirmed_suggestions": [c.to_payload() for c in self.confirmed],
        }
