import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .client import NameCorrectorClient
from .coordinator import Notice
from .errors import RemoteServiceError
from .schemas import ClientProfile

logger = logging.getLogger(__name__)


class ChatMode(str, Enum):
    GENERAL = 'general'
    NAME_VALIDATION = 'name_validation'


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatSession:
    """Holds the assistant mode, the name under discussion and the exchange history."""

    def __init__(self, client: NameCorrectorClient, profile: Optional[ClientProfile] = None):
        self._client = client
        self.profile = profile
        self.mode = ChatMode.GENERAL
        self.target_name: Optional[str] = None
        self.notices: List[Notice] = []
        self._history: List[ChatTurn] = []

    @property
    def history(self) -> Tuple[ChatTurn, ...]:
        return tuple(self._history)

    def _notify(self, kind: str, message: str) -> None:
        logger.info(f"Notice ({kind}): {message}")
        self.notices.append(Notice(kind, message))

    def select_target(self, name: str) -> bool:
        name = (name or '').strip()
        if not name:
            self._notify('missing_target', "Choose a name to discuss.")
            return False
        self.target_name = name
        return True

    def set_mode(self, mode) -> bool:
        try:
            mode = ChatMode(mode)
        except ValueError:
            self._notify('unknown_mode', f"Unknown chat mode '{mode}'.")
            return False
        if mode is ChatMode.NAME_VALIDATION and (not self.target_name or self.profile is None):
            self._notify('missing_target', "Select a name from your profile before starting a name validation chat.")
            return False
        self.mode = mode
        return True

    async def send(self, message: str) -> Optional[str]:
        """Sends a message; both turns are appended only when the assistant answers."""
        message = (message or '').strip()
        if not message:
            return None

        if self.mode is ChatMode.NAME_VALIDATION:
            request = {
                "client_profile": self.profile.to_payload(),
                "target_name": self.target_name,
                "history": [turn.to_payload() for turn in self._history],
            }
        else:
            request = {}

        try:
            response = await self._client.chat(self.mode.value, message, **request)
        except RemoteServiceError as exc:
            logger.error(f"Chat request failed: {exc}")
            self._notify('chat_failed', f"The assistant could not answer: {exc}")
            return None

        self._history.append(ChatTurn('user', message))
        self._history.append(ChatTurn('assistant', response))
        return response
