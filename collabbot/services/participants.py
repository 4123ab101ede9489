"""Conversation participant lookup."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Participant:
    """A member of a conversation."""

    name: str
    id: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "id": self.id, "email": self.email}


class ParticipantDirectory(ABC):
    """Source of conversation members, backed by the chat platform."""

    @abstractmethod
    async def list_members(self, conversation_id: str) -> List[Participant]:
        """
        List the members of a conversation.

        Args:
            conversation_id: Conversation key

        Returns:
            List of participants
        """
        pass


class StaticParticipantDirectory(ParticipantDirectory):
    """Directory over a fixed member list, e.g. the roster sent with an activity."""

    def __init__(self, members: Iterable[Participant]):
        self.members = list(members)

    async def list_members(self, conversation_id: str) -> List[Participant]:
        return list(self.members)
