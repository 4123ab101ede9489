"""Language model interface used by the router and capabilities."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FunctionSpec:
    """A function the model may call, described by a JSON schema."""

    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})


@dataclass(frozen=True)
class FunctionCall:
    """A function call requested by the model."""

    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ModelReply:
    """One model turn: text, function calls, or both."""

    content: Optional[str] = None
    function_calls: List[FunctionCall] = field(default_factory=list)


@dataclass
class ChatMessage:
    """A message in the prompt history."""

    role: str
    content: Optional[str] = None
    function_calls: List[FunctionCall] = field(default_factory=list)
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


class LanguageModel(ABC):
    """Chat model with function calling."""

    @abstractmethod
    async def complete(
        self,
        instructions: str,
        messages: List[ChatMessage],
        functions: Sequence[FunctionSpec] = ()
    ) -> ModelReply:
        """
        Run one completion.

        Args:
            instructions: System instructions
            messages: Conversation so far
            functions: Functions the model may call

        Returns:
            ModelReply
        """
        pass
