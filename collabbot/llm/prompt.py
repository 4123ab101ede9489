"""Function-calling prompt loop."""

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..utils.logger import get_app_logger
from .base import ChatMessage, FunctionSpec, LanguageModel


FunctionHandler = Callable[[Dict[str, Any]], Awaitable[str]]


def error_payload(message: str) -> str:
    """JSON error result handed back to the model."""
    return json.dumps({"status": "error", "message": message})


class ChatPrompt:
    """
    A model plus instructions plus callable functions.

    ``send`` keeps calling the model, executing the functions it asks for and
    feeding their results back, until it answers with text or the round limit
    is reached.
    """

    def __init__(self, model: LanguageModel, instructions: str, max_rounds: int = 5):
        self.model = model
        self.instructions = instructions
        self.max_rounds = max_rounds
        self.logger = get_app_logger("llm")
        self._specs: List[FunctionSpec] = []
        self._handlers: Dict[str, FunctionHandler] = {}

    def function(
        self,
        name: str,
        description: str,
        parameters: Optional[Dict[str, Any]],
        handler: FunctionHandler
    ) -> "ChatPrompt":
        """Register a callable function; returns self for chaining."""
        self._specs.append(FunctionSpec(
            name=name,
            description=description,
            parameters=parameters or {"type": "object", "properties": {}}
        ))
        self._handlers[name] = handler
        return self

    @property
    def function_names(self) -> List[str]:
        return [spec.name for spec in self._specs]

    async def _call(self, name: str, arguments: Dict[str, Any]) -> str:
        handler = self._handlers.get(name)
        if handler is None:
            self.logger.warning(f"Model called unknown function {name}")
            return error_payload(f"Unknown function: {name}")
        try:
            return await handler(arguments)
        except Exception as e:
            self.logger.error(f"Function {name} failed: {e}")
            return error_payload(f"Error in {name}: {e}")

    async def send(self, text: str) -> str:
        """
        Send a user message and run the function-calling loop.

        Args:
            text: User message

        Returns:
            The model's final text (empty when it gave none)
        """
        history: List[ChatMessage] = [ChatMessage(role="user", content=text)]
        last_content: Optional[str] = None

        for _ in range(self.max_rounds):
            reply = await self.model.complete(self.instructions, history, self._specs)
            last_content = reply.content or last_content

            if not reply.function_calls:
                return reply.content or ""

            history.append(ChatMessage(
                role="assistant",
                content=reply.content,
                function_calls=list(reply.function_calls)
            ))
            for call in reply.function_calls:
                self.logger.debug(f"Model called {call.name} with {call.arguments}")
                result = await self._call(call.name, call.arguments)
                history.append(ChatMessage(role="tool", content=result, tool_call_id=call.id, name=call.name))

        self.logger.warning(f"Function-calling loop stopped after {self.max_rounds} rounds")
        return last_content or ""
