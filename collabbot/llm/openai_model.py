"""OpenAI chat completions adapter."""

import json
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncAzureOpenAI, AsyncOpenAI

from ..utils.logger import get_app_logger
from .base import ChatMessage, FunctionCall, FunctionSpec, LanguageModel, ModelReply


class OpenAIChatModel(LanguageModel):
    """
    LanguageModel over the OpenAI (or Azure OpenAI) chat completions API.

    An endpoint together with an API version selects Azure; an endpoint
    alone is used as an OpenAI-compatible base URL.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        api_version: Optional[str] = None,
        temperature: float = 0.2,
        client: Any = None
    ):
        self.model = model
        self.temperature = temperature
        self.logger = get_app_logger("llm")

        if client is not None:
            self._client = client
        elif endpoint and api_version:
            self._client = AsyncAzureOpenAI(api_key=api_key, azure_endpoint=endpoint, api_version=api_version)
        else:
            self._client = AsyncOpenAI(api_key=api_key, base_url=endpoint)

        # Reasoning models reject a temperature
        self._new_api = self.model.startswith(("gpt-5", "o1", "o3", "o4"))

    def _completion_kwargs(self) -> dict:
        if self._new_api:
            return {}
        return {"temperature": self.temperature}

    @staticmethod
    def _to_openai_message(message: ChatMessage) -> Dict[str, Any]:
        if message.role == "tool":
            return {"role": "tool", "tool_call_id": message.tool_call_id, "content": message.content or ""}
        data: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.function_calls:
            data["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                }
                for call in message.function_calls
            ]
        return data

    @staticmethod
    def _to_tool(spec: FunctionSpec) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {"name": spec.name, "description": spec.description, "parameters": spec.parameters},
        }

    def _parse_call(self, tool_call) -> FunctionCall:
        try:
            arguments = json.loads(tool_call.function.arguments or "{}")
        except json.JSONDecodeError:
            self.logger.warning(f"Unparseable arguments for {tool_call.function.name}")
            arguments = {}
        if not isinstance(arguments, dict):
            arguments = {}
        return FunctionCall(id=tool_call.id, name=tool_call.function.name, arguments=arguments)

    async def complete(
        self,
        instructions: str,
        messages: List[ChatMessage],
        functions: Sequence[FunctionSpec] = ()
    ) -> ModelReply:
        payload = [{"role": "system", "content": instructions}]
        payload.extend(self._to_openai_message(m) for m in messages)

        kwargs = self._completion_kwargs()
        if functions:
            kwargs["tools"] = [self._to_tool(f) for f in functions]

        response = await self._client.chat.completions.create(
            model=self.model,
            messages=payload,
            **kwargs
        )
        if not response.choices:
            return ModelReply()

        message = response.choices[0].message
        calls = [self._parse_call(c) for c in (message.tool_calls or []) if c.type == "function"]
        return ModelReply(content=message.content, function_calls=calls)


def create_model(settings, kind: str) -> OpenAIChatModel:
    """Build the model for the router ("manager") or for capabilities."""
    return OpenAIChatModel(
        model=settings.get_model_name(kind),
        api_key=settings.llm_api_key,
        endpoint=settings.llm_endpoint,
        api_version=settings.llm_api_version if settings.llm_endpoint else None
    )
