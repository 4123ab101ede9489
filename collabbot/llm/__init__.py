"""Language model collaborator."""

from .base import ChatMessage, FunctionCall, FunctionSpec, LanguageModel, ModelReply
from .prompt import ChatPrompt, error_payload
from .openai_model import OpenAIChatModel, create_model

__all__ = [
    "ChatMessage",
    "FunctionCall",
    "FunctionSpec",
    "LanguageModel",
    "ModelReply",
    "ChatPrompt",
    "error_payload",
    "OpenAIChatModel",
    "create_model",
]
