"""Routes a request to exactly one capability."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..capabilities import BaseCapability, CapabilityKind, CapabilityRequest, CapabilityResult
from ..errors import CapabilityError, ContextNotFoundError
from ..llm import ChatPrompt, LanguageModel, error_payload
from ..prompts import ERROR_REPLY, FALLBACK_REPLY, MANAGER_INSTRUCTIONS
from ..search import Citation
from ..services.context_registry import ContextRegistry, RequestContext, context_registry
from ..utils.logger import get_app_logger
from ..utils.time_range import TimeRange, parse_timestamp, resolve_time_range


DELEGATION_DESCRIPTIONS = {
    CapabilityKind.SUMMARIZER: "Summaries, overviews and recent messages of this conversation",
    CapabilityKind.ACTION_ITEMS: "Creating, listing and updating action items",
    CapabilityKind.SEARCH: "Finding specific earlier messages",
}

DELEGATION_PARAMETERS = {
    "type": "object",
    "properties": {
        "user_request": {"type": "string", "description": "The request, restated for the specialist"},
        "calculated_start_time": {"type": "string", "description": "Start from calculate_time_range"},
        "calculated_end_time": {"type": "string", "description": "End from calculate_time_range"},
        "timespan_description": {"type": "string", "description": "Description from calculate_time_range"},
    },
    "required": ["user_request"],
}

TIME_RANGE_PARAMETERS = {
    "type": "object",
    "properties": {
        "time_phrase": {"type": "string", "description": "Time expression from the request, e.g. 'yesterday'"},
    },
    "required": ["time_phrase"],
}


def delegation_function_name(kind: CapabilityKind) -> str:
    return f"delegate_to_{kind.value}"


@dataclass
class DelegationResult:
    """What the router produced for one request."""

    response_text: str
    delegated_capability: Optional[CapabilityKind] = None
    citations: List[Citation] = field(default_factory=list)


@dataclass
class _RoutingRun:
    """State of a single process_request call."""

    token: str
    context: RequestContext
    time_range: Optional[TimeRange] = None
    delegated: Optional[CapabilityKind] = None
    result: Optional[CapabilityResult] = None
    error: Optional[str] = None


class CapabilityRouter:
    """
    Asks the model which capability fits a request and runs it.

    The router keeps no per-request state on the instance, so concurrent
    requests never see each other's time ranges or results.
    """

    def __init__(
        self,
        model: LanguageModel,
        capabilities: Mapping[CapabilityKind, BaseCapability],
        registry: Optional[ContextRegistry] = None,
        max_rounds: int = 5
    ):
        """
        Initialize the router.

        Args:
            model: Model that picks the capability
            capabilities: Handler for every CapabilityKind
            registry: Context registry (defaults to the process-wide one)
            max_rounds: Function-calling round limit

        Raises:
            CapabilityError: If a capability kind has no handler
        """
        missing = [k.value for k in CapabilityKind if k not in capabilities or k not in DELEGATION_DESCRIPTIONS]
        if missing:
            raise CapabilityError(f"No capability registered for: {', '.join(missing)}")

        self.model = model
        self.capabilities = dict(capabilities)
        self.registry = registry if registry is not None else context_registry
        self.max_rounds = max_rounds
        self.logger = get_app_logger("router")

    async def process_request(self, token: str) -> DelegationResult:
        """
        Handle the request registered under ``token``.

        Args:
            token: Request token in the context registry

        Returns:
            DelegationResult; model and capability failures become apology text

        Raises:
            ContextNotFoundError: If no context is registered for the token
        """
        context = self.registry.get(token)
        if context is None:
            raise ContextNotFoundError(token)

        run = _RoutingRun(token=token, context=context)
        prompt = self._build_prompt(run)

        try:
            reply = await prompt.send(context.text)
        except Exception as e:
            self.logger.error(f"Routing failed for {token}: {e}")
            return DelegationResult(response_text=ERROR_REPLY.format(error=e), delegated_capability=run.delegated)

        return self._finish(run, reply)

    def _build_prompt(self, run: _RoutingRun) -> ChatPrompt:
        context = run.context
        instructions = MANAGER_INSTRUCTIONS.format(
            current_date_time=context.date_label(),
            time_zone=context.time_zone,
            chat_type="personal" if context.is_personal_chat else "group",
            user_name=context.user_name
        )

        async def calculate_time_range(args: Dict[str, Any]) -> str:
            phrase = str(args.get("time_phrase") or "")
            resolved = resolve_time_range(phrase, context.now())
            if resolved is None:
                self.logger.info(f"Could not resolve time phrase '{phrase}'")
                return error_payload(f"Could not understand the time phrase '{phrase}'")
            run.time_range = resolved
            self.logger.info(f"Resolved '{phrase}' to {resolved.start_iso} - {resolved.end_iso}")
            return json.dumps({
                "status": "success",
                "calculated_start_time": resolved.start_iso,
                "calculated_end_time": resolved.end_iso,
                "timespan_description": resolved.description,
            })

        prompt = ChatPrompt(self.model, instructions, max_rounds=self.max_rounds)
        prompt.function(
            "calculate_time_range",
            "Turn a time expression into exact start and end times",
            TIME_RANGE_PARAMETERS,
            calculate_time_range
        )
        for kind in CapabilityKind:
            prompt.function(
                delegation_function_name(kind),
                DELEGATION_DESCRIPTIONS[kind],
                DELEGATION_PARAMETERS,
                self._delegate_handler(run, kind)
            )
        return prompt

    @staticmethod
    def _time_range_from_args(args: Dict[str, Any], run: _RoutingRun) -> Optional[TimeRange]:
        try:
            start = parse_timestamp(args.get("calculated_start_time"))
            end = parse_timestamp(args.get("calculated_end_time"))
        except ValueError:
            return run.time_range
        if start is None or end is None:
            return run.time_range
        description = args.get("timespan_description") or (run.time_range.description if run.time_range else "")
        return TimeRange(start=start, end=end, description=description)

    def _delegate_handler(self, run: _RoutingRun, kind: CapabilityKind):
        async def delegate(args: Dict[str, Any]) -> str:
            if run.delegated is not None:
                return error_payload(
                    f"This request was already handled by {run.delegated.value}; only one capability runs per request"
                )

            run.delegated = kind
            request = CapabilityRequest(
                user_request=str(args.get("user_request") or run.context.text),
                context=run.context,
                time_range=self._time_range_from_args(args, run)
            )
            self.logger.info(f"Delegating {run.token} to {kind.value}")

            try:
                run.result = await self.capabilities[kind].run(request)
            except Exception as e:
                run.error = str(e)
                self.logger.error(f"Error in {kind.value} capability: {e}")
                return error_payload(f"Error in {kind.value} capability: {e}")
            return run.result.text

        return delegate

    def _finish(self, run: _RoutingRun, reply: str) -> DelegationResult:
        if run.result is not None and run.result.text:
            return DelegationResult(
                response_text=run.result.text,
                delegated_capability=run.delegated,
                citations=list(run.result.citations)
            )

        text = (reply or "").strip()
        if not text:
            text = ERROR_REPLY.format(error=run.error) if run.error else FALLBACK_REPLY
        return DelegationResult(response_text=text, delegated_capability=run.delegated)
