"""Tests for CapabilityRouter."""

import json

import pytest

from collabbot.capabilities import BaseCapability, CapabilityKind, CapabilityResult
from collabbot.errors import CapabilityError, ContextNotFoundError
from collabbot.orchestration import CapabilityRouter
from collabbot.prompts import FALLBACK_REPLY
from collabbot.search import Citation
from tests.fakes import ScriptedModel, call, make_context, text


class RecordingCapability(BaseCapability):
    """Capability that records requests and returns a fixed result."""

    def __init__(self, kind, result=None, error=None):
        self.kind = kind
        self.result = result or CapabilityResult(text=f"{kind.value} answer")
        self.error = error
        self.requests = []

    async def run(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def capabilities():
    """One recording capability per kind."""
    return {kind: RecordingCapability(kind) for kind in CapabilityKind}


def _router(manager, capabilities, registry):
    return CapabilityRouter(manager, capabilities, registry=registry, max_rounds=5)


class TestCapabilityRouter:
    """SUT: CapabilityRouter"""

    def test_missing_capability(self, registry):
        """Every kind needs a handler."""
        partial = {CapabilityKind.SEARCH: RecordingCapability(CapabilityKind.SEARCH)}
        with pytest.raises(CapabilityError):
            CapabilityRouter(ScriptedModel(), partial, registry=registry)

    async def test_missing_context(self, capabilities, registry):
        """Unknown tokens raise ContextNotFoundError."""
        router = _router(ScriptedModel(), capabilities, registry)
        with pytest.raises(ContextNotFoundError) as exc_info:
            await router.process_request("nope")
        assert exc_info.value.token == "nope"

    async def test_time_range_then_delegation(self, capabilities, registry):
        """A resolved range is handed to the delegated capability."""
        manager = ScriptedModel([
            call("calculate_time_range", time_phrase="yesterday"),
            call("delegate_to_summarizer", user_request="summarize yesterday"),
            text("ignored"),
        ])
        registry.put("t1", make_context())
        result = await _router(manager, capabilities, registry).process_request("t1")

        time_payload = json.loads(manager.requests[1]["messages"][-1].content)
        assert time_payload["calculated_start_time"] == "2024-03-06T00:00:00.000Z"
        assert time_payload["calculated_end_time"] == "2024-03-07T00:00:00.000Z"
        assert time_payload["timespan_description"] == "yesterday"

        request = capabilities[CapabilityKind.SUMMARIZER].requests[0]
        assert request.time_range.description == "yesterday"
        assert request.user_request == "summarize yesterday"
        assert result.response_text == "summarizer answer"
        assert result.delegated_capability == CapabilityKind.SUMMARIZER

    async def test_time_range_from_arguments(self, capabilities, registry):
        """Explicit calculated times in the delegation are used."""
        manager = ScriptedModel([
            call("delegate_to_search", user_request="budget",
                 calculated_start_time="2024-03-01T00:00:00Z",
                 calculated_end_time="2024-03-02T00:00:00Z",
                 timespan_description="March 1"),
        ])
        registry.put("t1", make_context())
        await _router(manager, capabilities, registry).process_request("t1")
        time_range = capabilities[CapabilityKind.SEARCH].requests[0].time_range
        assert time_range.description == "March 1"
        assert time_range.start.day == 1 and time_range.end.day == 2

    async def test_single_delegation(self, capabilities, registry):
        """A second delegation in the same request is refused."""
        manager = ScriptedModel([
            call("delegate_to_search", user_request="a"),
            call("delegate_to_summarizer", user_request="b"),
        ])
        registry.put("t1", make_context())
        result = await _router(manager, capabilities, registry).process_request("t1")

        assert capabilities[CapabilityKind.SUMMARIZER].requests == []
        refusal = json.loads(manager.tool_results()[-1])
        assert refusal["status"] == "error"
        assert result.delegated_capability == CapabilityKind.SEARCH
        assert result.response_text == "search answer"

    async def test_citations_passed_through(self, registry):
        """Citations from the capability are returned."""
        citation = Citation(name="Message from Bob", url="https://x/1", abstract="...")
        capabilities = {kind: RecordingCapability(kind) for kind in CapabilityKind}
        capabilities[CapabilityKind.SEARCH] = RecordingCapability(
            CapabilityKind.SEARCH, CapabilityResult(text="found", citations=[citation])
        )
        registry.put("t1", make_context())
        manager = ScriptedModel([call("delegate_to_search", user_request="x")])
        result = await _router(manager, capabilities, registry).process_request("t1")
        assert result.citations == [citation]

    async def test_capability_error(self, registry):
        """A failing capability is reported to the model, which answers."""
        capabilities = {kind: RecordingCapability(kind) for kind in CapabilityKind}
        capabilities[CapabilityKind.ACTION_ITEMS] = RecordingCapability(
            CapabilityKind.ACTION_ITEMS, error=RuntimeError("db locked")
        )
        manager = ScriptedModel([
            call("delegate_to_action_items", user_request="list"),
            text("Sorry, action items are unavailable right now."),
        ])
        registry.put("t1", make_context())
        result = await _router(manager, capabilities, registry).process_request("t1")

        payload = json.loads(manager.tool_results()[0])
        assert payload["message"] == "Error in action_items capability: db locked"
        assert result.response_text == "Sorry, action items are unavailable right now."

    async def test_capability_error_without_reply(self, registry):
        """A failing capability and a silent model give an apology."""
        capabilities = {kind: RecordingCapability(kind) for kind in CapabilityKind}
        capabilities[CapabilityKind.SEARCH] = RecordingCapability(CapabilityKind.SEARCH, error=RuntimeError("boom"))
        registry.put("t1", make_context())
        manager = ScriptedModel([call("delegate_to_search", user_request="x")])
        result = await _router(manager, capabilities, registry).process_request("t1")
        assert result.response_text == "Sorry, I encountered an error processing your request: boom"

    async def test_model_failure(self, capabilities, registry):
        """A failing model call becomes an apology."""
        registry.put("t1", make_context())
        manager = ScriptedModel([ConnectionError("model down")])
        result = await _router(manager, capabilities, registry).process_request("t1")
        assert result.response_text == "Sorry, I encountered an error processing your request: model down"
        assert result.delegated_capability is None

    async def test_direct_answer(self, capabilities, registry):
        """Requests that need no capability get the model's reply."""
        registry.put("t1", make_context(text="hi"))
        result = await _router(ScriptedModel([text("Hello Alice!")]), capabilities, registry).process_request("t1")
        assert result.response_text == "Hello Alice!"
        assert result.delegated_capability is None

    async def test_fallback_reply(self, capabilities, registry):
        """A silent model yields the capabilities overview."""
        registry.put("t1", make_context())
        result = await _router(ScriptedModel(), capabilities, registry).process_request("t1")
        assert result.response_text == FALLBACK_REPLY

    async def test_unresolvable_phrase(self, capabilities, registry):
        """Unknown time phrases are reported back to the model."""
        manager = ScriptedModel([call("calculate_time_range", time_phrase="whenever"), text("Which period?")])
        registry.put("t1", make_context())
        result = await _router(manager, capabilities, registry).process_request("t1")
        assert json.loads(manager.tool_results()[0])["status"] == "error"
        assert result.response_text == "Which period?"

    async def test_instructions(self, capabilities, registry):
        """The routing prompt names the user, chat type and every delegation."""
        manager = ScriptedModel([text("hi")])
        registry.put("t1", make_context(is_personal_chat=True))
        await _router(manager, capabilities, registry).process_request("t1")
        request = manager.requests[0]
        assert "Chat type: personal" in request["instructions"]
        assert "2024-03-07 15:00 (Thursday)" in request["instructions"]
        assert request["functions"] == [
            "calculate_time_range",
            "delegate_to_summarizer",
            "delegate_to_action_items",
            "delegate_to_search",
        ]
