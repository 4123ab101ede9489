"""Tests for the function-calling prompt loop."""

import json

from collabbot.llm import ChatPrompt, FunctionCall, ModelReply, error_payload
from tests.fakes import ScriptedModel, call, text


async def _echo(args):
    return json.dumps({"status": "success", "echo": args})


class TestChatPrompt:
    """SUT: ChatPrompt.send"""

    async def test_text_reply(self):
        """A plain text reply ends the loop immediately."""
        model = ScriptedModel([text("hello")])
        prompt = ChatPrompt(model, "be nice")
        assert await prompt.send("hi") == "hello"
        assert model.requests[0]["instructions"] == "be nice"
        assert model.requests[0]["messages"][0].content == "hi"

    async def test_function_round_trip(self):
        """Function results are fed back to the model."""
        model = ScriptedModel([call("echo", value=1), text("done")])
        prompt = ChatPrompt(model, "x").function("echo", "Echo arguments", None, _echo)

        assert await prompt.send("go") == "done"
        assert model.requests[0]["functions"] == ["echo"]
        assert json.loads(model.tool_results()[0]) == {"status": "success", "echo": {"value": 1}}
        roles = [m.role for m in model.requests[1]["messages"]]
        assert roles == ["user", "assistant", "tool"]

    async def test_unknown_function(self):
        """Calling an unregistered function returns an error payload."""
        model = ScriptedModel([call("missing"), text("sorry")])
        await ChatPrompt(model, "x").send("go")
        assert json.loads(model.tool_results()[0])["status"] == "error"

    async def test_handler_exception(self):
        """A raising handler becomes an error payload instead of aborting."""
        async def broken(args):
            raise RuntimeError("kaput")

        model = ScriptedModel([call("broken"), text("recovered")])
        prompt = ChatPrompt(model, "x").function("broken", "Always fails", None, broken)
        assert await prompt.send("go") == "recovered"
        assert "kaput" in json.loads(model.tool_results()[0])["message"]

    async def test_parallel_calls(self):
        """Every call of a multi-call reply is executed."""
        reply = ModelReply(function_calls=[
            FunctionCall(id="a", name="echo", arguments={"n": 1}),
            FunctionCall(id="b", name="echo", arguments={"n": 2}),
        ])
        model = ScriptedModel([reply, text("ok")])
        await ChatPrompt(model, "x").function("echo", "Echo", None, _echo).send("go")
        tool_messages = [m for m in model.requests[1]["messages"] if m.role == "tool"]
        assert [m.tool_call_id for m in tool_messages] == ["a", "b"]

    async def test_round_limit(self):
        """The loop stops after max_rounds model calls."""
        model = ScriptedModel([call("echo"), call("echo"), call("echo")])
        prompt = ChatPrompt(model, "x", max_rounds=2).function("echo", "Echo", None, _echo)
        assert await prompt.send("go") == ""
        assert len(model.requests) == 2

    def test_function_names(self):
        """Registered functions are listed in order."""
        prompt = ChatPrompt(ScriptedModel(), "x").function("a", "A", None, _echo).function("b", "B", None, _echo)
        assert prompt.function_names == ["a", "b"]


def test_error_payload():
    """Error payloads are JSON with status error."""
    assert json.loads(error_payload("bad")) == {"status": "error", "message": "bad"}
