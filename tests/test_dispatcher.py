import asyncio

import pytest

from webchat.agent.invoker import AgentReply
from webchat.bridge.messages import OutboundResponse
from webchat.host.dispatcher import HostDispatcher


class FakeInvoker:
    def __init__(self, reply: AgentReply | None = None, *, gate: asyncio.Event | None = None) -> None:
        self.reply = reply or AgentReply(text="hi")
        self.gate = gate
        self.calls: list[tuple[str, str]] = []

    async def invoke(self, text: str, session_key: str) -> AgentReply:
        self.calls.append((text, session_key))
        if self.gate is not None:
            await self.gate.wait()
        return self.reply


class RaisingInvoker:
    async def invoke(self, text: str, session_key: str) -> AgentReply:
        raise RuntimeError("invoker broke")


class Outbox:
    def __init__(self) -> None:
        self.responses: list[OutboundResponse] = []

    async def __call__(self, response: OutboundResponse) -> None:
        self.responses.append(response)


@pytest.mark.asyncio
async def test_chat_call_produces_exactly_one_response() -> None:
    invoker = FakeInvoker()
    outbox = Outbox()
    dispatcher = HostDispatcher(invoker, outbox, "main")

    dispatcher.receive({"id": "c1", "type": "chat", "payload": {"text": "hello"}})
    await dispatcher.drain()

    assert invoker.calls == [("hello", "main")]
    assert [response.to_wire() for response in outbox.responses] == [
        {"id": "c1", "ok": True, "result": {"text": "hi"}, "error": None}
    ]


@pytest.mark.asyncio
async def test_log_messages_never_get_a_response() -> None:
    invoker = FakeInvoker()
    outbox = Outbox()
    dispatcher = HostDispatcher(invoker, outbox, "main")

    dispatcher.receive({"id": "log", "log": "console line"})
    dispatcher.receive({"id": "log", "type": "chat", "payload": {"text": "hello"}})
    await dispatcher.drain()

    assert outbox.responses == []
    assert invoker.calls == []


@pytest.mark.asyncio
async def test_unknown_shapes_are_ignored() -> None:
    invoker = FakeInvoker()
    outbox = Outbox()
    dispatcher = HostDispatcher(invoker, outbox, "main")

    for body in (None, {"id": "x"}, {"id": "x", "type": "chat", "payload": {"text": ""}}, {"id": "x", "type": "ping"}):
        dispatcher.receive(body)
    await dispatcher.drain()

    assert outbox.responses == []
    assert invoker.calls == []


@pytest.mark.asyncio
async def test_receive_returns_before_the_agent_finishes() -> None:
    gate = asyncio.Event()
    outbox = Outbox()
    dispatcher = HostDispatcher(FakeInvoker(gate=gate), outbox, "main")

    dispatcher.receive({"id": "c1", "type": "chat", "payload": {"text": "hello"}})

    assert dispatcher.in_flight == 1
    assert outbox.responses == []
    gate.set()
    await dispatcher.drain()
    assert dispatcher.in_flight == 0
    assert len(outbox.responses) == 1


@pytest.mark.asyncio
async def test_failed_agent_reply_becomes_error_response() -> None:
    outbox = Outbox()
    dispatcher = HostDispatcher(FakeInvoker(AgentReply(text=None, error="boom")), outbox, "main")

    dispatcher.receive({"id": "c1", "type": "chat", "payload": {"text": "hello"}})
    await dispatcher.drain()

    assert outbox.responses[0].to_wire() == {"id": "c1", "ok": False, "result": {"text": ""}, "error": "boom"}


@pytest.mark.asyncio
async def test_invoker_exception_is_reported_not_raised() -> None:
    outbox = Outbox()
    dispatcher = HostDispatcher(RaisingInvoker(), outbox, "main")

    dispatcher.receive({"id": "c1", "type": "chat", "payload": {"text": "hello"}})
    await dispatcher.drain()

    [response] = outbox.responses
    assert response.ok is False
    assert response.error == "invoker broke"


@pytest.mark.asyncio
async def test_identical_calls_are_not_deduplicated() -> None:
    invoker = FakeInvoker()
    outbox = Outbox()
    dispatcher = HostDispatcher(invoker, outbox, "main")

    dispatcher.receive({"id": "c1", "type": "chat", "payload": {"text": "same"}})
    dispatcher.receive({"id": "c2", "type": "chat", "payload": {"text": "same"}})
    await dispatcher.drain()

    assert invoker.calls == [("same", "main"), ("same", "main")]
    assert sorted(response.id for response in outbox.responses) == ["c1", "c2"]
