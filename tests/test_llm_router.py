import pytest
from langchain_core.messages import AIMessage, HumanMessage

from resolvix.core.config import settings
from resolvix.services import llm_router


class FakeChat:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return AIMessage(content=self.reply)


@pytest.fixture
def providers(monkeypatch):
    registry = {}
    monkeypatch.setattr(llm_router, "PROVIDERS", registry)
    monkeypatch.setattr(settings, "LLM_PROVIDERS", ["vertex", "groq"])
    return registry


MESSAGES = [HumanMessage(content="disk full on 10.0.0.5, what now?")]


def test_first_provider_answers(providers):
    vertex, groq = FakeChat(reply="  Free space in /var/log.  "), FakeChat(reply="unused")
    providers.update(vertex=lambda: vertex, groq=lambda: groq)

    assert llm_router.complete(MESSAGES) == ("Free space in /var/log.", "vertex")
    assert vertex.calls == [MESSAGES]
    assert groq.calls == []


def test_falls_back_on_error_and_empty_reply(providers):
    groq = FakeChat(reply="Rotate the logs.")
    providers.update(vertex=lambda: FakeChat(error=TimeoutError("slow")), groq=lambda: groq)
    assert llm_router.complete(MESSAGES) == ("Rotate the logs.", "groq")

    providers.update(vertex=lambda: FakeChat(reply="   "))
    assert llm_router.complete(MESSAGES) == ("Rotate the logs.", "groq")


def test_order_comes_from_settings(providers, monkeypatch):
    providers.update(vertex=lambda: FakeChat(reply="from vertex"), groq=lambda: FakeChat(reply="from groq"))
    monkeypatch.setattr(settings, "LLM_PROVIDERS", ["nope", "groq", "vertex"])
    assert llm_router.complete(MESSAGES) == ("from groq", "groq")


def test_content_parts_are_joined(providers):
    providers.update(vertex=lambda: FakeChat(reply=[{"type": "text", "text": "Check "}, {"type": "text", "text": "DNS."}]))
    assert llm_router.complete(MESSAGES) == ("Check DNS.", "vertex")


def test_all_providers_failing_raises(providers):
    providers.update(vertex=lambda: FakeChat(error=RuntimeError("quota")), groq=lambda: FakeChat(error=RuntimeError("down")))
    with pytest.raises(RuntimeError):
        llm_router.complete(MESSAGES)
