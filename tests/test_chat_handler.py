"""Tests for the memory-context chat request handler."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.chat.handler import FALLBACK_RESPONSE, ChatConfig, ChatHandler
from src.chat.prompt import NO_MEMORIES_PLACEHOLDER
from src.config import Settings
from tests.conftest import candidate, gemini_response, mock_httpx_client

TRAVEL_QUESTION = "What did I write about travel?"
TRAVEL_CONTEXT = "Title: Vacation Ideas\nContent: Japan, Norway, NZ\n"
TRAVEL_REPLY = "You wrote about Japan, Norway, and New Zealand."


@pytest.fixture
def handler() -> ChatHandler:
    return ChatHandler(ChatConfig(api_key="test-key", model="gemini-test"))


def _body(*contents: str, memory_context: str | None = None) -> dict:
    roles = ["user", "assistant"]
    body: dict = {
        "messages": [
            {"role": roles[i % 2], "content": c} for i, c in enumerate(contents)
        ]
    }
    if memory_context is not None:
        body["memoryContext"] = memory_context
    return body


def _sent_prompt(mock_client: AsyncMock) -> str:
    return mock_client.post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]


# -- Success path --------------------------------------------------------------


async def test_travel_scenario_end_to_end(handler: ChatHandler) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_client = mock_httpx_client(mock_cls, gemini_response(candidate(TRAVEL_REPLY)))
        result = await handler.handle("alice", _body(TRAVEL_QUESTION, memory_context=TRAVEL_CONTEXT))

    assert result.status == 200
    assert result.to_body() == {"response": TRAVEL_REPLY}
    prompt = _sent_prompt(mock_client)
    assert TRAVEL_CONTEXT in prompt
    assert prompt.count(TRAVEL_QUESTION) == 1


async def test_sends_fixed_generation_config(handler: ChatHandler) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_client = mock_httpx_client(mock_cls, gemini_response(candidate("ok")))
        await handler.handle("alice", _body("hi"))

    kwargs = mock_client.post.call_args.kwargs
    assert kwargs["json"]["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 800}
    assert kwargs["params"] == {"key": "test-key"}
    assert "gemini-test:generateContent" in mock_client.post.call_args.args[0]


async def test_history_rendered_in_order(handler: ChatHandler) -> None:
    body = _body("first question", "first answer", "second question", "second answer", "final?")
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_client = mock_httpx_client(mock_cls, gemini_response(candidate("ok")))
        await handler.handle("alice", body)

    prompt = _sent_prompt(mock_client)
    expected_history = (
        "User: first question\n"
        "Assistant: first answer\n"
        "User: second question\n"
        "Assistant: second answer"
    )
    assert expected_history in prompt
    assert "User's current question: final?" in prompt
    assert prompt.count("final?") == 1


@pytest.mark.parametrize("context", [None, ""])
async def test_missing_memory_context_uses_placeholder(handler: ChatHandler, context) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_client = mock_httpx_client(mock_cls, gemini_response(candidate("ok")))
        await handler.handle("alice", _body("hi", memory_context=context))

    assert NO_MEMORIES_PLACEHOLDER in _sent_prompt(mock_client)


async def test_message_without_content_renders_empty(handler: ChatHandler) -> None:
    body = {"messages": [{"role": "user"}, {"role": "user", "content": "next"}]}
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_client = mock_httpx_client(mock_cls, gemini_response(candidate("ok")))
        result = await handler.handle("alice", body)

    assert result.status == 200
    prompt = _sent_prompt(mock_client)
    assert "User: \n" in prompt
    assert "None" not in prompt
    assert "undefined" not in prompt


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
    ],
)
async def test_empty_candidates_fall_back(handler: ChatHandler, payload: dict) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_httpx_client(mock_cls, gemini_response(payload))
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 200
    assert result.response == FALLBACK_RESPONSE
    assert result.response == "I'm sorry, I couldn't generate a response. Please try again."


# -- Short-circuit validation ---------------------------------------------------


@pytest.mark.parametrize("user_id", [None, ""])
async def test_unauthenticated_makes_no_outbound_call(handler: ChatHandler, user_id) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        result = await handler.handle(user_id, _body("hi"))

    assert result.status == 401
    assert result.to_body() == {"error": "Unauthorized"}
    mock_cls.assert_not_called()


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"messages": None},
        {"messages": "hello"},
        {"messages": {"role": "user", "content": "hi"}},
        {"messages": []},
        ["not", "an", "object"],
        None,
    ],
)
async def test_bad_messages_make_no_outbound_call(handler: ChatHandler, body) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        result = await handler.handle("alice", body)

    assert result.status == 400
    assert result.error == "Messages are required"
    mock_cls.assert_not_called()


async def test_missing_api_key_is_internal_error() -> None:
    handler = ChatHandler(ChatConfig(api_key=""))
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 500
    assert result.error == "API key not configured"
    mock_cls.assert_not_called()


# -- Upstream error classification ------------------------------------------------


async def test_upstream_400_is_bad_request(handler: ChatHandler) -> None:
    resp = gemini_response({"error": {"message": "Invalid prompt secret-detail"}}, status_code=400)
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_httpx_client(mock_cls, resp)
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 400
    assert "Bad request to AI service" in result.error
    assert "secret-detail" not in result.error


async def test_upstream_401_is_unauthorized(handler: ChatHandler) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_httpx_client(mock_cls, gemini_response({"error": "bad key"}, status_code=401))
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 401
    assert "API key unauthorized" in result.error


async def test_upstream_503_is_server_error_with_code(handler: ChatHandler) -> None:
    resp = gemini_response(status_code=503, text="upstream overloaded stack trace")
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_httpx_client(mock_cls, resp)
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 500
    assert "503" in result.error
    assert "overloaded" not in result.error


async def test_network_failure_is_internal_error(handler: ChatHandler) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_httpx_client(mock_cls, httpx.ConnectError("connection refused"))
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 500
    assert result.error == "Failed to process your request"


async def test_malformed_upstream_json_is_internal_error(handler: ChatHandler) -> None:
    with patch("src.llm.gemini.httpx.AsyncClient") as mock_cls:
        mock_httpx_client(mock_cls, gemini_response(text="<html>not json</html>"))
        result = await handler.handle("alice", _body("hi"))

    assert result.status == 500
    assert result.error == "Failed to process your request"
    assert "html" not in result.error


# -- Configuration injection -------------------------------------------------------


async def test_client_factory_receives_injected_config() -> None:
    config = ChatConfig(api_key="k", model="custom-model")
    fake_client = MagicMock()
    fake_client.generate_content = AsyncMock(return_value=candidate("hello"))
    factory = MagicMock(return_value=fake_client)

    result = await ChatHandler(config, client_factory=factory).handle("alice", _body("hi"))

    assert result.response == "hello"
    factory.assert_called_once_with(config)
    fake_client.generate_content.assert_awaited_once()
    assert fake_client.generate_content.call_args.kwargs == {
        "temperature": 0.7,
        "max_output_tokens": 800,
    }


def test_config_from_settings() -> None:
    s = Settings(
        gemini_api_key="abc",
        gemini_model="gemini-pro",
        gemini_api_base="http://localhost:1234",
        gemini_timeout_seconds=12.5,
    )
    config = ChatConfig.from_settings(s)
    assert config.api_key == "abc"
    assert config.model == "gemini-pro"
    assert config.base_url == "http://localhost:1234"
    assert config.timeout == 12.5
    assert config.temperature == 0.7
    assert config.max_output_tokens == 800
