import pytest

from worldforge.config import Config
from worldforge.local_llm import LocalLLMError, call_ollama_chat, extract_reply


def reply(content):
    return {"message": {"role": "assistant", "content": content}, "done": True}


@pytest.mark.asyncio
async def test_call_ollama_chat_builds_payload(monkeypatch):
    captured: dict[str, object] = {}

    def fake_post(url, payload, timeout):
        captured["url"] = url
        captured["payload"] = payload
        captured["timeout"] = timeout
        return reply("  The world is old.  ")

    monkeypatch.setattr("worldforge.local_llm._post_chat", fake_post)

    result = await call_ollama_chat(
        system_prompt="System context",
        user_prompt="User payload",
        llm_model="llama3.1",
        base_url="http://localhost:11434/",
        timeout=30,
    )

    assert result == "The world is old."
    payload = captured["payload"]
    assert payload["model"] == "llama3.1"
    assert payload["stream"] is False
    assert "format" not in payload
    assert payload["messages"][0] == {"role": "system", "content": "System context"}
    assert payload["messages"][1] == {"role": "user", "content": "User payload"}
    assert captured["url"] == "http://localhost:11434/api/chat"
    assert captured["timeout"] == 30


@pytest.mark.asyncio
async def test_call_ollama_chat_uses_configured_timeout(monkeypatch):
    captured: dict[str, object] = {}

    def fake_post(url, payload, timeout):
        captured["timeout"] = timeout
        return reply("ok")

    monkeypatch.setattr("worldforge.local_llm._post_chat", fake_post)
    monkeypatch.setattr(Config, "LLM_TIMEOUT_SECONDS", 45.0)

    await call_ollama_chat(system_prompt="", user_prompt="Hi", llm_model="llama3.1")

    assert captured["timeout"] == 45.0


@pytest.mark.asyncio
async def test_call_ollama_chat_json_mode_strips_code_fence(monkeypatch):
    captured: dict[str, object] = {}

    def fake_post(url, payload, timeout):
        captured["payload"] = payload
        return reply('```json\n{"sectors": []}\n```')

    monkeypatch.setattr("worldforge.local_llm._post_chat", fake_post)

    result = await call_ollama_chat(
        system_prompt="",
        user_prompt="Sectors please",
        llm_model="llama3.1",
        json_mode=True,
        base_url="http://localhost:11434",
    )

    assert result == '{"sectors": []}'
    payload = captured["payload"]
    assert payload["format"] == "json"
    assert payload["messages"] == [{"role": "user", "content": "Sectors please"}]


@pytest.mark.asyncio
async def test_call_ollama_chat_json_mode_rejects_plain_text(monkeypatch):
    def fake_post(url, payload, timeout):
        return reply("Sure! Here are some sectors for your world.")

    monkeypatch.setattr("worldforge.local_llm._post_chat", fake_post)

    with pytest.raises(LocalLLMError, match="asked for JSON"):
        await call_ollama_chat(
            system_prompt="",
            user_prompt="Sectors please",
            llm_model="llama3.1",
            json_mode=True,
        )


@pytest.mark.asyncio
async def test_call_ollama_chat_rejects_empty_prompt():
    with pytest.raises(LocalLLMError):
        await call_ollama_chat(system_prompt="System", user_prompt="   ", llm_model="llama3.1")


def test_extract_reply_surfaces_server_error():
    with pytest.raises(LocalLLMError, match="model 'llama9' not found"):
        extract_reply({"error": "model 'llama9' not found"}, json_mode=False)


def test_extract_reply_rejects_missing_content():
    with pytest.raises(LocalLLMError, match="assistant content"):
        extract_reply({"message": {"role": "assistant"}}, json_mode=True)


def test_extract_reply_plain_text_is_not_parsed():
    assert extract_reply(reply("not json at all"), json_mode=False) == "not json at all"
