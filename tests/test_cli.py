import json

import pytest

from ollamakit.cli import build_config, build_parser, main
from tests.fakes import ScriptedServer, reply_empty, reply_json, reply_lines, reply_text


def test_list_prints_models_as_json(capsys):
    server = ScriptedServer(reply_json({"models": [{"name": "llama3.2:latest", "size": 7, "digest": "abc"}]}))
    assert main(["list"], transport=server.transport) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["models"][0]["name"] == "llama3.2:latest"
    assert server.requests[0].url.path == "/api/tags"


def test_generate_prints_response_text(capsys):
    server = ScriptedServer(reply_json({"model": "llama3.2", "response": "Rayleigh scattering.", "done": True}))
    assert main(["generate", "llama3.2", "Why is the sky blue?"], transport=server.transport) == 0
    assert capsys.readouterr().out.strip() == "Rayleigh scattering."
    assert server.body()["prompt"] == "Why is the sky blue?"
    assert server.body()["options"] == {"temperature": 0.8, "top_p": 0.9, "top_k": 40}


def test_chat_stream_prints_tokens(capsys):
    server = ScriptedServer(reply_lines([
        '{"model":"m","message":{"role":"assistant","content":"Ahoy"}}',
        '{"model":"m","message":{"role":"assistant","content":" there"},"done":true}',
    ]))
    code = main(["chat", "m", "hello", "--system", "You are a pirate", "--stream"], transport=server.transport)
    assert code == 0
    assert capsys.readouterr().out.strip() == "Ahoy there"
    body = server.body()
    assert body["stream"] is True
    assert [m["role"] for m in body["messages"]] == ["system", "user"]


def test_delete_and_copy(capsys):
    server = ScriptedServer(reply_empty(200))
    assert main(["delete", "old"], transport=server.transport) == 0
    assert main(["copy", "a", "b"], transport=server.transport) == 0
    out = capsys.readouterr().out
    assert "deleted 'old'" in out
    assert "copied 'a' to 'b'" in out


def test_embed_single_text(capsys):
    server = ScriptedServer(reply_json({"model": "e", "embeddings": [[0.5, 0.25]]}))
    assert main(["embed", "e", "hello"], transport=server.transport) == 0
    assert server.body()["input"] == "hello"
    assert json.loads(capsys.readouterr().out)["embeddings"] == [[0.5, 0.25]]


def test_model_not_found_exits_with_error(capsys):
    server = ScriptedServer(reply_text('{"error":"model not found"}', status=404))
    assert main(["show", "ghost"], transport=server.transport) == 1
    assert "Model 'ghost' not found" in capsys.readouterr().err


def test_headers_and_base_url_are_applied():
    server = ScriptedServer(reply_json({"models": []}))
    argv = ["--base-url", "http://gpu-box:9999", "--header", "Authorization=Bearer t", "ps"]
    assert main(argv, transport=server.transport) == 0
    sent = server.requests[0]
    assert sent.url.host == "gpu-box"
    assert sent.url.port == 9999
    assert sent.headers["authorization"] == "Bearer t"


def test_build_config_applies_overrides():
    args = build_parser().parse_args(["--retries", "0", "--log-level", "DEBUG", "list"])
    cfg = build_config(args, {"X-A": "1"})
    assert cfg.max_retries == 0
    assert cfg.logging_enabled is True
    assert cfg.logging_level == "DEBUG"
    assert cfg.custom_headers == {"X-A": "1"}


def test_bad_header_is_a_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main(["--header", "no-separator", "list"])
    assert excinfo.value.code == 2


def test_missing_command_is_a_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_sampling_defaults_come_from_settings(monkeypatch):
    monkeypatch.setenv("OLLAMAKIT_DEFAULT_TEMPERATURE", "0.1")
    server = ScriptedServer(reply_json({"model": "m", "message": {"role": "assistant", "content": "ok"}}))
    assert main(["chat", "m", "hi"], transport=server.transport) == 0
    assert server.body()["options"]["temperature"] == 0.1


def test_pull_falls_back_to_default_model(monkeypatch, capsys):
    monkeypatch.setenv("OLLAMAKIT_DEFAULT_MODEL", "qwen2.5:0.5b")
    server = ScriptedServer(reply_json({"status": "success"}))
    assert main(["pull"], transport=server.transport) == 0
    assert server.body()["model"] == "qwen2.5:0.5b"
    assert server.body()["stream"] is False
    assert capsys.readouterr().out.strip() == "success"


def test_log_bodies_flag_enables_body_logging():
    args = build_parser().parse_args(["--log-bodies", "list"])
    cfg = build_config(args, {})
    assert cfg.log_request_body is True
    assert cfg.log_response_body is True
    assert build_config(build_parser().parse_args(["list"]), {}).log_request_body is False
