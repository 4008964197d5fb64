"""Tests for the command line."""

from unittest.mock import AsyncMock, patch

import pytest

from acai import cli
from acai.chat_client import ChatCompletionClient
from acai.errors import ProviderError
from acai.models import Message
from acai.operations import Complete, Fix


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("acai.cli.configure_logging"):
        yield


def test_parser_accepts_global_options():
    args = cli.make_parser().parse_args(["--model", "sonnet", "--temperature", "0.2", "--max-tokens", "50", "fix", "--prompt", "null check"])
    assert args.command == "fix"
    assert args.model == "sonnet"
    assert args.temperature == 0.2
    assert args.max_tokens == 50
    assert args.top_p is None
    assert args.prompt == "null check"


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.make_parser().parse_args([])


def test_operation_prints_reply(capsys):
    send = AsyncMock(return_value=Message.assistant("fixed code"))
    with (
        patch.object(Fix, "send", send),
        patch("acai.cli.read_stdin_context", return_value="broken code"),
    ):
        code = cli.main(["fix", "--prompt", "make it work"])

    assert code == 0
    assert capsys.readouterr().out == "fixed code\n"
    send.assert_awaited_once()


def test_complete_prints_reassembled_text(capsys):
    with (
        patch.object(Complete, "send", AsyncMock(return_value="foo(x)bar")),
        patch("acai.cli.read_stdin_context", return_value="foo(<fim>)bar"),
    ):
        assert cli.main(["complete"]) == 0
    assert capsys.readouterr().out == "foo(x)bar\n"


def test_missing_credential_exits_with_status_one(monkeypatch, capsys):
    monkeypatch.delenv("OPENAI_API_KEY")
    with patch("acai.cli.read_stdin_context", return_value="code"):
        code = cli.main(["instruct", "--prompt", "refactor"])

    assert code == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().err


def test_provider_error_exits_with_status_one(capsys):
    error = ProviderError("GPT-4o", 429, {"error": "rate limited"}, '{"error": "rate limited"}')
    with (
        patch.object(Fix, "send", AsyncMock(side_effect=error)),
        patch("acai.cli.read_stdin_context", return_value="code"),
    ):
        assert cli.main(["fix"]) == 1
    assert "rate limited" in capsys.readouterr().err


def test_chat_loop_until_bye(capsys):
    send = AsyncMock(return_value=Message.assistant("hi there"))
    with (
        patch.object(ChatCompletionClient, "send_message", send),
        patch("acai.cli.read_stdin_context", return_value=None),
        patch("builtins.input", side_effect=["hello", "", "bye", "never read"]),
    ):
        assert cli.main(["chat"]) == 0

    assert send.await_count == 1
    assert send.await_args.args[0] == Message.user("hello")
    assert "hi there" in capsys.readouterr().out


def test_chat_sends_piped_context_first_and_survives_errors(capsys):
    send = AsyncMock(side_effect=[ProviderError("GPT-4o", 500, {}, "{}"), Message.assistant("second answer")])
    with (
        patch.object(ChatCompletionClient, "send_message", send),
        patch("acai.cli.read_stdin_context", return_value="print('x')"),
        patch("builtins.input", side_effect=["why?", EOFError]),
    ):
        assert cli.main(["--model", "haiku", "chat"]) == 0

    assert [c.args[0] for c in send.await_args_list] == [Message.user("print('x')"), Message.user("why?")]
    out = capsys.readouterr().out
    assert "Error: GPT-4o" in out
    assert "second answer" in out


def test_chat_saves_history_when_enabled(monkeypatch, isolated_config):
    monkeypatch.setattr(isolated_config, "save_history", True)
    with (
        patch.object(ChatCompletionClient, "send_message", AsyncMock(return_value=None)),
        patch("acai.cli.read_stdin_context", return_value=None),
        patch("builtins.input", side_effect=["hello", "bye"]),
    ):
        assert cli.main(["chat"]) == 0

    saved = list((isolated_config.data_dir / "messages").glob("*.json"))
    assert len(saved) == 1


def test_lsp_runs_language_server():
    with patch("acai.cli.start_stdio") as start:
        assert cli.main(["lsp"]) == 0
    start.assert_called_once_with()
