"""
Command line entry point.

Subcommands:
    chat                                    interactive conversation
    instruct / document / fix / optimize / suggest
                                            one-shot operation on piped code
    complete                                fill-in-middle on piped code
    lsp                                     language server on stdio
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from . import __version__
from .chat_client import ChatCompletionClient
from .completion_client import FIM_MARKER
from .config import config
from .errors import AcaiError, ConfigurationError
from .history import DataDir
from .lsp_server import start_stdio
from .models import Message
from .operations import CHAT_OPERATIONS, Complete
from .providers import MODEL_ALIASES, Model, Provider, resolve

logger = logging.getLogger(__name__)

CHAT_PROMPT = "> "
CHAT_EXIT_WORD = "bye"
DEFAULT_CHAT_MODEL = (Provider.OPENAI, Model.GPT4O)
CHAT_SYSTEM_PROMPT = (
    "You are a helpful coding assistant. Answer questions about code clearly and concisely. "
    "When asked for code, reply with complete and working snippets."
)


def configure_logging() -> None:
    """Log to stderr and to the log file in the data directory."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    try:
        config.data_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_path))
    except OSError as e:
        print(f"Cannot open log file {config.log_path}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def read_stdin_context() -> Optional[str]:
    """Code piped on stdin, or None for an interactive terminal."""
    if sys.stdin is None or sys.stdin.isatty():
        return None
    text = sys.stdin.read()
    return text or None


# =============================================================================
# Commands
# =============================================================================

async def _chat_turn(client: ChatCompletionClient, content: str) -> None:
    try:
        reply = await client.send_message(Message.user(content))
    except AcaiError as e:
        logger.error(f"Chat request failed: {e}")
        print(f"Error: {e}")
        return

    if reply is None:
        print("(no response)")
    else:
        print(f"\n{reply.content}\n")


async def run_chat(args: argparse.Namespace) -> int:
    """Interactive conversation until `bye`, end of input or Ctrl+C."""
    provider, model = resolve(args.model or "", DEFAULT_CHAT_MODEL)
    client = (
        ChatCompletionClient(provider, model, CHAT_SYSTEM_PROMPT)
        .set_temperature(args.temperature)
        .set_top_p(args.top_p)
        .set_max_tokens(args.max_tokens)
    )
    context = read_stdin_context()

    print(f"Chatting with {model.display_name} (type '{CHAT_EXIT_WORD}' to quit)")

    try:
        if context:
            await _chat_turn(client, context)

        while True:
            try:
                user_input = input(CHAT_PROMPT).strip()
            except EOFError:
                print()
                break
            if not user_input:
                continue
            if user_input.lower() == CHAT_EXIT_WORD:
                break
            await _chat_turn(client, user_input)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    finally:
        if config.save_history:
            DataDir().save_messages(client.get_message_history())

    return 0


async def run_operation(args: argparse.Namespace) -> int:
    operation = CHAT_OPERATIONS[args.command](
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        top_p=args.top_p,
        prompt=args.prompt,
        context=read_stdin_context(),
    )
    reply = await operation.send()
    if reply is not None:
        print(reply.content)
    return 0


async def run_complete(args: argparse.Namespace) -> int:
    operation = Complete(
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        top_p=args.top_p,
        context=read_stdin_context(),
    )
    text = await operation.send()
    if text is not None:
        print(text)
    return 0


# =============================================================================
# Entry point
# =============================================================================

def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="acai", description="AI coding assistant")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--model",
        help=f"Model alias ({', '.join(MODEL_ALIASES)}); unknown names use the command default",
    )
    parser.add_argument("--temperature", type=float)
    parser.add_argument("--max-tokens", type=int)
    parser.add_argument("--top-p", type=float)

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("chat", help="Interactive chat, with piped code as the first message")
    for name, operation in CHAT_OPERATIONS.items():
        sub = subparsers.add_parser(name, help=f"{operation.__name__} the code piped on stdin")
        sub.add_argument("--prompt", help="Additional instruction for the model")
    subparsers.add_parser("complete", help=f"Fill in the {FIM_MARKER} marker in piped code")
    subparsers.add_parser("lsp", help="Run the language server on stdio")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = make_parser().parse_args(argv)
    configure_logging()

    try:
        if args.command == "lsp":
            start_stdio()
            return 0
        if args.command == "chat":
            return asyncio.run(run_chat(args))
        if args.command == "complete":
            return asyncio.run(run_complete(args))
        return asyncio.run(run_operation(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except AcaiError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
