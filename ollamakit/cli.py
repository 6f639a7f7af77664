#!/usr/bin/env python3
"""
Command-line front-end for ollamakit.
"""

import argparse
import asyncio
import dataclasses
import sys
from typing import Awaitable, Callable, Dict, Optional

import httpx
from dotenv import load_dotenv

from .client import OllamaClient
from .domain.errors import OllamaError
from .domain.interfaces import StreamingOllamaApi
from .domain.models.common import Message, ModelOptions
from .domain.models.requests import (
    ChatRequest,
    CopyRequest,
    DeleteRequest,
    EmbedRequest,
    GenerateRequest,
    PullRequest,
    ShowRequest,
)
from .infrastructure.config.client_config import VALID_LOGGING_LEVELS, ClientConfiguration
from .infrastructure.config.settings import get_settings, reload_settings
from .utils import parse_header, setup_logging


def _print_json(record) -> None:
    print(record.model_dump_json(indent=2, exclude_none=True, by_alias=True))


def _default_options() -> ModelOptions:
    """Sampling defaults from the library settings."""
    s = get_settings()
    return ModelOptions(temperature=s.default_temperature, top_p=s.default_top_p, top_k=s.default_top_k)


def _model_or_default(args: argparse.Namespace) -> str:
    return args.model or get_settings().default_model


async def _cmd_list(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    _print_json(await client.list())


async def _cmd_ps(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    _print_json(await client.ps())


async def _cmd_show(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    _print_json(await client.show(ShowRequest(model=_model_or_default(args))))


async def _cmd_generate(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    request = GenerateRequest(model=args.model, prompt=args.prompt, options=_default_options())
    if args.stream:
        async for chunk in client.stream_generate(request):
            print(chunk.response, end="", flush=True)
        print()
        return
    print((await client.generate(request)).response)


async def _cmd_chat(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    messages = []
    if args.system:
        messages.append(Message.system(args.system))
    messages.append(Message.user(args.message))
    request = ChatRequest(model=args.model, messages=messages, options=_default_options())
    if args.stream:
        async for chunk in client.stream_chat(request):
            if chunk.message is not None:
                print(chunk.message.content, end="", flush=True)
        print()
        return
    response = await client.chat(request)
    print(response.message.content if response.message is not None else "")


async def _cmd_pull(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    request = PullRequest(model=_model_or_default(args))
    if args.stream:
        async for progress in client.stream_pull(request):
            if progress.total:
                print(f"{progress.status} {progress.completed}/{progress.total}", flush=True)
            else:
                print(progress.status, flush=True)
        return
    print((await client.pull(request)).status)


async def _cmd_delete(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    await client.delete(DeleteRequest(model=args.model))
    print(f"deleted '{args.model}'")


async def _cmd_copy(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    await client.copy(CopyRequest(source=args.source, destination=args.destination))
    print(f"copied '{args.source}' to '{args.destination}'")


async def _cmd_embed(client: StreamingOllamaApi, args: argparse.Namespace) -> None:
    text = args.text[0] if len(args.text) == 1 else list(args.text)
    _print_json(await client.embed(EmbedRequest(model=args.model, input=text)))


_COMMANDS: Dict[str, Callable[[StreamingOllamaApi, argparse.Namespace], Awaitable[None]]] = {
    "list": _cmd_list,
    "ps": _cmd_ps,
    "show": _cmd_show,
    "generate": _cmd_generate,
    "chat": _cmd_chat,
    "pull": _cmd_pull,
    "delete": _cmd_delete,
    "copy": _cmd_copy,
    "embed": _cmd_embed,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollamakit",
        description="Talk to a local Ollama server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list                                   # Installed models
  %(prog)s generate llama3.2 "Why is the sky blue?" --stream
  %(prog)s chat llama3.2 "Hello" --system "Answer briefly"
  %(prog)s --base-url http://gpu-box:11434 ps     # Another server
        """
    )
    parser.add_argument('--base-url',
                        help='Server URL (default: from settings, http://localhost:11434)')
    parser.add_argument('--retries',
                        type=int,
                        help='Retries for 5xx and transient network failures')
    parser.add_argument('--header',
                        action='append',
                        default=[],
                        metavar='NAME=VALUE',
                        help='Extra request header (repeatable)')
    parser.add_argument('--log-level',
                        choices=list(VALID_LOGGING_LEVELS),
                        help='Enable request logging at this level')
    parser.add_argument('--log-bodies',
                        action='store_true',
                        help='Also log request and response bodies')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('list', help='List local models')
    sub.add_parser('ps', help='List running models')

    p = sub.add_parser('show', help='Show model details')
    p.add_argument('model', nargs='?', help='Model name (default: settings default_model)')

    p = sub.add_parser('generate', help='Generate a completion')
    p.add_argument('model')
    p.add_argument('prompt')
    p.add_argument('--stream', action='store_true', help='Print tokens as they arrive')

    p = sub.add_parser('chat', help='Send one chat message')
    p.add_argument('model')
    p.add_argument('message')
    p.add_argument('--system', help='System prompt')
    p.add_argument('--stream', action='store_true', help='Print tokens as they arrive')

    p = sub.add_parser('pull', help='Download a model')
    p.add_argument('model', nargs='?', help='Model name (default: settings default_model)')
    p.add_argument('--stream', action='store_true', help='Show progress')

    p = sub.add_parser('delete', help='Delete a model')
    p.add_argument('model')

    p = sub.add_parser('copy', help='Copy a model')
    p.add_argument('source')
    p.add_argument('destination')

    p = sub.add_parser('embed', help='Embed one or more texts')
    p.add_argument('model')
    p.add_argument('text', nargs='+')
    return parser


def build_config(args: argparse.Namespace, headers: Dict[str, str]) -> ClientConfiguration:
    """Settings-derived configuration with command-line overrides applied."""
    config = ClientConfiguration.from_settings(reload_settings())
    if args.base_url:
        config = dataclasses.replace(config, base_url=args.base_url)
    if args.retries is not None:
        config = config.with_retry(args.retries)
    if headers:
        config = config.with_headers(headers)
    if args.log_level:
        config = config.with_logging(True, args.log_level)
    if args.log_bodies:
        config = config.with_verbose_bodies()
    return config


async def _run(args: argparse.Namespace, headers: Dict[str, str],
               transport: Optional[httpx.AsyncBaseTransport]) -> int:
    config = build_config(args, headers)
    async with OllamaClient(config, transport=transport) as client:
        await _COMMANDS[args.command](client, args)
    return 0


def main(argv=None, transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    """Main entry point for the ollamakit CLI."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        headers = dict(parse_header(h) for h in args.header)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(args.log_level or "WARN")

    try:
        return asyncio.run(_run(args, headers, transport))
    except OllamaError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
