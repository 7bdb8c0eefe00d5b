"""Command implementations for the CLI interface."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from typing import Callable

from ghost_assistant.confirm import auto_confirm, confirm
from ghost_assistant.history_store import (
    ChatHistoryStore,
    ChatMessage,
    MessageSender,
    validate_chat_name,
)
from ghost_assistant.settings import AppSettings
from ghost_assistant.util.time import format_timestamp


@dataclass
class Command:
    """Describe a CLI command and its argument handler."""

    func: Callable[[argparse.Namespace], int | None]
    help: str
    add_arguments: Callable[[argparse.ArgumentParser], None]


def format_message(message: ChatMessage) -> str:
    """Return a one-message transcript line for terminal output."""
    stamp = format_timestamp(message.timestamp)
    return f"[{stamp}] {message.sender.value}: {message.text}"


def _print_message(message: ChatMessage) -> None:
    if message.sender is MessageSender.USER:
        return
    sys.stdout.write(format_message(message) + "\n")
    sys.stdout.flush()


def _build_orchestrator(args: argparse.Namespace, *, echo: bool = True):
    from ghost_assistant.agent import ChatOrchestrator

    settings: AppSettings = args.app_settings
    callback = auto_confirm if getattr(args, "yes", False) else confirm
    listener = _print_message if echo else None
    orchestrator = ChatOrchestrator.from_settings(
        settings,
        confirm_callback=callback,
        on_message=listener,
    )
    return orchestrator


def _history_store(args: argparse.Namespace) -> ChatHistoryStore:
    return ChatHistoryStore(args.app_settings.chat.history_dir)


def _lookup_process(pid: str | int):
    from ghost_assistant.tools.process import ProcessInfo

    try:
        number = int(pid)
    except (TypeError, ValueError):
        raise LookupError(f"'{pid}' is not a process id.") from None
    return ProcessInfo.from_pid(number)


# ----------------------------------------------------------------------
def _handle_slash_command(
    line: str, orchestrator, store: ChatHistoryStore
) -> bool:
    """Run a ``/command`` typed in the REPL; return ``False`` to quit."""
    command, _, argument = line[1:].partition(" ")
    command = command.lower()
    argument = argument.strip()
    if command in {"quit", "exit"}:
        return False
    if command == "new":
        orchestrator.start_new_chat()
    elif command == "save":
        try:
            path = store.save_chat(orchestrator.transcript, argument)
        except ValueError as exc:
            sys.stdout.write(f"Error: {exc}\n")
        else:
            sys.stdout.write(f"Chat saved to {path}\n")
    elif command == "load":
        try:
            messages = store.load_chat(argument)
        except ValueError as exc:
            sys.stdout.write(f"Error: {exc}\n")
            return True
        if messages is None:
            sys.stdout.write(f"Error: chat '{argument}' could not be loaded.\n")
            return True
        orchestrator.load_transcript(messages)
        for message in messages:
            sys.stdout.write(format_message(message) + "\n")
    elif command == "chats":
        for name in store.list_chats():
            sys.stdout.write(f"{name}\n")
    elif command == "attach":
        try:
            process = _lookup_process(argument)
        except LookupError as exc:
            sys.stdout.write(f"Error: {exc}\n")
            return True
        orchestrator.attach_process(process)
        sys.stdout.write(f"Attached to {process.display_name}\n")
    elif command == "detach":
        orchestrator.detach_process()
        sys.stdout.write("Detached\n")
    else:
        sys.stdout.write(
            "Commands: /new, /save NAME, /load NAME, /chats, /attach PID, "
            "/detach, /quit\n"
        )
    return True


def cmd_chat(args: argparse.Namespace) -> int:
    """Run an interactive chat session on the terminal."""
    orchestrator = _build_orchestrator(args)
    store = _history_store(args)
    while True:
        sys.stdout.write("You> ")
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            sys.stdout.write("\n")
            break
        text = line.rstrip("\n")
        if text.startswith("/"):
            if not _handle_slash_command(text.strip(), orchestrator, store):
                break
            continue
        orchestrator.send_message(text)
    return 0


def add_chat_arguments(p: argparse.ArgumentParser) -> None:
    """Configure parser for the ``chat`` command."""
    p.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="approve every tool call without asking",
    )


def cmd_ask(args: argparse.Namespace) -> int:
    """Send a single message and print the visible replies."""
    try:
        for name in (args.load, args.save):
            if name is not None:
                validate_chat_name(name)
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    orchestrator = _build_orchestrator(args, echo=False)
    if args.load:
        messages = _history_store(args).load_chat(args.load)
        if messages is None:
            sys.stderr.write(f"chat '{args.load}' could not be loaded\n")
            return 1
        orchestrator.load_transcript(messages)
    if args.attach is not None:
        try:
            orchestrator.attach_process(_lookup_process(args.attach))
        except LookupError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
    result = orchestrator.send_message(" ".join(args.text))
    if result is None:
        sys.stderr.write("nothing to send\n")
        return 1
    for message in result.messages:
        _print_message(message)
    if args.save:
        _history_store(args).save_chat(orchestrator.transcript, args.save)
    return 1 if result.error else 0


def add_ask_arguments(p: argparse.ArgumentParser) -> None:
    """Configure parser for the ``ask`` command."""
    p.add_argument("text", nargs="+", help="message to send")
    p.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="approve every tool call without asking",
    )
    p.add_argument("--load", help="continue the saved chat NAME")
    p.add_argument("--save", help="save the resulting chat as NAME")
    p.add_argument(
        "--attach",
        metavar="PID",
        type=int,
        help="attach the running process PID for tools that inspect it",
    )


def cmd_tools(args: argparse.Namespace) -> int:
    """List the tool catalog in registration order."""
    from ghost_assistant.confirm import requires_approval
    from ghost_assistant.tools import build_default_registry

    registry = build_default_registry(args.app_settings)
    for name, description in registry.list():
        marker = " [approval]" if requires_approval(name) else ""
        sys.stdout.write(f"{name}{marker}\n")
        if args.descriptions:
            sys.stdout.write(f"    {description}\n")
    return 0


def add_tools_arguments(p: argparse.ArgumentParser) -> None:
    """Configure parser for the ``tools`` command."""
    p.add_argument(
        "-d",
        "--descriptions",
        action="store_true",
        help="include tool descriptions",
    )


def cmd_history(args: argparse.Namespace) -> int:
    """List, show or delete saved chats."""
    store = _history_store(args)
    try:
        for name in (args.delete, args.show):
            if name is not None:
                validate_chat_name(name)
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    if args.delete:
        if not store.delete_chat(args.delete):
            sys.stderr.write(f"chat '{args.delete}' not found\n")
            return 1
        return 0
    if args.show:
        messages = store.load_chat(args.show)
        if messages is None:
            sys.stderr.write(f"chat '{args.show}' could not be loaded\n")
            return 1
        for message in messages:
            sys.stdout.write(format_message(message) + "\n")
        return 0
    for name in store.list_chats():
        sys.stdout.write(f"{name}\n")
    return 0


def add_history_arguments(p: argparse.ArgumentParser) -> None:
    """Configure parser for the ``history`` command."""
    group = p.add_mutually_exclusive_group()
    group.add_argument("--show", metavar="NAME", help="print saved chat NAME")
    group.add_argument("--delete", metavar="NAME", help="delete saved chat NAME")


def cmd_check(args: argparse.Namespace) -> int:
    """Verify LLM connectivity using loaded settings."""
    from ghost_assistant.llm.client import LLMClient

    client = LLMClient(args.app_settings.llm)
    results = {"llm": client.check_llm()}
    sys.stdout.write(
        json.dumps(results, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
    )
    return 0 if results["llm"].get("ok") else 1


def add_check_arguments(p: argparse.ArgumentParser) -> None:
    """Configure parser for the ``check`` command."""


COMMANDS: dict[str, Command] = {
    "chat": Command(cmd_chat, "start an interactive chat", add_chat_arguments),
    "ask": Command(cmd_ask, "send a single message", add_ask_arguments),
    "tools": Command(cmd_tools, "list available tools", add_tools_arguments),
    "history": Command(cmd_history, "manage saved chats", add_history_arguments),
    "check": Command(cmd_check, "verify LLM settings", add_check_arguments),
}
