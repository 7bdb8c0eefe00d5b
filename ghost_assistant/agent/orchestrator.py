"""Chat orchestrator that drives one tool-calling turn at a time.

A turn starts when the user sends a message and ends once the model's reply
has been shown (plain text) or folded back into the conversation (tool call).
Tool calls are never shown verbatim; the user sees short system notices
instead while the raw call and its result are recorded in the conversation
log so the model can summarise the outcome on the next completion.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from ..confirm import ApprovalGate, ConfirmCallback
from ..history_store import ChatMessage, MessageSender
from ..llm.client import CompletionError, LLMClient
from ..llm.prompt import build_system_prompt
from ..log import logger
from ..settings import AppSettings, ChatSettings
from ..telemetry import log_event
from ..tools.base import ATTACHED_PROCESS_KEY, Tool, ToolExecutionError
from ..tools.process import ProcessInfo
from ..tools.registry import ToolRegistry, build_default_registry
from ..tools.utils import log_tool
from ..util.strings import preview
from .conversation import ConversationLog, Role
from .extractor import ToolCall, extract_tool_call
from .turn import TurnOutcome, TurnResult, TurnState

WELCOME_MESSAGE = "Welcome, Guardian! Ghost at your service. How can I assist you today?"
TOOL_OUTPUT_PREFIX = "Tool output: "
COMPLETION_ERROR_PREFIX = "Error: Could not get response from Ghost."
_NOTICE_RESULT_LIMIT = 1000

MessageListener = Callable[[ChatMessage], None]


@runtime_checkable
class SupportsChatLLM(Protocol):
    """Interface expected from completion clients used by the orchestrator."""

    async def complete_async(self, messages: Sequence[Mapping[str, Any]]) -> str:
        """Return the assistant reply for ordered chat *messages*."""


class ChatOrchestrator:
    """Own the conversation log, transcript and turn state of one chat session."""

    def __init__(
        self,
        llm: SupportsChatLLM,
        registry: ToolRegistry,
        gate: ApprovalGate | None = None,
        *,
        settings: ChatSettings | None = None,
        on_message: MessageListener | None = None,
    ) -> None:
        self._llm = llm
        self._registry = registry
        self._settings = settings or ChatSettings()
        self._gate = gate or ApprovalGate(mode=self._settings.approval_mode)
        self._on_message = on_message
        self._log = ConversationLog(self._settings.max_history_entries)
        self._transcript: list[ChatMessage] = []
        self._turn_messages: list[ChatMessage] = []
        self._state = TurnState.IDLE
        self._attached_process: ProcessInfo | None = None
        self._system_prompt = build_system_prompt(
            self._registry.list(), self._settings.system_prompt
        )
        self.start_new_chat()

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        confirm_callback: ConfirmCallback | None = None,
        on_message: MessageListener | None = None,
    ) -> ChatOrchestrator:
        """Build an orchestrator wired to the real LLM client and tool catalog."""
        gate = ApprovalGate(confirm_callback, mode=settings.chat.approval_mode)
        return cls(
            LLMClient(settings.llm),
            build_default_registry(settings),
            gate,
            settings=settings.chat,
            on_message=on_message,
        )

    # ------------------------------------------------------------------
    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def is_busy(self) -> bool:
        """Return ``True`` while a turn is in flight."""
        return self._state is not TurnState.IDLE

    @property
    def log(self) -> ConversationLog:
        return self._log

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return tuple(self._transcript)

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def attached_process(self) -> ProcessInfo | None:
        return self._attached_process

    # ------------------------------------------------------------------
    def attach_process(self, process: ProcessInfo) -> None:
        """Make *process* available to tools that declare they need it."""
        self._attached_process = process
        logger.info("Attached process %s", process.display_name)

    def detach_process(self) -> None:
        if self._attached_process is not None:
            logger.info("Detached process %s", self._attached_process.display_name)
        self._attached_process = None

    def start_new_chat(self) -> None:
        """Clear the transcript and re-seed the log with the system prompt."""
        self._ensure_idle()
        self._log.reset(self._system_prompt)
        self._transcript = []
        self._show(ChatMessage(WELCOME_MESSAGE, MessageSender.ASSISTANT))

    def load_transcript(self, messages: Iterable[ChatMessage]) -> None:
        """Replace the session with saved *messages*.

        Only user and assistant messages are replayed into the conversation
        log; system notices stay visible in the transcript only.
        """
        self._ensure_idle()
        loaded = list(messages)
        self._transcript = loaded
        self._log.rebuild_from_transcript(self._system_prompt, loaded)

    def _ensure_idle(self) -> None:
        if self.is_busy:
            raise RuntimeError("cannot change the chat while a turn is in progress")

    # ------------------------------------------------------------------
    def send_message(self, text: str) -> TurnResult | None:
        """Synchronous counterpart to :meth:`send_message_async`."""
        return self._run_sync(self.send_message_async(text))

    async def send_message_async(self, text: str) -> TurnResult | None:
        """Process one user message and return the turn summary.

        Returns ``None`` without side effects when *text* is blank or another
        turn is still in flight.
        """
        if self.is_busy or not text or not text.strip():
            return None
        self._state = TurnState.AWAITING_COMPLETION
        self._turn_messages = []
        try:
            self._log.append(Role.USER, text)
            self._show(ChatMessage(text, MessageSender.USER))
            result = await self._run_turn()
            result.messages = list(self._turn_messages)
            return result
        finally:
            self._state = TurnState.RESOLVED
            self._log.truncate()
            self._turn_messages = []
            self._state = TurnState.IDLE

    # ------------------------------------------------------------------
    async def _run_turn(self) -> TurnResult:
        tool_results: list[str] = []
        last_call: ToolCall | None = None
        last_outcome: TurnOutcome | None = None
        rounds = 0
        while True:
            self._state = TurnState.AWAITING_COMPLETION
            self._log.truncate()
            try:
                reply = await self._request_completion()
            except CompletionError as exc:
                self._notify(f"{COMPLETION_ERROR_PREFIX} {exc.message}")
                return TurnResult(
                    TurnOutcome.COMPLETION_ERROR,
                    call=last_call,
                    tool_results=tool_results,
                    error=exc.message,
                )

            call = extract_tool_call(reply)
            if call is None:
                self._state = TurnState.DIRECT
                self._log.append(Role.ASSISTANT, reply)
                self._show(ChatMessage(reply, MessageSender.ASSISTANT))
                return TurnResult(
                    last_outcome or TurnOutcome.NO_CALL,
                    reply=reply,
                    call=last_call,
                    tool_results=tool_results,
                )

            result_text, last_outcome = await self._dispatch(call)
            self._log.append(Role.ASSISTANT, reply)
            self._log.append(Role.USER, f"{TOOL_OUTPUT_PREFIX}{result_text}")
            tool_results.append(result_text)
            last_call = call
            rounds += 1
            if (
                not self._settings.follow_up_tool_results
                or rounds >= self._settings.max_tool_rounds
            ):
                return TurnResult(last_outcome, call=call, tool_results=tool_results)

    async def _request_completion(self) -> str:
        messages = self._log.to_messages()
        try:
            reply = await self._llm.complete_async(messages)
        except CompletionError:
            raise
        except Exception as exc:
            logger.exception("Completion request failed")
            raise CompletionError(str(exc) or type(exc).__name__) from exc
        if not isinstance(reply, str) or not reply.strip():
            raise CompletionError("LLM response was empty")
        return reply

    async def _dispatch(self, call: ToolCall) -> tuple[str, TurnOutcome]:
        name = call.tool_name
        self._notify(f"Ghost is attempting to use tool: '{name}'.")
        tool = self._registry.resolve(name)
        if tool is None:
            self._notify(f"Unknown tool requested: '{name}'.")
            log_event("TOOL_UNKNOWN", {"tool": name, "params": call.parameters})
            return f"Assistant requested an unknown tool: '{name}'.", TurnOutcome.UNKNOWN_TOOL

        if self._gate.requires_approval(name):
            self._state = TurnState.PENDING_APPROVAL
            self._notify(f"Awaiting user confirmation for tool: {name}...")
            if not await self._request_approval(name, call.parameters):
                self._notify(f"Tool '{name}' execution denied by user.")
                log_event("TOOL_DENIED", {"tool": name, "params": call.parameters})
                return f"User denied execution for tool {name}.", TurnOutcome.DENIED
            self._notify(f"User approved tool: {name}. Executing...")
        else:
            self._notify(f"Executing tool: {name}...")

        self._state = TurnState.EXECUTING
        parameters = call.with_context(self._context_for(tool))
        result, outcome = await self._execute(tool, parameters)
        log_tool(name, parameters, result)
        self._notify(f"Tool '{name}' result: {preview(result, _NOTICE_RESULT_LIMIT)}")
        return result, outcome

    async def _request_approval(self, name: str, parameters: Mapping[str, Any]) -> bool:
        try:
            return await self._gate.request_approval_async(name, parameters)
        except Exception:
            logger.exception("Approval callback failed for tool %s; treating as denied", name)
            return False

    async def _execute(
        self, tool: Tool, parameters: dict[str, Any]
    ) -> tuple[str, TurnOutcome]:
        try:
            result = await asyncio.to_thread(tool.execute, parameters)
        except ToolExecutionError as exc:
            return f"Error: {exc}", TurnOutcome.FAILED
        except Exception as exc:
            logger.exception("Tool %s raised an unexpected error", tool.name)
            self._notify(f"Critical error during execution of tool '{tool.name}': {exc}")
            return f"Error executing tool '{tool.name}': {exc}", TurnOutcome.FAILED
        return str(result), TurnOutcome.EXECUTED

    def _context_for(self, tool: Tool) -> dict[str, Any]:
        if tool.needs_attached_process and self._attached_process is not None:
            return {ATTACHED_PROCESS_KEY: self._attached_process}
        return {}

    # ------------------------------------------------------------------
    def _show(self, message: ChatMessage) -> None:
        self._transcript.append(message)
        if self.is_busy:
            self._turn_messages.append(message)
        if self._on_message is not None:
            self._on_message(message)

    def _notify(self, text: str) -> None:
        self._show(ChatMessage(text, MessageSender.SYSTEM))

    @staticmethod
    def _run_sync(coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        coro.close()
        raise RuntimeError(
            "Synchronous ChatOrchestrator methods cannot run inside an active "
            "asyncio event loop; use the async variants instead."
        )
