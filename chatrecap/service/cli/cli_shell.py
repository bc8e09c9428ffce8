"""Interactive chat shell.

Purpose
-------
Presentation-only loop around :class:`ConversationSession`: read a message,
print the answer, repeat. Input is read with :func:`asyncio.to_thread` so the
event loop keeps running background summaries while the user types.

Commands (prefixed with a backslash):
    - ``\\stats``: Number of turns and total tokens
    - ``\\summary``: Print the running summary
    - ``\\summarize``: Summarize the whole history now
    - ``\\history``: One line per turn (its gloss when available)
    - ``\\delete N``: Drop the last N turns
    - ``\\help`` / ``\\h``: List the commands
    - ``\\quit`` / ``\\exit``: Leave the shell
"""

from __future__ import annotations

import asyncio
import shlex
from typing import Awaitable, Callable, List, Optional

from ...base.errors import ChatRecapError
from ...session import ConversationSession

Reader = Callable[[str], Awaitable[Optional[str]]]
Printer = Callable[[str], None]

COMMANDS = ("stats", "summary", "summarize", "history", "delete", "help", "quit")


async def read_line(prompt: str) -> Optional[str]:
    """Read one line off the loop thread; ``None`` on EOF."""
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


class ChatShell:
    """Holds the interactive state and executes messages and commands.

    Parameters
    ----------
    session: ConversationSession
        The conversation to drive.
    eof: str
        End-of-message marker. ``"\\n"`` sends each line; any other marker
        collects lines until one ends with it.
    reader: Reader
        Async line reader (defaults to stdin).
    printer: Printer
        Output sink (defaults to ``print``).
    """

    def __init__(
        self,
        session: ConversationSession,
        *,
        eof: str = "\n",
        reader: Optional[Reader] = None,
        printer: Optional[Printer] = None,
    ) -> None:
        self.session = session
        self.eof = eof
        self.reader = reader or read_line
        self.printer = printer or print
        self.running = True

    async def read_message(self) -> Optional[str]:
        """Return the next message with the EOF marker removed (``None`` on EOF)."""
        line = await self.reader("> ")
        if line is None or self.eof == "\n":
            return line
        lines: List[str] = [line]
        while not lines[-1].endswith(self.eof):
            more = await self.reader("  ")
            if more is None:
                break
            lines.append(more)
        text = "\n".join(lines)
        return text[: -len(self.eof)] if text.endswith(self.eof) else text

    async def run(self) -> int:
        await self.session.init()
        self._greet()
        while self.running:
            message = await self.read_message()
            if message is None:
                break
            if not message.strip():
                continue
            if message.startswith("\\"):
                await self.handle_command(message[1:])
            else:
                await self.handle_message(message)
        await self.session.drain()
        return 0

    async def handle_message(self, message: str) -> None:
        try:
            self.printer(await self.session.chat(message))
        except ChatRecapError as exc:
            self.printer(f"Error: {exc}")

    async def handle_command(self, line: str) -> None:
        """Execute one backslash command (without the backslash)."""
        try:
            args = shlex.split(line)
        except ValueError:
            args = line.split()
        if not args:
            self.printer("Type \\help to list the commands.")
            return
        cmd, rest = args[0].lower(), args[1:]

        if cmd == "stats":
            stats = self.session.stats()
            self.printer(
                f"The conversation contains {stats['turns']} turns and a total of {stats['tokens']} tokens."
            )
        elif cmd == "summary":
            if self.session.summary:
                self.printer(self.session.summary)
            else:
                self.printer("There is no summary yet. Use the command \\summarize to create one.")
        elif cmd == "summarize":
            if not len(self.session.history):
                self.printer("Nothing to summarize yet.")
                return
            try:
                self.printer(await self.session.summarize())
            except ChatRecapError as exc:
                self.printer(f"Error: {exc}")
        elif cmd == "history":
            for i, turn in enumerate(self.session.history):
                text = turn.turn_summary or turn.input
                self.printer(f"{i}.\t" + text.replace("\n", "\n\t"))
        elif cmd == "delete":
            self._delete(rest)
        elif cmd in ("help", "h"):
            self.printer("The available commands are: " + ", ".join(COMMANDS))
        elif cmd in ("quit", "exit", "q"):
            self.running = False
        else:
            self.printer(f"No such command: {cmd}")

    def _delete(self, args: List[str]) -> None:
        try:
            count = abs(int(args[0]))
        except (IndexError, ValueError):
            count = 0
        if not count:
            self.printer(
                "The 'delete' command should be followed by the number of turns to delete, "
                "eg. 1 to delete only the last turn"
            )
            return
        removed = self.session.delete_last(count)
        self.printer(f"Deleted the last {len(removed)} turns")

    def _greet(self) -> None:
        names = self.session.names
        model = self.session.default_model or "(catalog default)"
        send = "hitting <Enter>" if self.eof == "\n" else f"typing: {self.eof}"
        self.printer(f"Using model: {model}")
        self.printer(f"Send by {send}")
        self.printer(f"Hi {names.user}. What's on your mind?")


__all__ = ["ChatShell", "read_line", "COMMANDS"]
