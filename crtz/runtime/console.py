"""
Console - where narrative output goes and choice input comes from.
"""

from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO


class Console:
    """Standard-stream console."""

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def write(self, text: str = "") -> None:
        """Write one line of output."""
        print(text, file=self.stdout)

    def error(self, text: str) -> None:
        print(text, file=self.stderr)

    def prompt(self, text: str) -> Optional[str]:
        """
        Show a prompt and read one line.

        Returns:
            The line without its newline, or None at end of input
        """
        self.stdout.write(text)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip('\n')


class ScriptedConsole(Console):
    """
    Console that replays canned input and records output.

    Usage:
        console = ScriptedConsole(["2", "1"])
        Interpreter(program, console=console).run()
        assert "[Dialogue ended]" in console.lines
    """

    def __init__(self, inputs: Iterable[str] = ()):
        self._inputs = list(inputs)
        self.lines: list[str] = []
        self.errors: list[str] = []
        self.prompts: list[str] = []

    def write(self, text: str = "") -> None:
        self.lines.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)

    def prompt(self, text: str) -> Optional[str]:
        self.prompts.append(text)
        if not self._inputs:
            return None
        return self._inputs.pop(0)

    @property
    def output(self) -> str:
        return '\n'.join(self.lines)
