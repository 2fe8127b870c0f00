"""
Line debugger - pauses a run before nodes and inspects program state.

Usage:
    debugger = Debugger(console, stepping=True)
    Interpreter(program, console=console, debugger=debugger).run()

Commands at the `> ` prompt:
    step (s)            run to the next node
    continue (c)        run to the next breakpoint
    print (p) <var>     show a variable or obj.field
    variables (v)       list every variable and object field
    break (b) <line>    add a breakpoint
    delete <line>       remove a breakpoint
    breakpoints (b)     list breakpoints
    help (h)            list commands
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from crtz.lang.expressions import split_dotted
from crtz.runtime.console import Console

if TYPE_CHECKING:
    from crtz.lang.program import Program


HELP_TEXT = (
    "Debugger commands:",
    "  step (s):           Execute the next line.",
    "  continue (c):       Continue execution until the next breakpoint.",
    "  print (p) <var>:    Print the value of a variable.",
    "  variables (v):      List all variables.",
    "  break (b) <line>:   Set a breakpoint at the specified line.",
    "  delete <line>:      Remove a breakpoint at the specified line.",
    "  breakpoints (b):    List all breakpoints.",
    "  help (h):           Show this help message.",
)


class Debugger:
    """
    Breakpoint/step controller consulted before each node.

    Attributes:
        breakpoints: Source lines that pause execution
        stepping: Pause before every node
    """

    def __init__(self, console: Console | None = None, stepping: bool = False):
        self.console = console or Console()
        self.breakpoints: set[int] = set()
        self.stepping = stepping

    def add_breakpoint(self, line: int) -> None:
        self.breakpoints.add(line)

    def remove_breakpoint(self, line: int) -> None:
        self.breakpoints.discard(line)

    def step(self) -> None:
        self.stepping = True

    def continue_execution(self) -> None:
        self.stepping = False

    def should_pause(self, line: int) -> bool:
        return self.stepping or line in self.breakpoints

    def check(self, line: int, program: Program) -> None:
        """Pause at `line` if stepping or on a breakpoint, then serve commands."""
        if not self.should_pause(line):
            return

        self.console.write(f"Breakpoint at line {line}. Type 'help' for commands.")
        while True:
            command = self.console.prompt("> ")
            if command is None:
                # Input closed: let the run finish
                self.continue_execution()
                return
            if self.handle_command(command.strip(), program):
                return

    def handle_command(self, command: str, program: Program) -> bool:
        """
        Execute one command.

        Returns:
            True when execution should resume
        """
        name, _, arg = command.partition(' ')
        arg = arg.strip()

        if name in ("step", "s"):
            self.step()
            return True
        if name in ("continue", "c"):
            self.continue_execution()
            return True

        if name in ("print", "p"):
            if arg:
                self.print_variable(arg, program)
            else:
                self.console.write("Usage: print <variable>")
        elif name in ("help", "h"):
            for text in HELP_TEXT:
                self.console.write(text)
        elif name in ("variables", "v"):
            self.list_variables(program)
        elif name == "breakpoints" or (name == "b" and not arg):
            self.list_breakpoints()
        elif name in ("break", "b"):
            self._edit_breakpoint(arg, "break", self.add_breakpoint, "Breakpoint added at line")
        elif name == "delete":
            self._edit_breakpoint(arg, "delete", self.remove_breakpoint, "Breakpoint removed at line")
        else:
            self.console.write("Unknown command. Type 'help' for available commands.")
        return False

    def _edit_breakpoint(self, arg: str, usage: str, apply, message: str) -> None:
        if not arg:
            self.console.write(f"Usage: {usage} <line>")
            return
        try:
            line = int(arg)
        except ValueError:
            self.console.write("Invalid line number")
            return
        apply(line)
        self.console.write(f"{message} {line}")

    def print_variable(self, name: str, program: Program) -> None:
        variables = program.variables
        if name in variables.ints:
            self.console.write(f"{name} = {variables.ints[name]}")
        elif name in variables.bools:
            self.console.write(f"{name} = {'true' if variables.bools[name] else 'false'}")
        elif name in variables.strings:
            self.console.write(f"{name} = {variables.strings[name]}")
        else:
            instance_name, field_name = split_dotted(name)
            instance = program.objects.get(instance_name)
            if field_name and instance is not None and field_name in instance.fields:
                self.console.write(f"{name} = {instance.fields[field_name]}")
            else:
                self.console.write("Variable not found.")

    def list_variables(self, program: Program) -> None:
        variables = program.variables
        self.console.write("Integer variables:")
        for name, value in variables.ints.items():
            self.console.write(f"  {name} = {value}")

        self.console.write("Boolean variables:")
        for name, value in variables.bools.items():
            self.console.write(f"  {name} = {'true' if value else 'false'}")

        self.console.write("String variables:")
        for name, value in variables.strings.items():
            self.console.write(f"  {name} = {value}")

        self.console.write("Object fields:")
        for instance in program.objects.values():
            for field_name, value in instance.fields.items():
                self.console.write(f"  {instance.name}.{field_name} = {value}")

    def list_breakpoints(self) -> None:
        if not self.breakpoints:
            self.console.write("No breakpoints set.")
            return
        lines = ' '.join(str(line) for line in sorted(self.breakpoints))
        self.console.write(f"Breakpoints at lines: {lines}")
