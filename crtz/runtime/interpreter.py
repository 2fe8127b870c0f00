"""
Interpreter - walks the node graph of a parsed program.

Per visited node:
1. Render the node text ([@You] and ${...} interpolation).
2. If the node has choices, list them, read a valid choice id and move
   to its target. Choices pre-empt the node's actions entirely.
3. Otherwise run the actions in order. `goto`, a satisfied `if` (or its
   `else`) moves to another node; `end` stops the whole run.
4. A node that neither jumps nor ends finishes the run normally.

Script mistakes never raise: they are reported as diagnostics and
resolved with a default (usually 0 or a no-op).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

from crtz.core.config import RunConfig
from crtz.core.events import EventBus, ScriptEvent
from crtz.lang.ast import (
    Action,
    Choice,
    Display,
    End,
    Goto,
    If,
    Instantiate,
    MethodCall,
    Node,
    Print,
    Set,
    Show,
    Signal,
    Statement,
    StatementForm,
)
from crtz.lang.diagnostics import Diagnostic, Severity
from crtz.lang.expressions import evaluate, split_dotted
from crtz.lang.parser import resolve_statement
from crtz.lang.program import Instance, Program, Variables
from crtz.runtime.console import Console
from crtz.runtime.debugger import Debugger
from crtz.runtime.interpolation import render, substitute_player

if TYPE_CHECKING:
    from crtz.assets.pictures import PictureLoader

logger = logging.getLogger(__name__)


MAX_CALL_DEPTH = 64


class Termination(Enum):
    """How a run finished."""
    END = auto()                # an `end;` action
    NO_OUTGOING_EDGE = auto()   # a node without choices that did not jump
    UNKNOWN_NODE = auto()       # jumped to a node that does not exist
    NO_ENTRY = auto()           # the script declares no nodes
    INPUT_CLOSED = auto()       # input ran out at a choice prompt
    STEP_LIMIT = auto()         # RunConfig.max_steps reached


@dataclass
class RunResult:
    """Outcome of Interpreter.run()."""
    termination: Termination
    last_node: Optional[str] = None
    steps: int = 0


@dataclass
class Flow:
    """Outcome of running an action list."""
    jump: Optional[str] = None
    ended: bool = False

    @property
    def transferred(self) -> bool:
        return self.ended or self.jump is not None


class Interpreter:
    """
    Runs one program to a terminal state.

    The program's variable tables and object table are the live store:
    they are mutated in place, so run a `program.clone()` to keep the
    parsed original untouched.

    Args:
        program: Parsed program
        config: Run settings
        console: Output/input channel
        events: Bus that receives signals and lifecycle events
        debugger: Optional debugger consulted before each node
        pictures: Optional picture loader for `picture` declarations
    """

    def __init__(
        self,
        program: Program,
        config: Optional[RunConfig] = None,
        console: Optional[Console] = None,
        events: Optional[EventBus] = None,
        debugger: Optional[Debugger] = None,
        pictures: Optional[PictureLoader] = None,
    ):
        self.program = program
        self.config = config or RunConfig()
        self.console = console or Console()
        self.events = events or EventBus()
        if debugger is None and self.config.debug:
            debugger = Debugger(self.console, stepping=True)
        self.debugger = debugger
        self.pictures = pictures

        self.diagnostics: list[Diagnostic] = []
        self.current: Optional[str] = None
        self._picture_handles: dict[str, list[Any]] = {}
        # (instance, local scope) of each method call in progress
        self._frames: list[tuple[Instance, Variables]] = []

    @property
    def globals(self) -> Variables:
        return self.program.variables

    @property
    def objects(self) -> dict[str, Instance]:
        return self.program.objects

    # Diagnostics

    def report(self, message: str, severity: Severity = Severity.WARNING) -> None:
        diagnostic = Diagnostic(message=message, severity=severity, phase="run")
        diagnostic.log(logger)
        self.diagnostics.append(diagnostic)

    # Run loop

    def run(self) -> RunResult:
        """Run from the entry node until a terminal state."""
        self._write_header()
        self._load_pictures()
        self.events.publish(ScriptEvent.RUN_STARTED, entry=self.program.entry)

        self.current = self.program.entry
        if self.current is None:
            self.report("Script declares no nodes", Severity.ERROR)
            return self._finish(Termination.NO_ENTRY, 0)

        steps = 0
        while True:
            node = self.program.get_node(self.current)
            if node is None:
                self.report(f"Unknown node: {self.current}", Severity.ERROR)
                return self._finish(Termination.UNKNOWN_NODE, steps)

            if self.config.max_steps is not None and steps >= self.config.max_steps:
                return self._finish(Termination.STEP_LIMIT, steps)
            steps += 1

            if self.debugger is not None:
                self.debugger.check(node.line, self.program)
            self.events.publish(ScriptEvent.NODE_ENTERED, node=node.name, line=node.line)

            if node.text:
                self.console.write(self.render(node.text, self.globals))

            if node.has_choices:
                choice = self.ask_choice(node)
                if choice is None:
                    return self._finish(Termination.INPUT_CLOSED, steps)
                self.events.publish(
                    ScriptEvent.CHOICE_MADE,
                    node=node.name,
                    choice_id=choice.id,
                    target=choice.target,
                )
                self.current = choice.target
                continue

            flow = self.execute_actions(node.actions, self.globals)
            if flow.ended:
                self.console.write("[Dialogue ended]")
                return self._finish(Termination.END, steps)
            if flow.jump is not None:
                self.current = flow.jump
                continue

            self.console.write("[End of Conversation]")
            return self._finish(Termination.NO_OUTGOING_EDGE, steps)

    def _finish(self, termination: Termination, steps: int) -> RunResult:
        result = RunResult(termination=termination, last_node=self.current, steps=steps)
        self.events.publish(ScriptEvent.RUN_ENDED, termination=termination, node=self.current)
        logger.debug(f"Run finished: {termination.name} at {self.current} after {steps} nodes")
        return result

    def _write_header(self) -> None:
        if not self.config.show_header:
            return
        if self.program.npc:
            self.console.write(f"Npc: {self.program.npc}")
        if self.program.desc:
            self.console.write(f"Description: {self.program.desc}")
            self.console.write()

    def _load_pictures(self) -> None:
        if self.pictures is None:
            return
        for decl in self.program.pictures.values():
            handles = self.pictures.load_folder(decl.folder)
            self._picture_handles[decl.name] = list(handles)[:decl.size]
            logger.info(f"Loaded {len(self._picture_handles[decl.name])} pictures into {decl.name}")

    def render(self, text: str, scope: Variables) -> str:
        return render(text, self.config.player_name, scope, self.objects)

    def ask_choice(self, node: Node) -> Optional[Choice]:
        """List the node's choices and block until a declared id is entered."""
        for choice in node.choices:
            text = substitute_player(choice.text, self.config.player_name)
            self.console.write(f"[{choice.id}] {text}")

        while True:
            line = self.console.prompt(self.config.choice_prompt)
            if line is None:
                return None
            try:
                selected = int(line.strip())
            except ValueError:
                self.console.write("Invalid")
                continue

            choice = node.find_choice(selected)
            if choice is not None:
                return choice
            self.console.write("Invalid choice")

    # Actions

    def evaluate(self, expr: str, scope: Variables) -> int:
        return evaluate(expr, scope, self.objects)

    def execute_actions(self, actions: list[Action] | tuple[StatementForm, ...], scope: Variables) -> Flow:
        """Run actions in order until one transfers control."""
        for action in actions:
            flow = self.execute(action, scope)
            if flow.transferred:
                return flow
        return Flow()

    def execute(self, action: StatementForm, scope: Variables) -> Flow:
        if isinstance(action, Set):
            self.assign(action.target, self.evaluate(action.expr, scope), scope)

        elif isinstance(action, Signal):
            self.emit_signal(action.name, self.evaluate(action.expr, scope))

        elif isinstance(action, If):
            if self.evaluate(action.condition, scope):
                return Flow(jump=action.then_target)
            if action.else_target is not None:
                return Flow(jump=action.else_target)

        elif isinstance(action, Goto):
            return Flow(jump=action.target)

        elif isinstance(action, End):
            return Flow(ended=True)

        elif isinstance(action, Statement):
            return self.execute_actions(resolve_statement(action.text), scope)

        elif isinstance(action, Show):
            self.console.write(self.render(action.text, scope))

        elif isinstance(action, MethodCall):
            args = [self.evaluate(arg, scope) for arg in action.args]
            self.call_method(action.instance, action.method, args)

        elif isinstance(action, Instantiate):
            if self.program.instantiate(action.class_name, action.instance_name) is None:
                self.report(f"Unknown class in inline new: {action.class_name}")

        elif isinstance(action, Print):
            if action.literal is not None:
                self.console.write(action.literal)
            else:
                self.console.write(str(self.evaluate(action.expr or "", scope)))

        elif isinstance(action, Display):
            self.display_picture(action.picture, self.evaluate(action.index, scope))

        return Flow()

    def assign(self, target: str, value: int, scope: Variables) -> None:
        """
        Store a value.

        Dotted targets write an object field, creating a bare object if
        the instance does not exist. Inside a method, a dotted write to the
        object the method runs on also updates the local copy of that field
        so the write-back keeps it. Bare names go to the boolean table when
        already declared there, otherwise to the integer table.
        """
        instance_name, field_name = split_dotted(target)
        if not field_name:
            scope.assign(target, value)
            return

        instance = self.objects.get(instance_name)
        if instance is None:
            self.report(f"Runtime: assignment to field of unknown instance '{instance_name}'")
            instance = Instance(name=instance_name, class_name="")
            self.objects[instance_name] = instance
        instance.fields[field_name] = value

        if self._frames:
            owner, local = self._frames[-1]
            if owner is instance and local is scope:
                local.bools.pop(field_name, None)
                local.strings.pop(field_name, None)
                local.ints[field_name] = value

    def emit_signal(self, name: str, value: int) -> None:
        if self.config.echo_signals:
            self.console.write(f"[SIGNAL] {name} = {value}")
        self.events.publish(ScriptEvent.SIGNAL, name=name, value=value)

    # Methods

    def call_method(self, instance_name: str, method_name: str, args: list[int]) -> None:
        """
        Run `instance.method(args)`.

        The method runs in a fresh scope: a copy of the globals, then the
        parameters, then the object's fields for names not yet bound.
        Afterwards every declared field and every global that exists in
        that scope is written back, whether or not the method changed it.
        """
        instance = self.objects.get(instance_name)
        if instance is None:
            self.report(f"Runtime: unknown instance '{instance_name}'")
            return
        class_def = self.program.classes.get(instance.class_name)
        if class_def is None:
            self.report(f"Runtime: unknown class '{instance.class_name}' for instance '{instance_name}'")
            return
        body = class_def.methods.get(method_name)
        if body is None:
            self.report(f"Runtime: class '{class_def.name}' has no method '{method_name}'")
            return
        if len(self._frames) >= MAX_CALL_DEPTH:
            self.report(f"Runtime: call depth exceeded in '{instance_name}.{method_name}'", Severity.ERROR)
            return

        local = self.globals.copy()
        params = class_def.method_params.get(method_name, [])
        for name, value in zip(params, args):
            local.bools.pop(name, None)
            local.strings.pop(name, None)
            local.ints[name] = value
        for name, value in instance.fields.items():
            if name not in local:
                local.ints[name] = value

        self._frames.append((instance, local))
        try:
            flow = self.execute_actions(body, local)
        finally:
            self._frames.pop()
        if flow.jump is not None:
            logger.debug(f"Jump to {flow.jump} inside {instance_name}.{method_name} ignored")

        self._write_back(instance, class_def.fields, local)

    def _write_back(self, instance: Instance, declared: dict[str, int], local: Variables) -> None:
        for name in declared:
            if name in local.ints:
                instance.fields[name] = local.ints[name]
            elif name in local.bools:
                instance.fields[name] = int(local.bools[name])

        for name in self.globals.ints:
            if name in local.ints:
                self.globals.ints[name] = local.ints[name]
        for name in self.globals.bools:
            if name in local.bools:
                self.globals.bools[name] = local.bools[name]
        for name in self.globals.strings:
            if name in local.strings:
                self.globals.strings[name] = local.strings[name]

    # Pictures

    def display_picture(self, name: str, index: int) -> None:
        if self.pictures is None:
            self.report(f"display: no picture loader attached for '{name}'")
            return
        handles = self._picture_handles.get(name)
        if handles is None:
            self.report(f"display: unknown picture '{name}'")
            return
        if not 0 <= index < len(handles):
            self.report(f"display: index {index} out of range for '{name}'")
            return
        self.pictures.display(handles[index])


def run_program(program: Program, **kwargs: Any) -> RunResult:
    """Convenience wrapper: Interpreter(program, **kwargs).run()."""
    return Interpreter(program, **kwargs).run()
