"""
Dialogue structure - nodes, choices and the actions they run.

Actions form a closed set built once by the parser:

    Set | Signal | If | Goto | End | Statement | Show

`Statement` keeps the raw text of anything the node grammar does not
cover (method calls, inline `new`, `print(...)`) and of every line of a
method body. The interpreter resolves that text into one of the
statement forms at the bottom of this module the first time it runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union


@dataclass(frozen=True)
class Set:
    """`set target = expr;` - target may be `obj.field`."""
    tag: ClassVar[str] = "set"
    target: str
    expr: str
    line: int = 0


@dataclass(frozen=True)
class Signal:
    """`signal name = expr;` - notify observers, no effect on state."""
    tag: ClassVar[str] = "signal"
    name: str
    expr: str
    line: int = 0


@dataclass(frozen=True)
class If:
    """`if (cond) goto then_target [else goto else_target];`"""
    tag: ClassVar[str] = "if"
    condition: str
    then_target: str
    else_target: Optional[str] = None
    line: int = 0


@dataclass(frozen=True)
class Goto:
    tag: ClassVar[str] = "goto"
    target: str
    line: int = 0


@dataclass(frozen=True)
class End:
    tag: ClassVar[str] = "end"
    line: int = 0


@dataclass(frozen=True)
class Statement:
    """Free-form statement kept verbatim, resolved at run time."""
    tag: ClassVar[str] = "statement"
    text: str
    line: int = 0


@dataclass(frozen=True)
class Show:
    """One line of narrated output, interpolated when shown."""
    tag: ClassVar[str] = "show"
    text: str
    line: int = 0


Action = Union[Set, Signal, If, Goto, End, Statement, Show]


@dataclass(frozen=True)
class Choice:
    """A numbered, player-selectable edge out of a node."""
    id: int
    text: str
    target: str


@dataclass
class Node:
    """
    A named unit of dialogue.

    Attributes:
        name: Unique node name
        text: Display text (may contain [@You] and ${var} markers)
        choices: Player choices; when present they are the only way out
        actions: Actions run in order when the node has no choices
        line: Source line of the `node` keyword
    """
    name: str
    text: str = ""
    choices: list[Choice] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    line: int = 0

    @property
    def has_choices(self) -> bool:
        return len(self.choices) > 0

    def find_choice(self, choice_id: int) -> Optional[Choice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


# Statement forms, resolved from Statement text

@dataclass(frozen=True)
class MethodCall:
    """`instance.method(arg, ...)`"""
    instance: str
    method: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class Instantiate:
    """`new ClassName instanceName`"""
    class_name: str
    instance_name: str


@dataclass(frozen=True)
class Print:
    """`print("literal")` or `print(expr)`"""
    literal: Optional[str] = None
    expr: Optional[str] = None


@dataclass(frozen=True)
class Display:
    """`display(picture[index])`"""
    picture: str
    index: str = "0"


StatementForm = Union[Action, MethodCall, Instantiate, Print, Display]
