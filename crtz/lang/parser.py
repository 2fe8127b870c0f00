"""
Declaration parser - builds a Program from script text.

A script is a sequence of top-level declarations:

```
npc "Old Sailor";
desc "Smells of salt.";

int gold = 10;
string title = 'Captain';
match met = false;

class Hero {
    int health = 100;
    void attack(amount) { set health = health - amount; }
}
new Hero hero;

node Start {
    line "Ahoy [@You], you have ${gold} gold.";
    choice 1: "Fight" -> Fight;
    choice 2: "Leave" -> Bye;
}

node Fight {
    hero.attack(3);
    if (hero.health <= 0) goto Dead else goto Bye;
}
```

The parser makes a single left-to-right pass with one token of
lookahead. Problems are recorded as diagnostics and parsing carries on,
so a script with local mistakes still yields a usable (partial) program.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

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
from crtz.lang.expressions import evaluate
from crtz.lang.lexer import Lexer, Token, TokenKind
from crtz.lang.program import ClassDef, PictureDecl, Program, Room

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """A (possibly partial) program plus everything that went wrong."""
    program: Program
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)


# Keywords that open an action inside a node or method body
ACTION_KEYWORDS = ("set", "signal", "if", "goto", "end", "show")


class ScriptParser:
    """
    Parses one script.

    Usage:
        result = ScriptParser(source).parse()
        program = result.program
    """

    def __init__(self, source: str):
        self.source = source
        self.lexer = Lexer(source)
        self.tk: Token = self.lexer.next()
        self.program = Program()
        self.diagnostics: list[Diagnostic] = []

    # Token helpers

    def consume(self) -> Token:
        token = self.tk
        self.tk = self.lexer.next()
        return token

    def at_end(self) -> bool:
        return self.tk.kind == TokenKind.EOF

    def at_symbol(self, text: str) -> bool:
        return self.tk.is_symbol(text)

    def expect_symbol(self, text: str) -> bool:
        if self.at_symbol(text):
            self.consume()
            return True
        self.error(f"Expected symbol '{text}' but got '{self.tk.text}'")
        return False

    def error(self, message: str, line: Optional[int] = None) -> None:
        diagnostic = Diagnostic(
            message=message,
            severity=Severity.ERROR,
            line=self.tk.line if line is None else line,
        )
        diagnostic.log(logger)
        self.diagnostics.append(diagnostic)

    def collect_until(self, *stops: str) -> str:
        """
        Consume tokens up to (not including) one of the stop symbols.

        Returns the covered source text verbatim. Parentheses opened
        inside the run are balanced before a ")" stop is honoured.
        """
        first: Optional[Token] = None
        last: Optional[Token] = None
        depth = 0
        while not self.at_end():
            if self.tk.kind == TokenKind.SYMBOL and self.tk.text in stops:
                if not (self.tk.text == ")" and depth > 0):
                    break
            if self.at_symbol("("):
                depth += 1
            elif self.at_symbol(")"):
                depth -= 1
            if first is None:
                first = self.tk
            last = self.consume()

        if first is None or last is None:
            return ""
        return self.source[first.start:last.end].strip()

    # Top level

    def parse(self) -> ParseResult:
        while not self.at_end():
            if self.tk.kind == TokenKind.PICTURE:
                self.parse_picture()
            elif self.tk.kind == TokenKind.IDENT:
                keyword = self.tk.text
                if keyword == "npc":
                    self.program.npc = self.parse_string_declaration("npc")
                elif keyword == "desc":
                    self.program.desc = self.parse_string_declaration("desc")
                elif keyword in ("int", "string", "match"):
                    self.parse_variable()
                elif keyword == "node":
                    self.parse_node()
                elif keyword == "class":
                    self.parse_class()
                elif keyword == "new":
                    self.parse_new()
                elif keyword == "room":
                    self.parse_room()
                else:
                    self.error(f"Unknown top-level keyword: {keyword}")
                    self.consume()
            else:
                self.consume()

        return ParseResult(program=self.program, diagnostics=self.diagnostics)

    def parse_string_declaration(self, keyword: str) -> str:
        self.consume()
        if self.tk.kind != TokenKind.STRING:
            self.error(f"{keyword} requires string")
            return ""
        value = self.consume().text
        self.expect_symbol(";")
        return value

    def parse_variable(self) -> None:
        """`int x = expr;`, `string s = 'text';`, `match b = true;`"""
        var_type = self.consume().text
        variables = self.program.variables

        if self.tk.kind != TokenKind.IDENT:
            self.error(f"{var_type} expects identifier")
            return
        name = self.consume().text

        if not self.at_symbol("="):
            if var_type == "string":
                variables.strings[name] = ""
            elif var_type == "match":
                variables.bools[name] = False
            else:
                variables.ints[name] = 0
            self.expect_symbol(";")
            return

        self.consume()
        if var_type == "string":
            if self.tk.kind not in (TokenKind.STRING, TokenKind.STRING_DEC):
                self.error("String variable requires string literal")
                return
            variables.strings[name] = self.consume().text
            self.expect_symbol(";")
        elif var_type == "match":
            if self.tk.kind != TokenKind.BOOLEAN:
                self.error("Boolean variable requires true or false")
                return
            variables.bools[name] = self.consume().text == "true"
            self.expect_symbol(";")
        else:
            expr = self.collect_until(";")
            self.expect_symbol(";")
            variables.ints[name] = evaluate(expr, variables)

    # Classes and objects

    def parse_class(self) -> None:
        self.consume()
        if self.tk.kind != TokenKind.IDENT:
            self.error("class expects a name")
            return
        class_def = ClassDef(name=self.consume().text)

        if not self.at_symbol("{"):
            self.error("expected '{' after class name")
            return
        self.consume()

        while not self.at_symbol("}") and not self.at_end():
            if self.tk.is_ident("int"):
                self.parse_field(class_def)
            elif self.tk.is_ident("void"):
                self.parse_method(class_def)
            elif self.tk.kind == TokenKind.IDENT:
                self.error(f"Unknown class member: {self.tk.text}")
                self.consume()
            else:
                self.consume()

        self.expect_symbol("}")
        self.program.classes[class_def.name] = class_def

    def parse_field(self, class_def: ClassDef) -> None:
        self.consume()
        if self.tk.kind != TokenKind.IDENT:
            self.error("field expects identifier")
            self.consume()
            return
        name = self.consume().text

        value = 0
        if self.at_symbol("="):
            self.consume()
            expr = self.collect_until(";")
            value = evaluate(expr, self.program.variables)
        self.expect_symbol(";")
        class_def.fields[name] = value

    def parse_method(self, class_def: ClassDef) -> None:
        self.consume()
        if self.tk.kind != TokenKind.IDENT:
            self.error("method expects a name")
            return
        name = self.consume().text

        params: list[str] = []
        if self.at_symbol("("):
            self.consume()
        else:
            self.error("expected '(' after method name")
        # A missing "(" must not let the parameter list run into the body
        while not self.at_symbol(")") and not self.at_symbol("{") and not self.at_end():
            token = self.consume()
            if token.kind == TokenKind.IDENT:
                params.append(token.text)
        self.expect_symbol(")")

        if not self.at_symbol("{"):
            self.error("expected '{' for method body")
            return
        self.consume()

        body: list[Action] = []
        while not self.at_symbol("}") and not self.at_end():
            line = self.tk.line
            text = self.collect_until(";", "}")
            if self.at_symbol(";"):
                self.consume()
            if text:
                body.append(Statement(text=text, line=line))
        self.expect_symbol("}")

        class_def.methods[name] = body
        class_def.method_params[name] = params

    def parse_new(self) -> None:
        """`new ClassName instanceName;`"""
        self.consume()
        if self.tk.kind != TokenKind.IDENT:
            self.error("new expects class name")
            return
        class_name = self.consume().text
        if self.tk.kind != TokenKind.IDENT:
            self.error("new expects instance name")
            return
        instance_name = self.consume().text
        self.expect_symbol(";")

        if self.program.instantiate(class_name, instance_name) is None:
            self.error(f"Unknown class {class_name} for new")

    # Nodes

    def parse_node(self) -> None:
        line = self.tk.line
        self.consume()
        if self.tk.kind != TokenKind.IDENT:
            self.error("node expects name")
            self.consume()
            return
        node = Node(name=self.consume().text, line=line)

        if not self.at_symbol("{"):
            self.error("expected '{' after node name")
            return
        self.consume()

        while not self.at_symbol("}") and not self.at_end():
            if self.tk.kind != TokenKind.IDENT:
                self.consume()
                continue

            keyword = self.tk.text
            if keyword == "line":
                self.consume()
                if self.tk.kind == TokenKind.STRING:
                    node.text = self.consume().text
                self.expect_symbol(";")
            elif keyword == "choice":
                self.parse_choice(node)
            elif keyword in ACTION_KEYWORDS:
                self.parse_action(node.actions)
            else:
                self.parse_raw_statement(node.actions)

        self.expect_symbol("}")
        self.program.nodes[node.name] = node
        if self.program.entry is None:
            self.program.entry = node.name

    def parse_choice(self, node: Node) -> None:
        """`choice <id> : "<text>" -> <target>;`"""
        self.consume()
        if self.tk.kind != TokenKind.NUMBER:
            self.error("choice id expected")
            self.consume()
            return
        choice_id = self.consume().number
        self.expect_symbol(":")

        if self.tk.kind != TokenKind.STRING:
            self.error("choice text string expected")
            return
        text = self.consume().text

        if self.at_symbol("->"):
            self.consume()
        elif self.at_symbol("-"):
            self.consume()
            if self.at_symbol(">"):
                self.consume()

        if self.tk.kind != TokenKind.IDENT:
            self.error("choice target expected")
            return
        target = self.consume().text
        self.expect_symbol(";")
        node.choices.append(Choice(id=choice_id, text=text, target=target))

    def parse_action(self, actions: list[Action]) -> None:
        """Parse one keyword action (set/signal/if/goto/end/show)."""
        line = self.tk.line
        keyword = self.consume().text

        if keyword == "set":
            target = ""
            if self.tk.kind == TokenKind.IDENT:
                target = self.consume().text
            else:
                self.error("set expected identifier")
            if self.at_symbol("="):
                self.consume()
            else:
                self.error("expected '=' after set var")
            expr = self.collect_until(";")
            self.expect_symbol(";")
            if target:
                actions.append(Set(target=target, expr=expr, line=line))

        elif keyword == "signal":
            if self.tk.kind != TokenKind.IDENT:
                self.error("signal name expected")
                return
            name = self.consume().text
            if self.at_symbol("="):
                self.consume()
            expr = self.collect_until(";")
            self.expect_symbol(";")
            actions.append(Signal(name=name, expr=expr, line=line))

        elif keyword == "if":
            self.parse_if(actions, line)

        elif keyword == "goto":
            if self.tk.kind != TokenKind.IDENT:
                self.error("goto target expected")
                return
            target = self.consume().text
            self.expect_symbol(";")
            actions.append(Goto(target=target, line=line))

        elif keyword == "end":
            self.expect_symbol(";")
            actions.append(End(line=line))

        elif keyword == "show":
            if self.tk.kind != TokenKind.STRING:
                self.error("show requires string literal")
                return
            texts = [self.consume().text]
            while self.at_symbol(","):
                self.consume()
                if self.tk.kind != TokenKind.STRING:
                    self.error("show expects string after comma")
                    break
                texts.append(self.consume().text)
            self.expect_symbol(";")
            actions.extend(Show(text=text, line=line) for text in texts)

    def parse_if(self, actions: list[Action], line: int) -> None:
        """`if (<cond>) goto <target> [else goto <target>];`"""
        if self.at_symbol("("):
            self.consume()
        else:
            self.error("if requires (")
        condition = self.collect_until(")")
        self.expect_symbol(")")

        if self.tk.is_ident("goto"):
            self.consume()
        else:
            self.error("if expects goto")

        if self.tk.kind != TokenKind.IDENT:
            self.error("goto target expected")
            return
        then_target = self.consume().text

        else_target = None
        if self.tk.is_ident("else"):
            self.consume()
            if self.tk.is_ident("goto"):
                self.consume()
            else:
                self.error("else expects goto")
            if self.tk.kind == TokenKind.IDENT:
                else_target = self.consume().text
            else:
                self.error("else goto target expected")

        self.expect_symbol(";")
        actions.append(If(
            condition=condition,
            then_target=then_target,
            else_target=else_target,
            line=line,
        ))

    def parse_raw_statement(self, actions: list[Action]) -> None:
        line = self.tk.line
        text = self.collect_until(";")
        if self.at_symbol(";"):
            self.consume()
        if text:
            actions.append(Statement(text=text, line=line))

    # Rooms and pictures

    def parse_room(self) -> None:
        self.consume()
        if self.tk.kind != TokenKind.IDENT:
            self.error("room expects a name")
            return
        room = Room(name=self.consume().text)

        if not self.at_symbol("{"):
            self.error("expected '{' after room name")
            return
        self.consume()

        while not self.at_symbol("}") and not self.at_end():
            if self.tk.kind != TokenKind.IDENT:
                self.consume()
                continue

            keyword = self.consume().text
            if keyword == "desc" and self.tk.kind == TokenKind.STRING:
                room.description = self.consume().text
                self.expect_symbol(";")
            elif keyword == "exit" and self.tk.kind == TokenKind.IDENT:
                direction = self.consume().text
                if self.tk.kind == TokenKind.IDENT:
                    room.exits[direction] = self.consume().text
                    self.expect_symbol(";")
            elif keyword == "item" and self.tk.kind == TokenKind.IDENT:
                room.items.append(self.consume().text)
                self.expect_symbol(";")
            elif keyword == "npc" and self.tk.kind == TokenKind.IDENT:
                room.npcs.append(self.consume().text)
                self.expect_symbol(";")

        self.expect_symbol("}")
        self.program.rooms[room.name] = room
        if self.program.current_room is None:
            self.program.current_room = room.name

    def parse_picture(self) -> None:
        """`picture <name>[<size>] = load("<folder>");`"""
        line = self.tk.line
        self.consume()

        if self.tk.kind != TokenKind.IDENT:
            self.error("picture expects an identifier")
            return
        name = self.consume().text

        if not self.at_symbol("["):
            self.error("expected '[' after picture name")
            return
        self.consume()
        if self.tk.kind != TokenKind.NUMBER:
            self.error("expected number for array size")
            return
        size = self.consume().number
        if not self.at_symbol("]"):
            self.error("expected ']' after array size")
            return
        self.consume()

        if not self.at_symbol("="):
            self.error("expected '=' after array declaration")
            return
        self.consume()
        if self.tk.kind != TokenKind.LOAD:
            self.error("expected 'load' keyword")
            return
        self.consume()
        if not self.at_symbol("("):
            self.error("expected '(' after load")
            return
        self.consume()
        if self.tk.kind != TokenKind.STRING:
            self.error("expected string for folder path")
            return
        folder = self.consume().text
        if not self.at_symbol(")"):
            self.error("expected ')' after folder path")
            return
        self.consume()
        self.expect_symbol(";")

        self.program.pictures[name] = PictureDecl(name=name, size=size, folder=folder, line=line)


def parse_string(content: str) -> ParseResult:
    """Parse script text."""
    return ScriptParser(content).parse()


def parse_file(path: str | Path) -> ParseResult:
    """Parse a .crtz script file."""
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    return parse_string(content)


# Run-time statement resolution

LEADING_WORD_PATTERN = re.compile(r'[A-Za-z_][\w.]*')
METHOD_CALL_PATTERN = re.compile(r'^([A-Za-z_]\w*)\.([A-Za-z_]\w*)\s*\((.*)\)$', re.DOTALL)
NEW_PATTERN = re.compile(r'^new\s+([A-Za-z_]\w*)\s+([A-Za-z_]\w*)$')
PRINT_PATTERN = re.compile(r'^print\s*\((.*)\)$', re.DOTALL)
DISPLAY_PATTERN = re.compile(r'^display\s*\(\s*([A-Za-z_]\w*)\s*(?:\[(.*)\])?\s*\)$', re.DOTALL)


def split_arguments(raw: str) -> list[str]:
    """Split "a, f(b, c), 3" on top-level commas, dropping empty pieces."""
    args = []
    current = []
    depth = 0
    for c in raw:
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
        elif c == ',' and depth == 0:
            args.append(''.join(current).strip())
            current = []
            continue
        current.append(c)
    args.append(''.join(current).strip())
    return [arg for arg in args if arg]


@lru_cache(maxsize=512)
def resolve_statement(text: str) -> tuple[StatementForm, ...]:
    """
    Turn Statement text into the forms it stands for.

    Keyword actions (set, signal, if, goto, end, show) parse exactly as
    they do in a node body. Method calls, `new`, `print` and `display`
    become their statement forms. Anything else resolves to nothing.
    """
    text = text.strip()
    leading = LEADING_WORD_PATTERN.match(text)
    if leading and leading.group(0) in ACTION_KEYWORDS:
        parser = ScriptParser(text + ";")
        actions: list[Action] = []
        parser.parse_action(actions)
        return tuple(actions)

    match = METHOD_CALL_PATTERN.match(text)
    if match:
        return (MethodCall(
            instance=match.group(1),
            method=match.group(2),
            args=tuple(split_arguments(match.group(3))),
        ),)

    match = NEW_PATTERN.match(text)
    if match:
        return (Instantiate(class_name=match.group(1), instance_name=match.group(2)),)

    match = PRINT_PATTERN.match(text)
    if match:
        inner = match.group(1).strip()
        if len(inner) >= 2 and inner[0] == '"' and inner[-1] == '"':
            return (Print(literal=inner[1:-1]),)
        return (Print(expr=inner),)

    match = DISPLAY_PATTERN.match(text)
    if match:
        return (Display(picture=match.group(1), index=(match.group(2) or "0").strip()),)

    return ()
