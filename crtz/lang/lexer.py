"""
Lexer - turns script text into tokens.

One tokenizer serves both call sites:

- script mode, used by the declaration parser: strings, comments,
  keywords, the `->` arrow and every other character as a symbol.
- expression mode, used by the expression evaluator: only operators,
  parentheses, numbers and (dotted) identifiers; anything else is skipped.

Tokens are produced lazily, one per `next()` call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenKind(Enum):
    """Kinds of token the lexer can produce."""
    IDENT = auto()
    NUMBER = auto()
    STRING = auto()         # "double quoted"
    STRING_DEC = auto()     # 'single quoted', used by string declarations
    BOOLEAN = auto()
    PICTURE = auto()
    LOAD = auto()
    SYMBOL = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        kind: Token kind
        text: Literal text (string contents without quotes)
        number: Numeric value for NUMBER tokens
        line: 1-based source line of the first character
        start: Offset of the first character in the source
        end: Offset just past the last character
    """
    kind: TokenKind
    text: str = ""
    number: int = 0
    line: int = 0
    start: int = 0
    end: int = 0

    def is_symbol(self, text: str) -> bool:
        return self.kind == TokenKind.SYMBOL and self.text == text

    def is_ident(self, text: str) -> bool:
        return self.kind == TokenKind.IDENT and self.text == text


TWO_CHAR_SYMBOLS = ("<=", ">=", "==", "!=", "->")
EXPRESSION_TWO_CHAR = ("<=", ">=", "==", "!=")
EXPRESSION_SYMBOLS = "+-*/()<>"

KEYWORD_KINDS = {
    "true": TokenKind.BOOLEAN,
    "false": TokenKind.BOOLEAN,
    "picture": TokenKind.PICTURE,
    "load": TokenKind.LOAD,
}


def _ident_start(c: str) -> bool:
    return c.isascii() and (c.isalpha() or c == '_')


def _ident_part(c: str, dotted: bool) -> bool:
    return c.isascii() and (c.isalnum() or c == '_' or (dotted and c == '.'))


def _digit(c: str) -> bool:
    return c.isascii() and c.isdigit()


class Lexer:
    """
    Pull-model tokenizer.

    Args:
        source: Text to tokenize
        expression: Tokenize as a standalone expression instead of a script
        dotted: Allow '.' inside identifiers so `obj.field` is one token
    """

    def __init__(self, source: str, expression: bool = False, dotted: bool = True):
        self.source = source
        self.expression = expression
        self.dotted = dotted
        self.pos = 0
        self.line = 1
        self._last: Token | None = None

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            if token.kind == TokenKind.EOF:
                return
            yield token

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ''

    def _advance(self) -> str:
        c = self._peek()
        if c:
            self.pos += 1
            if c == '\n':
                self.line += 1
        return c

    def _skip_space(self) -> None:
        while self._peek() and self._peek().isspace():
            self._advance()

    def _starts_with(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def _make(self, kind: TokenKind, text: str, start: int, line: int, number: int = 0) -> Token:
        token = Token(kind=kind, text=text, number=number, line=line, start=start, end=self.pos)
        self._last = token
        return token

    def next(self) -> Token:
        """Produce the next token (EOF forever once the input is exhausted)."""
        while True:
            self._skip_space()
            if not self._starts_with("//"):
                break
            # Line comment
            while self._peek() and self._peek() != '\n':
                self._advance()

        start, line = self.pos, self.line
        c = self._peek()

        if not c:
            return self._make(TokenKind.EOF, "", start, line)

        if self.expression:
            return self._next_expression_token(c, start, line)

        if c == '"':
            return self._make(TokenKind.STRING, self._read_string('"'), start, line)

        if c == "'":
            return self._make(TokenKind.STRING_DEC, self._read_string("'"), start, line)

        if _ident_start(c):
            word = self._read_ident()
            return self._make(KEYWORD_KINDS.get(word, TokenKind.IDENT), word, start, line)

        if _digit(c) or (c == '-' and _digit(self._peek(1))):
            return self._read_number(start, line)

        for symbol in TWO_CHAR_SYMBOLS:
            if self._starts_with(symbol):
                self.pos += 2
                return self._make(TokenKind.SYMBOL, symbol, start, line)

        return self._make(TokenKind.SYMBOL, self._advance(), start, line)

    def _next_expression_token(self, c: str, start: int, line: int) -> Token:
        for symbol in EXPRESSION_TWO_CHAR:
            if self._starts_with(symbol):
                self.pos += 2
                return self._make(TokenKind.SYMBOL, symbol, start, line)

        # A sign directly before a digit is part of the literal only where
        # an operand is expected; elsewhere it is the binary operator.
        if c in "+-" and _digit(self._peek(1)) and self._operand_expected():
            return self._read_number(start, line)

        if c in EXPRESSION_SYMBOLS:
            return self._make(TokenKind.SYMBOL, self._advance(), start, line)

        if _digit(c):
            return self._read_number(start, line)

        if _ident_start(c):
            word = self._read_ident()
            kind = TokenKind.BOOLEAN if word in ("true", "false") else TokenKind.IDENT
            return self._make(kind, word, start, line)

        # Anything else is not part of the expression grammar
        self._advance()
        return self.next()

    def _operand_expected(self) -> bool:
        last = self._last
        if last is None:
            return True
        return last.kind == TokenKind.SYMBOL and last.text != ')'

    def _read_ident(self) -> str:
        chars = []
        while self._peek() and _ident_part(self._peek(), self.dotted):
            chars.append(self._advance())
        return ''.join(chars)

    def _read_number(self, start: int, line: int) -> Token:
        chars = [self._advance()]
        while _digit(self._peek()):
            chars.append(self._advance())
        text = ''.join(chars)
        return self._make(TokenKind.NUMBER, text, start, line, number=int(text))

    def _read_string(self, quote: str) -> str:
        """Read a quoted literal; an unterminated one runs to end of input."""
        self._advance()
        out = []
        while self._peek():
            ch = self._advance()
            if ch == quote:
                break
            if ch == '\\' and self._peek():
                esc = self._advance()
                out.append('\n' if esc == 'n' else esc)
            else:
                out.append(ch)
        return ''.join(out)


def tokenize(source: str, expression: bool = False) -> list[Token]:
    """Tokenize a whole string (EOF token not included)."""
    return list(Lexer(source, expression=expression))
