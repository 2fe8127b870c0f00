"""
Language module - the .crtz front end.

Provides:
- Tokenizing (shared by scripts and expressions)
- Integer expression evaluation
- Declaration parsing into a Program
- Typed dialogue actions
"""

from crtz.lang.lexer import Lexer, Token, TokenKind, tokenize
from crtz.lang.expressions import evaluate, compile_expression
from crtz.lang.ast import (
    Action,
    Choice,
    Node,
    Set,
    Signal,
    If,
    Goto,
    End,
    Statement,
    Show,
)
from crtz.lang.program import Program, Variables, ClassDef, Instance, Room, PictureDecl
from crtz.lang.diagnostics import Diagnostic, Severity, CrtzError, ExportValidationError
from crtz.lang.parser import ScriptParser, ParseResult, parse_string, parse_file

__all__ = [
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    "evaluate",
    "compile_expression",
    "Action",
    "Choice",
    "Node",
    "Set",
    "Signal",
    "If",
    "Goto",
    "End",
    "Statement",
    "Show",
    "Program",
    "Variables",
    "ClassDef",
    "Instance",
    "Room",
    "PictureDecl",
    "Diagnostic",
    "Severity",
    "CrtzError",
    "ExportValidationError",
    "ScriptParser",
    "ParseResult",
    "parse_string",
    "parse_file",
]
