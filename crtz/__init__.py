"""
crtz

An interpreter for .crtz branching NPC dialogue scripts.

Quick Start:
    from crtz import parse_file, Interpreter, RunConfig

    result = parse_file("sailor.crtz")
    interpreter = Interpreter(result.program, config=RunConfig(player_name="Mira"))
    interpreter.run()
"""

__version__ = "0.1.0"

from crtz.core import EventBus, Event, ScriptEvent, RunConfig
from crtz.lang import (
    Program,
    ParseResult,
    Diagnostic,
    Severity,
    CrtzError,
    ExportValidationError,
    parse_string,
    parse_file,
    evaluate,
)
from crtz.runtime import (
    Console,
    ScriptedConsole,
    Debugger,
    Interpreter,
    RunResult,
    Termination,
    run_program,
)
from crtz.export import export_program, compile_script_file

__all__ = [
    # Core
    "EventBus",
    "Event",
    "ScriptEvent",
    "RunConfig",
    # Language
    "Program",
    "ParseResult",
    "Diagnostic",
    "Severity",
    "CrtzError",
    "ExportValidationError",
    "parse_string",
    "parse_file",
    "evaluate",
    # Runtime
    "Console",
    "ScriptedConsole",
    "Debugger",
    "Interpreter",
    "RunResult",
    "Termination",
    "run_program",
    # Export
    "export_program",
    "compile_script_file",
]
