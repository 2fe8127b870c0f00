"""
Runtime module - executes parsed scripts.

Provides:
- Node-graph interpreter with choices, jumps and method dispatch
- Text interpolation
- Console abstraction (real streams or scripted input)
- Line debugger
"""

from crtz.runtime.console import Console, ScriptedConsole
from crtz.runtime.debugger import Debugger
from crtz.runtime.interpolation import interpolate, render, substitute_player
from crtz.runtime.interpreter import Interpreter, RunResult, Termination, run_program

__all__ = [
    "Console",
    "ScriptedConsole",
    "Debugger",
    "interpolate",
    "render",
    "substitute_player",
    "Interpreter",
    "RunResult",
    "Termination",
    "run_program",
]
