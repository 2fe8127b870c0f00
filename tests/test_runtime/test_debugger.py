import pytest
from crtz.lang.program import Instance, Program, Variables
from crtz.runtime.console import ScriptedConsole
from crtz.runtime.debugger import Debugger

@pytest.fixture
def program():
    return Program(
        variables=Variables(ints={"gold": 5}, bools={"met": True}, strings={"title": "Captain"}),
        objects={"hero": Instance(name="hero", class_name="Hero", fields={"health": 40})},
    )

def test_no_pause_without_breakpoint(program):
    console = ScriptedConsole(["c"])
    debugger = Debugger(console)

    debugger.check(3, program)

    assert console.lines == []
    assert console.prompts == []

def test_breakpoint_pauses_and_serves_commands(program):
    console = ScriptedConsole(["p gold", "print hero.health", "c"])
    debugger = Debugger(console)
    debugger.add_breakpoint(3)

    debugger.check(3, program)

    assert console.lines == [
        "Breakpoint at line 3. Type 'help' for commands.",
        "gold = 5",
        "hero.health = 40",
    ]
    assert not debugger.stepping

def test_step_keeps_pausing(program):
    console = ScriptedConsole(["s"])
    debugger = Debugger(console)
    debugger.add_breakpoint(1)

    debugger.check(1, program)

    assert debugger.stepping
    assert debugger.should_pause(99)

def test_end_of_input_resumes(program):
    console = ScriptedConsole()
    debugger = Debugger(console, stepping=True)

    debugger.check(1, program)

    assert not debugger.stepping

def test_breakpoint_commands(program):
    console = ScriptedConsole()
    debugger = Debugger(console)

    for command in ["b 7", "break 9", "b", "delete 7", "breakpoints", "delete 9", "b",
                    "break x", "delete", "p", "zzz"]:
        assert debugger.handle_command(command, program) is False

    assert console.lines == [
        "Breakpoint added at line 7",
        "Breakpoint added at line 9",
        "Breakpoints at lines: 7 9",
        "Breakpoint removed at line 7",
        "Breakpoints at lines: 9",
        "Breakpoint removed at line 9",
        "No breakpoints set.",
        "Invalid line number",
        "Usage: delete <line>",
        "Usage: print <variable>",
        "Unknown command. Type 'help' for available commands.",
    ]

def test_print_variables(program):
    console = ScriptedConsole()
    debugger = Debugger(console)

    for name in ["met", "title", "hero.mana", "nothing"]:
        debugger.print_variable(name, program)

    assert console.lines == ["met = true", "title = Captain", "Variable not found.", "Variable not found."]

def test_list_variables(program):
    console = ScriptedConsole()
    Debugger(console).handle_command("v", program)

    assert console.lines == [
        "Integer variables:",
        "  gold = 5",
        "Boolean variables:",
        "  met = true",
        "String variables:",
        "  title = Captain",
        "Object fields:",
        "  hero.health = 40",
    ]

def test_help(program):
    console = ScriptedConsole()
    Debugger(console).handle_command("h", program)

    assert console.lines[0] == "Debugger commands:"
    assert len(console.lines) == 9
