import textwrap

import pytest
from unittest.mock import MagicMock, patch


@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window creation.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.image'):

        import pygame

        # Any picture window closes on its first poll
        pygame.event.get.return_value = [MagicMock(type=pygame.QUIT)]
        pygame.image.load.return_value.get_size.return_value = (4, 3)

        yield


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from crtz.core.events import EventBus
    return EventBus()


@pytest.fixture
def console():
    """Scripted console with no queued input."""
    from crtz.runtime.console import ScriptedConsole
    return ScriptedConsole()


@pytest.fixture
def parse():
    """Parse dedented script text."""
    from crtz.lang.parser import parse_string

    def _parse(source):
        return parse_string(textwrap.dedent(source))
    return _parse


@pytest.fixture
def run_script(parse):
    """
    Parse and run a script against canned input.

    Returns (RunResult, ScriptedConsole, Interpreter).
    """
    from crtz.core.config import RunConfig
    from crtz.runtime.console import ScriptedConsole
    from crtz.runtime.interpreter import Interpreter

    def _run(source, inputs=(), events=None, pictures=None, **settings):
        result = parse(source)
        console = ScriptedConsole(inputs)
        interpreter = Interpreter(
            result.program,
            config=RunConfig(**settings),
            console=console,
            events=events,
            pictures=pictures,
        )
        return interpreter.run(), console, interpreter
    return _run
