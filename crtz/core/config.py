"""
Run configuration.

Settings that shape how a script is presented and driven, validated with
Pydantic the same way components are.

Usage:
    config = RunConfig(player_name="Mira", echo_signals=False)
    interpreter = Interpreter(program, config=config)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RunConfig(BaseModel):
    """
    Interpreter settings.

    Attributes:
        player_name: Name substituted for the [@You] marker
        choice_prompt: Prompt shown while waiting for a choice
        echo_signals: Print "[SIGNAL] name = value" when a signal fires
        show_header: Print the npc name and description before the entry node
        debug: Start the debugger in stepping mode
        max_steps: Stop after visiting this many nodes (None = unlimited)
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
    )

    player_name: str = "Andrew"
    choice_prompt: str = "Choose: "
    echo_signals: bool = True
    show_header: bool = True
    debug: bool = False
    max_steps: Optional[int] = Field(default=None, ge=1)
