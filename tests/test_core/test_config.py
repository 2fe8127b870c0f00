import pytest
from pydantic import ValidationError
from crtz.core.config import RunConfig

def test_defaults():
    config = RunConfig()

    assert config.player_name == "Andrew"
    assert config.choice_prompt == "Choose: "
    assert config.echo_signals
    assert config.show_header
    assert not config.debug
    assert config.max_steps is None

def test_unknown_setting_rejected():
    with pytest.raises(ValidationError):
        RunConfig(speed=3)

def test_max_steps_must_be_positive():
    with pytest.raises(ValidationError):
        RunConfig(max_steps=0)

def test_assignment_is_validated():
    config = RunConfig()
    config.player_name = "Mira"

    assert config.player_name == "Mira"
    with pytest.raises(ValidationError):
        config.max_steps = -1
