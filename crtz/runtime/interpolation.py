"""
Text interpolation for node text and `show` lines.

- `[@You]` becomes `[<player name>]`
- `${name}` becomes the current value of a string, boolean or integer
  variable (in that order of lookup), `${obj.field}` the object field.
  Unknown names render as `0`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from crtz.lang.expressions import split_dotted

if TYPE_CHECKING:
    from crtz.lang.program import Instance, Variables


PLAYER_MARKER = "[@You]"


def substitute_player(text: str, player_name: str) -> str:
    return text.replace(PLAYER_MARKER, f"[{player_name}]")


def lookup_text(name: str, scope: Variables, objects: Mapping[str, Instance]) -> str:
    """Render one `${...}` reference."""
    instance_name, field_name = split_dotted(name)
    if field_name:
        instance = objects.get(instance_name)
        if instance is not None and field_name in instance.fields:
            return str(instance.fields[field_name])
        return "0"

    if name in scope.strings:
        return scope.strings[name]
    if name in scope.bools:
        return "true" if scope.bools[name] else "false"
    if name in scope.ints:
        return str(scope.ints[name])
    return "0"


def interpolate(text: str, scope: Variables, objects: Mapping[str, Instance]) -> str:
    """
    Replace every `${...}` reference.

    Scanning resumes after the inserted value, so values that themselves
    contain `${` are never expanded again.
    """
    pos = 0
    while True:
        start = text.find("${", pos)
        if start == -1:
            break
        end = text.find("}", start + 2)
        if end == -1:
            break

        value = lookup_text(text[start + 2:end].strip(), scope, objects)
        text = text[:start] + value + text[end + 1:]
        pos = start + len(value)

    return text


def render(text: str, player_name: str, scope: Variables, objects: Mapping[str, Instance]) -> str:
    """Apply player substitution, then variable interpolation."""
    return interpolate(substitute_player(text, player_name), scope, objects)
