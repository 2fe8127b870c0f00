"""
Program model - everything a parsed script declares.

The parser fills a Program once; at run time the interpreter mutates
only the variable tables and the object table.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional

from crtz.lang.ast import Action, Node


@dataclass
class Variables:
    """
    The three variable namespaces.

    Attributes:
        ints: `int` variables
        bools: `match` variables
        strings: `string` variables
    """
    ints: dict[str, int] = field(default_factory=dict)
    bools: dict[str, bool] = field(default_factory=dict)
    strings: dict[str, str] = field(default_factory=dict)

    def copy(self) -> Variables:
        return Variables(
            ints=dict(self.ints),
            bools=dict(self.bools),
            strings=dict(self.strings),
        )

    def assign(self, name: str, value: int) -> None:
        """Store an evaluated value: known booleans keep their type, anything else is an int."""
        if name in self.bools:
            self.bools[name] = value != 0
        else:
            self.ints[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.ints or name in self.bools or name in self.strings


@dataclass
class ClassDef:
    """
    A declared class.

    Attributes:
        name: Class name
        fields: Field name -> default value
        methods: Method name -> body (Statement actions)
        method_params: Method name -> parameter names
    """
    name: str
    fields: dict[str, int] = field(default_factory=dict)
    methods: dict[str, list[Action]] = field(default_factory=dict)
    method_params: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class Instance:
    """A live object: a class name plus its own copy of the fields."""
    name: str
    class_name: str
    fields: dict[str, int] = field(default_factory=dict)


@dataclass
class Room:
    """A `room` declaration. Rooms are descriptive only."""
    name: str
    description: str = ""
    exits: dict[str, str] = field(default_factory=dict)
    items: list[str] = field(default_factory=list)
    npcs: list[str] = field(default_factory=list)


@dataclass
class PictureDecl:
    """`picture name[size] = load("folder");`"""
    name: str
    size: int
    folder: str
    line: int = 0


@dataclass
class Program:
    """
    A parsed script.

    Attributes:
        npc: Name from the `npc` declaration
        desc: Text from the `desc` declaration
        variables: Global variable tables
        classes: Class table
        objects: Live object table, keyed by instance name
        nodes: Node table
        entry: Name of the first node declared
        rooms: Room table
        current_room: Name of the first room declared
        pictures: Picture declarations
    """
    npc: str = ""
    desc: str = ""
    variables: Variables = field(default_factory=Variables)
    classes: dict[str, ClassDef] = field(default_factory=dict)
    objects: dict[str, Instance] = field(default_factory=dict)
    nodes: dict[str, Node] = field(default_factory=dict)
    entry: Optional[str] = None
    rooms: dict[str, Room] = field(default_factory=dict)
    current_room: Optional[str] = None
    pictures: dict[str, PictureDecl] = field(default_factory=dict)

    def instantiate(self, class_name: str, instance_name: str) -> Optional[Instance]:
        """Create (or replace) an object seeded with the class defaults."""
        class_def = self.classes.get(class_name)
        if class_def is None:
            return None

        instance = Instance(
            name=instance_name,
            class_name=class_name,
            fields=dict(class_def.fields),
        )
        self.objects[instance_name] = instance
        return instance

    def get_node(self, name: str) -> Optional[Node]:
        return self.nodes.get(name)

    def clone(self) -> Program:
        """Deep copy, so one parse can back several independent runs."""
        return copy.deepcopy(self)
