import pytest
from crtz.lang.ast import (
    Choice,
    Display,
    End,
    Goto,
    If,
    Instantiate,
    MethodCall,
    Print,
    Set,
    Show,
    Signal,
    Statement,
)
from crtz.lang.diagnostics import Severity
from crtz.lang.parser import parse_file, resolve_statement, split_arguments

SAILOR = """
npc "Old Sailor";
desc "Smells of salt.";

int gold = 10;
int bonus = gold * 2 + 1;
string title = 'Captain';
match met = false;

class Hero {
    int health = 100;
    int attack = 5;
    void hit(amount) { set health = health - amount; }
}
new Hero hero;

node Start {
    line "Ahoy [@You]!";
    choice 1: "Fight" -> Fight;
    choice 2: "Leave" - > Bye;
}

node Fight {
    set gold = gold + 5;
    signal fought = 1;
    if ((gold + 1) * 2 > 10) goto Rich else goto Bye;
    goto Bye;
    end;
    show "one", "two";
    hero.hit(3);
}

node Bye { end; }
"""

def test_header(parse):
    program = parse(SAILOR).program

    assert program.npc == "Old Sailor"
    assert program.desc == "Smells of salt."

def test_variables(parse):
    result = parse(SAILOR)
    variables = result.program.variables

    assert not result.diagnostics
    assert variables.ints == {"gold": 10, "bonus": 21}
    assert variables.strings == {"title": "Captain"}
    assert variables.bools == {"met": False}

def test_variable_initializers(parse):
    variables = parse("""
        int a = -5;
        int b;
        match m = true;
        string s = "double";
    """).program.variables

    assert variables.ints == {"a": -5, "b": 0}
    assert variables.bools == {"m": True}
    assert variables.strings == {"s": "double"}

def test_class_and_instance(parse):
    program = parse(SAILOR).program
    hero_class = program.classes["Hero"]

    assert hero_class.fields == {"health": 100, "attack": 5}
    assert hero_class.method_params["hit"] == ["amount"]
    assert [a.text for a in hero_class.methods["hit"]] == ["set health = health - amount"]
    assert isinstance(hero_class.methods["hit"][0], Statement)

    hero = program.objects["hero"]
    assert hero.class_name == "Hero"
    assert hero.fields == {"health": 100, "attack": 5}
    assert hero.fields is not hero_class.fields

def test_new_unknown_class(parse):
    result = parse("new Ghost g;")

    assert result.has_errors
    assert result.diagnostics[0].message == "Unknown class Ghost for new"
    assert "g" not in result.program.objects

def test_entry_is_first_node(parse):
    program = parse(SAILOR).program

    assert program.entry == "Start"
    assert list(program.nodes) == ["Start", "Fight", "Bye"]

def test_node_text_and_choices(parse):
    start = parse(SAILOR).program.nodes["Start"]

    assert start.text == "Ahoy [@You]!"
    assert start.choices == [
        Choice(id=1, text="Fight", target="Fight"),
        Choice(id=2, text="Leave", target="Bye"),
    ]
    assert start.find_choice(2).target == "Bye"
    assert start.find_choice(3) is None

def test_node_actions(parse):
    actions = parse(SAILOR).program.nodes["Fight"].actions

    assert [type(a) for a in actions] == [Set, Signal, If, Goto, End, Show, Show, Statement]

    set_action, signal, branch, goto = actions[:4]
    assert (set_action.target, set_action.expr) == ("gold", "gold + 5")
    assert (signal.name, signal.expr) == ("fought", "1")
    assert branch.condition == "(gold + 1) * 2 > 10"
    assert (branch.then_target, branch.else_target) == ("Rich", "Bye")
    assert goto.target == "Bye"
    assert [a.text for a in actions[5:7]] == ["one", "two"]
    assert actions[7].text == "hero.hit(3)"

def test_action_lines(parse):
    program = parse(SAILOR).program

    assert program.nodes["Start"].line == 17
    assert program.nodes["Fight"].actions[0].line == 24

def test_if_without_else(parse):
    branch = parse("node A { if (x) goto B; }").program.nodes["A"].actions[0]

    assert branch.condition == "x"
    assert branch.else_target is None

def test_unknown_top_level_keyword(parse):
    result = parse("banana; npc \"A\";")

    assert result.diagnostics[0].message == "Unknown top-level keyword: banana"
    assert result.program.npc == "A"

def test_missing_semicolon_recovers(parse):
    result = parse('npc "A" desc "B";')

    assert result.program.npc == "A"
    assert result.program.desc == "B"
    assert str(result.diagnostics[0]) == "Error at line 1: Expected symbol ';' but got 'desc'"
    assert result.diagnostics[0].severity == Severity.ERROR

def test_rooms(parse):
    program = parse("""
        room Dock {
            desc "Wet planks.";
            exit north Market;
            item rope;
            npc sailor;
        }
        room Market { desc "Busy."; }
    """).program

    dock = program.rooms["Dock"]
    assert dock.description == "Wet planks."
    assert dock.exits == {"north": "Market"}
    assert dock.items == ["rope"]
    assert dock.npcs == ["sailor"]
    assert program.current_room == "Dock"

def test_picture_declaration(parse):
    result = parse('picture scenes[3] = load("art/scenes");')
    decl = result.program.pictures["scenes"]

    assert not result.diagnostics
    assert (decl.size, decl.folder, decl.line) == (3, "art/scenes", 1)

def test_picture_errors(parse):
    result = parse('picture scenes = load("art");')

    assert result.diagnostics[0].message == "expected '[' after picture name"
    assert not result.program.pictures

def test_parse_file(tmp_path):
    path = tmp_path / "sailor.crtz"
    path.write_text(SAILOR, encoding="utf-8")

    assert parse_file(path).program.npc == "Old Sailor"

def test_resolve_method_call():
    assert resolve_statement("hero.hit(3, f(x, y))") == (
        MethodCall(instance="hero", method="hit", args=("3", "f(x, y)")),
    )
    assert resolve_statement("hero.rest()") == (MethodCall(instance="hero", method="rest"),)

def test_resolve_other_forms():
    assert resolve_statement("new Hero h2") == (Instantiate(class_name="Hero", instance_name="h2"),)
    assert resolve_statement('print("hi there")') == (Print(literal="hi there"),)
    assert resolve_statement("print(gold + 1)") == (Print(expr="gold + 1"),)
    assert resolve_statement("display(scenes[2])") == (Display(picture="scenes", index="2"),)
    assert resolve_statement("display(scenes)") == (Display(picture="scenes", index="0"),)
    assert resolve_statement("frobnicate") == ()

def test_resolve_keyword_actions():
    (set_action,) = resolve_statement("set health = health - amount")
    assert isinstance(set_action, Set)
    assert (set_action.target, set_action.expr) == ("health", "health - amount")

    (branch,) = resolve_statement("if(x > 1) goto Done")
    assert isinstance(branch, If)
    assert branch.then_target == "Done"

    assert [type(a) for a in resolve_statement("end")] == [End]

def test_split_arguments():
    assert split_arguments("a, f(b, c), 3") == ["a", "f(b, c)", "3"]
    assert split_arguments("  ") == []

def test_method_missing_paren_keeps_body(parse):
    result = parse("""
        class Hero {
            void hit amount { set health = health - amount; }
            int hp = 3;
        }
    """)
    hero_class = result.program.classes["Hero"]

    assert result.diagnostics[0].message == "expected '(' after method name"
    assert hero_class.method_params["hit"] == ["amount"]
    assert [a.text for a in hero_class.methods["hit"]] == ["set health = health - amount"]
    assert hero_class.fields == {"hp": 3}

def test_malformed_first_node_is_not_entry(parse):
    result = parse("node Broken node Start { end; }")

    assert result.diagnostics[0].message == "expected '{' after node name"
    assert "Broken" not in result.program.nodes
    assert result.program.entry == "Start"
