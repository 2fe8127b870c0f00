import pytest
from crtz.runtime.interpreter import Termination

HERO = """
int bonus = 5;
class Hero {
    int health = 100;
    void hit(amount) { set health = health - amount; }
    void greet() { show "Hello, I have ${health} hp"; }
    void stop() { end; set health = 0; }
    void flee() { goto Elsewhere; set health = 1; }
}
new Hero hero;
"""

def test_method_updates_field(run_script):
    _, console, interpreter = run_script(HERO + """
        node Start { hero.hit(30); show "${hero.health}"; end; }
    """)

    assert interpreter.objects["hero"].fields["health"] == 70
    assert "70" in console.lines

def test_arguments_evaluated_in_caller_scope(run_script):
    _, _, interpreter = run_script(HERO + "node Start { hero.hit(bonus * 2); end; }")

    assert interpreter.objects["hero"].fields["health"] == 90

def test_global_with_field_name_is_aliased(run_script):
    _, _, interpreter = run_script("""
        int health = 100;
        class Hero {
            int health = 50;
            void attack(damage) { set health = health - damage; }
        }
        new Hero hero;
        node Start { hero.attack(3); end; }
    """)

    assert interpreter.objects["hero"].fields["health"] == 97
    assert interpreter.globals.ints["health"] == 97

def test_method_scope_sees_fields(run_script):
    _, console, _ = run_script(HERO + "node Start { hero.greet(); end; }")

    assert "Hello, I have 100 hp" in console.lines

def test_end_inside_method_stops_only_the_method(run_script):
    result, console, interpreter = run_script(HERO + """
        node Start { hero.stop(); show "after"; end; }
    """)

    assert interpreter.objects["hero"].fields["health"] == 100
    assert "after" in console.lines
    assert result.termination == Termination.END

def test_goto_inside_method_is_ignored(run_script):
    result, _, interpreter = run_script(HERO + "node Start { hero.flee(); end; }")

    assert result.termination == Termination.END
    assert result.last_node == "Start"
    assert interpreter.objects["hero"].fields["health"] == 100

def test_instances_are_independent(run_script):
    _, _, interpreter = run_script(HERO + """
        new Hero other;
        node Start { hero.hit(10); end; }
    """)

    assert interpreter.objects["hero"].fields["health"] == 90
    assert interpreter.objects["other"].fields["health"] == 100

def test_unknown_instance_or_method(run_script):
    result, _, interpreter = run_script(HERO + """
        node Start { ghost.hit(1); hero.fly(); end; }
    """)

    assert [d.message for d in interpreter.diagnostics] == [
        "Runtime: unknown instance 'ghost'",
        "Runtime: class 'Hero' has no method 'fly'",
    ]
    assert result.termination == Termination.END

def test_runaway_recursion_is_cut_off(run_script):
    result, _, interpreter = run_script("""
        class Spinner { void spin() { s.spin(); } }
        new Spinner s;
        node Start { s.spin(); end; }
    """)

    assert result.termination == Termination.END
    assert "call depth exceeded" in interpreter.diagnostics[-1].message

def test_extra_arguments_ignored(run_script):
    _, _, interpreter = run_script(HERO + "node Start { hero.hit(10, 99); hero.greet(1); end; }")

    assert interpreter.objects["hero"].fields["health"] == 90

def test_dotted_set_on_own_object_inside_method(run_script):
    _, _, interpreter = run_script("""
        class Hero {
            int health = 100;
            void hurt(n) { set hero.health = hero.health - n; }
        }
        new Hero hero;
        node Start { hero.hurt(10); hero.hurt(5); end; }
    """)

    assert interpreter.objects["hero"].fields["health"] == 85

def test_dotted_set_on_other_object_inside_method(run_script):
    _, _, interpreter = run_script(HERO + """
        new Hero target;
        class Healer { void heal(n) { set target.health = target.health + n; } }
        new Healer medic;
        node Start { target.hit(30); medic.heal(10); end; }
    """)

    assert interpreter.objects["target"].fields["health"] == 80
    assert interpreter.objects["hero"].fields["health"] == 100
