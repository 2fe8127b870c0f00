import logging
import pytest
from crtz.core.events import EventBus, ScriptEvent

def test_signal_reaches_subscriber(event_bus):
    received = []
    event_bus.subscribe(ScriptEvent.SIGNAL, received.append)

    event = event_bus.publish(ScriptEvent.SIGNAL, name="quest_started", value=1)

    assert received == [event]
    assert event["name"] == "quest_started"
    assert event.get("value") == 1
    assert event.get("line", -1) == -1

def test_only_matching_event_type_is_delivered(event_bus):
    signals = []
    event_bus.subscribe(ScriptEvent.SIGNAL, signals.append)

    event_bus.publish(ScriptEvent.NODE_ENTERED, node="Start", line=1)

    assert signals == []

def test_handlers_run_in_subscription_order(event_bus):
    order = []
    event_bus.subscribe(ScriptEvent.NODE_ENTERED, lambda e: order.append(("log", e["node"])))
    event_bus.subscribe(ScriptEvent.NODE_ENTERED, lambda e: order.append(("ui", e["node"])))

    event_bus.publish(ScriptEvent.NODE_ENTERED, node="Dock", line=3)

    assert order == [("log", "Dock"), ("ui", "Dock")]

def test_unsubscribe(event_bus):
    received = []
    event_bus.subscribe(ScriptEvent.CHOICE_MADE, received.append)
    event_bus.unsubscribe(ScriptEvent.CHOICE_MADE, received.append)
    event_bus.unsubscribe(ScriptEvent.RUN_ENDED, received.append)

    event_bus.publish(ScriptEvent.CHOICE_MADE, node="Start", choice_id=1, target="Fight")

    assert received == []

def test_handler_can_unsubscribe_itself(event_bus):
    endings = []
    def first_ending_only(event):
        endings.append(event["termination"])
        event_bus.unsubscribe(ScriptEvent.RUN_ENDED, first_ending_only)

    event_bus.subscribe(ScriptEvent.RUN_ENDED, first_ending_only)
    event_bus.publish(ScriptEvent.RUN_ENDED, termination="END", node="Bye")
    event_bus.publish(ScriptEvent.RUN_ENDED, termination="END", node="Bye")

    assert endings == ["END"]

def test_failing_handler_is_logged_and_skipped(event_bus, caplog):
    received = []
    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(ScriptEvent.SIGNAL, broken)
    event_bus.subscribe(ScriptEvent.SIGNAL, received.append)

    with caplog.at_level(logging.ERROR, logger="crtz.core.events"):
        event_bus.publish(ScriptEvent.SIGNAL, name="alarm", value=1)

    assert len(received) == 1
    assert "Error in SIGNAL handler" in caplog.text

def test_clear(event_bus):
    received = []
    event_bus.subscribe(ScriptEvent.SIGNAL, received.append)
    event_bus.subscribe(ScriptEvent.RUN_STARTED, received.append)

    event_bus.clear(ScriptEvent.SIGNAL)
    event_bus.publish(ScriptEvent.SIGNAL, name="x", value=0)
    event_bus.publish(ScriptEvent.RUN_STARTED, entry="Start")
    assert [e.type for e in received] == [ScriptEvent.RUN_STARTED]

    event_bus.clear()
    event_bus.publish(ScriptEvent.RUN_STARTED, entry="Start")
    assert len(received) == 1

def test_publish_without_subscribers():
    event = EventBus().publish(ScriptEvent.RUN_STARTED, entry=None)

    assert event.type == ScriptEvent.RUN_STARTED
    assert event.data == {"entry": None}
