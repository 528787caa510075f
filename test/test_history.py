"""Test fork nodes and the undo/redo history"""
import math

import pytest

from branchwork.exceptions import AtEndError, AtStartError
from branchwork.history import ForkNode, History
from branchwork.machine.engine import Engine, Yielded
from branchwork.machine.program import Program, Yield


def make_echo():
    prog = Program("echo")

    @prog.step(entry=True)
    def start(env, value):
        env.setdefault("seen", []).append(value)
        return Yield(list(env["seen"]), then="start")

    return prog


def new_node(label=None, **kwargs):
    return ForkNode(Engine(make_echo()), label, **kwargs)


def make_history(*labels, calls=None):
    """A history with one entry per label, recording callbacks in calls"""
    calls = [] if calls is None else calls
    history = History(new_node())
    for label in labels:
        history.push(
            new_node(
                label,
                undo=lambda l=label: calls.append(("undo", l)),
                redo=lambda l=label: calls.append(("redo", l)),
            )
        )
    return history


## ForkNode


def test_admit_release():
    node = new_node(limit=2)
    assert node.admit()
    assert node.admit()
    assert not node.admit()
    assert node.active == 2
    assert node.saturated
    node.release()
    assert node.active == 1
    node.release()
    node.release()
    assert node.active == 0


def test_limit_zero_admits_nothing():
    node = new_node(limit=0)
    assert not node.admit()
    assert node.active == 0


def test_unlimited():
    node = new_node()
    assert node.limit == math.inf
    assert all(node.admit() for _ in range(100))


def test_fork():
    undo = lambda: None
    node = new_node("A", limit=3, active=2, undo=undo)
    node.engine.resume("first")
    child = node.fork()
    assert child.active == 0
    assert child.limit == 3
    assert child.label == "A"
    assert child.undo is undo
    assert child.engine is not node.engine

    assert child.engine.resume("child") == Yielded(["first", "child"])
    # original engine untouched
    assert node.engine.frame.locals["seen"] == ["first"]
    assert node.active == 2


def test_bad_limit():
    with pytest.raises(ValueError):
        new_node(limit=-1)


## History


def test_push():
    history = make_history("A", "B")
    assert len(history) == 3
    assert history.cursor == 2
    assert history.labels == ["A", "B"]
    assert history.current().label == "B"
    assert history.root.label is None


def test_undo_redo_callbacks():
    calls = []
    history = make_history("A", "B", calls=calls)
    history.undo()
    assert calls == [("undo", "B")]
    assert history.current().label == "A"
    history.undo()
    assert history.cursor == 0
    history.redo()
    assert calls == [("undo", "B"), ("undo", "A"), ("redo", "A")]
    assert history.cursor == 1


def test_bounds():
    calls = []
    history = make_history("A", calls=calls)
    with pytest.raises(AtEndError):
        history.redo()
    assert history.cursor == 1
    history.undo()
    with pytest.raises(AtStartError):
        history.undo()
    assert history.cursor == 0
    assert calls == [("undo", "A")]
    assert not history.can_undo
    assert history.can_redo


def test_empty_history_bounds():
    history = History(new_node())
    with pytest.raises(AtStartError):
        history.undo()
    with pytest.raises(AtEndError):
        history.redo()
    assert history.labels == []


@pytest.mark.parametrize("position", [0, 1, 2, 3])
def test_inverse_law(position):
    history = make_history("A", "B", "C")
    for _ in range(3 - position):
        history.undo()
    assert history.cursor == position

    if history.can_redo:
        history.redo()
        history.undo()
        assert history.cursor == position
    else:
        with pytest.raises(AtEndError):
            history.redo()

    if history.can_undo:
        history.undo()
        history.redo()
        assert history.cursor == position
    else:
        with pytest.raises(AtStartError):
            history.undo()

    assert history.current().label == [None, "A", "B", "C"][position]


def test_truncation():
    history = make_history("A", "B", "C")
    history.undo()
    history.undo()
    cursor_before = history.cursor
    history.push(new_node("D"))
    assert len(history) == cursor_before + 2
    assert history.labels == ["A", "D"]
    assert not history.can_redo


def test_failing_callback_leaves_cursor():
    def bad():
        raise RuntimeError("nope")

    history = History(new_node())
    history.push(new_node("A", undo=bad))
    with pytest.raises(RuntimeError):
        history.undo()
    assert history.cursor == 1


def test_active_over_limit():
    with pytest.raises(ValueError):
        new_node(limit=1, active=3)
    assert new_node(limit=1, active=1).saturated
