import pytest

from runeengine.layer import Layer, LayerStack


class RecordingLayer(Layer):
    def __init__(self, name, log):
        super().__init__(name)
        self.log = log

    def on_attach(self):
        self.log.append(("attach", self.name))

    def on_detach(self):
        self.log.append(("detach", self.name))


@pytest.fixture
def log():
    return []


def test_default_name():
    assert Layer().name == "Layer"


def test_custom_name():
    assert Layer("Example").name == "Example"


def test_overlays_stay_above_layers(log):
    stack = LayerStack()
    first = RecordingLayer("first", log)
    overlay = RecordingLayer("overlay", log)
    second = RecordingLayer("second", log)
    stack.push_layer(first)
    stack.push_overlay(overlay)
    stack.push_layer(second)
    assert list(stack) == [first, second, overlay]
    assert list(reversed(stack)) == [overlay, second, first]
    assert len(stack) == 3


def test_push_calls_on_attach(log):
    stack = LayerStack()
    stack.push_layer(RecordingLayer("a", log))
    stack.push_overlay(RecordingLayer("b", log))
    assert log == [("attach", "a"), ("attach", "b")]


def test_pop_layer_detaches_and_moves_insert_point(log):
    stack = LayerStack()
    a = RecordingLayer("a", log)
    b = RecordingLayer("b", log)
    overlay = RecordingLayer("overlay", log)
    stack.push_layer(a)
    stack.push_layer(b)
    stack.push_overlay(overlay)
    stack.pop_layer(a)
    assert ("detach", "a") in log
    c = RecordingLayer("c", log)
    stack.push_layer(c)
    assert list(stack) == [b, c, overlay]


def test_pop_overlay(log):
    stack = LayerStack()
    a = RecordingLayer("a", log)
    overlay = RecordingLayer("overlay", log)
    stack.push_layer(a)
    stack.push_overlay(overlay)
    stack.pop_overlay(overlay)
    assert list(stack) == [a]
    assert log[-1] == ("detach", "overlay")
    b = RecordingLayer("b", log)
    stack.push_layer(b)
    assert list(stack) == [a, b]


def test_pop_missing_layer_is_ignored(log):
    stack = LayerStack()
    a = RecordingLayer("a", log)
    stack.push_layer(a)
    stack.pop_layer(RecordingLayer("ghost", log))
    stack.pop_overlay(RecordingLayer("ghost2", log))
    assert list(stack) == [a]
    assert all(entry[0] == "attach" for entry in log)


def test_contains_uses_identity(log):
    stack = LayerStack()
    a = RecordingLayer("a", log)
    stack.push_layer(a)
    assert a in stack
    assert RecordingLayer("a", log) not in stack