"""Tests for the Inputs registry."""

import pytest

from reactigraph import Graph, Inputs, Signal, Sink


class TestInputs:
    def test_creation_from_schema(self):
        i = Inputs(Graph(), {"countries": ["Sweden"], "year_range": (1900, 2000)})
        assert i.read("countries") == ["Sweden"]
        assert i.read("year_range") == (1900, 2000)

    def test_initial_overrides(self):
        i = Inputs(Graph(), {"x": 10, "y": "hello"}, initial={"x": 99})
        assert i.read("x") == 99
        assert i.read("y") == "hello"

    def test_signal_per_key(self):
        g = Graph()
        i = Inputs(g, {"countries": []})
        sig = i.signal("countries")
        assert isinstance(sig, Signal)
        assert sig.name == "countries"

    def test_unknown_key(self):
        i = Inputs(Graph(), {"x": 1})
        with pytest.raises(KeyError):
            i.read("nope")
        with pytest.raises(KeyError):
            i.write("nope", 2)

    def test_write(self):
        i = Inputs(Graph(), {"x": 0})
        i.write("x", 42)
        assert i.read("x") == 42

    def test_update_batches(self):
        g = Graph(auto_flush=True)
        i = Inputs(g, {"x": 0, "y": 0})
        log = []
        Sink(g, lambda x, y: log.append((x, y)), [i.signal("x"), i.signal("y")])
        g.flush()
        i.update({"x": 1, "y": 2})
        assert log == [(0, 0), (1, 2)]  # single batch

    def test_update_rejects_unknown_before_writing(self):
        i = Inputs(Graph(), {"x": 0})
        with pytest.raises(KeyError):
            i.update({"x": 5, "nope": 1})
        assert i.read("x") == 0

    def test_keys_and_snapshot(self):
        i = Inputs(Graph(), {"a": 1, "b": 2})
        assert i.keys() == ["a", "b"]
        assert "a" in i
        assert list(i) == ["a", "b"]
        assert i.snapshot() == {"a": 1, "b": 2}
