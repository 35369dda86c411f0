"""Textual integration for reactigraph. Opt-in — requires textual.

A Textual sink only renders while its app is running and not paused, so
widget replacement can't race a flush. NoMatches from widget queries is
ignored: the widget the render targets is gone, nothing to update.
"""

from contextlib import contextmanager

from textual.css.query import NoMatches

from reactigraph.computed import _default_name
from reactigraph.sink import Sink

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend Textual sinks during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def sink(app, graph, render, *inputs, name=None) -> Sink:
    """Sink that safely bridges to Textual widgets.

    Stays dirty while the app is paused or not running, so the next flush
    after resuming renders the latest values.
    """

    def _safe(*values):
        try:
            render(*values)
        except NoMatches:
            pass

    return Sink(
        graph,
        _safe,
        inputs,
        name=name or _default_name(render),
        when=lambda: is_safe(app),
    )
