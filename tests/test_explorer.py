"""Tests for the life-expectancy explorer: loading, reshaping and session wiring."""

import pandas as pd
import pytest

from reactigraph import FlushError, LoadError
from reactigraph.explorer import (
    ExplorerSession,
    boxplot_stats,
    filter_rows,
    load,
    to_long,
    to_wide,
)

CSV = """country,1900,1950,2000
Sweden,52.4,71.3,79.6
Norway,53.1,72.0,78.7
Denmark,51.0,70.2,76.9
"""


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "life_expectancy.csv"
    path.write_text(CSV)
    return path


@pytest.fixture
def table(csv_path):
    return load(csv_path)


class TestLoad:
    def test_wide_table(self, table):
        assert list(table.columns) == ["country", 1900, 1950, 2000]
        assert list(table["country"]) == ["Sweden", "Norway", "Denmark"]
        assert table.loc[0, 1950] == pytest.approx(71.3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError, match="no such file"):
            load(tmp_path / "absent.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(LoadError):
            load(path)

    def test_missing_country_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("nation,1900\nSweden,52.4\n")
        with pytest.raises(LoadError, match="country"):
            load(path)

    def test_non_year_header(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("country,1900,region\nSweden,52.4,north\n")
        with pytest.raises(LoadError, match="not a year"):
            load(path)

    def test_non_numeric_value(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("country,1900,1950\nSweden,52.4,unknown\nNorway,53.1,72.0\n")
        with pytest.raises(LoadError, match="non-numeric"):
            load(path)

    def test_duplicate_country(self, tmp_path):
        path = tmp_path / "dupes.csv"
        path.write_text("country,1900,1950\nSweden,52.4,71.3\n Sweden,52.5,71.4\n")
        with pytest.raises(LoadError, match="duplicate country 'Sweden'"):
            load(path)

    def test_blank_values_allowed(self, tmp_path):
        path = tmp_path / "gaps.csv"
        path.write_text("country,1900,1950\nSweden,,71.3\n")
        wide = load(path)
        assert pd.isna(wide.loc[0, 1900])


class TestReshape:
    def test_to_long(self, table):
        long = to_long(table)
        assert list(long.columns) == ["country", "year", "life_expectancy"]
        assert len(long) == 9
        sweden = long[long["country"] == "Sweden"]
        assert list(sweden["year"]) == [1900, 1950, 2000]

    def test_to_long_drops_missing(self):
        wide = pd.DataFrame({"country": ["Sweden"], 1900: [float("nan")], 1950: [71.3]})
        long = to_long(wide)
        assert list(long["year"]) == [1950]

    def test_to_wide_inverts_to_long(self, table):
        wide = to_wide(to_long(table))
        assert list(wide.columns) == ["country", 1900, 1950, 2000]
        assert list(wide["country"]) == ["Denmark", "Norway", "Sweden"]
        row = wide[wide["country"] == "Norway"].iloc[0]
        assert row[2000] == pytest.approx(78.7)


class TestFilter:
    def test_countries_and_inclusive_years(self, table):
        rows = filter_rows(to_long(table), ["Sweden", "Norway"], (1900, 1950))
        assert list(rows["country"]) == ["Norway", "Norway", "Sweden", "Sweden"]
        assert list(rows["year"]) == [1900, 1950, 1900, 1950]

    def test_no_countries(self, table):
        assert filter_rows(to_long(table), [], (1900, 2000)).empty

    def test_boxplot_stats(self, table):
        stats = boxplot_stats(to_long(table))
        sweden = stats[stats["country"] == "Sweden"].iloc[0]
        assert sweden["min"] == pytest.approx(52.4)
        assert sweden["median"] == pytest.approx(71.3)
        assert sweden["max"] == pytest.approx(79.6)
        assert sweden["count"] == 3


class TestExplorerSession:
    def test_scenario(self, table):
        session = ExplorerSession(table, countries=["Sweden"], year_range=(1900, 2000))
        plot, tab = [], []
        session.bind("plot", plot.append)
        session.bind("table", tab.append)
        session.flush()
        assert session.filtered.generation == 1

        session.select(["Sweden", "Norway"])
        report = session.flush()

        assert session.filtered.generation == 2  # recomputed once for two sinks
        assert report.rendered == ["plot", "table"]
        assert len(plot) == 2 and len(tab) == 2
        assert plot[-1] is tab[-1]
        assert sorted(plot[-1]["country"].unique()) == ["Norway", "Sweden"]
        assert len(plot[-1]) == 6

    def test_default_year_range(self, table):
        session = ExplorerSession(table)
        assert session.inputs.read("year_range") == (1900, 2000)
        assert session.available_countries() == ["Denmark", "Norway", "Sweden"]

    def test_year_range_narrows(self, table):
        session = ExplorerSession(table, countries=["Denmark"])
        log = []
        session.bind("plot", log.append)
        session.flush()
        session.set_year_range(1950, 2000)
        session.flush()
        assert list(log[-1]["year"]) == [1950, 2000]

    def test_unbound_sources_stay_lazy(self, table):
        session = ExplorerSession(table, countries=["Sweden"])
        session.bind("plot", lambda rows: None)
        session.flush()
        assert session.stats.dirty
        assert session.table_view.dirty
        assert session.stats.generation == 0

    def test_stats_source(self, table):
        session = ExplorerSession(table, countries=["Sweden", "Norway"])
        log = []
        session.bind("boxplot", log.append, source="stats")
        session.flush()
        assert list(log[0]["country"]) == ["Norway", "Sweden"]

    def test_table_view_source(self, table):
        session = ExplorerSession(table, countries=["Norway"], year_range=(1950, 2000))
        log = []
        session.bind("table", log.append, source="table_view")
        session.flush()
        assert list(log[0].columns) == ["country", 1950, 2000]

    def test_unknown_source(self, table):
        session = ExplorerSession(table)
        with pytest.raises(KeyError):
            session.bind("x", print, source="nope")

    def test_render_failure_isolated(self, table):
        session = ExplorerSession(table, countries=["Sweden"])
        log = []

        def broken(rows):
            raise RuntimeError("plot backend down")

        session.bind("plot", broken)
        session.bind("table", log.append)
        with pytest.raises(FlushError):
            session.flush()
        assert len(log) == 1

    def test_sessions_isolated(self, table):
        alice = ExplorerSession(table, countries=["Sweden"], name="alice")
        bob = ExplorerSession(table, countries=["Sweden"], name="bob")
        alice_log, bob_log = [], []
        alice.bind("plot", alice_log.append)
        bob.bind("plot", bob_log.append)
        alice.flush()
        bob.flush()

        alice.select(["Norway"])
        alice.flush()
        bob.flush()

        assert len(alice_log) == 2
        assert len(bob_log) == 1
        assert list(bob_log[0]["country"].unique()) == ["Sweden"]

    def test_context_manager_disposes(self, table):
        with ExplorerSession(table) as session:
            pass
        assert session.graph.disposed
