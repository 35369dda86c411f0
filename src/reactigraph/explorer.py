"""Life-expectancy explorer — the data layer and its reactive wiring.

The source table is wide: one `country` column and one column per year.
It is melted to long form (country, year, life_expectancy) once per
session, then filtered by the selected countries and year range.

    table = load("life_expectancy.csv")
    session = ExplorerSession(table, countries=["Sweden"], year_range=(1900, 2000))
    session.bind("plot", draw_lines)
    session.bind("boxplot", draw_boxes, source="stats")
    session.flush()

    session.select(["Sweden", "Norway"])
    session.flush()  # filtered recomputes once, both sinks render once
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

import pandas as pd

from reactigraph.computed import Computed
from reactigraph.errors import LoadError
from reactigraph.graph import FlushReport, Graph
from reactigraph.sink import Sink
from reactigraph.store import Inputs

logger = logging.getLogger("reactigraph.explorer")

COUNTRY = "country"
YEAR = "year"
VALUE = "life_expectancy"


# ─── Data source ─────────────────────────────────────────────────────────────


def load(path: str | Path) -> pd.DataFrame:
    """Read a wide life-expectancy CSV.

    Raises LoadError for a missing or empty file, a missing `country`
    column, a non-year column header, a non-numeric value or a country
    listed on more than one row.
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f"no such file: {path}")
    try:
        wide = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise LoadError(f"cannot parse {path}: {exc}") from exc

    if COUNTRY not in wide.columns:
        raise LoadError(f"{path}: missing {COUNTRY!r} column")

    years = {}
    for column in wide.columns:
        if column == COUNTRY:
            continue
        try:
            years[column] = int(str(column).strip())
        except ValueError:
            raise LoadError(f"{path}: column {column!r} is not a year") from None

    for column in years:
        values = pd.to_numeric(wide[column], errors="coerce")
        bad = values.isna() & wide[column].notna()
        if bad.any():
            row = int(bad.idxmax())
            raise LoadError(f"{path}: non-numeric value {wide.at[row, column]!r} in row {row}, column {column}")
        wide[column] = values

    wide = wide.rename(columns=years)
    wide[COUNTRY] = wide[COUNTRY].astype(str).str.strip()
    dupes = wide[COUNTRY].duplicated()
    if dupes.any():
        row = int(dupes.idxmax())
        raise LoadError(f"{path}: duplicate country {wide.at[row, COUNTRY]!r} in row {row}")
    logger.info("Loaded %s: %d countries, %d years", path, len(wide), len(years))
    return wide


# ─── Reshaping ───────────────────────────────────────────────────────────────


def to_long(wide: pd.DataFrame) -> pd.DataFrame:
    """Melt a wide table into (country, year, life_expectancy) rows; missing values dropped."""
    long = wide.melt(id_vars=COUNTRY, var_name=YEAR, value_name=VALUE)
    long = long.dropna(subset=[VALUE])
    long[YEAR] = long[YEAR].astype(int)
    return long.sort_values([COUNTRY, YEAR]).reset_index(drop=True)


def to_wide(long: pd.DataFrame) -> pd.DataFrame:
    wide = long.pivot(index=COUNTRY, columns=YEAR, values=VALUE).reset_index()
    wide.columns.name = None
    return wide


def filter_rows(long: pd.DataFrame, countries: Iterable[str], year_range: tuple[int, int]) -> pd.DataFrame:
    """Rows for the given countries with low <= year <= high, sorted by country and year."""
    low, high = year_range
    mask = long[COUNTRY].isin(list(countries)) & long[YEAR].between(low, high)
    return long.loc[mask].sort_values([COUNTRY, YEAR]).reset_index(drop=True)


def boxplot_stats(long: pd.DataFrame) -> pd.DataFrame:
    """Five-number summary per country, the input a boxplot draws from."""
    grouped = long.groupby(COUNTRY)[VALUE]
    stats = pd.DataFrame({
        "min": grouped.min(),
        "q1": grouped.quantile(0.25),
        "median": grouped.median(),
        "q3": grouped.quantile(0.75),
        "max": grouped.max(),
        "count": grouped.count(),
    })
    return stats.reset_index()


# ─── Session ─────────────────────────────────────────────────────────────────


class ExplorerSession:
    """One user's private graph over a shared, read-only table.

    Inputs: `countries` (list of names) and `year_range` ((low, high)).
    Derived: `filtered` rows, `stats` per country, `table_view` in wide form.
    Derived nodes only compute when a bound sink needs them.
    """

    def __init__(
        self,
        table: pd.DataFrame,
        *,
        countries: Iterable[str] = (),
        year_range: tuple[int, int] | None = None,
        name: str = "explorer",
        auto_flush: bool = False,
        raise_errors: bool = True,
    ) -> None:
        self.long = to_long(table)
        if year_range is None:
            year_range = self.year_bounds()

        self.graph = Graph(name, auto_flush=auto_flush, raise_errors=raise_errors)
        self.inputs = Inputs(
            self.graph,
            {"countries": list(countries), "year_range": tuple(year_range)},
        )
        self.filtered = Computed(
            self.graph,
            lambda selected, years: filter_rows(self.long, selected, years),
            inputs=(self.inputs.signal("countries"), self.inputs.signal("year_range")),
            name="filtered",
        )
        self.stats = Computed(self.graph, boxplot_stats, inputs=(self.filtered,), name="stats")
        self.table_view = Computed(self.graph, to_wide, inputs=(self.filtered,), name="table_view")

    def available_countries(self) -> list[str]:
        return sorted(self.long[COUNTRY].unique())

    def year_bounds(self) -> tuple[int, int]:
        if self.long.empty:
            return (0, 0)
        return int(self.long[YEAR].min()), int(self.long[YEAR].max())

    def select(self, countries: Iterable[str]) -> None:
        self.inputs.write("countries", list(countries))

    def set_year_range(self, low: int, high: int) -> None:
        self.inputs.write("year_range", (low, high))

    def bind(self, name: str, render: Callable[[pd.DataFrame], object], source: str = "filtered") -> Sink:
        """Register a render backend fed by one of the derived tables."""
        nodes = {"filtered": self.filtered, "stats": self.stats, "table_view": self.table_view}
        if source not in nodes:
            raise KeyError(f"unknown source {source!r}; expected one of {sorted(nodes)}")
        return Sink(self.graph, render, (nodes[source],), name=name)

    def flush(self) -> FlushReport:
        return self.graph.flush()

    def dispose(self) -> None:
        self.graph.dispose()

    def __enter__(self) -> ExplorerSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()
