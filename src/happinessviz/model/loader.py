"""
Survey Data Loader (CSV)
========================
Reads one World Happiness Report file per year and maps its columns onto the
fixed :class:`Row` schema.

The yearly files disagree on column names ("Happiness Score", "Score",
"Happiness.Score", ...) and only some of them carry a region column. Regions
missing from a year are backfilled from a reference year's file.
"""
from __future__ import annotations

import csv
import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Union

from happinessviz import config
from happinessviz.model.rows import METRIC_KEYS, WORLD, Row

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Column name variants seen across 2015-2019 CSVs
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "country": ("Country or region", "Country name", "Country"),
    "region": ("Region",),
    "score": ("Score", "Happiness Score", "Ladder score", "Happiness.Score"),
    "gdp": (
        "GDP per capita",
        "Economy (GDP per Capita)",
        "Log GDP per capita",
        "Economy..GDP.per.Capita.",
    ),
    "social": ("Social support", "Family"),
    "life": (
        "Healthy life expectancy",
        "Health (Life Expectancy)",
        "Health..Life.Expectancy.",
    ),
    "freedom": ("Freedom to make life choices", "Freedom"),
    "generosity": ("Generosity",),
    "corruption": (
        "Perceptions of corruption",
        "Trust (Government Corruption)",
        "Corruption",
        "Trust..Government.Corruption.",
    ),
}

_NON_LETTERS = re.compile(r"[^a-z]")


class DataLoadError(IOError):
    """A year's data file could not be read."""

    def __init__(self, year: int, path: PathLike, reason: str) -> None:
        super().__init__(f"Cannot load data for {year} from '{path}': {reason}")
        self.year = year
        self.path = str(path)
        self.reason = reason


@dataclass(frozen=True)
class LoadResult:
    year: int
    rows: tuple[Row, ...]
    regions: tuple[str, ...]


# ------------------------------------------------------------------------------
# Field resolution
# ------------------------------------------------------------------------------

def normalize_header(name: str) -> str:
    """Lowercase and keep letters only: 'Happiness.Score' -> 'happinessscore'."""
    return _NON_LETTERS.sub("", name.casefold())


def pick_field(record: Mapping[Optional[str], Optional[str]], candidates: Sequence[str]) -> str:
    """
    Return the raw value of the first matching column, or ``""``.

    Exact header names are tried first, in order. Only when none of them holds
    a value is the normalized comparison used against every source header.
    """
    for name in candidates:
        value = record.get(name)
        if value is not None and value != "":
            return value

    # later duplicates win, like a plain dict build
    by_normalized = {normalize_header(k): k for k in record if isinstance(k, str)}
    for name in candidates:
        key = by_normalized.get(normalize_header(name))
        if key is None:
            continue
        value = record.get(key)
        if value is not None and value != "":
            return value
    return ""


def parse_number(text: Optional[str]) -> Optional[float]:
    """Decimal string -> float. Empty, unparseable or non-finite -> ``None``."""
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


# ------------------------------------------------------------------------------
# File access
# ------------------------------------------------------------------------------

def year_path(year: int, data_dir: Optional[PathLike] = None) -> Path:
    return Path(data_dir if data_dir is not None else config.DATA_DIR) / f"{year}.csv"


def _read_records(path: Path, year: int) -> list[dict[Optional[str], Optional[str]]]:
    try:
        with open(path, mode='r', encoding='utf-8-sig', newline='') as f:
            line = f.readline()
            delimiter = ';' if ';' in line else ','
            f.seek(0)
            return list(csv.DictReader(f, delimiter=delimiter))
    except FileNotFoundError:
        raise DataLoadError(year, path, "file not found") from None
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise DataLoadError(year, path, str(e)) from e


@lru_cache(maxsize=None)
def _cached_region_reference(path: str, year: int) -> Mapping[str, str]:
    records = _read_records(Path(path), year)
    mapping: dict[str, str] = {}
    for record in records:
        country = pick_field(record, COLUMN_ALIASES["country"]).strip()
        region = pick_field(record, COLUMN_ALIASES["region"]).strip() or WORLD
        mapping[country] = region
    logger.info(f"Loaded region reference for {len(mapping)} countries from {path}")
    return MappingProxyType(mapping)


def load_region_reference(path: PathLike, year: int) -> Mapping[str, str]:
    """
    Country -> region mapping of the reference file, read once per process.

    Failures are not cached; an unreadable file yields an empty mapping.
    """
    try:
        return _cached_region_reference(str(path), year)
    except DataLoadError as e:
        logger.warning(f"Region reference unavailable, regions default to '{WORLD}': {e.reason}")
        return MappingProxyType({})


def clear_region_cache() -> None:
    """Forget cached reference mappings (e.g. after the data directory changed)."""
    _cached_region_reference.cache_clear()


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------

def sorted_regions(rows: Sequence[Row]) -> tuple[str, ...]:
    return tuple(sorted({r.region for r in rows}, key=lambda s: (s.casefold(), s)))


def row_from_record(record: Mapping[Optional[str], Optional[str]], region_by_country: Mapping[str, str]) -> Row:
    country = pick_field(record, COLUMN_ALIASES["country"]).strip()
    region_in_file = pick_field(record, COLUMN_ALIASES["region"]).strip()
    region = region_in_file or region_by_country.get(country) or WORLD
    if not region_in_file:
        logger.debug(f"Region for '{country}' resolved to '{region}'")

    metrics = {key: parse_number(pick_field(record, COLUMN_ALIASES[key])) for key in METRIC_KEYS}
    return Row(country=country, region=region, **metrics)


def load_year(
    year: int,
    data_dir: Optional[PathLike] = None,
    reference_year: Optional[int] = None,
) -> LoadResult:
    """
    Load a specific year (2015-2019).

    Raises:
        DataLoadError: If the year's file cannot be read. No retry is attempted.
    """
    path = year_path(year, data_dir)
    logger.info(f"Loading {year} from {path}")
    records = _read_records(path, year)

    ref_year = config.REFERENCE_YEAR if reference_year is None else reference_year
    region_by_country = load_region_reference(year_path(ref_year, data_dir), ref_year)

    rows = tuple(row_from_record(record, region_by_country) for record in records)
    regions = sorted_regions(rows)
    logger.info(f"Loaded {len(rows)} rows across {len(regions)} regions for {year}")
    return LoadResult(year=year, rows=rows, regions=regions)
