"""read governance csv exports into string-valued records"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd

logger = logging.getLogger(__name__)


class CsvParseError(ValueError):
    """raised when a csv file cannot be parsed"""


def read_csv(file_path: str | Path) -> List[Dict[str, str]]:
    """read a csv with a header row and return one dict per non-empty line

    every value stays a string; empty cells become "" rather than NaN so
    callers can rely on plain truthiness checks
    """
    path = Path(file_path)
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError:
        logger.debug(f"{path} is empty")
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CsvParseError(f"Failed to parse {path}: {e}") from e

    # short rows leave NaN in trailing columns even with keep_default_na off
    df = df.fillna("")
    logger.debug(f"Read {len(df)} rows from {path}")
    return df.to_dict(orient="records")
