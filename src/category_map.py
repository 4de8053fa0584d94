"""load the proposal title -> category enhancement lookup"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from src.csv_reader import read_csv
from src.models import CategoryMapping

logger = logging.getLogger(__name__)


def load_category_map(file_path: str | Path) -> Dict[str, CategoryMapping]:
    """build a title keyed category map; later rows overwrite earlier ones"""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Category enhancement file not found: {path}")

    category_map: Dict[str, CategoryMapping] = {}
    for row in read_csv(path):
        category_map[row.get('title', '')] = CategoryMapping(
            high_level_category=row.get('high_level_category', ''),
            topic_subject=row.get('topic_subject', ''),
        )
    logger.info(
        f"Loaded {len(category_map)} entries from category enhancement file.")
    return category_map
