#!/usr/bin/env python3
"""build per-chain proposals, validators and votes json from csv exports"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from src.category_map import load_category_map
from src.csv_reader import read_csv
from src.normalize_votes import chain_id_from_filename, normalize_chain
from src.output_writer import write_chain_outputs
from src.settings import (
    CATEGORY_FILE_NAME,
    DATA_DIR,
    PROPOSALS_SUFFIX,
    SOURCE_DIR,
    resolve_dir,
    setup_logging,
)

logger = logging.getLogger(__name__)


def list_proposal_files(source_dir: str | Path) -> List[Path]:
    """return <chain>_proposals.csv files in a stable order"""
    source_dir = Path(source_dir)
    return sorted(p for p in source_dir.iterdir()
                  if p.is_file() and p.name.endswith(PROPOSALS_SUFFIX))


def process_all_data(source_dir: str | Path = SOURCE_DIR, output_dir: str | Path = DATA_DIR,
                     parquet: bool = False) -> List[str]:
    """process every chain export and return the chain ids written

    a missing category file aborts before any chain is touched
    """
    source_dir = Path(source_dir)
    output_dir = Path(output_dir)
    logger.info("Starting data optimization process...")

    category_map = load_category_map(source_dir / CATEGORY_FILE_NAME)

    processed: List[str] = []
    for csv_path in list_proposal_files(source_dir):
        chain_id = chain_id_from_filename(csv_path.name)
        logger.info(f"Processing chain: {chain_id}...")

        rows = read_csv(csv_path)
        chain = normalize_chain(chain_id, rows, category_map)
        write_chain_outputs(output_dir, chain, parquet=parquet)

        processed.append(chain_id)
        logger.info(f"Successfully generated optimized data for {chain_id}.")

    logger.info("Data optimization process finished successfully!")
    return processed


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Convert <chain>_proposals.csv exports into per-chain JSON.")
    parser.add_argument("--source-dir", default=None,
                        help=f"Directory holding the csv exports (default: {SOURCE_DIR})")
    parser.add_argument("--output-dir", default=None,
                        help=f"Data root for per-chain json (default: {DATA_DIR})")
    parser.add_argument("--parquet", action="store_true",
                        help="Also write proposals/votes parquet copies")
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("-v", "--verbose", action="store_true",
                           help="Enable verbose logging (DEBUG)")
    log_group.add_argument("-q", "--quiet", action="store_true",
                           help="Reduce logging output (ERROR)")
    args = parser.parse_args()
    setup_logging(args.verbose, args.quiet)

    try:
        process_all_data(
            resolve_dir(args.source_dir, SOURCE_DIR),
            resolve_dir(args.output_dir, DATA_DIR),
            parquet=args.parquet,
        )
    except Exception as e:
        logger.error(
            f"A critical error occurred during the data optimization process: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
