#!/usr/bin/env python3
"""
cli to build the governance dashboard data and serve it over http
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from src.category_summary import summarize_all
from src.optimize_data import process_all_data
from src.reclassify_proposals import reclassify_all
from src.settings import (
    API_HOST,
    API_PORT,
    DATA_DIR,
    SOURCE_DIR,
    resolve_dir,
    setup_logging,
)

logger = logging.getLogger(__name__)

STEPS = ["optimize", "reclassify", "summary"]


def _normalize_step_choice(val: str) -> List[str]:
    v = (val or "").strip().lower()
    if v in {"", "all"}:
        return list(STEPS)
    return [v]


def run_pipeline(steps: List[str], source_dir: Path, output_dir: Path, parquet: bool = False) -> None:
    """run the requested steps in pipeline order"""
    for step in STEPS:
        if step not in steps:
            logger.debug(f"Skipping step: {step}")
            continue
        if step == "optimize":
            process_all_data(source_dir, output_dir, parquet=parquet)
        elif step == "reclassify":
            reclassify_all(output_dir)
        elif step == "summary":
            summarize_all(output_dir)


def serve(data_dir: Path, host: str, port: int) -> None:
    import uvicorn
    from src import api

    api.DATA_DIR = data_dir
    logger.info(f"Serving {data_dir} on http://{host}:{port}")
    uvicorn.run(api.app, host=host, port=port)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Build per-chain governance JSON for the dashboard, or serve it.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=(
            "Examples:\n"
            "  Full rebuild (csv -> json -> v2 taxonomy -> category summaries):\n"
            "    python gov_dashboard.py\n\n"
            "  Re-run the reclassifier only:\n"
            "    python gov_dashboard.py --step reclassify\n\n"
            "  Serve public/data:\n"
            "    python gov_dashboard.py --serve --port 8000\n"
        ),
    )
    parser.add_argument("--step", choices=["all", *STEPS], default="all",
                        help="Pipeline step to run (default: all)")
    parser.add_argument("--source-dir", default=None,
                        help=f"Directory holding the csv exports (default: {SOURCE_DIR})")
    parser.add_argument("--output-dir", default=None,
                        help=f"Data root for per-chain json (default: {DATA_DIR})")
    parser.add_argument("--parquet", action="store_true",
                        help="Also write proposals/votes parquet copies")
    parser.add_argument("--serve", action="store_true",
                        help="Start the read-only API instead of running the pipeline")
    parser.add_argument("--host", default=API_HOST, help="API bind host")
    parser.add_argument("--port", type=int, default=API_PORT, help="API bind port")
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("-v", "--verbose", action="store_true",
                           help="Enable verbose logging (DEBUG)")
    log_group.add_argument("-q", "--quiet", action="store_true",
                           help="Reduce logging output (ERROR)")

    args = parser.parse_args()
    setup_logging(args.verbose, args.quiet)

    source_dir = resolve_dir(args.source_dir, SOURCE_DIR)
    output_dir = resolve_dir(args.output_dir, DATA_DIR)

    if args.serve:
        serve(output_dir, args.host, args.port)
        return

    steps = _normalize_step_choice(args.step)
    logger.info(f"Steps: {', '.join(steps)} | source={source_dir} | output={output_dir}")

    try:
        run_pipeline(steps, source_dir, output_dir, parquet=args.parquet)
    except Exception as e:
        logger.error(f"A critical error occurred during the data pipeline: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
