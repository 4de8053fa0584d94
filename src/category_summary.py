#!/usr/bin/env python3
"""per-chain category and topic summary with vote and voting power splits

besides ``category_summary.json`` in each chain directory, the data root
gets ``all_chains.json`` (the same aggregation over every chain) and
``metadata.json`` describing the run. proposal ids are only unique within
a chain, so votes join proposals on (chain_id, proposal_id).
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from src.normalize_votes import VOTE_OPTION_PREFIX
from src.output_writer import (
    PROPOSALS_FILE,
    VOTES_FILE,
    read_json,
    write_json,
)
from src.settings import DATA_DIR, resolve_dir, setup_logging

logger = logging.getLogger(__name__)

CATEGORY_SUMMARY_FILE = "category_summary.json"
ALL_CHAINS_FILE = "all_chains.json"
METADATA_FILE = "metadata.json"
SUMMARY_OPTIONS = ["YES", "NO", "ABSTAIN", "NO_WITH_VETO"]

JOIN_KEYS = ['chain_id', 'proposal_id']

ChainInputs = Tuple[List[dict], List[dict]]


def _empty_distribution(value: Any = 0) -> Dict[str, Any]:
    return {opt: value for opt in SUMMARY_OPTIONS}


def _group_stats(proposals: pd.DataFrame, votes: pd.DataFrame, key: str) -> Dict[str, Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for name, group in proposals.groupby(key, sort=True):
        count = int(len(group))
        pass_count = int(group['passed'].sum())
        stats[str(name)] = {
            'count': count,
            'passCount': pass_count,
            'passRate': (pass_count / count) * 100 if count else 0,
            'voteDistribution': _empty_distribution(0),
            'votingPowerDistribution': _empty_distribution(0.0),
        }

    if votes.empty:
        return stats

    counts = votes.groupby([key, 'option']).size()
    for (name, option), n in counts.items():
        stats[str(name)]['voteDistribution'][option] = int(n)

    power = votes.dropna(subset=['power']).groupby([key, 'option'])['power'].sum()
    for (name, option), total in power.items():
        stats[str(name)]['votingPowerDistribution'][option] = float(total)
    return stats


def _chain_column(df: pd.DataFrame, chain_id: Optional[str]) -> pd.Series:
    if chain_id is not None:
        return pd.Series(chain_id, index=df.index, dtype=object)
    return df['chain_id'].fillna('').astype(str)


def build_category_summary(proposals: List[dict], votes: List[dict],
                           chain_id: Optional[str] = None) -> Dict[str, Any]:
    """aggregate proposals by type (category) and topic

    votes are joined on (chain_id, proposal_id). when chain_id is given every
    record is taken to belong to that chain; otherwise each record's own
    chain_id field is used. votes for unknown proposals, with an option
    outside SUMMARY_OPTIONS, or with non numeric power are left out of the
    corresponding distribution
    """
    prop_df = pd.DataFrame(proposals, columns=['chain_id', 'proposal_id', 'type', 'topic', 'status'])
    prop_df['chain_id'] = _chain_column(prop_df, chain_id)
    prop_df['proposal_id'] = prop_df['proposal_id'].astype(str)
    prop_df['type'] = prop_df['type'].fillna('Unknown').replace('', 'Unknown')
    prop_df['topic'] = prop_df['topic'].fillna('Unclassified').replace('', 'Unclassified')
    prop_df['passed'] = prop_df['status'].fillna('').astype(str).str.upper().str.contains('PASSED')

    vote_df = pd.DataFrame(votes, columns=['chain_id', 'proposal_id', 'vote_option', 'voting_power'])
    vote_df['chain_id'] = _chain_column(vote_df, chain_id)
    vote_df['proposal_id'] = vote_df['proposal_id'].astype(str)
    vote_df['option'] = vote_df['vote_option'].map(
        lambda v: v.replace(VOTE_OPTION_PREFIX, '', 1) if isinstance(v, str) else None)
    # infinite power would make the summary unserializable as strict json
    vote_df['power'] = pd.to_numeric(vote_df['voting_power'], errors='coerce').replace(
        [float('inf'), float('-inf')], float('nan'))
    vote_df = vote_df[vote_df['option'].isin(SUMMARY_OPTIONS)]
    vote_df = vote_df.merge(prop_df[JOIN_KEYS + ['type', 'topic']], on=JOIN_KEYS, how='inner')

    categories = _group_stats(prop_df, vote_df, 'type')
    topics = _group_stats(prop_df, vote_df, 'topic')
    # a topic is attributed to the category of its first proposal
    first_category = prop_df.drop_duplicates('topic').set_index('topic')['type']
    for name, entry in topics.items():
        entry['category'] = str(first_category.get(name, 'Unknown'))

    summary: Dict[str, Any] = {'categories': categories, 'topics': topics}
    if chain_id is not None:
        summary = {'chain_id': chain_id, **summary}
    return summary


def build_all_chains_summary(chains: Dict[str, ChainInputs]) -> Dict[str, Any]:
    """aggregate every chain's proposals and votes into one summary"""
    proposals: List[dict] = []
    votes: List[dict] = []
    for chain_id, (chain_proposals, chain_votes) in chains.items():
        proposals.extend({**p, 'chain_id': chain_id} for p in chain_proposals)
        votes.extend({**v, 'chain_id': chain_id} for v in chain_votes)
    return build_category_summary(proposals, votes)


def build_summary_metadata(chains: Dict[str, ChainInputs], summary: Dict[str, Any],
                           generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        'generatedAt': generated_at.isoformat(),
        'totalProposals': sum(len(p) for p, _ in chains.values()),
        'totalVotes': sum(len(v) for _, v in chains.values()),
        'totalCategories': len(summary['categories']),
        'totalTopics': len(summary['topics']),
        'chains': len(chains),
        'chainList': list(chains),
    }


def load_chain_inputs(chain_dir: str | Path) -> Optional[ChainInputs]:
    """read (proposals, votes) for a chain directory; None if either file is missing"""
    chain_dir = Path(chain_dir)
    proposals_path = chain_dir / PROPOSALS_FILE
    votes_path = chain_dir / VOTES_FILE
    if not proposals_path.exists() or not votes_path.exists():
        logger.info(f"Skipping {chain_dir.name}: missing one or more required files.")
        return None
    return read_json(proposals_path), read_json(votes_path)


def write_category_summary(chain_dir: str | Path,
                           inputs: Optional[ChainInputs] = None) -> Optional[Path]:
    """write category_summary.json for a chain directory; None if inputs are missing"""
    chain_dir = Path(chain_dir)
    if inputs is None:
        inputs = load_chain_inputs(chain_dir)
        if inputs is None:
            return None

    proposals, votes = inputs
    summary = build_category_summary(proposals, votes, chain_id=chain_dir.name)
    out_path = chain_dir / CATEGORY_SUMMARY_FILE
    write_json(out_path, summary)
    logger.info(f"Successfully updated {out_path}")
    return out_path


def write_all_chains_summary(data_dir: str | Path, chains: Dict[str, ChainInputs]) -> Tuple[Path, Path]:
    """write all_chains.json and metadata.json at the data root"""
    data_dir = Path(data_dir)
    summary = build_all_chains_summary(chains)
    all_chains_path = data_dir / ALL_CHAINS_FILE
    write_json(all_chains_path, summary)
    logger.info(
        f"Saved all chains distributions: {len(summary['categories'])} categories, "
        f"{len(summary['topics'])} topics")

    metadata_path = data_dir / METADATA_FILE
    write_json(metadata_path, build_summary_metadata(chains, summary))
    logger.info(f"Saved metadata to {metadata_path}")
    return all_chains_path, metadata_path


def summarize_all(data_dir: str | Path = DATA_DIR) -> List[Path]:
    """write every per-chain summary, then the cross-chain aggregate

    returns the per-chain summary paths in chain order
    """
    data_dir = Path(data_dir)
    written: List[Path] = []
    chains: Dict[str, ChainInputs] = {}
    for chain_dir in sorted(p for p in data_dir.iterdir() if p.is_dir()):
        inputs = load_chain_inputs(chain_dir)
        if inputs is None:
            continue
        chains[chain_dir.name] = inputs
        written.append(write_category_summary(chain_dir, inputs))

    if chains:
        write_all_chains_summary(data_dir, chains)
    else:
        logger.warning(f"No chain data found under {data_dir}; skipping all chains summary")
    return written


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Write category_summary.json for every chain directory plus all_chains.json and metadata.json at the data root.")
    parser.add_argument("--data-dir", default=None,
                        help=f"Data root with one directory per chain (default: {DATA_DIR})")
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("-v", "--verbose", action="store_true",
                           help="Enable verbose logging (DEBUG)")
    log_group.add_argument("-q", "--quiet", action="store_true",
                           help="Reduce logging output (ERROR)")
    args = parser.parse_args()
    setup_logging(args.verbose, args.quiet)

    try:
        summarize_all(resolve_dir(args.data_dir, DATA_DIR))
    except Exception as e:
        logger.error(f"Category summary failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
