"""write per-chain json documents under the data root"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List

import pandas as pd

from src.models import ChainData

logger = logging.getLogger(__name__)

PROPOSALS_FILE = "proposals.json"
VALIDATORS_FILE = "validators.json"
VOTES_FILE = "votes.json"


def reject_json_constant(token: str) -> Any:
    """parse_constant hook: NaN and Infinity are not json"""
    raise ValueError(f"Invalid JSON constant: {token}")


def write_json(output_path: str | Path, payload: Any) -> None:
    """overwrite output_path with pretty printed, strictly valid json"""
    output_path = Path(output_path)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False, allow_nan=False)


def read_json(input_path: str | Path) -> Any:
    with open(input_path, 'r', encoding='utf-8') as f:
        return json.load(f, parse_constant=reject_json_constant)


def write_records_to_parquet(records: List[dict], output_path: str | Path) -> None:
    """write flat records to parquet; nested values are stored as json text"""
    if not records:
        logger.warning(f"No records to write to {output_path}")
        return
    df = pd.DataFrame(records)
    for col in df.columns:
        if df[col].map(lambda v: isinstance(v, (dict, list))).any():
            df[col] = df[col].map(
                lambda v: json.dumps(v, ensure_ascii=False) if isinstance(v, (dict, list)) else v)
    # mixed str/number voting power breaks arrow type inference
    df = df.astype({col: "string" for col in df.columns if df[col].dtype == object})
    df.to_parquet(output_path, index=False, engine='pyarrow')


def write_chain_outputs(output_dir: str | Path, chain: ChainData, parquet: bool = False) -> Path:
    """write proposals, validators and votes json for one chain

    files are overwritten in place one after another; a crash midway can
    leave the chain directory with a mix of old and new files
    """
    chain_dir = Path(output_dir) / chain.chain_id
    os.makedirs(chain_dir, exist_ok=True)

    proposals = chain.proposal_records()
    votes = chain.vote_records()
    write_json(chain_dir / PROPOSALS_FILE, proposals)
    write_json(chain_dir / VALIDATORS_FILE, chain.validator_records())
    write_json(chain_dir / VOTES_FILE, votes)

    if parquet:
        write_records_to_parquet(proposals, chain_dir / "proposals.parquet")
        write_records_to_parquet(votes, chain_dir / "votes.parquet")

    logger.debug(f"Wrote {chain.chain_id} outputs to {chain_dir}")
    return chain_dir
