#!/usr/bin/env python3
"""second pass: derive the v2 proposal taxonomy from title and type

rules are evaluated top to bottom and the first match wins. title checks are
substring tests on the lower-cased title, type checks are substring tests on
the raw type value. rule order and keyword lists are part of the
proposals_v2.json output contract.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from src.output_writer import PROPOSALS_FILE, read_json, write_json
from src.settings import DATA_DIR, resolve_dir, setup_logging

logger = logging.getLogger(__name__)

PROPOSALS_V2_FILE = "proposals_v2.json"

DEFAULT_CLASSIFICATION = ("Governance", "Signaling")

Classification = Tuple[str, str]


def _title_has(title: str, keywords: Sequence[str]) -> bool:
    return any(k in title for k in keywords)


def _type_has(proposal_type: str, markers: Sequence[str]) -> bool:
    return any(m in proposal_type for m in markers)


@dataclass(frozen=True)
class Rule:
    """a named (predicate, result) pair; result may depend on the title"""
    name: str
    predicate: Callable[[str, str], bool]
    result: Callable[[str], Classification]


def _treasury_topic(title: str) -> Classification:
    if _title_has(title, ('core development', 'sdk', 'client')):
        return 'Treasury', 'Core Development Funding'
    if _title_has(title, ('incentives', 'liquidity', 'pool')):
        return 'Treasury', 'Liquidity & Incentives'
    if _title_has(title, ('marketing', 'community', 'events', 'hackathon')):
        return 'Treasury', 'Community & Marketing Funding'
    return 'Treasury', 'dApp & Tooling Funding'


def _governance_topic(title: str) -> Classification:
    if _title_has(title, ('committee', 'charter', 'policy')):
        return 'Governance', 'Process & Policy'
    return 'Governance', 'Signaling'


def _unknown_topic(title: str) -> Classification:
    if 'fund' in title:
        return 'Governance', 'dApp & Tooling Funding'
    return 'Governance', 'Signaling'


RECLASSIFICATION_RULES: List[Rule] = [
    # spam goes first so "upgrade airdrop" titles never reach protocol
    Rule('spam',
         lambda title, t: _title_has(title, ('airdrop', 'claim now', 'new version')),
         lambda title: ('Governance', 'Spam & Malicious')),
    Rule('core_upgrade',
         lambda title, t: _type_has(t, ('SoftwareUpgrade',)) or 'upgrade' in title,
         lambda title: ('Protocol', 'Core Upgrade')),
    Rule('parameter_change',
         lambda title, t: _type_has(t, ('ParameterChange',)) or 'parameter' in title,
         lambda title: ('Protocol', 'Parameter Change')),
    Rule('security',
         lambda title, t: _title_has(title, ('security', 'audit')),
         lambda title: ('Protocol', 'Security')),
    Rule('treasury',
         lambda title, t: _type_has(t, ('CommunityPoolSpend',)),
         _treasury_topic),
    Rule('ibc',
         lambda title, t: _type_has(t, ('IBCRelated',)) or 'ibc' in title,
         lambda title: ('Ecosystem', 'IBC Management')),
    Rule('dapp_onboarding',
         lambda title, t: _type_has(t, ('SmartContract',))
         or _title_has(title, ('wasm', 'whitelist', 'contract')),
         lambda title: ('Ecosystem', 'dApp Onboarding')),
    Rule('token',
         lambda title, t: _type_has(t, ('TokenRelated',))
         or _title_has(title, ('token', 'alliance asset')),
         lambda title: ('Ecosystem', 'Token Management')),
    Rule('partnership',
         lambda title, t: _title_has(title, ('partnership', 'collaboration')),
         lambda title: ('Ecosystem', 'Partnership')),
    Rule('governance',
         lambda title, t: _type_has(t, ('TextProposal',))
         or _title_has(title, ('signaling', 'policy')),
         _governance_topic),
    Rule('unknown_type',
         lambda title, t: _type_has(t, ('Unknown', 'Unclassified', 'Miscellaneous')),
         _unknown_topic),
]


def reclassify_proposal(title: Optional[str], proposal_type: Optional[str] = None,
                        topic: Optional[str] = None) -> Classification:
    """return (type_v2, topic_v2_display) for a proposal

    topic is accepted for call-site symmetry but does not influence the result
    """
    lowered = (title or '').lower()
    raw_type = proposal_type or ''
    for rule in RECLASSIFICATION_RULES:
        if rule.predicate(lowered, raw_type):
            return rule.result(lowered)
    return DEFAULT_CLASSIFICATION


def with_v2_fields(proposal: dict) -> dict:
    """copy a proposal record and append the v2 taxonomy fields"""
    type_v2, topic_v2_display = reclassify_proposal(
        proposal.get('title'), proposal.get('type'), proposal.get('topic'))
    return {
        **proposal,
        'type_v2': type_v2,
        'topic_v2': topic_v2_display,
        'topic_v2_display': topic_v2_display,
        'topic_v2_unique': f"{type_v2} - {topic_v2_display}",
    }


def reclassify_chain_dir(chain_dir: str | Path) -> Optional[Path]:
    """write proposals_v2.json next to proposals.json; None if there is none"""
    chain_dir = Path(chain_dir)
    proposals_path = chain_dir / PROPOSALS_FILE
    if not proposals_path.exists():
        logger.debug(f"No {PROPOSALS_FILE} in {chain_dir}; skipping")
        return None

    proposals = read_json(proposals_path)
    updated = [with_v2_fields(p) for p in proposals]

    out_path = chain_dir / PROPOSALS_V2_FILE
    write_json(out_path, updated)
    logger.info(f"Successfully created {out_path}")
    return out_path


def reclassify_all(data_dir: str | Path = DATA_DIR) -> List[Path]:
    data_dir = Path(data_dir)
    written: List[Path] = []
    for chain_dir in sorted(p for p in data_dir.iterdir() if p.is_dir()):
        out = reclassify_chain_dir(chain_dir)
        if out is not None:
            written.append(out)
    logger.info("Reclassification complete for all chains.")
    return written


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Add type_v2/topic_v2 fields to every chain's proposals.json.")
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
        reclassify_all(resolve_dir(args.data_dir, DATA_DIR))
    except Exception as e:
        logger.error(f"Reclassification failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
