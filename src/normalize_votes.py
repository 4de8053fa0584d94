"""normalize chain proposal rows into proposals, validators and votes

each row of ``<chain>_proposals.csv`` carries its vote list as an embedded
json string. a single pass over the rows extracts validators and votes and
tallies the final vote counts per option.

validator identity: a vote names its validator twice, as ``voter`` (a
display label) and ``validatorAddress``. the address is the canonical
identity, used both as the dedup key and as the stored reference in
validators and votes, so the two outputs always join. the label falls back
to the identity when the address is missing. votes with no ``voter`` are
never attributed to a validator.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from src.models import (
    UNKNOWN_CATEGORY,
    CategoryMapping,
    ChainData,
    Proposal,
    Validator,
    Vote,
)
from src.output_writer import reject_json_constant
from src.settings import PROPOSALS_SUFFIX

logger = logging.getLogger(__name__)

VOTE_OPTION_PREFIX = "VOTE_OPTION_"


class InvalidVoteError(ValueError):
    """raised when a vote cannot be tallied"""


def chain_id_from_filename(file_name: str) -> str:
    """strip the _proposals.csv suffix, e.g. cosmos_proposals.csv -> cosmos"""
    if file_name.endswith(PROPOSALS_SUFFIX):
        return file_name[:-len(PROPOSALS_SUFFIX)]
    return file_name


def _vote_field(vote: Any, key: str) -> Any:
    return vote.get(key) if isinstance(vote, dict) else None


def parse_votes(raw: Optional[str], title: str = "") -> List[Any]:
    """decode the embedded vote list; unreadable input yields an empty list

    NaN and Infinity literals count as unreadable since strict json has no
    such values
    """
    try:
        votes = json.loads(raw or '[]', parse_constant=reject_json_constant)
    except (ValueError, TypeError):
        logger.warning(
            f'Could not parse votes for proposal "{title}". Skipping votes.')
        return []
    if not isinstance(votes, list):
        logger.warning(
            f'Votes for proposal "{title}" are not a list. Skipping votes.')
        return []
    return votes


def validator_identity(vote: Any) -> Optional[str]:
    """canonical validator key for a vote, or None when it has no voter"""
    voter = _vote_field(vote, 'voter')
    if not voter:
        return None
    return _vote_field(vote, 'validatorAddress') or voter


def tally_key(option: Any) -> str:
    """VOTE_OPTION_NO_WITH_VETO -> no_with_veto_count"""
    if not isinstance(option, str):
        raise InvalidVoteError(f"Vote option must be a string, got {option!r}")
    return f"{option.replace(VOTE_OPTION_PREFIX, '', 1).lower()}_count"


def tally_votes(votes: Iterable[Any]) -> Dict[str, int]:
    """count votes per normalized option key"""
    tally: Dict[str, int] = {}
    for vote in votes:
        key = tally_key(_vote_field(vote, 'option'))
        tally[key] = tally.get(key, 0) + 1
    return tally


def normalize_proposal(
    chain: ChainData,
    row: Mapping[str, str],
    category_map: Mapping[str, CategoryMapping],
) -> Proposal:
    """add one csv row to the chain accumulator and return its proposal"""
    title = row.get('title', '')
    proposal_id = row.get('id', '')
    mapped = category_map.get(title, UNKNOWN_CATEGORY)

    votes_data = parse_votes(row.get('votes'), title)

    for vote in votes_data:
        identity = validator_identity(vote)
        if identity is None:
            continue
        voter = _vote_field(vote, 'voter')
        existing = chain.validators.get(identity)
        if existing is None:
            chain.validators[identity] = Validator(
                validator_address=identity,
                moniker=voter,
                chain_id=chain.chain_id,
            )
        elif existing.moniker != voter:
            logger.debug(
                f"Validator {identity} also seen as '{voter}'; keeping '{existing.moniker}'")
        chain.votes.append(Vote(
            proposal_id=proposal_id,
            validator_address=identity,
            vote_option=_vote_field(vote, 'option'),
            voting_power=_vote_field(vote, 'votingPower'),
        ))

    proposal = Proposal(
        proposal_id=proposal_id,
        chain_id=chain.chain_id,
        title=title,
        type=mapped.high_level_category,
        topic=mapped.topic_subject,
        status=row.get('status', ''),
        submit_time=row.get('submit_time', ''),
        final_tally_result=tally_votes(votes_data),
    )
    chain.proposals.append(proposal)
    return proposal


def normalize_chain(
    chain_id: str,
    rows: Iterable[Mapping[str, str]],
    category_map: Mapping[str, CategoryMapping],
) -> ChainData:
    """run every proposal row of one chain through the normalizer"""
    chain = ChainData(chain_id=chain_id)
    for row in rows:
        normalize_proposal(chain, row, category_map)
    logger.debug(
        f"{chain_id}: {len(chain.proposals)} proposals, "
        f"{len(chain.validators)} validators, {len(chain.votes)} votes")
    return chain
