"""governance records emitted by the pipeline"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class CategoryMapping:
    """category enhancement for a single proposal title"""
    high_level_category: str
    topic_subject: str


UNKNOWN_CATEGORY = CategoryMapping(
    high_level_category="Unknown", topic_subject="Unknown")


@dataclass
class Proposal:
    proposal_id: str
    chain_id: str
    title: str
    type: str
    topic: str
    status: str
    submit_time: str
    final_tally_result: Dict[str, int] = field(default_factory=dict)

    def to_record(self) -> dict:
        return {
            'proposal_id': self.proposal_id,
            'chain_id': self.chain_id,
            'title': self.title,
            'type': self.type,
            'topic': self.topic,
            'status': self.status,
            'submit_time': self.submit_time,
            'final_tally_result': dict(self.final_tally_result),
        }


@dataclass
class Validator:
    validator_address: str
    moniker: str
    chain_id: str

    def to_record(self) -> dict:
        return {
            'validator_address': self.validator_address,
            'moniker': self.moniker,
            'chain_id': self.chain_id,
        }


@dataclass
class Vote:
    """one validator vote on one proposal; option and power are passed through"""
    proposal_id: str
    validator_address: str
    vote_option: Any = None
    voting_power: Any = None

    def to_record(self) -> dict:
        return {
            'proposal_id': self.proposal_id,
            'validator_address': self.validator_address,
            'vote_option': self.vote_option,
            'voting_power': self.voting_power,
        }


@dataclass
class ChainData:
    """everything the first pass collects for a single chain

    validators is keyed by canonical validator identity; dicts keep
    insertion order so the first-seen validator is written first
    """
    chain_id: str
    proposals: List[Proposal] = field(default_factory=list)
    validators: Dict[str, Validator] = field(default_factory=dict)
    votes: List[Vote] = field(default_factory=list)

    def proposal_records(self) -> List[dict]:
        return [p.to_record() for p in self.proposals]

    def validator_records(self) -> List[dict]:
        return [v.to_record() for v in self.validators.values()]

    def vote_records(self) -> List[dict]:
        return [v.to_record() for v in self.votes]
