import json
import logging

import pytest

from src.models import CategoryMapping
from src.normalize_votes import (
    InvalidVoteError,
    normalize_chain,
    parse_votes,
    tally_votes,
)

CATEGORY_MAP = {
    "Upgrade to v10": CategoryMapping("Protocol", "Software Upgrade"),
}


def _row(pid, title, votes, status="PROPOSAL_STATUS_PASSED"):
    return {
        "id": pid, "title": title, "status": status,
        "submit_time": "2023-01-01T00:00:00Z",
        "votes": votes if isinstance(votes, str) else json.dumps(votes),
    }


def test_tally_counts_by_option():
    votes = [{"option": "VOTE_OPTION_YES"}, {"option": "VOTE_OPTION_YES"}, {"option": "VOTE_OPTION_NO"}]
    assert tally_votes(votes) == {"yes_count": 2, "no_count": 1}


def test_tally_rejects_missing_option():
    with pytest.raises(InvalidVoteError):
        tally_votes([{"option": None}])


def test_parse_votes_bad_json_warns(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_votes("{oops", "Broken") == []
    assert "Broken" in caplog.text
    assert parse_votes("null", "Null votes") == []
    assert parse_votes("", "Empty") == []


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_parse_votes_rejects_non_json_constants(caplog, literal):
    raw = '[{"voter": "Figment", "option": "VOTE_OPTION_YES", "votingPower": ' + literal + '}]'
    with caplog.at_level(logging.WARNING):
        assert parse_votes(raw, "Odd power") == []
    assert "Odd power" in caplog.text


def test_proposal_ids_and_categories_pass_through():
    rows = [
        _row("42", "Upgrade to v10", []),
        _row("43", "No mapping here", []),
    ]
    chain = normalize_chain("cosmos", rows, CATEGORY_MAP)
    records = chain.proposal_records()
    assert [p["proposal_id"] for p in records] == ["42", "43"]
    assert records[0]["type"] == "Protocol"
    assert records[0]["topic"] == "Software Upgrade"
    assert records[1]["type"] == "Unknown"
    assert records[1]["topic"] == "Unknown"
    assert all(p["chain_id"] == "cosmos" for p in records)


def test_unparseable_votes_still_emit_proposal():
    chain = normalize_chain("cosmos", [_row("1", "x", "not json")], CATEGORY_MAP)
    assert len(chain.proposals) == 1
    assert chain.proposals[0].final_tally_result == {}
    assert chain.votes == []
    assert chain.validators == {}


def test_falsy_voter_is_skipped_but_still_tallied():
    votes = [
        {"voter": "", "validatorAddress": "valoper1ghost", "option": "VOTE_OPTION_NO", "votingPower": "5"},
        {"voter": "Figment", "validatorAddress": "valoper1fig", "option": "VOTE_OPTION_YES", "votingPower": "10"},
    ]
    chain = normalize_chain("cosmos", [_row("1", "x", votes)], CATEGORY_MAP)
    assert [v.validator_address for v in chain.votes] == ["valoper1fig"]
    assert list(chain.validators) == ["valoper1fig"]
    assert chain.proposals[0].final_tally_result == {"no_count": 1, "yes_count": 1}


def test_validator_identity_is_address_and_first_seen_wins():
    rows = [
        _row("1", "a", [
            {"voter": "Figment", "validatorAddress": "valoper1fig", "option": "VOTE_OPTION_YES", "votingPower": "10"},
            {"voter": "Chorus", "validatorAddress": "valoper1cho", "option": "VOTE_OPTION_NO", "votingPower": "3"},
        ]),
        _row("2", "b", [
            {"voter": "Figment (renamed)", "validatorAddress": "valoper1fig", "option": "VOTE_OPTION_ABSTAIN", "votingPower": "11"},
            {"voter": "NoAddress", "option": "VOTE_OPTION_YES", "votingPower": "1"},
        ]),
    ]
    chain = normalize_chain("cosmos", rows, CATEGORY_MAP)

    validators = chain.validator_records()
    assert [v["validator_address"] for v in validators] == ["valoper1fig", "valoper1cho", "NoAddress"]
    assert validators[0]["moniker"] == "Figment"
    assert all(v["chain_id"] == "cosmos" for v in validators)

    # every vote joins back to a validator record
    known = {v["validator_address"] for v in validators}
    assert all(v["validator_address"] in known for v in chain.vote_records())
    assert chain.vote_records()[2] == {
        "proposal_id": "2", "validator_address": "valoper1fig",
        "vote_option": "VOTE_OPTION_ABSTAIN", "voting_power": "11",
    }
