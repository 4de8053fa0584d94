import csv
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import src.api as api


def _write_csv(path: Path, header, rows) -> None:
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)


@pytest.fixture
def write_csv():
    return _write_csv


@pytest.fixture
def source_dir(tmp_path):
    """minimal new_data directory with two chains and a category file"""
    src_dir = tmp_path / "new_data"
    src_dir.mkdir()
    _write_csv(
        src_dir / "proposal_categories_enhanced.csv",
        ["title", "high_level_category", "topic_subject"],
        [
            ["Upgrade to v10", "Protocol", "Software Upgrade"],
            ["Fund the hackathon", "Treasury", "Community"],
        ],
    )
    cosmos_votes = [
        {"voter": "Figment", "validatorAddress": "cosmosvaloper1fig", "option": "VOTE_OPTION_YES", "votingPower": "100"},
        {"voter": "Chorus", "validatorAddress": "cosmosvaloper1cho", "option": "VOTE_OPTION_NO", "votingPower": "50"},
    ]
    _write_csv(
        src_dir / "cosmos_proposals.csv",
        ["id", "title", "status", "submit_time", "votes"],
        [
            ["1", "Upgrade to v10", "PROPOSAL_STATUS_PASSED", "2023-01-01T00:00:00Z", json.dumps(cosmos_votes)],
            ["2", "Fund the hackathon", "PROPOSAL_STATUS_REJECTED", "2023-02-01T00:00:00Z", "not json"],
            [],
            ["3", "Unmapped title", "PROPOSAL_STATUS_PASSED", "2023-03-01T00:00:00Z", ""],
        ],
    )
    _write_csv(
        src_dir / "osmosis_proposals.csv",
        ["id", "title", "status", "submit_time", "votes"],
        [["7", "Claim now airdrop", "PROPOSAL_STATUS_REJECTED", "2023-04-01T00:00:00Z", "[]"]],
    )
    (src_dir / "README.txt").write_text("ignored", encoding="utf-8")
    return src_dir


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """data root with one chain, wired into the api module"""
    root = tmp_path / "data"
    chain_dir = root / "cosmos"
    chain_dir.mkdir(parents=True)
    (chain_dir / "votes.json").write_text(json.dumps([
        {"proposal_id": "1", "validator_address": "cosmosvaloper1fig",
         "vote_option": "VOTE_OPTION_YES", "voting_power": "100"},
    ]), encoding="utf-8")
    (chain_dir / "proposals.json").write_text(json.dumps([
        {"proposal_id": "1", "chain_id": "cosmos", "title": "Upgrade to v10"},
    ]), encoding="utf-8")
    monkeypatch.setattr(api, "DATA_DIR", root, raising=True)
    return root


@pytest.fixture
def client(data_dir):
    return TestClient(api.app)
