import importlib


def test_imports():
    assert importlib.import_module('src.csv_reader')
    assert importlib.import_module('src.normalize_votes')
    assert importlib.import_module('src.optimize_data')
    assert importlib.import_module('src.reclassify_proposals')
    assert importlib.import_module('src.category_summary')
    assert importlib.import_module('src.api')


def test_proposal_record_snapshot():
    mod = importlib.import_module('src.models')
    p = mod.Proposal(
        proposal_id='12', chain_id='cosmos', title='t', type='Protocol',
        topic='Upgrade', status='PROPOSAL_STATUS_PASSED', submit_time='2023-01-01T00:00:00Z',
        final_tally_result={'yes_count': 1},
    )
    rec = p.to_record()
    assert list(rec) == [
        'proposal_id', 'chain_id', 'title', 'type', 'topic', 'status',
        'submit_time', 'final_tally_result',
    ]
    assert rec['final_tally_result'] == {'yes_count': 1}


essential_vote = {
    'voter': 'Figment', 'validatorAddress': 'cosmosvaloper1abc',
    'option': 'VOTE_OPTION_NO_WITH_VETO', 'votingPower': '1200.5',
}


def test_chain_id_and_tally_key():
    mod = importlib.import_module('src.normalize_votes')
    assert mod.chain_id_from_filename('osmosis_proposals.csv') == 'osmosis'
    assert mod.tally_key(essential_vote['option']) == 'no_with_veto_count'
    assert mod.validator_identity(essential_vote) == 'cosmosvaloper1abc'
