import pytest
from flask_jwt_extended import create_access_token

from confidential_vote import routes
from confidential_vote.encryption.input_encryption import InputEncryptionService
from confidential_vote.security.token_manager import TokenManager
from election_helpers import (
    ADMIN,
    ELECTION,
    INSUFFICIENT_FEE,
    PROPOSAL_A,
    PROPOSAL_B,
    REGISTRATION_FEE,
    VOTER1,
    VOTER2,
    VOTER3,
)


@pytest.fixture
def client(app_ctx, monkeypatch):
    engine, decryption_service = routes.build_engine(app_ctx.config)
    monkeypatch.setattr(routes, 'engine', engine)
    monkeypatch.setattr(routes, 'decryption_service', decryption_service)
    with app_ctx.test_client() as client:
        yield client


@pytest.fixture
def auth(app_ctx):
    tokens = TokenManager(app_ctx)

    def _headers(principal):
        return {"Authorization": f"Bearer {tokens.generate_token(principal)}"}
    return _headers


@pytest.fixture
def ballot(app_ctx):
    svc = InputEncryptionService(app_ctx.config['INPUT_ENCRYPTION_KEY'])

    def _ballot(choice, voter):
        return svc.encrypt_uint32(choice, ELECTION, voter).to_dict()
    return _ballot


def test_election_state(client):
    rv = client.get('/election')
    assert rv.status_code == 200
    assert rv.get_json() == {
        'address': ELECTION,
        'administrator': ADMIN,
        'stage': 'registration',
        'num_proposals': 3,
        'voters_count': 0,
        'total_votes': 0,
        'registration_fee': REGISTRATION_FEE,
    }


def test_register_requires_token(client):
    rv = client.post('/register', json={'fee': REGISTRATION_FEE})
    assert rv.status_code == 401


def test_register_with_large_payment(client, auth):
    rv = client.post('/register', json={'fee': "10000000000000000000"}, headers=auth(VOTER1))
    assert rv.status_code == 201
    assert rv.get_json() == {'voter_index': 0, 'voters_count': 1}


def test_register_rejects_fee_beyond_uint256(client, auth):
    rv = client.post('/register', json={'fee': str(2 ** 256)}, headers=auth(VOTER1))
    assert rv.status_code == 400
    assert rv.get_json()['error'] == 'invalid_request'


def test_token_identity_must_be_a_principal(client, app_ctx):
    token = create_access_token(identity="alice")
    rv = client.post('/register', json={'fee': REGISTRATION_FEE},
                     headers={"Authorization": f"Bearer {token}"})
    assert rv.status_code == 403
    assert rv.get_json()['error'] == 'not_authorized'


def test_full_round(client, auth, ballot):
    for voter in (VOTER1, VOTER2, VOTER3):
        rv = client.post('/register', json={'fee': str(REGISTRATION_FEE)}, headers=auth(voter))
        assert rv.status_code == 201
    assert rv.get_json() == {'voter_index': 2, 'voters_count': 3}

    assert client.post('/stage/advance', headers=auth(ADMIN)).get_json() == {'stage': 'vote'}

    for voter, choice in [(VOTER1, PROPOSAL_A), (VOTER2, PROPOSAL_B), (VOTER3, PROPOSAL_B)]:
        rv = client.post('/vote', json=ballot(choice, voter), headers=auth(voter))
        assert rv.status_code == 200
    assert rv.get_json() == {'total_votes': 3}

    client.post('/stage/advance', headers=auth(ADMIN))
    rv = client.post('/winner/reveal', headers=auth(ADMIN))
    assert rv.status_code == 200
    winner = rv.get_json()['winner']
    assert winner['type'] == 'euint32'
    assert client.get('/winner').get_json() == {'winner': winner}

    rv = client.post('/decrypt', json={'handle': winner['handle']}, headers=auth(ADMIN))
    assert rv.get_json() == {'handle': winner['handle'], 'value': PROPOSAL_B}

    quota = client.get(f'/voters/{VOTER1}/remaining-votes').get_json()['remaining_votes']
    rv = client.post('/decrypt', json={'handle': quota['handle']}, headers=auth(ADMIN))
    assert rv.get_json()['value'] == 0

    rv = client.post('/withdraw', headers=auth(ADMIN))
    assert rv.get_json() == {'amount': str(REGISTRATION_FEE * 3)}

    rv = client.post('/reset', json={'num_proposals': 4}, headers=auth(ADMIN))
    assert rv.get_json() == {'stage': 'registration', 'num_proposals': 4}
    state = client.get('/election').get_json()
    assert state['voters_count'] == 0
    assert state['total_votes'] == 0


def test_voter_cannot_decrypt_winner(client, auth, ballot):
    client.post('/register', json={'fee': REGISTRATION_FEE}, headers=auth(VOTER1))
    client.post('/stage/advance', headers=auth(ADMIN))
    client.post('/vote', json=ballot(PROPOSAL_A, VOTER1), headers=auth(VOTER1))
    client.post('/stage/advance', headers=auth(ADMIN))
    winner = client.post('/winner/reveal', headers=auth(ADMIN)).get_json()['winner']

    rv = client.post('/decrypt', json={'handle': winner['handle']}, headers=auth(VOTER1))
    assert rv.status_code == 403
    assert rv.get_json()['error'] == 'decryption_not_permitted'


@pytest.mark.parametrize("principal,path,payload,status,error", [
    (ADMIN, '/register', {'fee': REGISTRATION_FEE}, 403, 'administrator_cannot_participate'),
    (VOTER1, '/register', {'fee': INSUFFICIENT_FEE}, 400, 'insufficient_fee'),
    (VOTER1, '/stage/advance', None, 403, 'not_authorized'),
    (VOTER1, '/winner/reveal', None, 403, 'not_authorized'),
    (VOTER1, '/reset', {'num_proposals': 3}, 403, 'not_authorized'),
    (VOTER1, '/withdraw', None, 403, 'not_authorized'),
    (ADMIN, '/winner/reveal', None, 409, 'wrong_stage'),
    (ADMIN, '/withdraw', None, 422, 'no_funds_to_withdraw'),
])
def test_election_errors_map_to_status(client, auth, principal, path, payload, status, error):
    rv = client.post(path, json=payload, headers=auth(principal))
    assert rv.status_code == status
    assert rv.get_json()['error'] == error


def test_double_registration_conflict(client, auth):
    client.post('/register', json={'fee': REGISTRATION_FEE}, headers=auth(VOTER1))
    rv = client.post('/register', json={'fee': REGISTRATION_FEE}, headers=auth(VOTER1))
    assert rv.status_code == 409
    assert rv.get_json()['error'] == 'already_registered'


def test_vote_without_registration(client, auth, ballot):
    client.post('/stage/advance', headers=auth(ADMIN))
    rv = client.post('/vote', json=ballot(PROPOSAL_A, VOTER1), headers=auth(VOTER1))
    assert rv.status_code == 404
    assert rv.get_json()['error'] == 'not_registered'


def test_vote_with_foreign_ballot(client, auth, ballot):
    client.post('/register', json={'fee': REGISTRATION_FEE}, headers=auth(VOTER2))
    client.post('/stage/advance', headers=auth(ADMIN))
    rv = client.post('/vote', json=ballot(PROPOSAL_A, VOTER1), headers=auth(VOTER2))
    assert rv.status_code == 400
    assert rv.get_json()['error'] == 'invalid_proof'


def test_reveal_without_votes(client, auth):
    client.post('/stage/advance', headers=auth(ADMIN))
    client.post('/stage/advance', headers=auth(ADMIN))
    rv = client.post('/winner/reveal', headers=auth(ADMIN))
    assert rv.status_code == 422
    assert rv.get_json()['error'] == 'no_votes_cast'


@pytest.mark.parametrize("path,payload", [
    ('/register', {'fee': -5}),
    ('/register', None),
    ('/vote', {'handle': 'abc'}),
    ('/reset', {'num_proposals': 'many'}),
    ('/decrypt', {'handle': 'nope'}),
])
def test_invalid_payloads(client, auth, path, payload):
    rv = client.post(path, json=payload, headers=auth(VOTER1 if path != '/reset' else ADMIN))
    assert rv.status_code == 400
    assert rv.get_json()['error'] == 'invalid_request'


def test_proposal_count_views(client):
    assert client.get('/proposals/0/count').status_code == 200
    rv = client.get('/proposals/3/count')
    assert rv.status_code == 404
    assert rv.get_json()['error'] == 'invalid_proposal_id'


def test_remaining_votes_views(client):
    assert client.get('/voters/not-an-address/remaining-votes').status_code == 400
    rv = client.get(f'/voters/{VOTER1}/remaining-votes')
    assert rv.status_code == 404
    assert rv.get_json()['error'] == 'not_registered'
