# confidential_vote/routes.py

# JSON API over the confidential tally engine.
# The caller principal is the JWT identity; every election rule is enforced
# by the engine itself, the routes only validate payloads and map errors.

from flask import jsonify, request
from flask_jwt_extended import jwt_required

from confidential_vote import app, limiter
from confidential_vote.audit.event_log import ElectionEventLog
from confidential_vote.encryption.acl import AccessControlLedger
from confidential_vote.encryption.decryption import DecryptionNotPermitted, DecryptionService
from confidential_vote.encryption.input_encryption import InputEncryptionService
from confidential_vote.encryption.mock_coprocessor import MockCoprocessor
from confidential_vote.election.engine import ConfidentialVote
from confidential_vote.election.errors import (
    AdministratorCannotParticipate,
    AlreadyFinal,
    AlreadyRegistered,
    ElectionError,
    InsufficientFee,
    InvalidProof,
    InvalidProposalId,
    NoFundsToWithdraw,
    NoProposals,
    NotAuthorized,
    NotRegistered,
    NoVotesCast,
    WrongStage,
)
from confidential_vote.operations.fee_ledger import FeeLedger
from confidential_vote.security.input_validator import InputValidator, ValidationError
from confidential_vote.security.token_manager import TokenManager

ERROR_STATUS = {
    NotAuthorized: 403,
    AdministratorCannotParticipate: 403,
    NotRegistered: 404,
    InvalidProposalId: 404,
    WrongStage: 409,
    AlreadyRegistered: 409,
    AlreadyFinal: 409,
    InsufficientFee: 400,
    InvalidProof: 400,
    NoProposals: 422,
    NoVotesCast: 422,
    NoFundsToWithdraw: 422,
}


def build_engine(config):
    """Wire an engine and its collaborators from application config."""
    acl = AccessControlLedger()
    coprocessor = MockCoprocessor(acl, InputEncryptionService(config['INPUT_ENCRYPTION_KEY']),
                                  executor=config['ELECTION_ADDRESS'])
    engine = ConfidentialVote(
        administrator=config['ELECTION_ADMINISTRATOR'],
        address=config['ELECTION_ADDRESS'],
        num_proposals=config['ELECTION_NUM_PROPOSALS'],
        arithmetic=coprocessor,
        acl=acl,
        fee_ledger=FeeLedger(config['ELECTION_ADDRESS']),
        event_log=ElectionEventLog(log_dir=config['EVENT_LOG_DIR']),
        registration_fee=config['REGISTRATION_FEE_WEI'],
    )
    return engine, DecryptionService(coprocessor, acl)


engine, decryption_service = build_engine(app.config)
validator = InputValidator()
tokens = TokenManager(app)


def _caller():
    principal = tokens.get_identity()
    if principal is None:
        raise NotAuthorized("Token identity is not a principal address")
    return principal


def _ciphertext_json(ciphertext):
    return ciphertext.to_dict() if ciphertext is not None else None


@app.errorhandler(ElectionError)
def handle_election_error(error):
    return jsonify({'error': error.code, 'message': error.message}), ERROR_STATUS.get(type(error), 400)


@app.errorhandler(ValidationError)
def handle_validation_error(error):
    return jsonify({'error': 'invalid_request', 'message': str(error)}), 400


@app.errorhandler(DecryptionNotPermitted)
def handle_decryption_denied(error):
    return jsonify({'error': 'decryption_not_permitted', 'message': str(error)}), 403


@app.route('/election', methods=['GET'])
def election_state():
    return jsonify({
        'address': engine.address,
        'administrator': engine.administrator,
        'stage': engine.stage.label,
        'num_proposals': engine.num_proposals,
        'voters_count': engine.voters_count,
        'total_votes': engine.total_votes,
        'registration_fee': engine.registration_fee,
    })


@app.route('/register', methods=['POST'])
@jwt_required()
@limiter.limit("30/minute")
def register():
    payload = validator.validate_registration(request.get_json(silent=True))
    voter_index = engine.register(_caller(), payload['fee'])
    return jsonify({'voter_index': voter_index, 'voters_count': engine.voters_count}), 201


@app.route('/vote', methods=['POST'])
@jwt_required()
@limiter.limit("30/minute")
def vote():
    encrypted_input = validator.validate_vote(request.get_json(silent=True))
    total_votes = engine.vote(_caller(), encrypted_input)
    return jsonify({'total_votes': total_votes})


@app.route('/stage/advance', methods=['POST'])
@jwt_required()
def advance_stage():
    stage = engine.advance_stage(_caller())
    return jsonify({'stage': stage.label})


@app.route('/winner/reveal', methods=['POST'])
@jwt_required()
def reveal_winner():
    winner = engine.reveal_encrypted_winner(_caller())
    return jsonify({'winner': _ciphertext_json(winner)})


@app.route('/winner', methods=['GET'])
def encrypted_winner():
    return jsonify({'winner': _ciphertext_json(engine.encrypted_winner_id)})


@app.route('/reset', methods=['POST'])
@jwt_required()
def reset():
    payload = validator.validate_reset(request.get_json(silent=True))
    engine.reset(_caller(), payload['num_proposals'])
    return jsonify({'stage': engine.stage.label, 'num_proposals': engine.num_proposals})


@app.route('/proposals/<int:proposal_id>/count', methods=['GET'])
def proposal_count(proposal_id):
    return jsonify({'count': _ciphertext_json(engine.get_encrypted_proposal_count(proposal_id))})


@app.route('/voters/<principal>/remaining-votes', methods=['GET'])
def remaining_votes(principal):
    if not validator.validate_principal(principal):
        raise ValidationError("Invalid principal address")
    return jsonify({'remaining_votes': _ciphertext_json(engine.get_encrypted_remaining_votes(principal))})


@app.route('/withdraw', methods=['POST'])
@jwt_required()
def withdraw():
    amount = engine.withdraw(_caller())
    return jsonify({'amount': str(amount)})


# Stand-in for the external decryption service: plaintext only for
# principals holding a persistent grant on the handle.
@app.route('/decrypt', methods=['POST'])
@jwt_required()
def decrypt():
    handle = validator.validate_decrypt(request.get_json(silent=True))
    value = decryption_service.user_decrypt(handle, _caller())
    return jsonify({'handle': handle, 'value': value})
