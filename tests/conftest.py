import os
import tempfile

# Must be set before confidential_vote is imported: the app reads them at import.
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('EVENT_LOG_DIR', tempfile.mkdtemp(prefix='confidential-vote-events-'))
os.environ.setdefault('RATELIMIT_ENABLED', 'false')

import pytest  # noqa: E402

from confidential_vote import app as flask_app, db  # noqa: E402
from confidential_vote.audit.event_log import ElectionEventLog  # noqa: E402
from confidential_vote.encryption.acl import AccessControlLedger  # noqa: E402
from confidential_vote.encryption.decryption import DecryptionService  # noqa: E402
from confidential_vote.encryption.input_encryption import InputEncryptionService  # noqa: E402
from confidential_vote.encryption.mock_coprocessor import MockCoprocessor  # noqa: E402
from confidential_vote.election.engine import ConfidentialVote  # noqa: E402
from confidential_vote.operations.fee_ledger import FeeLedger  # noqa: E402

from election_helpers import ADMIN, ELECTION, NUM_PROPOSALS, REGISTRATION_FEE  # noqa: E402


@pytest.fixture
def app_ctx():
    """Application context with fresh fee ledger tables."""
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def acl():
    return AccessControlLedger()


@pytest.fixture
def input_service():
    return InputEncryptionService(master_key='test-input-master-key')


@pytest.fixture
def coprocessor(acl, input_service):
    return MockCoprocessor(acl, input_service, executor=ELECTION)


@pytest.fixture
def decryption(coprocessor, acl):
    return DecryptionService(coprocessor, acl)


@pytest.fixture
def event_log(tmp_path):
    return ElectionEventLog(log_dir=str(tmp_path / "events"))


@pytest.fixture
def make_engine(app_ctx, coprocessor, acl, event_log):
    def _make(num_proposals=NUM_PROPOSALS):
        return ConfidentialVote(
            administrator=ADMIN,
            address=ELECTION,
            num_proposals=num_proposals,
            arithmetic=coprocessor,
            acl=acl,
            fee_ledger=FeeLedger(ELECTION),
            event_log=event_log,
            registration_fee=REGISTRATION_FEE,
        )
    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def encrypt_vote(input_service):
    def _encrypt(choice, voter):
        return input_service.encrypt_uint32(choice, ELECTION, voter)
    return _encrypt
