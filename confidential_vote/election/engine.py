# confidential_vote/election/engine.py
"""Confidential tally engine.

`ConfidentialVote` owns one `Election` aggregate and exposes the election's
entry points. Calls are serialized behind a single lock and every
precondition is checked before any state changes, so each call either
completes fully or leaves the election untouched.

Decryption never happens here: the engine only handles ciphertexts and grants
the administrator access to the values it may later decrypt off-system.
"""

import logging
import threading
from functools import wraps

from confidential_vote.authentication.access_control import (
    AccessPolicy,
    Permission,
    normalize_principal,
    require_permission,
)
from confidential_vote.encryption.input_encryption import InputVerificationError
from confidential_vote.election.custody import CiphertextCustody
from confidential_vote.election.errors import (
    ElectionError,
    InsufficientFee,
    InvalidProof,
    InvalidProposalId,
    NoFundsToWithdraw,
)
from confidential_vote.election.lifecycle import ElectionLifecycle
from confidential_vote.election.models import Election
from confidential_vote.election.registry import VoterRegistry
from confidential_vote.election.stage import Stage, StageController
from confidential_vote.election.tally import EncryptedTally
from confidential_vote.election.winner import WinnerResolver

logger = logging.getLogger(__name__)

REGISTRATION_FEE_WEI = 5 * 10 ** 15  # 0.005 ether


def election_operation(name):
    """Serialize the call and record rejections in the event log."""
    def decorator(func):
        @wraps(func)
        def wrapper(self, caller, *args, **kwargs):
            with self._lock:
                try:
                    return func(self, caller, *args, **kwargs)
                except ElectionError as e:
                    logger.info(f"{name} rejected for {caller}: {e.code}")
                    self._emit('operation_rejected', {'operation': name, 'error': e.code}, caller)
                    raise
        return wrapper
    return decorator


class ConfidentialVote:
    def __init__(self, administrator, address, num_proposals, arithmetic, acl, fee_ledger,
                 event_log=None, registration_fee=REGISTRATION_FEE_WEI):
        """
        administrator: principal allowed to run the election (never votes)
        address: principal of the engine itself, the executor of ciphertext ops
        num_proposals: proposals created for the first round
        arithmetic: ConfidentialArithmetic backend
        acl: AccessControlLedger shared with the backend
        fee_ledger: FeeLedger collecting registration fees
        event_log: optional ElectionEventLog
        """
        self.administrator = normalize_principal(administrator)
        self.address = normalize_principal(address)
        self.registration_fee = registration_fee
        self.policy = AccessPolicy(self.administrator)
        self.arithmetic = arithmetic
        self.acl = acl
        self.fee_ledger = fee_ledger
        self.event_log = event_log

        custody = CiphertextCustody(acl, self.address, self.administrator)
        self.stages = StageController()
        self.registry = VoterRegistry(arithmetic, custody)
        self.tally = EncryptedTally(arithmetic, custody)
        self.resolver = WinnerResolver(arithmetic, custody)
        self.lifecycle = ElectionLifecycle(self.tally, self.stages)

        self.election = Election()
        self._lock = threading.RLock()
        with self._lock, self.acl.operation("deploy"):
            self.lifecycle.new_round(self.election, num_proposals)
        logger.info(f"Election {self.address} deployed with {num_proposals} proposals")

    def _emit(self, event_type, data, principal=None):
        if self.event_log is not None:
            self.event_log.log_event(event_type, data, principal)

    # ------------------------------ operations ------------------------------ #

    @election_operation("register")
    @require_permission(Permission.REGISTER)
    def register(self, caller, paid_fee):
        self.stages.require(self.election, Stage.REGISTRATION)
        self.registry.check_can_register(self.election, caller)
        if paid_fee < self.registration_fee:
            raise InsufficientFee(paid_fee, self.registration_fee)

        with self.acl.operation("register"):
            voter = self.registry.register(self.election, caller)
        # the ledger commit is the last step that can fail
        try:
            refund = self.fee_ledger.collect(caller, paid_fee, self.registration_fee)
        except Exception:
            self.registry.discard(self.election, voter)
            raise

        logger.info(f"Voter {voter.index} registered: {caller}")
        self._emit('voter_registered', {'voter_index': voter.index, 'refund': refund}, caller)
        return voter.index

    @election_operation("vote")
    @require_permission(Permission.VOTE)
    def vote(self, caller, encrypted_input):
        voter = self.registry.lookup(self.election, caller)
        self.stages.require(self.election, Stage.VOTE)

        with self.acl.operation("vote"):
            try:
                ballot = self.arithmetic.verify_and_decode(encrypted_input, caller)
            except InputVerificationError as e:
                raise InvalidProof(f"Invalid encrypted input: {e}")
            self.tally.apply_vote(self.election, voter, ballot)

        logger.info(f"Vote recorded, total votes: {self.election.total_votes}")
        self._emit('vote_cast', {'voter_index': voter.index, 'total_votes': self.election.total_votes}, caller)
        return self.election.total_votes

    @election_operation("advance_stage")
    @require_permission(Permission.ADVANCE_STAGE)
    def advance_stage(self, caller):
        stage = self.stages.advance(self.election)
        logger.info(f"Election advanced to {stage.label} stage")
        self._emit('stage_advanced', {'stage': stage.label}, caller)
        return stage

    @election_operation("reveal_winner")
    @require_permission(Permission.REVEAL_WINNER)
    def reveal_encrypted_winner(self, caller):
        self.stages.require(self.election, Stage.DONE)
        self.resolver.check_can_resolve(self.election)

        with self.acl.operation("reveal_winner"):
            winner = self.resolver.resolve(self.election)

        self._emit('winner_revealed', {'handle': winner.handle}, caller)
        return winner

    @election_operation("reset")
    @require_permission(Permission.RESET)
    def reset(self, caller, num_proposals):
        with self.acl.operation("reset"):
            self.lifecycle.new_round(self.election, num_proposals)
        logger.info(f"Election reset with {num_proposals} proposals")
        self._emit('election_reset', {'num_proposals': num_proposals}, caller)

    @election_operation("withdraw")
    @require_permission(Permission.WITHDRAW)
    def withdraw(self, caller):
        balance = self.fee_ledger.balance()
        if balance <= 0:
            raise NoFundsToWithdraw("No funds to withdraw")
        self.fee_ledger.withdraw(caller, balance)
        self._emit('funds_withdrawn', {'amount': balance}, caller)
        return balance

    # -------------------------------- views --------------------------------- #

    def get_encrypted_proposal_count(self, proposal_id):
        with self._lock:
            proposals = self.election.proposals
            if isinstance(proposal_id, bool) or not isinstance(proposal_id, int) \
                    or not 0 <= proposal_id < len(proposals):
                raise InvalidProposalId("Invalid proposal id")
            return proposals[proposal_id].count

    def get_encrypted_remaining_votes(self, principal):
        with self._lock:
            voter = self.registry.lookup(self.election, normalize_principal(principal))
            return voter.remaining_quota

    @property
    def stage(self):
        return self.election.stage

    @property
    def total_votes(self):
        return self.election.total_votes

    @property
    def voters_count(self):
        return len(self.election.voters)

    @property
    def num_proposals(self):
        return len(self.election.proposals)

    @property
    def encrypted_winner_id(self):
        return self.election.encrypted_winner_id

    def balance(self):
        return self.fee_ledger.balance()
