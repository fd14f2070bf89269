# confidential_vote/election/errors.py
"""Error taxonomy for the confidential tally engine.

Every operation checks all of its preconditions before touching election
state, so raising any of these leaves the election exactly as it was.
"""


class ElectionError(Exception):
    """Base class for every rejected election operation."""
    code = "election_error"

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class NotAuthorized(ElectionError):
    """Caller is not allowed to perform this operation."""
    code = "not_authorized"


class WrongStage(ElectionError):
    """Operation is not valid in the current stage."""
    code = "wrong_stage"

    def __init__(self, expected, actual):
        super().__init__(f"Not in {expected.label} stage (current stage: {actual.label})")
        self.expected = expected
        self.actual = actual


class AlreadyRegistered(ElectionError):
    """Principal is already registered for this round."""
    code = "already_registered"


class NotRegistered(ElectionError):
    """Principal is not registered for this round."""
    code = "not_registered"


class AdministratorCannotParticipate(ElectionError):
    """The administrator cannot register or vote."""
    code = "administrator_cannot_participate"


class InsufficientFee(ElectionError):
    """Paid fee is below the registration fee."""
    code = "insufficient_fee"

    def __init__(self, paid, required):
        super().__init__(f"Insufficient fee sent: {paid} < {required}")
        self.paid = paid
        self.required = required


class InvalidProof(ElectionError):
    """Encrypted input could not be verified or decoded."""
    code = "invalid_proof"


class NoProposals(ElectionError):
    """Election has no proposals."""
    code = "no_proposals"


class NoVotesCast(ElectionError):
    """No votes were cast in this round."""
    code = "no_votes_cast"


class AlreadyFinal(ElectionError):
    """Election is already in its final stage."""
    code = "already_final"


class InvalidProposalId(ElectionError):
    """Proposal id is out of range."""
    code = "invalid_proposal_id"


class NoFundsToWithdraw(ElectionError):
    """No collected fees to withdraw."""
    code = "no_funds_to_withdraw"
