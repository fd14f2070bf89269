# confidential_vote/election/registry.py

from confidential_vote.election.errors import AlreadyRegistered, NotRegistered
from confidential_vote.election.models import Voter

VOTE_QUOTA = 1


class VoterRegistry:
    def __init__(self, arithmetic, custody):
        self.arithmetic = arithmetic
        self.custody = custody

    def check_can_register(self, election, principal):
        if election.is_registered(principal):
            raise AlreadyRegistered("Already registered")

    def register(self, election, principal) -> Voter:
        self.check_can_register(election, principal)
        quota = self.custody.keep(self.arithmetic.encrypt(VOTE_QUOTA))
        voter = Voter(index=len(election.voters), principal=principal, remaining_quota=quota)
        election.voters.append(voter)
        election.voter_index[principal] = voter.index
        return voter

    def lookup(self, election, principal) -> Voter:
        voter = election.find_voter(principal)
        if voter is None:
            raise NotRegistered("Not registered")
        return voter

    def discard(self, election, voter):
        """Undo the most recent `register` call."""
        if election.voters and election.voters[-1] is voter:
            election.voters.pop()
            election.voter_index.pop(voter.principal, None)
