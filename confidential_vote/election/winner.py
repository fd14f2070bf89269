# confidential_vote/election/winner.py

from confidential_vote.election.errors import NoProposals, NoVotesCast


class WinnerResolver:
    """Oblivious max-fold over the proposal counters.

    Strict greater-than keeps the earliest proposal on ties.
    """

    def __init__(self, arithmetic, custody):
        self.arithmetic = arithmetic
        self.custody = custody

    def check_can_resolve(self, election):
        if not election.proposals:
            raise NoProposals("No proposals")
        if election.total_votes == 0:
            raise NoVotesCast("No votes cast")

    def resolve(self, election):
        self.check_can_resolve(election)
        a, scratch = self.arithmetic, self.custody.scratch

        first = election.proposals[0]
        best_count, best_id = first.count, first.id
        for proposal in election.proposals[1:]:
            is_greater = scratch(a.gt(proposal.count, best_count))
            best_count = scratch(a.select(is_greater, proposal.count, best_count))
            best_id = scratch(a.select(is_greater, proposal.id, best_id))

        election.encrypted_winner_id = self.custody.keep(best_id)
        return election.encrypted_winner_id
