# confidential_vote/election/lifecycle.py


class ElectionLifecycle:
    """Starts a fresh round in place.

    Grants on the discarded ciphertexts are left as they are.
    """

    def __init__(self, tally, stages):
        self.tally = tally
        self.stages = stages

    def new_round(self, election, num_proposals: int):
        if isinstance(num_proposals, bool) or not isinstance(num_proposals, int) or num_proposals < 0:
            raise ValueError("Number of proposals must be a non-negative integer")
        proposals = self.tally.create_proposals(num_proposals)
        election.proposals = proposals
        election.voters = []
        election.voter_index = {}
        election.total_votes = 0
        election.encrypted_winner_id = None
        self.stages.restart(election)
