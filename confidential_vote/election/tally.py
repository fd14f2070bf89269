# confidential_vote/election/tally.py
"""Oblivious vote application.

A vote touches every proposal counter and the voter's quota on every call.
Whether the vote matched a proposal, and whether the voter still had quota,
only ever exists as an encrypted boolean fed into `select`.
"""

from typing import List

from confidential_vote.encryption.arithmetic import Ciphertext
from confidential_vote.election.models import Election, Proposal, Voter


class EncryptedTally:
    def __init__(self, arithmetic, custody):
        self.arithmetic = arithmetic
        self.custody = custody

    def create_proposals(self, num_proposals: int) -> List[Proposal]:
        a, keep = self.arithmetic, self.custody.keep
        return [Proposal(id=keep(a.encrypt(i)), count=keep(a.encrypt(0))) for i in range(num_proposals)]

    def apply_vote(self, election: Election, voter: Voter, vote: Ciphertext):
        a, scratch, keep = self.arithmetic, self.custody.scratch, self.custody.keep

        zero = scratch(a.encrypt(0))
        one = scratch(a.encrypt(1))
        has_quota = scratch(a.gt(voter.remaining_quota, zero))

        # compute everything first so a backend failure leaves no partial update
        new_counts = []
        for proposal in election.proposals:
            matched = scratch(a.eq(vote, proposal.id))
            increment = scratch(a.select(matched, one, zero))
            candidate = scratch(a.add(proposal.count, increment))
            new_counts.append(keep(a.select(has_quota, candidate, proposal.count)))

        decremented = scratch(a.sub(voter.remaining_quota, one))
        new_quota = keep(a.select(has_quota, decremented, voter.remaining_quota))

        for proposal, count in zip(election.proposals, new_counts):
            proposal.count = count
        voter.remaining_quota = new_quota
        # counted even when the quota gate turned this vote into a no-op
        election.total_votes += 1
