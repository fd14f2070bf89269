# confidential_vote/election/models.py

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from confidential_vote.encryption.arithmetic import Ciphertext
from confidential_vote.election.stage import Stage


@dataclass
class Proposal:
    id: Ciphertext
    count: Ciphertext


@dataclass
class Voter:
    index: int
    principal: str
    remaining_quota: Ciphertext


@dataclass
class Election:
    """All per-round state. Owned by the engine, mutated only by its operations."""
    stage: Stage = Stage.REGISTRATION
    proposals: List[Proposal] = field(default_factory=list)
    voters: List[Voter] = field(default_factory=list)
    voter_index: Dict[str, int] = field(default_factory=dict)
    total_votes: int = 0
    encrypted_winner_id: Optional[Ciphertext] = None

    def is_registered(self, principal: str) -> bool:
        return principal in self.voter_index

    def find_voter(self, principal: str) -> Optional[Voter]:
        index = self.voter_index.get(principal)
        return None if index is None else self.voters[index]
