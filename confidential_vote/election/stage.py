# confidential_vote/election/stage.py

from enum import IntEnum

from confidential_vote.election.errors import AlreadyFinal, WrongStage


class Stage(IntEnum):
    REGISTRATION = 0
    VOTE = 1
    DONE = 2

    @property
    def label(self):
        return self.name.lower()


class StageController:
    """Forward-only stage machine: Registration -> Vote -> Done.

    The only way back to Registration is `restart`, used by reset.
    """

    def require(self, election, stage: Stage):
        if election.stage != stage:
            raise WrongStage(stage, election.stage)

    def check_can_advance(self, election):
        if election.stage == Stage.DONE:
            raise AlreadyFinal("Already in final stage")

    def advance(self, election) -> Stage:
        self.check_can_advance(election)
        election.stage = Stage(election.stage + 1)
        return election.stage

    def restart(self, election):
        election.stage = Stage.REGISTRATION
