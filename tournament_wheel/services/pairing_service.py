import random # Default source for wheel draws
from typing import List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from tournament_wheel.core.exceptions import (
    DuplicateTeamError,
    PairingCompleteError,
    UnpairableTeamCountError,
)
from tournament_wheel.models.bracket_model import MatchupModel
from tournament_wheel.models.team_model import TeamModel, TeamRef

class PairingRun(BaseModel):
    """
    Working state of the roller wheel while teams are being paired.

    Every spin returns a new run: one team is drawn uniformly at random from the
    remaining teams, and every second draw closes a matchup against the draw just
    before it. When exactly two teams remain they are paired directly, without a draw.
    A run is never persisted; once complete, its matchups are handed to bracket creation.
    """
    round_number: int = Field(default=1, ge=1)
    teams: Tuple[TeamRef, ...] = ()
    selected: Tuple[TeamRef, ...] = () # Draw order
    remaining: Tuple[TeamRef, ...] = ()
    matchups: Tuple[MatchupModel, ...] = () # Order in which pairs were completed

    class Config:
        frozen = True

    @classmethod
    def start(cls, teams: Sequence[Union[TeamModel, TeamRef]], round_number: int = 1) -> "PairingRun":
        if round_number < 1:
            raise ValueError(f"Round number must be positive, got {round_number}.")

        refs = tuple(team.ref() if isinstance(team, TeamModel) else team for team in teams)
        seen = set()
        for ref in refs:
            if ref.id in seen:
                raise DuplicateTeamError(ref.id)
            seen.add(ref.id)

        if len(refs) % 2 != 0:
            raise UnpairableTeamCountError(len(refs))

        return cls(round_number=round_number, teams=refs, remaining=refs)

    @property
    def is_complete(self) -> bool:
        return not self.remaining

    @property
    def pending_team(self) -> Optional[TeamRef]:
        """The last drawn team while it is still waiting for an opponent."""
        if len(self.selected) % 2 == 1:
            return self.selected[-1]
        return None

    def spin(self, rng: Optional[random.Random] = None) -> "PairingRun":
        if self.is_complete:
            raise PairingCompleteError("All teams have already been paired.")

        # Last two teams are paired as they are, there is nothing left to draw
        if len(self.remaining) == 2:
            team1, team2 = self.remaining
            return self.model_copy(update={
                "selected": self.selected + self.remaining,
                "remaining": (),
                "matchups": self.matchups + (MatchupModel.between(team1, team2, self.round_number),),
            })

        source = rng if rng is not None else random
        index = int(source.random() * len(self.remaining))
        drawn = self.remaining[index]

        selected = self.selected + (drawn,)
        matchups = self.matchups
        if len(selected) % 2 == 0:
            matchups = matchups + (MatchupModel.between(selected[-2], drawn, self.round_number),)

        return self.model_copy(update={
            "selected": selected,
            "remaining": self.remaining[:index] + self.remaining[index + 1:],
            "matchups": matchups,
        })

def pair_teams(
    teams: Sequence[Union[TeamModel, TeamRef]],
    round_number: int = 1,
    rng: Optional[random.Random] = None,
) -> List[MatchupModel]:
    """
    Spins the wheel until every team is paired and returns the matchups.
    An empty team list gives no matchups; an odd one raises UnpairableTeamCountError.
    """
    run = PairingRun.start(teams, round_number=round_number)
    while not run.is_complete:
        run = run.spin(rng)
    return list(run.matchups)
