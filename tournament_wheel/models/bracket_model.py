from uuid import uuid4
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, model_validator

from tournament_wheel.models.team_model import TeamRef

class MatchupModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    round: int = Field(ge=1)

    # Team snapshots taken when the matchup was created
    team1_id: str = Field(alias="team1Id")
    team1_name: str = Field(alias="team1Name")
    team2_id: str = Field(alias="team2Id")
    team2_name: str = Field(alias="team2Name")

    winner: Optional[str] = None # Team id of the winner
    matchup_time: Optional[str] = Field(default=None, alias="matchupTime") # Free text, e.g. "3:30 PM"

    class Config:
        from_attributes = True
        populate_by_name = True
        frozen = True

    @computed_field
    @property
    def completed(self) -> bool:
        return self.winner is not None

    @model_validator(mode="after")
    def check_teams_and_winner(self):
        if self.team1_id == self.team2_id:
            raise ValueError(f"A matchup needs two different teams, got {self.team1_id} twice.")
        if self.winner is not None and self.winner not in (self.team1_id, self.team2_id):
            raise ValueError(f"Winner {self.winner} is not one of the matchup's teams.")
        return self

    @property
    def team_ids(self) -> Tuple[str, str]:
        return (self.team1_id, self.team2_id)

    @property
    def team1(self) -> TeamRef:
        return TeamRef(id=self.team1_id, name=self.team1_name)

    @property
    def team2(self) -> TeamRef:
        return TeamRef(id=self.team2_id, name=self.team2_name)

    @property
    def winner_ref(self) -> Optional[TeamRef]:
        if self.winner is None:
            return None
        return self.team1 if self.winner == self.team1_id else self.team2

    @classmethod
    def between(cls, team1: TeamRef, team2: TeamRef, round_number: int) -> "MatchupModel":
        return cls(
            round=round_number,
            team1_id=team1.id,
            team1_name=team1.name,
            team2_id=team2.id,
            team2_name=team2.name,
        )

class MatchupSelector(BaseModel):
    """
    Identifies one matchup of a bracket by the (team1_id, team2_id, round) composite
    key of the legacy documents. matchup_id, when present, must name the same matchup
    and tells apart rematches that share the key.
    """
    team1_id: str
    team2_id: str
    round: int = Field(ge=1)
    matchup_id: Optional[str] = None

    @classmethod
    def for_matchup(cls, matchup: MatchupModel) -> "MatchupSelector":
        return cls(
            team1_id=matchup.team1_id,
            team2_id=matchup.team2_id,
            round=matchup.round,
            matchup_id=matchup.id,
        )

    def matches(self, matchup: MatchupModel) -> bool:
        if self.matchup_id is not None and matchup.id != self.matchup_id:
            return False
        return (
            matchup.team1_id == self.team1_id
            and matchup.team2_id == self.team2_id
            and matchup.round == self.round
        )

class BracketModel(BaseModel):
    id: Optional[str] = None # Assigned by the store on first save
    name: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt") # Stamped by the store on first save
    created_by: Optional[str] = Field(default=None, alias="createdBy")

    total_teams: int = Field(default=0, alias="totalTeams", ge=0)
    current_round: int = Field(default=1, alias="currentRound", ge=1)
    completed: bool = False
    revision: int = Field(default=0, ge=0)

    matchups: List[MatchupModel] = Field(default_factory=list) # Creation order, "Match N" is position N-1

    class Config:
        from_attributes = True
        populate_by_name = True
        frozen = True

class BracketSummary(BaseModel):
    id: str
    name: str
    total_teams: int
    match_count: int
    current_round: int
    completed: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_bracket(cls, bracket: BracketModel) -> "BracketSummary":
        return cls(
            id=bracket.id,
            name=bracket.name,
            total_teams=bracket.total_teams,
            match_count=len(bracket.matchups),
            current_round=bracket.current_round,
            completed=bracket.completed,
            created_at=bracket.created_at,
        )
