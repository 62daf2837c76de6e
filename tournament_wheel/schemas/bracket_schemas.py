from typing import List, Optional

from pydantic import BaseModel, Field

from tournament_wheel.models.bracket_model import MatchupModel, MatchupSelector

class PairingRequest(BaseModel):
    round_number: int = Field(1, ge=1, description="Round the new matchups belong to")
    seed: Optional[int] = Field(None, description="Seed for a reproducible draw")

class PairingResponse(BaseModel):
    round_number: int
    matchups: List[MatchupModel]

class BracketCreateRequest(BaseModel):
    name: str = Field("", max_length=100, description="Blank names become 'Tournament <date>'")
    # Matchups from a previous pairing preview. When omitted, the wheel is run on all teams.
    matchups: Optional[List[MatchupModel]] = None
    round_number: int = Field(1, ge=1, description="Used only when matchups are omitted")
    seed: Optional[int] = None

class WinnerUpdateRequest(MatchupSelector):
    winner_id: str = Field(..., description="ID of one of the matchup's two teams")

class MatchTimeUpdateRequest(MatchupSelector):
    matchup_time: str = Field(..., description="Free text, e.g. '3:30 PM'")
