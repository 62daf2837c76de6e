from collections import Counter
from typing import Iterable, List

from pydantic import BaseModel, Field

from tournament_wheel.models.bracket_model import BracketModel, BracketSummary

class TeamWins(BaseModel):
    name: str
    wins: int

class TournamentStats(BaseModel):
    teams: int = 0
    tournaments: int = 0
    completed_tournaments: int = 0
    total_matches: int = 0
    recent_tournaments: List[BracketSummary] = Field(default_factory=list)
    top_teams: List[TeamWins] = Field(default_factory=list)

def compute_statistics(
    brackets: Iterable[BracketModel],
    team_count: int = 0,
    recent_limit: int = 5,
    top_limit: int = 5,
) -> TournamentStats:
    """
    Dashboard numbers over stored brackets.
    `brackets` must already be ordered newest first; the recent list keeps that order.
    Wins are counted per team name as recorded in each matchup's snapshot.
    """
    brackets = list(brackets)
    wins: Counter = Counter()
    for bracket in brackets:
        for matchup in bracket.matchups:
            if matchup.completed:
                wins[matchup.winner_ref.name] += 1

    return TournamentStats(
        teams=team_count,
        tournaments=len(brackets),
        completed_tournaments=sum(1 for b in brackets if b.completed),
        total_matches=sum(len(b.matchups) for b in brackets),
        recent_tournaments=[BracketSummary.from_bracket(b) for b in brackets[:recent_limit]],
        top_teams=[TeamWins(name=name, wins=count) for name, count in wins.most_common(top_limit)],
    )
