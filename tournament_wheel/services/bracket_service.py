from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from tournament_wheel.core.exceptions import (
    InvalidBracketError,
    InvalidWinnerError,
    MatchupNotFoundError,
)
from tournament_wheel.models.bracket_model import BracketModel, MatchupModel, MatchupSelector
from tournament_wheel.models.team_model import TeamModel, TeamRef

# Bracket operations never modify the bracket they are given.
# Each one returns a new BracketModel that the caller is responsible for saving.

def default_bracket_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"Tournament {today.month}/{today.day}/{today.year}"

def create_bracket(
    name: str,
    teams: Sequence[Union[TeamModel, TeamRef]],
    matchups: Iterable[MatchupModel],
    created_by: Optional[str] = None,
) -> BracketModel:
    """
    Builds a new bracket from the matchups produced by the wheel.

    The matchups must use every team exactly once and must all belong to the same
    round, which becomes the bracket's current round.
    """
    if not teams:
        raise InvalidBracketError("A bracket needs at least one team.")

    team_ids = set()
    for team in teams:
        if team.id in team_ids:
            raise InvalidBracketError(f"Team {team.id} is listed more than once.")
        team_ids.add(team.id)

    matchups = list(matchups)
    if not matchups:
        raise InvalidBracketError("A bracket needs at least one matchup.")

    paired_ids = set()
    for matchup in matchups:
        if matchup.winner is not None:
            raise InvalidBracketError(f"Matchup {matchup.id} already has a winner; new matchups start unplayed.")
        for team_id in matchup.team_ids:
            if team_id not in team_ids:
                raise InvalidBracketError(f"Matchup {matchup.id} uses team {team_id}, which is not part of this bracket.")
            if team_id in paired_ids:
                raise InvalidBracketError(f"Team {team_id} is paired more than once.")
            paired_ids.add(team_id)

    unpaired = team_ids - paired_ids
    if unpaired:
        raise InvalidBracketError(f"Teams without a matchup: {', '.join(sorted(unpaired))}.")

    rounds = {matchup.round for matchup in matchups}
    if len(rounds) != 1:
        raise InvalidBracketError(f"Matchups span several rounds: {sorted(rounds)}.")

    return BracketModel(
        name=name.strip() if name and name.strip() else default_bracket_name(),
        created_by=created_by,
        total_teams=len(team_ids),
        current_round=rounds.pop(),
        completed=False,
        matchups=matchups,
    )

def find_matchup(bracket: BracketModel, selector: MatchupSelector) -> Tuple[int, MatchupModel]:
    """Returns the position and the matchup the selector resolves to; it must resolve to exactly one."""
    found = [(i, m) for i, m in enumerate(bracket.matchups) if selector.matches(m)]
    if not found:
        raise MatchupNotFoundError(
            f"No matchup {selector.team1_id} vs {selector.team2_id} in round {selector.round}"
            + (f" with ID {selector.matchup_id}." if selector.matchup_id else ".")
        )
    if len(found) > 1:
        # The composite key is not unique for a rematch within one round
        raise MatchupNotFoundError(
            f"{len(found)} matchups match {selector.team1_id} vs {selector.team2_id} in round {selector.round}; "
            "select the matchup by its ID.",
            candidates=len(found),
        )
    return found[0]

def _replace_matchup(bracket: BracketModel, index: int, matchup: MatchupModel) -> BracketModel:
    matchups = list(bracket.matchups)
    matchups[index] = matchup
    return bracket.model_copy(update={"matchups": matchups})

def record_winner(bracket: BracketModel, selector: MatchupSelector, winner_id: str) -> BracketModel:
    index, matchup = find_matchup(bracket, selector)
    if winner_id not in matchup.team_ids:
        raise InvalidWinnerError(winner_id, matchup.id)

    updated = _replace_matchup(bracket, index, matchup.model_copy(update={"winner": winner_id}))
    return updated.model_copy(update={"completed": is_bracket_complete(updated)})

def record_match_time(bracket: BracketModel, selector: MatchupSelector, time_text: str) -> BracketModel:
    # No format check, the time is whatever the organizer typed (e.g. "3:30 PM")
    index, matchup = find_matchup(bracket, selector)
    return _replace_matchup(bracket, index, matchup.model_copy(update={"matchup_time": time_text}))

def is_bracket_complete(bracket: BracketModel) -> bool:
    return bool(bracket.matchups) and all(m.completed for m in bracket.matchups)

def collect_winners(bracket: BracketModel) -> List[TeamRef]:
    """
    Winners of a finished bracket in matchup order.
    Next rounds are not generated automatically: these teams are fed back to the wheel.
    """
    if not is_bracket_complete(bracket):
        raise InvalidBracketError(f"Bracket {bracket.name} still has matchups without a winner.")
    return [m.winner_ref for m in bracket.matchups]
