from .team_model import TeamModel, TeamRef
from .bracket_model import BracketModel, BracketSummary, MatchupModel, MatchupSelector
