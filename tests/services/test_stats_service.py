from datetime import datetime, timedelta, timezone

from tournament_wheel.models.bracket_model import BracketModel, MatchupModel, MatchupSelector
from tournament_wheel.models.team_model import TeamRef
from tournament_wheel.services import bracket_service
from tournament_wheel.services.stats_service import compute_statistics

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def make_bracket(bracket_id, days_ago, winners):
    """Two matchups (Alpha v Beta, Gamma v Delta) with the given winners (None for unplayed)."""
    matchups = [
        MatchupModel.between(TeamRef(id="a", name="Alpha"), TeamRef(id="b", name="Beta"), 1),
        MatchupModel.between(TeamRef(id="c", name="Gamma"), TeamRef(id="d", name="Delta"), 1),
    ]
    bracket = BracketModel(
        id=bracket_id,
        name=f"Cup {bracket_id}",
        created_at=NOW - timedelta(days=days_ago),
        total_teams=4,
        matchups=matchups,
    )
    for matchup, winner in zip(matchups, winners):
        if winner is not None:
            bracket = bracket_service.record_winner(bracket, MatchupSelector.for_matchup(matchup), winner)
    return bracket


class TestComputeStatistics:

    def test_counts(self):
        brackets = [
            make_bracket("b1", 0, ["a", "d"]),
            make_bracket("b2", 1, ["a", None]),
            make_bracket("b3", 2, [None, None]),
        ]
        stats = compute_statistics(brackets, team_count=4)

        assert stats.teams == 4
        assert stats.tournaments == 3
        assert stats.completed_tournaments == 1
        assert stats.total_matches == 6

    def test_top_teams_by_wins(self):
        brackets = [
            make_bracket("b1", 0, ["a", "d"]),
            make_bracket("b2", 1, ["a", "c"]),
            make_bracket("b3", 2, ["b", "d"]),
        ]
        stats = compute_statistics(brackets, top_limit=2)

        assert [(t.name, t.wins) for t in stats.top_teams] == [("Alpha", 2), ("Delta", 2)]

    def test_recent_tournaments_keep_given_order(self):
        brackets = [make_bracket(f"b{i}", i, [None, None]) for i in range(7)]
        stats = compute_statistics(brackets, recent_limit=5)

        assert [s.id for s in stats.recent_tournaments] == ["b0", "b1", "b2", "b3", "b4"]
        assert stats.recent_tournaments[0].match_count == 2

    def test_no_brackets(self):
        stats = compute_statistics([])
        assert stats.tournaments == 0
        assert stats.top_teams == []
        assert stats.recent_tournaments == []
