"""Exceptions raised by the pairing engine, the bracket operations and the repository."""


class TournamentWheelError(Exception):
    """Base exception for all tournament wheel errors."""
    pass


# --- Pairing ---

class PairingError(TournamentWheelError):
    """Base exception for errors raised while pairing teams."""
    pass


class UnpairableTeamCountError(PairingError):
    """Raised when the wheel is given an odd number of teams."""

    def __init__(self, team_count: int):
        self.team_count = team_count
        super().__init__(f"Cannot pair {team_count} teams: an even number of teams is required.")


class DuplicateTeamError(PairingError):
    """Raised when the same team id appears more than once in a pairing run."""

    def __init__(self, team_id: str):
        self.team_id = team_id
        super().__init__(f"Team {team_id} appears more than once.")


class PairingCompleteError(PairingError):
    """Raised when the wheel is spun after every team has been paired."""
    pass


# --- Bracket ---

class BracketError(TournamentWheelError):
    """Base exception for bracket validation and mutation errors."""
    pass


class InvalidBracketError(BracketError):
    """Raised when matchups do not exactly partition the bracket's teams."""
    pass


class MatchupNotFoundError(BracketError):
    """Raised when a selector resolves to zero or to several matchups."""

    def __init__(self, message: str, candidates: int = 0):
        self.candidates = candidates
        super().__init__(message)


class InvalidWinnerError(BracketError):
    """Raised when the winner is not one of the matchup's two teams."""

    def __init__(self, winner_id: str, matchup_id: str):
        self.winner_id = winner_id
        self.matchup_id = matchup_id
        super().__init__(f"Team {winner_id} is not playing in matchup {matchup_id}.")


# --- Repository ---

class RepositoryError(TournamentWheelError):
    """Base exception for document store and repository errors."""
    pass


class BracketNotFoundError(RepositoryError):
    """Raised when no stored document backs the given bracket id."""

    def __init__(self, bracket_id: str):
        self.bracket_id = bracket_id
        super().__init__(f"Bracket with ID {bracket_id} not found.")


class ConflictError(RepositoryError):
    """Raised when a save is based on a stale revision of the bracket."""

    def __init__(self, bracket_id: str, expected_revision: int, stored_revision: int):
        self.bracket_id = bracket_id
        self.expected_revision = expected_revision
        self.stored_revision = stored_revision
        super().__init__(
            f"Bracket {bracket_id} was modified concurrently "
            f"(revision {expected_revision}, stored revision {stored_revision})."
        )


class StoreUnavailableError(RepositoryError):
    """Raised when the document store cannot be read or written."""
    pass
