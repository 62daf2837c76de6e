import logging
import random
import threading
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Response

from tournament_wheel.core.config import settings
from tournament_wheel.core.exceptions import (
    BracketError,
    BracketNotFoundError,
    ConflictError,
    MatchupNotFoundError,
    PairingError,
    StoreUnavailableError,
    TournamentWheelError,
)
from tournament_wheel.models.bracket_model import BracketModel, BracketSummary
from tournament_wheel.models.team_model import TeamModel, TeamRef
from tournament_wheel.schemas.bracket_schemas import (
    BracketCreateRequest,
    MatchTimeUpdateRequest,
    PairingRequest,
    PairingResponse,
    WinnerUpdateRequest,
)
from tournament_wheel.services import bracket_service
from tournament_wheel.services.bracket_repository import BRACKETS_COLLECTION, BracketRepository
from tournament_wheel.services.document_store import DocumentStore, JsonFileDocumentStore
from tournament_wheel.services.pairing_service import pair_teams
from tournament_wheel.services.stats_service import TournamentStats, compute_statistics
from tournament_wheel.services.team_service import TEAMS_COLLECTION, TeamService

logger = logging.getLogger(__name__)

router = APIRouter()

_store: Optional[DocumentStore] = None
_store_lock = threading.Lock()

# --- Dependencies ---

def get_store() -> DocumentStore:
    global _store
    # Sync endpoints run in a threadpool; every request must share one store and its lock
    with _store_lock:
        if _store is None:
            _store = JsonFileDocumentStore(
                settings.DATA_DIR,
                file_names={TEAMS_COLLECTION: settings.TEAMS_FILE, BRACKETS_COLLECTION: settings.BRACKETS_FILE},
            )
    return _store

def get_bracket_repository(store: DocumentStore = Depends(get_store)) -> BracketRepository:
    return BracketRepository(store)

def get_team_service(store: DocumentStore = Depends(get_store)) -> TeamService:
    return TeamService(store)

async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """
    Identity of the caller, recorded as the bracket's createdBy.
    Sign-in and admin/user roles are enforced by the client, not here.
    """
    return x_user_id

def _http_error(e: TournamentWheelError) -> HTTPException:
    if isinstance(e, (BracketNotFoundError, MatchupNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, StoreUnavailableError):
        logger.error("Document store unavailable: %s", e)
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, (PairingError, BracketError)):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))

# --- Teams and pairing ---

@router.get("/teams", response_model=List[TeamModel], summary="List teams")
def list_teams(team_service: TeamService = Depends(get_team_service)):
    try:
        return team_service.fetch_teams()
    except TournamentWheelError as e:
        raise _http_error(e)

@router.post("/pairings", response_model=PairingResponse, summary="Spin the wheel for all teams")
def preview_pairings(
    payload: PairingRequest,
    team_service: TeamService = Depends(get_team_service),
):
    """
    Pairs every stored team without saving anything.
    The client animates the draw and then posts the matchups to /brackets.
    """
    rng = random.Random(payload.seed) if payload.seed is not None else None
    try:
        matchups = pair_teams(team_service.fetch_teams(), round_number=payload.round_number, rng=rng)
    except TournamentWheelError as e:
        raise _http_error(e)
    return PairingResponse(round_number=payload.round_number, matchups=matchups)

# --- Brackets ---

@router.post("/brackets", response_model=BracketModel, status_code=201, summary="Create a bracket")
def create_bracket(
    payload: BracketCreateRequest,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    team_service: TeamService = Depends(get_team_service),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    """
    Creates a bracket from previewed matchups, or runs the wheel on all teams when
    no matchups are given. The matchups must use every stored team exactly once.
    """
    try:
        teams = team_service.fetch_teams()
        matchups = payload.matchups
        if matchups is None:
            rng = random.Random(payload.seed) if payload.seed is not None else None
            matchups = pair_teams(teams, round_number=payload.round_number, rng=rng)
        bracket = bracket_service.create_bracket(payload.name, teams, matchups, created_by=current_user_id)
        bracket_id = repository.save(bracket)
        return repository.load(bracket_id)
    except TournamentWheelError as e:
        raise _http_error(e)

@router.get("/brackets", response_model=List[BracketSummary], summary="List brackets, newest first")
def list_brackets(repository: BracketRepository = Depends(get_bracket_repository)):
    try:
        return list(repository.list())
    except TournamentWheelError as e:
        raise _http_error(e)

@router.get("/brackets/{bracket_id}", response_model=BracketModel, summary="Get a bracket")
def get_bracket(
    bracket_id: str = Path(..., description="The ID of the bracket"),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    try:
        return repository.load(bracket_id)
    except TournamentWheelError as e:
        raise _http_error(e)

@router.put("/brackets/{bracket_id}/winner", response_model=BracketModel, summary="Record a matchup winner")
def record_winner(
    payload: WinnerUpdateRequest,
    bracket_id: str = Path(..., description="The ID of the bracket"),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    try:
        bracket = repository.load(bracket_id)
        updated = bracket_service.record_winner(bracket, payload, payload.winner_id)
        repository.save(updated)
        return repository.load(bracket_id)
    except TournamentWheelError as e:
        raise _http_error(e)

@router.put("/brackets/{bracket_id}/match-time", response_model=BracketModel, summary="Set a matchup's time")
def record_match_time(
    payload: MatchTimeUpdateRequest,
    bracket_id: str = Path(..., description="The ID of the bracket"),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    try:
        bracket = repository.load(bracket_id)
        updated = bracket_service.record_match_time(bracket, payload, payload.matchup_time)
        repository.save(updated)
        return repository.load(bracket_id)
    except TournamentWheelError as e:
        raise _http_error(e)

@router.get("/brackets/{bracket_id}/winners", response_model=List[TeamRef], summary="Winners of a finished bracket")
def get_winners(
    bracket_id: str = Path(..., description="The ID of the bracket"),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    """Teams to put back on the wheel for the next round."""
    try:
        return bracket_service.collect_winners(repository.load(bracket_id))
    except TournamentWheelError as e:
        raise _http_error(e)

@router.delete("/brackets/{bracket_id}", status_code=204, summary="Delete a bracket")
def delete_bracket(
    bracket_id: str = Path(..., description="The ID of the bracket"),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    try:
        repository.delete(bracket_id)
    except TournamentWheelError as e:
        raise _http_error(e)
    return Response(status_code=204)

# --- Dashboard ---

@router.get("/stats", response_model=TournamentStats, summary="Tournament statistics")
def get_statistics(
    team_service: TeamService = Depends(get_team_service),
    repository: BracketRepository = Depends(get_bracket_repository),
):
    try:
        return compute_statistics(
            repository.load_all(),
            team_count=team_service.count_teams(),
            recent_limit=settings.RECENT_TOURNAMENTS_LIMIT,
            top_limit=settings.TOP_TEAMS_LIMIT,
        )
    except TournamentWheelError as e:
        raise _http_error(e)
