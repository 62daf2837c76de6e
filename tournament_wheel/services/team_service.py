import logging
from typing import Any, Dict, List

from tournament_wheel.models.team_model import TeamModel
from tournament_wheel.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

TEAMS_COLLECTION = "teams"

class TeamService:
    """Read-only access to the teams collection; teams are managed elsewhere."""

    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def _from_document(doc: Dict[str, Any]) -> TeamModel:
        team_id = str(doc["id"])
        return TeamModel(
            id=team_id,
            name=doc.get("name") or team_id,
            members=list(doc.get("members") or []),
        )

    def fetch_teams(self) -> List[TeamModel]:
        teams = [self._from_document(doc) for doc in self.store.list(TEAMS_COLLECTION)]
        logger.debug("Fetched %d teams", len(teams))
        return teams

    def count_teams(self) -> int:
        return len(self.store.list(TEAMS_COLLECTION))
