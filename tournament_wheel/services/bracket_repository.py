import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from tournament_wheel.core.config import settings
from tournament_wheel.core.exceptions import BracketNotFoundError, ConflictError, StoreUnavailableError
from tournament_wheel.models.bracket_model import BracketModel, BracketSummary
from tournament_wheel.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

BRACKETS_COLLECTION = "brackets"

ORDER_CREATED_DESC = "created_desc"
ORDER_CREATED_ASC = "created_asc"

def _created_sort_key(bracket: BracketModel) -> datetime:
    # Documents without a timestamp sort as the oldest; naive timestamps are taken as UTC
    if bracket.created_at is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if bracket.created_at.tzinfo is None:
        return bracket.created_at.replace(tzinfo=timezone.utc)
    return bracket.created_at

class BracketListing:
    """
    Summaries of every stored bracket.
    Each iteration does one full fetch from the store, so the listing can be iterated again
    to get fresh results. It is not a live subscription.
    """

    def __init__(self, repository: "BracketRepository", order_by: str = ORDER_CREATED_DESC):
        self.repository = repository
        self.order_by = order_by

    def __iter__(self) -> Iterator[BracketSummary]:
        for bracket in self.repository.load_all(order_by=self.order_by):
            yield BracketSummary.from_bracket(bracket)

class BracketRepository:
    """
    Maps BracketModel values to and from documents in the "brackets" collection.

    Saving replaces the whole document. Updating a bracket is a read-modify-write:
    load it, apply one bracket operation, save it back. Without optimistic locking two
    callers updating different matchups of the same bracket race and the last save wins.
    """

    def __init__(self, store: DocumentStore, optimistic_locking: Optional[bool] = None):
        self.store = store
        self.optimistic_locking = settings.OPTIMISTIC_LOCKING if optimistic_locking is None else optimistic_locking

    # --- Mapping ---

    def _to_document(self, bracket: BracketModel) -> Dict[str, Any]:
        return bracket.model_dump(mode="json", by_alias=True, exclude={"id"})

    def _from_document(self, doc_id: str, doc: Dict[str, Any]) -> BracketModel:
        data = dict(doc)
        data["id"] = doc_id

        # Legacy and partially written documents
        data["name"] = data.get("name") or f"Tournament {doc_id}"
        data["totalTeams"] = data.get("totalTeams") or 0
        data["currentRound"] = data.get("currentRound") or 1
        data["completed"] = bool(data.get("completed") or False)
        data["revision"] = data.get("revision") or 0

        matchups = []
        for position, matchup in enumerate(data.get("matchups") or [], start=1):
            matchup = dict(matchup)
            if not matchup.get("id"):
                matchup["id"] = f"match-{matchup.get('round', 1)}-{position}"
            matchups.append(matchup)
        data["matchups"] = matchups

        return BracketModel.model_validate(data)

    # --- Operations ---

    def save(self, bracket: BracketModel) -> str:
        """Adds the bracket on first save (id is None) and replaces the stored document afterwards."""
        doc = self._to_document(bracket)

        if bracket.id is None:
            if doc.get("createdAt") is None:
                doc["createdAt"] = self.store.server_timestamp().isoformat()
            if self.optimistic_locking:
                doc["revision"] = bracket.revision + 1
            bracket_id = self.store.add(BRACKETS_COLLECTION, doc)
            logger.info("Created bracket %s (%s, %d matchups)", bracket_id, bracket.name, len(bracket.matchups))
            return bracket_id

        if doc.get("createdAt") is None:
            doc["createdAt"] = self.store.server_timestamp().isoformat()

        if self.optimistic_locking:
            doc["revision"] = bracket.revision + 1
            stored_revision = self.store.set_if_revision(BRACKETS_COLLECTION, bracket.id, doc, bracket.revision)
            if stored_revision != bracket.revision:
                raise ConflictError(bracket.id, bracket.revision, stored_revision)
            logger.info("Saved bracket %s at revision %d", bracket.id, bracket.revision + 1)
            return bracket.id

        self.store.set(BRACKETS_COLLECTION, bracket.id, doc)
        logger.info("Saved bracket %s", bracket.id)
        return bracket.id

    def load(self, bracket_id: str) -> BracketModel:
        doc = self.store.get(BRACKETS_COLLECTION, bracket_id)
        if doc is None:
            raise BracketNotFoundError(bracket_id)
        try:
            return self._from_document(bracket_id, doc)
        except ValidationError as e:
            raise StoreUnavailableError(f"Bracket {bracket_id} is stored in an unreadable form: {e}") from e

    def load_all(self, order_by: str = ORDER_CREATED_DESC) -> List[BracketModel]:
        """Loads every readable bracket; documents without an id or that fail validation are logged and skipped."""
        if order_by not in (ORDER_CREATED_DESC, ORDER_CREATED_ASC):
            raise ValueError(f"Unsupported ordering '{order_by}'.")
        brackets = []
        for doc in self.store.list(BRACKETS_COLLECTION):
            doc_id = doc.get("id")
            if not doc_id:
                logger.warning("Skipping bracket document without an id (%s)", doc.get("name"))
                continue
            try:
                brackets.append(self._from_document(doc_id, doc))
            except ValidationError as e:
                logger.warning("Skipping unreadable bracket %s: %s", doc_id, e)
        brackets.sort(key=_created_sort_key, reverse=(order_by == ORDER_CREATED_DESC))
        return brackets

    def list(self, order_by: str = ORDER_CREATED_DESC) -> BracketListing:
        if order_by not in (ORDER_CREATED_DESC, ORDER_CREATED_ASC):
            raise ValueError(f"Unsupported ordering '{order_by}'.")
        return BracketListing(self, order_by=order_by)

    def delete(self, bracket_id: str) -> None:
        if not self.store.delete(BRACKETS_COLLECTION, bracket_id):
            raise BracketNotFoundError(bracket_id)
        logger.info("Deleted bracket %s", bracket_id)
