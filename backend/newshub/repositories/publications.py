"""Publication store used by the ingestion orchestrator."""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session

from newshub.models.publication import Publication

logger = logging.getLogger(__name__)


class PublicationStore:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[Publication]:
        """Active publications, least recently fetched (never fetched) first."""
        return (
            self.db.query(Publication)
            .filter(Publication.is_active == True)  # noqa: E712
            .order_by(Publication.last_fetched_at.asc().nulls_first(), Publication.id)
            .all()
        )

    def get(self, publication_id: int) -> Optional[Publication]:
        return self.db.get(Publication, publication_id)

    def record_fetch_outcome(
        self, publication_id: int, error: Optional[str] = None
    ) -> Optional[Publication]:
        """Stamp the fetch time and store (or clear) the fetch error."""
        publication = self.get(publication_id)
        if publication is None:
            logger.warning(f"Cannot record fetch outcome, publication {publication_id} not found")
            return None

        publication.last_fetched_at = datetime.now(timezone.utc)
        publication.fetch_error = error
        self.db.commit()
        return publication
