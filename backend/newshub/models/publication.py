from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from newshub.core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Publication(Base):
    __tablename__ = "publications"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    rss_url = Column(String, unique=True, nullable=False, index=True)
    website_url = Column(String)
    logo_url = Column(String)
    description = Column(Text)
    category = Column(String, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Fetch bookkeeping, written after every ingestion attempt
    last_fetched_at = Column(DateTime(timezone=True), nullable=True)
    fetch_error = Column(Text, nullable=True)  # NULL after a successful fetch

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    articles = relationship("Article", back_populates="publication")

    @property
    def has_fetch_error(self) -> bool:
        return self.fetch_error is not None
