from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from newshub.core.database import Base
from newshub.models.publication import utcnow


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    publication_id = Column(
        Integer, ForeignKey("publications.id"), nullable=False, index=True
    )

    # Normalized feed data
    title = Column(String, nullable=False)
    content = Column(Text)
    summary = Column(Text)
    url = Column(String, nullable=False, index=True)  # Canonical URL
    guid = Column(String)
    author = Column(String)
    published_date = Column(DateTime(timezone=True), index=True)
    image_url = Column(String)

    # Derived fields
    word_count = Column(Integer, default=0)
    reading_time = Column(Integer, default=0)  # minutes
    tags = Column(JSON, default=list)  # Topic names from the tagger

    # Metadata
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    publication = relationship("Publication", back_populates="articles")
    user_states = relationship(
        "UserArticle", back_populates="article", passive_deletes=True
    )

    # Re-ingesting the same URL for a publication updates the row
    __table_args__ = (
        UniqueConstraint("url", "publication_id", name="uq_articles_url_publication"),
    )
