from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    Boolean,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from newshub.core.database import Base


class UserArticle(Base):
    """Per-user read/save state for an article."""

    __tablename__ = "user_articles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    article_id = Column(
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_read = Column(Boolean, default=False)
    is_saved = Column(Boolean, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    saved_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="article_states")
    article = relationship("Article", back_populates="user_states")

    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="uq_user_articles_user_article"),
    )
