from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class ArticleBase(BaseModel):
    title: str
    content: str = ""
    summary: str = ""
    url: str
    guid: str
    author: Optional[str] = None
    published_date: datetime
    image_url: Optional[str] = None
    word_count: int = 0
    reading_time: int = 0  # minutes
    tags: List[str] = Field(default_factory=list)


class ArticleCreate(ArticleBase):
    """Normalized article produced from one feed item, ready for upsert."""

    publication_id: int

    @property
    def key(self) -> tuple:
        """Identity of the row this record upserts into."""
        return (self.url, self.publication_id)
