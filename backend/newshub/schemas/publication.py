from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class PublicationBase(BaseModel):
    name: str
    rss_url: str
    website_url: Optional[str] = None
    logo_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True


class PublicationCreate(PublicationBase):
    pass


class Publication(PublicationBase):
    id: int
    last_fetched_at: Optional[datetime] = None
    fetch_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
