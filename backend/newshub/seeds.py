"""Default publication list used to seed a fresh database."""

import logging
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from newshub.models.publication import Publication
from newshub.schemas.publication import PublicationCreate

logger = logging.getLogger(__name__)

DEFAULT_PUBLICATIONS = [
    # Tech publications
    {
        "name": "TechCrunch",
        "rss_url": "https://techcrunch.com/feed/",
        "website_url": "https://techcrunch.com",
        "description": "Technology news and insights",
        "category": "Technology",
    },
    {
        "name": "Hacker News",
        "rss_url": "https://hnrss.org/frontpage",
        "website_url": "https://news.ycombinator.com",
        "description": "Social news website focusing on computer science and entrepreneurship",
        "category": "Technology",
    },
    {
        "name": "The Verge",
        "rss_url": "https://www.theverge.com/rss/index.xml",
        "website_url": "https://www.theverge.com",
        "description": "Technology, science, art, and culture news",
        "category": "Technology",
    },
    {
        "name": "Ars Technica",
        "rss_url": "https://feeds.arstechnica.com/arstechnica/index",
        "website_url": "https://arstechnica.com",
        "description": "Technology news and analysis",
        "category": "Technology",
    },
    {
        "name": "Wired",
        "rss_url": "https://www.wired.com/feed/rss",
        "website_url": "https://www.wired.com",
        "description": "Science, Technology, Business, Culture",
        "category": "Technology",
    },
    # News publications
    {
        "name": "BBC News",
        "rss_url": "https://feeds.bbci.co.uk/news/rss.xml",
        "website_url": "https://www.bbc.com/news",
        "description": "BBC News provides trusted World and UK news",
        "category": "News",
    },
    {
        "name": "The New York Times",
        "rss_url": "https://rss.nytimes.com/services/xml/rss/nyt/HomePage.xml",
        "website_url": "https://www.nytimes.com",
        "description": "Breaking news, world news & multimedia",
        "category": "News",
    },
    {
        "name": "The Atlantic",
        "rss_url": "https://www.theatlantic.com/feed/all/",
        "website_url": "https://www.theatlantic.com",
        "description": "News, politics, culture, technology, health, and more",
        "category": "News",
    },
    {
        "name": "The New Yorker",
        "rss_url": "https://www.newyorker.com/feed/everything",
        "website_url": "https://www.newyorker.com",
        "description": "News, politics, culture, humor, and cartoons",
        "category": "Culture",
    },
    {
        "name": "New York Magazine",
        "rss_url": "http://feeds.feedburner.com/nymag/intelligencer",
        "website_url": "https://nymag.com/intelligencer",
        "description": "Intelligencer - Politics and news",
        "category": "News",
    },
    {
        "name": "The Cut",
        "rss_url": "http://feeds.feedburner.com/nymag/fashion",
        "website_url": "https://www.thecut.com",
        "description": "Fashion, beauty, and lifestyle news",
        "category": "Culture",
    },
]


def seed_publications(db: Session, publications: Optional[Iterable[dict]] = None) -> int:
    """Insert publications whose feed URL is not stored yet. Returns the number created."""
    created = 0
    for data in publications if publications is not None else DEFAULT_PUBLICATIONS:
        publication = PublicationCreate(**data)
        existing = (
            db.query(Publication)
            .filter(Publication.rss_url == publication.rss_url)
            .first()
        )
        if existing:
            logger.info(f"Publication already exists: {publication.name}")
            continue

        db.add(Publication(**publication.model_dump()))
        created += 1
        logger.info(f"Created publication: {publication.name}")

    db.commit()
    return created
