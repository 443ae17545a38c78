from .publication import Publication
from .article import Article
from .user import User
from .user_article import UserArticle

__all__ = [
    "Publication",
    "Article",
    "User",
    "UserArticle",
]
