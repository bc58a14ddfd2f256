from .search_query import SearchQuery
from .session import SessionRecord

__all__ = ["SearchQuery", "SessionRecord"]
