"""
Events module - logowanie przebiegu wyszukiwania do formatu JSON.

Zawiera:
- SearchEvent: Dataclass reprezentująca zdarzenie
- SearchEventType: Enum typów zdarzeń
- SearchLogger: Klasa logująca zdarzenia
"""

from .search_logger import SearchEvent, SearchEventType, SearchLogger

__all__ = ["SearchEvent", "SearchEventType", "SearchLogger"]
