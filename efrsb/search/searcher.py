from efrsb.fetcher.exceptions import FetchError
from efrsb.fetcher.session import FetchSessionManager
from efrsb.logging.logger import Log
from efrsb.search.models import FetchResult, SearchKind, SearchQuery
from efrsb.validation.inn import validate_inn

MIN_QUERY_LENGTH = 3


def validate_query(query: SearchQuery) -> str | None:
    """Return an error message for an unusable query, or None."""
    text = query.text.strip()
    if not text:
        return "Поисковый запрос не может быть пустым"
    if query.kind is SearchKind.INN:
        validation = validate_inn(text)
        if not validation.is_valid:
            return validation.message
    if len(text) < MIN_QUERY_LENGTH:
        return f"Поисковый запрос должен содержать минимум {MIN_QUERY_LENGTH} символа"
    return None


class SearchService:
    """Runs one registry query in its own short-lived session."""

    def __init__(self, session_manager: FetchSessionManager) -> None:
        self._session_manager = session_manager

    async def search(self, query: SearchQuery) -> FetchResult:
        """Validate and run a single query.

        Invalid queries never open a session. Session problems, including a
        busy session, are returned as a failed result.
        """
        message = validate_query(query)
        if message is not None:
            return FetchResult.failed(message)

        normalized = SearchQuery(kind=query.kind, text=query.text.strip(), region=query.region)
        try:
            async with self._session_manager.session() as fetcher:
                return await fetcher.fetch_one(normalized)
        except FetchError as exc:
            Log.error(f"Search for {normalized.text!r} failed: {exc}")
            return FetchResult.failed(str(exc))
