import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from efrsb.config.settings import Settings
from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.factory import FetcherFactory
from efrsb.fetcher.session import FetchSessionManager
from efrsb.search.orchestrator import BatchOrchestrator
from efrsb.search.progress import ProgressChannel, ProgressSnapshot
from efrsb.search.searcher import SearchService
from efrsb.search.throttle import BaseThrottle, FixedDelayThrottle


@dataclass
class AppContext:
    """Process-wide collaborators shared by the HTTP and websocket handlers."""

    settings: Settings
    session_manager: FetchSessionManager
    channel: ProgressChannel
    snapshot: ProgressSnapshot
    orchestrator: BatchOrchestrator
    search_service: SearchService
    cancel_event: asyncio.Event | None = field(default=None)


def build_context(
    settings: Settings,
    fetcher_factory: Callable[[], BaseRecordFetcher] | None = None,
    throttle: BaseThrottle | None = None,
) -> AppContext:
    """Wire the session manager, progress channel and services together."""
    factory = fetcher_factory or (lambda: FetcherFactory.create(settings))
    session_manager = FetchSessionManager(factory)
    channel = ProgressChannel()
    snapshot = ProgressSnapshot()
    snapshot.attach(channel)
    orchestrator = BatchOrchestrator(
        session_manager=session_manager,
        channel=channel,
        throttle=throttle or FixedDelayThrottle(settings.inter_item_delay_seconds),
        default_region=settings.default_region,
    )
    return AppContext(
        settings=settings,
        session_manager=session_manager,
        channel=channel,
        snapshot=snapshot,
        orchestrator=orchestrator,
        search_service=SearchService(session_manager),
    )
