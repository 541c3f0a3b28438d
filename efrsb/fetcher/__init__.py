from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.factory import FetcherFactory
from efrsb.fetcher.session import FetchSessionManager

__all__ = ["BaseRecordFetcher", "FetchSessionManager", "FetcherFactory"]
