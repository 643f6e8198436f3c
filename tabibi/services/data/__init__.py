"""Data fetching service."""

from tabibi.services.data.fetcher import DataFetcher, FetchedData

__all__ = ["DataFetcher", "FetchedData"]
