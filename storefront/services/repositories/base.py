"""Base repository with shared Supabase client."""

from supabase._async.client import AsyncClient


class BaseRepository:
    """Base class for all repositories.

    Methods await the async client's query builders.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client
