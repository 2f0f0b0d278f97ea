"""Supabase client for diagnosis session persistence.

Built lazily, and only when credentials are configured. Every PostgREST
request carries the persistence timeout, so a stalled insert fails inside
the write instead of landing after the caller has stopped waiting.
"""

from supabase import Client, ClientOptions, create_client

from mesmtf.config import PERSIST_TIMEOUT_SECONDS, SUPABASE_ANON_KEY, SUPABASE_URL

_client: Client | None = None


def client_options(timeout: float = PERSIST_TIMEOUT_SECONDS) -> ClientOptions:
    return ClientOptions(postgrest_client_timeout=timeout)


def get_client() -> Client | None:
    global _client
    if _client is None and SUPABASE_URL and SUPABASE_ANON_KEY:
        _client = create_client(SUPABASE_URL, SUPABASE_ANON_KEY, options=client_options())
    return _client
