"""Supabase client construction for database and auth operations."""

from functools import lru_cache
from typing import Any

from supabase import Client, create_client
from supabase.lib.client_options import SyncClientOptions
from supabase_auth import SyncMemoryStorage

from src.core.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get the cached Supabase client for database operations.

    Built once by the application lifespan and handed to the services
    that need it. Uses the secret key when configured, otherwise the
    public anon key. It carries no user identity, so it only serves
    public reads; per-user writes go through create_user_client().

    IMPORTANT: Do NOT use this client for auth operations that call
    set_session() - use create_auth_client() instead to avoid polluting
    the shared client's Authorization header.

    Returns:
        Client: Supabase client instance.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.database_key,
    )


def create_auth_client() -> Client:
    """Create a fresh Supabase client for auth operations.

    Use this for operations that call auth.set_session(), auth.sign_in_*(),
    auth.sign_up() or auth.sign_out(). Each call creates a new isolated
    client instance with in-memory session storage.

    Returns:
        Client: Fresh Supabase client instance with isolated session storage.
    """
    settings = get_settings()
    options = SyncClientOptions(
        storage=SyncMemoryStorage(),
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=options,
    )


def scope_to_user(client: Client, access_token: str) -> Client:
    """Send the user's access token on the client's database calls.

    Row-level security then sees the caller as ``auth.uid()``.

    Args:
        client: Client whose PostgREST requests should carry the token.
        access_token: The user's JWT.

    Returns:
        Client: The same client, now scoped to the user.
    """
    client.postgrest.auth(access_token)
    return client


def create_user_client(access_token: str) -> Client:
    """Create a fresh Supabase client acting as the given user.

    Use this for writes the database authorizes per user (posting a
    ride, requesting a seat, creating or editing a profile).

    Args:
        access_token: The caller's JWT from the Authorization header.

    Returns:
        Client: Isolated client whose database calls carry the token.
    """
    return scope_to_user(create_auth_client(), access_token)


async def check_database_connection(client: Client) -> dict[str, Any]:
    """Check if database connection is healthy.

    Performs a simple query to verify database connectivity.

    Args:
        client: Supabase client to query.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    try:
        client.table("rides").select("id").limit(1).execute()
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}
