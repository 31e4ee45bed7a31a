import logging

from supabase import Client, ClientOptions, create_client
from shifttree.config.settings import settings

logger = logging.getLogger(__name__)


def _client_options() -> ClientOptions:
    return ClientOptions(
        schema=settings.db_schema,
        postgrest_client_timeout=settings.db_timeout,
    )


class SupabaseClient:
    """Process-wide Supabase clients, created on first use."""

    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            logger.info("Creating Supabase client for %s (schema=%s)", settings.supabase_url, settings.db_schema)
            cls._client = create_client(settings.supabase_url, settings.supabase_key, options=_client_options())
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Used by the seed script."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key, options=_client_options()
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    """FastAPI dependency: the data-access client handed to every service."""
    return SupabaseClient.get_client()


def check_database(supabase: Client) -> bool:
    """Cheap round-trip used by the readiness probe."""
    try:
        supabase.table("user_account").select("id").limit(1).execute()
        return True
    except Exception as e:
        logger.warning("Database readiness check failed: %s", e)
        return False
