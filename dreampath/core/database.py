"""
Database Configuration

Supabase client for REST API access to the remote goals/tasks tables.
The client is created on first use so local-only deployments never need
Supabase credentials.
"""

from typing import Optional

from supabase import create_client, Client

from dreampath.core.config import settings

_supabase: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client instance.

    Raises RuntimeError when SUPABASE_URL / SUPABASE_SERVICE_KEY are not set.
    """
    global _supabase

    if _supabase is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
            raise RuntimeError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required when USE_LOCAL_DATA is off"
            )
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
    return _supabase
