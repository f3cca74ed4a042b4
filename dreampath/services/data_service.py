"""
Goal/task storage backends.

Analytics only needs two reads: every goal and every task of the current
user. Which backend provides them is chosen explicitly from the
USE_LOCAL_DATA setting when the service is built.
"""

from typing import List, Optional, Protocol

from dreampath.core.config import settings
from dreampath.models.goal import Goal
from dreampath.models.task import Task


class DataServiceError(Exception):
    """Goals or tasks could not be read from (or written to) storage."""


class DataService(Protocol):
    def list_goals(self) -> List[Goal]: ...

    def list_tasks(self) -> List[Task]: ...


def get_data_service(
    use_local_data: Optional[bool] = None, user_id: Optional[str] = None
) -> DataService:
    """Build the backend selected by ``use_local_data`` (default: settings)."""
    if use_local_data is None:
        use_local_data = settings.USE_LOCAL_DATA

    if use_local_data:
        from dreampath.services.local_data_service import get_local_data_service

        return get_local_data_service()

    from dreampath.services.supabase_data_service import SupabaseDataService

    return SupabaseDataService(
        user_id=user_id if user_id is not None else settings.DATA_USER_ID
    )
