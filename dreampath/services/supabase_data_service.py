"""Read-only goal/task access backed by the Supabase ``goals`` and ``tasks`` tables."""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import ValidationError
from supabase import Client

from dreampath.core import database
from dreampath.models.goal import Goal, RecordModel
from dreampath.models.task import Task
from dreampath.services.data_service import DataServiceError
from dreampath.services.logger import logger

RecordT = TypeVar("RecordT", bound=RecordModel)


class SupabaseDataService:
    def __init__(self, client: Optional[Client] = None, user_id: str = ""):
        self._client = client
        self.user_id = user_id

    @property
    def supabase(self) -> Client:
        """Client created on first read, so missing credentials surface as a read failure."""
        if self._client is None:
            self._client = database.get_supabase_client()
        return self._client

    def _select(self, table: str) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table(table).select("*")
            if self.user_id:
                query = query.eq("user_id", self.user_id)
            result = query.execute()
        except Exception as e:
            logger.error(f"Error fetching {table}: {e}")
            raise DataServiceError(f"Could not fetch {table}: {e}") from e
        return result.data or []

    def _parse(self, rows: List[Dict[str, Any]], model: Type[RecordT]) -> List[RecordT]:
        records: List[RecordT] = []
        for row in rows:
            try:
                records.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid {model.__name__.lower()} row {row.get('id')}: {e}")
        return records

    def list_goals(self) -> List[Goal]:
        return self._parse(self._select("goals"), Goal)

    def list_tasks(self) -> List[Task]:
        return self._parse(self._select("tasks"), Task)
