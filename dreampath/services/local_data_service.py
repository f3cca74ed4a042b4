"""
Local goal/task store.

Goals and tasks live in the key-value store as two JSON arrays of camelCase
records, the same layout the mobile client keeps on device. Records that no
longer match the models are skipped with a warning rather than failing the
whole read.
"""

import json
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import ValidationError

from dreampath.core.cache import KeyValueClient, get_redis_client
from dreampath.models.goal import Goal, GoalStatus, RecordModel
from dreampath.models.task import Task, TaskStatus
from dreampath.services.data_service import DataServiceError
from dreampath.services.logger import logger

GOALS_KEY = "@dreampath_goals"
TASKS_KEY = "@dreampath_tasks"

RecordT = TypeVar("RecordT", bound=RecordModel)


class LocalDataService:
    def __init__(
        self,
        store: Optional[KeyValueClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store if store is not None else get_redis_client()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # Raw access

    def _read(self, key: str, model: Type[RecordT]) -> List[RecordT]:
        try:
            raw = self.store.get(key)
        except Exception as e:
            logger.error(f"Error reading {key}: {e}")
            raise DataServiceError(f"Could not read {key}: {e}") from e

        if not raw:
            return []

        try:
            items = json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt data under {key}: {e}")
            raise DataServiceError(f"Corrupt data under {key}") from e
        if not isinstance(items, list):
            raise DataServiceError(f"Expected a list under {key}")

        records: List[RecordT] = []
        for item in items:
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid {model.__name__.lower()} record "
                    f"{item.get('id') if isinstance(item, dict) else item!r}: {e}"
                )
        return records

    def _write(self, key: str, records: Iterable[RecordModel]) -> None:
        body = json.dumps([record.to_record() for record in records])
        try:
            self.store.set(key, body)
        except Exception as e:
            logger.error(f"Error writing {key}: {e}")
            raise DataServiceError(f"Could not write {key}: {e}") from e

    # Goals

    def list_goals(self) -> List[Goal]:
        return self._read(GOALS_KEY, Goal)

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return next((goal for goal in self.list_goals() if goal.id == goal_id), None)

    def save_goal(self, goal: Goal) -> Goal:
        """Insert the goal, or replace the stored goal with the same id."""
        goals = self.list_goals()
        for index, existing in enumerate(goals):
            if existing.id == goal.id:
                goals[index] = goal
                break
        else:
            goals.append(goal)
        self._write(GOALS_KEY, goals)
        logger.info(f"Goal saved locally: {goal.id}")
        return goal

    def update_goal_status(self, goal_id: str, status: GoalStatus) -> Optional[Goal]:
        goal = self.get_goal(goal_id)
        if goal is None:
            return None
        now = self.clock()
        updated = goal.model_copy(
            update={
                "status": status,
                "updated_at": now,
                "completed_at": now if status == GoalStatus.COMPLETED else None,
            }
        )
        return self.save_goal(updated)

    def delete_goal(self, goal_id: str, cascade: bool = True) -> bool:
        """Remove a goal; with ``cascade`` its tasks are removed too."""
        goals = self.list_goals()
        remaining = [goal for goal in goals if goal.id != goal_id]
        if len(remaining) == len(goals):
            return False
        self._write(GOALS_KEY, remaining)
        if cascade:
            tasks = self.list_tasks()
            self._write(TASKS_KEY, [task for task in tasks if task.goal_id != goal_id])
        logger.info(f"Goal deleted locally: {goal_id}")
        return True

    # Tasks

    def list_tasks(self) -> List[Task]:
        return self._read(TASKS_KEY, Task)

    def list_tasks_for_goal(self, goal_id: str) -> List[Task]:
        return [task for task in self.list_tasks() if task.goal_id == goal_id]

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((task for task in self.list_tasks() if task.id == task_id), None)

    def save_tasks(self, tasks: Iterable[Task]) -> List[Task]:
        """Merge tasks by id: existing ones are replaced, new ones appended."""
        merged: Dict[str, Task] = {task.id: task for task in self.list_tasks()}
        saved = list(tasks)
        for task in saved:
            merged[task.id] = task
        self._write(TASKS_KEY, merged.values())
        logger.info(f"Tasks saved locally: {len(saved)}")
        return saved

    def save_task(self, task: Task) -> Task:
        self.save_tasks([task])
        return task

    def update_task_status(self, task_id: str, status: TaskStatus) -> Optional[Task]:
        """Change a task's status. Completing stamps ``completed_at``; any other
        status clears it so a task is never completed without a timestamp."""
        tasks = self.list_tasks()
        for index, task in enumerate(tasks):
            if task.id != task_id:
                continue
            now = self.clock()
            if status == TaskStatus.COMPLETED:
                completed_at = task.completed_at or now
            else:
                completed_at = None
            tasks[index] = task.model_copy(
                update={"status": status, "completed_at": completed_at, "updated_at": now}
            )
            self._write(TASKS_KEY, tasks)
            logger.info(f"Task status updated: {task_id} {status.value}")
            return tasks[index]
        return None

    def delete_task(self, task_id: str) -> bool:
        tasks = self.list_tasks()
        remaining = [task for task in tasks if task.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self._write(TASKS_KEY, remaining)
        logger.info(f"Task deleted locally: {task_id}")
        return True

    def clear(self) -> None:
        try:
            self.store.delete(GOALS_KEY, TASKS_KEY)
        except Exception as e:
            raise DataServiceError(f"Could not clear local data: {e}") from e


# Singleton instance
_local_data_service: Optional[LocalDataService] = None


def get_local_data_service() -> LocalDataService:
    """Get singleton instance of LocalDataService."""
    global _local_data_service
    if _local_data_service is None:
        _local_data_service = LocalDataService()
    return _local_data_service


def reset_local_data_service() -> None:
    global _local_data_service
    _local_data_service = None
