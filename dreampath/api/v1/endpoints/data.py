"""Local goal/task CRUD. Only available when USE_LOCAL_DATA is on."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from dreampath.core.config import settings
from dreampath.models.goal import Goal, GoalStatus
from dreampath.models.task import Task, TaskStatus
from dreampath.services.data_service import DataServiceError
from dreampath.services.local_data_service import LocalDataService, get_local_data_service

router = APIRouter(redirect_slashes=False)


class GoalStatusUpdate(BaseModel):
    status: GoalStatus


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


def get_local_store() -> LocalDataService:
    if not settings.USE_LOCAL_DATA:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Local data store is disabled (USE_LOCAL_DATA is off)",
        )
    return get_local_data_service()


def _storage_error(e: DataServiceError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


# Goals


@router.get("/goals", response_model=List[Goal])
async def list_goals(store: LocalDataService = Depends(get_local_store)):
    try:
        return store.list_goals()
    except DataServiceError as e:
        raise _storage_error(e)


@router.get("/goals/{goal_id}", response_model=Goal)
async def get_goal(goal_id: str, store: LocalDataService = Depends(get_local_store)):
    try:
        goal = store.get_goal(goal_id)
    except DataServiceError as e:
        raise _storage_error(e)
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal


@router.post("/goals", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def save_goal(goal: Goal, store: LocalDataService = Depends(get_local_store)):
    """Create a goal, or replace the one with the same id"""
    try:
        return store.save_goal(goal)
    except DataServiceError as e:
        raise _storage_error(e)


@router.patch("/goals/{goal_id}/status", response_model=Goal)
async def update_goal_status(
    goal_id: str,
    update: GoalStatusUpdate,
    store: LocalDataService = Depends(get_local_store),
):
    try:
        goal = store.update_goal_status(goal_id, update.status)
    except DataServiceError as e:
        raise _storage_error(e)
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal


@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: str,
    cascade: bool = Query(True, description="Also delete the goal's tasks"),
    store: LocalDataService = Depends(get_local_store),
):
    try:
        deleted = store.delete_goal(goal_id, cascade=cascade)
    except DataServiceError as e:
        raise _storage_error(e)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Tasks


@router.get("/tasks", response_model=List[Task])
async def list_tasks(
    goal_id: Optional[str] = Query(None, alias="goalId"),
    store: LocalDataService = Depends(get_local_store),
):
    try:
        if goal_id:
            return store.list_tasks_for_goal(goal_id)
        return store.list_tasks()
    except DataServiceError as e:
        raise _storage_error(e)


@router.post("/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def save_task(task: Task, store: LocalDataService = Depends(get_local_store)):
    try:
        return store.save_task(task)
    except DataServiceError as e:
        raise _storage_error(e)


@router.post("/tasks/bulk", response_model=List[Task], status_code=status.HTTP_201_CREATED)
async def save_tasks(tasks: List[Task], store: LocalDataService = Depends(get_local_store)):
    """Merge tasks by id into the store"""
    try:
        return store.save_tasks(tasks)
    except DataServiceError as e:
        raise _storage_error(e)


@router.patch("/tasks/{task_id}/status", response_model=Task)
async def update_task_status(
    task_id: str,
    update: TaskStatusUpdate,
    store: LocalDataService = Depends(get_local_store),
):
    try:
        task = store.update_task_status(task_id, update.status)
    except DataServiceError as e:
        raise _storage_error(e)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, store: LocalDataService = Depends(get_local_store)):
    try:
        deleted = store.delete_task(task_id)
    except DataServiceError as e:
        raise _storage_error(e)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
