"""Project and task API endpoints."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from vault_projects.action_items import ActionItemDraft, create_action_item
from vault_projects.api.models import (
    CreateActionItemRequest,
    MilestoneResponse,
    MoveStatusRequest,
    ProjectResponse,
    TaskResponse,
    UpdateTaskRequest,
)
from vault_projects.factory import get_project_index
from vault_projects.models import Task, make_task_key

logger = logging.getLogger(__name__)

router = APIRouter()


def _find_task(task_id: str, path: str | None) -> Task:
    """Resolve a bare id (optionally scoped to a note) or raise 404."""
    index = get_project_index()
    task = index.get_task(make_task_key(path, task_id) if path else task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return task


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects() -> list[ProjectResponse]:
    """List indexed project notes with their rollups."""
    index = get_project_index()
    return [ProjectResponse.from_project(project) for project in index.projects.values()]


@router.get("/projects/tasks", response_model=list[TaskResponse])
async def list_project_tasks(path: str) -> list[TaskResponse]:
    """List tasks of one project in scan order.

    Args:
        path: Vault-relative note path

    Raises:
        HTTPException: If the note is not an indexed project
    """
    index = get_project_index()
    if index.get_project(path) is None:
        raise HTTPException(status_code=404, detail=f"Project not found: {path}")
    return [TaskResponse.from_task(task) for task in index.get_project_tasks(path)]


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, path: str | None = None) -> TaskResponse:
    """Get a task by id, scoped to a note when ``path`` is given."""
    return TaskResponse.from_task(_find_task(task_id, path))


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    request: UpdateTaskRequest,
    path: str | None = None,
) -> TaskResponse:
    """Write field changes into the task's note and return the reindexed task.

    Raises:
        HTTPException: 404 if the task or its note is gone
    """
    task = _find_task(task_id, path)
    index = get_project_index()
    try:
        await index.update_task(task.key, request.changes)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    updated = index.get_task(task.key)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Task not found after update: {task_id}")
    return TaskResponse.from_task(updated)


@router.post("/tasks/{task_id}/status", response_model=TaskResponse)
async def move_task_to_status(
    task_id: str,
    request: MoveStatusRequest,
    path: str | None = None,
) -> TaskResponse:
    """Set the configured status property on a task."""
    task = _find_task(task_id, path)
    index = get_project_index()
    try:
        await index.move_task_to_status(task.key, request.status)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return TaskResponse.from_task(_find_task(task.id, task.document_path))


@router.get("/milestones", response_model=list[MilestoneResponse])
async def list_milestones() -> list[MilestoneResponse]:
    """List milestones from every project note."""
    index = get_project_index()
    return [MilestoneResponse.from_milestone(m) for m in index.milestones]


@router.post("/action-items", response_model=TaskResponse)
async def create_item(request: CreateActionItemRequest) -> TaskResponse:
    """Create an epic, story or sub-task in a project note.

    Raises:
        HTTPException: 400 for invalid fields, 404 for unknown notes
    """
    index = get_project_index()
    try:
        draft = ActionItemDraft(**request.model_dump(exclude={"document_path"}))
        task_id = await create_action_item(index, request.document_path, draft)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return TaskResponse.from_task(_find_task(task_id, request.document_path))


@router.post("/index/reload")
async def reload_index() -> dict[str, int]:
    """Force a full rescan for debugging/recovery.

    Returns:
        {"projects": 3, "tasks": 42, "milestones": 5}
    """
    index = get_project_index()
    snapshot = await index.reindex()
    return {
        "projects": len(snapshot.projects),
        "tasks": len(snapshot.tasks),
        "milestones": len(snapshot.milestones),
    }
