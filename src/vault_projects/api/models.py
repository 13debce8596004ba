"""API models for VaultProjects."""

from typing import Any

from pydantic import BaseModel, Field

from vault_projects.action_items import ActionItemKind
from vault_projects.models import Milestone, ProjectEntry, Task, parse_dependency


class DependencyResponse(BaseModel):
    """Parsed dependency edge."""

    task_id: str
    link_type: str


class TaskResponse(BaseModel):
    """API response model for tasks."""

    id: str
    key: str
    document_path: str
    line: int
    text: str
    kind: str
    status: str
    checked: bool
    properties: dict[str, str]
    depends: list[str]
    dependencies: list[DependencyResponse]

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        """Convert Task to TaskResponse."""
        return cls(
            id=task.id,
            key=task.key,
            document_path=task.document_path,
            line=task.line,
            text=task.text,
            kind=task.kind.value,
            status=task.status.value,
            checked=task.checked,
            properties=dict(task.properties),
            depends=list(task.depends),
            dependencies=[
                DependencyResponse(task_id=dep.task_id, link_type=dep.link_type)
                for dep in map(parse_dependency, task.depends)
            ],
        )


class ProjectResponse(BaseModel):
    """API response model for projects (without tasks)."""

    document_path: str
    title: str
    percent_complete: float
    next_due: str | None
    completed_tasks: int
    total_tasks: int

    @classmethod
    def from_project(cls, project: ProjectEntry) -> "ProjectResponse":
        """Convert ProjectEntry to ProjectResponse."""
        return cls(
            document_path=project.document_path,
            title=project.title,
            percent_complete=project.percent_complete,
            next_due=project.next_due,
            completed_tasks=project.completed_tasks,
            total_tasks=project.total_tasks,
        )


class MilestoneResponse(BaseModel):
    """API response model for milestones."""

    id: str
    title: str
    date: str
    description: str | None
    document_path: str

    @classmethod
    def from_milestone(cls, milestone: Milestone) -> "MilestoneResponse":
        """Convert Milestone to MilestoneResponse."""
        return cls(
            id=milestone.id,
            title=milestone.title,
            date=milestone.date,
            description=milestone.description,
            document_path=milestone.document_path,
        )


class UpdateTaskRequest(BaseModel):
    """Request model for task field changes."""

    changes: dict[str, Any] = Field(default_factory=dict)


class MoveStatusRequest(BaseModel):
    """Request model for moving a task to a status value."""

    status: str


class CreateActionItemRequest(BaseModel):
    """Request model for a new epic, story or sub-task."""

    document_path: str
    kind: ActionItemKind = ActionItemKind.EPIC
    title: str
    assignee: str
    start: str | None = None
    due: str | None = None
    priority: str | None = None
    description: str = ""
    parent_epic: str | None = None
    parent_story: str | None = None
    dependency: str | None = None
    dependency_type: str | None = None
