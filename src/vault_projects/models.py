"""Domain models for the project index."""

from dataclasses import dataclass, field
from enum import Enum

DEPENDENCY_TYPES = ("FF", "FS", "SF", "SS")


class TaskStatus(str, Enum):
    """Checkbox-derived task state."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    DONE = "done"


class TaskKind(str, Enum):
    """Hierarchy level inferred from the id prefix."""

    EPIC = "epic"
    STORY = "story"
    SUBTASK = "subtask"
    UNKNOWN = "unknown"

    @classmethod
    def from_id(cls, task_id: str) -> "TaskKind":
        """Classify a task id: sb-* subtask, s-* story, e-* epic."""
        lowered = task_id.lower()
        if lowered.startswith("sb"):
            return cls.SUBTASK
        if lowered.startswith("s"):
            return cls.STORY
        if lowered.startswith("e"):
            return cls.EPIC
        return cls.UNKNOWN


def make_task_key(document_path: str, task_id: str) -> str:
    """Compose the unique lookup key for a task."""
    return f"{document_path}::{task_id.lower()}"


@dataclass
class Task:
    """One checkbox or table-row action item."""

    id: str  # Lowercased id (block anchor, id cell, or synthetic)
    document_path: str  # Vault-relative path of the owning note
    line: int  # Zero-based line of the primary row
    text: str  # Display text, markup stripped
    properties: dict[str, str]  # Lowercased keys
    checked: bool
    status: TaskStatus
    depends: list[str] = field(default_factory=list)  # Raw "type:id" or "id" strings
    kind: TaskKind = TaskKind.UNKNOWN

    @property
    def key(self) -> str:
        """Composite key used by the index."""
        return make_task_key(self.document_path, self.id)


@dataclass(frozen=True)
class Dependency:
    """A parsed dependency edge."""

    task_id: str
    link_type: str = "FS"


def parse_dependency(raw: str) -> Dependency:
    """Split an optional FF/FS/SF/SS prefix from a dependency string.

    Unknown prefixes are kept as part of the id.
    """
    value = raw.strip()
    head, sep, tail = value.partition(":")
    if sep and head.upper() in DEPENDENCY_TYPES:
        return Dependency(task_id=tail.strip().lower(), link_type=head.upper())
    return Dependency(task_id=value.lower())


@dataclass
class Milestone:
    """One dated row from a Title + Date table."""

    id: str
    title: str
    date: str  # YYYY-MM-DD
    description: str | None
    document_path: str


@dataclass
class ProjectEntry:
    """Aggregated data for one project note."""

    document_path: str
    tasks: list[Task]  # Scan order
    percent_complete: float  # 0..1, 1.0 for an empty project
    next_due: str | None  # Earliest due date among open tasks
    completed_tasks: int = 0
    total_tasks: int = 0

    @property
    def title(self) -> str:
        """Note name without folder or extension."""
        name = self.document_path.rsplit("/", 1)[-1]
        return name[:-3] if name.endswith(".md") else name


@dataclass(frozen=True)
class IndexSnapshot:
    """Fully built index state, swapped in as a unit."""

    projects: dict[str, ProjectEntry] = field(default_factory=dict)
    tasks: dict[str, Task] = field(default_factory=dict)
    milestones: list[Milestone] = field(default_factory=list)
