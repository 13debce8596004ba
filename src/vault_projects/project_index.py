"""In-memory index of every project note, task and milestone."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from vault_projects.config import Config
from vault_projects.models import IndexSnapshot, Milestone, ProjectEntry, Task, make_task_key
from vault_projects.mutations import rewrite_task_lines
from vault_projects.obsidian.frontmatter import extract_frontmatter, is_flagged
from vault_projects.obsidian.scanner import scan_document
from vault_projects.obsidian.vault import DocumentStore

logger = logging.getLogger(__name__)


class ProjectIndex:
    """Central index of projects and tasks; views read from here.

    State is rebuilt from scratch on every ``reindex`` and swapped in as
    one ``IndexSnapshot``. Task objects from an older snapshot are never
    updated, so callers re-fetch after a change notification.
    """

    def __init__(self, store: DocumentStore, config: Config | None = None) -> None:
        """Initialize empty index over a document store."""
        self._store = store
        self._config = config or Config()
        self._snapshot = IndexSnapshot()
        self._listeners: list[Callable[[], None]] = []
        self._reindex_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def store(self) -> DocumentStore:
        """Storage the index reads from and writes to."""
        return self._store

    @property
    def write_lock(self) -> asyncio.Lock:
        """Lock held by every note mutation from resolve through reindex."""
        return self._write_lock

    @property
    def config(self) -> Config:
        """Settings the index was built with."""
        return self._config

    @property
    def snapshot(self) -> IndexSnapshot:
        """Current index state."""
        return self._snapshot

    @property
    def projects(self) -> dict[str, ProjectEntry]:
        """Document path -> project entry."""
        return self._snapshot.projects

    @property
    def tasks(self) -> dict[str, Task]:
        """Composite key -> task."""
        return self._snapshot.tasks

    @property
    def milestones(self) -> list[Milestone]:
        """Milestones across all project notes."""
        return self._snapshot.milestones

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe to rebuilds.

        Returns:
            Function that removes the subscription
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"[ProjectIndex] Listener error: {e}", exc_info=True)

    async def reindex(self) -> IndexSnapshot:
        """Rescan every project note and swap in the result.

        Overlapping calls run one after another.
        """
        async with self._reindex_lock:
            snapshot = await self._build_snapshot()
            # Atomic replacement (readers never see a half-built index)
            self._snapshot = snapshot
            logger.info(
                f"[ProjectIndex] Indexed {len(snapshot.projects)} projects, "
                f"{len(snapshot.tasks)} tasks, {len(snapshot.milestones)} milestones"
            )
        self._notify()
        return snapshot

    async def _build_snapshot(self) -> IndexSnapshot:
        projects: dict[str, ProjectEntry] = {}
        tasks: dict[str, Task] = {}
        milestones: list[Milestone] = []
        flag = self._config.project_flag_property

        for path in self._store.list_documents():
            try:
                content = await self._store.read(path)
            except OSError as e:
                logger.warning(f"[ProjectIndex] Failed to read {path}: {e}")
                continue

            if not is_flagged(extract_frontmatter(content), flag):
                continue

            result = scan_document(content, path, due_property=self._config.due_property)
            projects[path] = result.project
            for task in result.project.tasks:
                # Duplicate ids: the last occurrence wins the lookup
                tasks[task.key] = task
            milestones.extend(result.milestones)

        return IndexSnapshot(projects=projects, tasks=tasks, milestones=milestones)

    # ---------- lookups ----------

    def get_project(self, document_path: str) -> ProjectEntry | None:
        """Get project entry by note path."""
        return self.projects.get(document_path)

    def get_project_tasks(self, document_path: str) -> list[Task]:
        """Tasks of one project in scan order, empty for unknown paths."""
        project = self.projects.get(document_path)
        return project.tasks if project else []

    def project_paths(self) -> list[str]:
        """Paths of all indexed project notes."""
        return list(self.projects)

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by composite key or bare id.

        A bare id that occurs in several notes returns whichever match
        comes first; use the composite key to pick a specific note.
        """
        tasks = self.tasks
        if task_id in tasks:
            return tasks[task_id]

        path, sep, bare = task_id.rpartition("::")
        if sep and path:
            return tasks.get(make_task_key(path, bare))

        suffix = f"::{task_id.lower()}"
        for key, task in tasks.items():
            if key.endswith(suffix):
                return task
        return None

    # ---------- mutations ----------

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> None:
        """Persist field changes for one task, then reindex.

        The task is resolved, rewritten and reindexed under one lock, so a
        queued update always sees line numbers from the previous write.
        Unknown ids are ignored. Storage errors propagate and leave the
        index as it was.
        """
        async with self._write_lock:
            task = self.get_task(task_id)
            if task is None:
                logger.debug(f"[ProjectIndex] update_task: unknown task {task_id}")
                return

            content = await self._store.read(task.document_path)
            lines = rewrite_task_lines(content.split("\n"), task, changes)
            await self._store.write(task.document_path, "\n".join(lines))
            logger.info(f"[ProjectIndex] Updated {task.key}: {sorted(changes)}")

            await self.reindex()

    async def move_task_to_status(self, task_id: str, status: str) -> None:
        """Set the configured status property; the checkbox is left alone."""
        await self.update_task(task_id, {self._config.status_property: status})
