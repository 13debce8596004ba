"""Dependency injection factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from vault_projects.config import Config
from vault_projects.obsidian.vault import DocumentStore, VaultDocumentStore
from vault_projects.obsidian.vault_watcher import VaultWatcher
from vault_projects.project_index import ProjectIndex
from vault_projects.websocket.broadcaster import IndexBroadcaster

logger = logging.getLogger(__name__)

# Global instances for dependency injection
_config: Config | None = None
_store: DocumentStore | None = None
_project_index: ProjectIndex | None = None
_broadcaster: IndexBroadcaster | None = None
_watcher: VaultWatcher | None = None


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_document_store() -> DocumentStore:
    """Get or create the vault document store."""
    global _store
    if _store is None:
        _store = VaultDocumentStore(get_config().vault_path)
    return _store


def get_project_index() -> ProjectIndex:
    """Get or create ProjectIndex singleton."""
    global _project_index
    if _project_index is None:
        _project_index = ProjectIndex(get_document_store(), get_config())
    return _project_index


def get_broadcaster() -> IndexBroadcaster:
    """Get or create IndexBroadcaster singleton."""
    global _broadcaster
    if _broadcaster is None:
        _broadcaster = IndexBroadcaster()
    return _broadcaster


def make_reindex_callback(
    index: ProjectIndex, loop: asyncio.AbstractEventLoop
) -> Callable[[str, str], None]:
    """Build a watcher callback that schedules one reindex per burst of events."""
    pending = False
    # Strong references; the loop only keeps weak ones
    background_tasks: set[asyncio.Task[None]] = set()

    async def run() -> None:
        nonlocal pending
        pending = False
        try:
            await index.reindex()
        except Exception as e:
            logger.error(f"[Factory] Reindex after file change failed: {e}", exc_info=True)

    def schedule() -> None:
        nonlocal pending
        if pending:
            return
        pending = True
        task = loop.create_task(run())
        background_tasks.add(task)
        task.add_done_callback(background_tasks.discard)

    def callback(event_type: str, note_path: str) -> None:
        logger.debug(f"[Factory] {event_type} {note_path}, scheduling reindex")
        loop.call_soon_threadsafe(schedule)

    return callback


def start_vault_watcher() -> None:
    """Start the file watcher that keeps the index in sync with the vault."""
    global _watcher
    config = get_config()
    vault_path = Path(config.vault_path)
    if not vault_path.exists():
        logger.warning(f"[Factory] Vault not found, not watching: {vault_path}")
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.error("[Factory] No running event loop found")
        return

    try:
        watcher = VaultWatcher(vault_path)
        watcher.set_callback(make_reindex_callback(get_project_index(), loop))
        watcher.start()
        _watcher = watcher
    except Exception as e:
        logger.error(f"[Factory] Failed to start watcher for {vault_path}: {e}", exc_info=True)


def stop_vault_watcher() -> None:
    """Stop the running file watcher."""
    global _watcher
    if _watcher is None:
        return
    try:
        _watcher.stop()
    except Exception as e:
        logger.error(f"[Factory] Failed to stop watcher: {e}")
    _watcher = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    index = get_project_index()
    unsubscribe = get_broadcaster().attach(index)

    logger.info("[Lifespan] Building project index...")
    await index.reindex()

    if get_config().watch:
        logger.info("[Lifespan] Starting vault watcher...")
        start_vault_watcher()
    try:
        yield
    finally:
        logger.info("[Lifespan] Stopping vault watcher...")
        stop_vault_watcher()
        unsubscribe()


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from vault_projects import __version__
    from vault_projects.api.projects import router as projects_router
    from vault_projects.api.websocket import router as ws_router

    app = FastAPI(
        title="VaultProjects",
        description="Project, task and milestone index for markdown vaults",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(projects_router, prefix="/api")
    app.include_router(ws_router)  # WebSocket at /ws

    return app
