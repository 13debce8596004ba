"""File system watcher for vault notes."""

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


class VaultWatcher:
    """Watches a vault for markdown changes and triggers a callback."""

    def __init__(self, vault_path: Path):
        """Initialize watcher for a vault directory.

        Args:
            vault_path: Root of the vault
        """
        self.vault_path = vault_path.resolve()
        self._observer: BaseObserver | None = None
        self._callback: Callable[[str, str], None] | None = None

    def set_callback(self, callback: Callable[[str, str], None]) -> None:
        """Set callback for file system events.

        Args:
            callback: Function(event_type, relative_path) called on events
        """
        self._callback = callback

    def start(self) -> None:
        """Start watching in watchdog's background thread."""
        handler = _VaultEventHandler(self.vault_path, self._callback)
        self._observer = Observer()
        self._observer.schedule(handler, str(self.vault_path), recursive=True)
        logger.info(f"[VaultWatcher] Watching {self.vault_path}")
        self._observer.start()

    def stop(self) -> None:
        """Stop watching and clean up resources."""
        if self._observer:
            logger.info(f"[VaultWatcher] Stopping watcher for {self.vault_path}")
            self._observer.stop()
            self._observer.join()
            self._observer = None


class _VaultEventHandler(FileSystemEventHandler):
    """Internal handler for vault file system events."""

    def __init__(self, vault_path: Path, callback: Callable[[str, str], None] | None):
        self.vault_path = vault_path
        self.callback = callback

    def _relative_note_path(self, file_path: str) -> str | None:
        """Vault-relative path for visible markdown notes, None otherwise."""
        path = Path(file_path).resolve()
        if path.suffix != ".md":
            return None
        try:
            relative = path.relative_to(self.vault_path)
        except ValueError:
            return None
        if any(part.startswith(".") for part in relative.parts):
            return None
        return relative.as_posix()

    def _handle_event(self, event_type: str, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        # Convert bytes to str if needed
        src_path = event.src_path
        if isinstance(src_path, bytes):
            src_path = src_path.decode("utf-8")

        note_path = self._relative_note_path(src_path)
        if not note_path:
            return

        logger.debug(f"[VaultEventHandler] {event_type}: {note_path}")

        if self.callback:
            try:
                self.callback(event_type, note_path)
            except Exception as e:
                logger.error(f"[VaultEventHandler] Callback error: {e}", exc_info=True)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        self._handle_event("modified", event)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        self._handle_event("created", event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file deletion events."""
        self._handle_event("deleted", event)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename events."""
        self._handle_event("moved", event)
