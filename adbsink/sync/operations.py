"""Executes planned sync decisions against the backends."""

import logging

from ..backends.base import SyncBackend
from ..exceptions import SinkInvariantError
from .comparator import SyncAction, SyncDecision

logger = logging.getLogger(__name__)


class SyncOperations:
    """Applies one decision at a time to the destination backend."""

    def __init__(self, source: SyncBackend, destination: SyncBackend):
        """Initialize sync operations.

        Args:
            source: Backend the data is read from
            destination: Backend being converged toward the source
        """
        self.source = source
        self.destination = destination

    def execute(self, decision: SyncDecision) -> bool:
        """Execute one decision.

        Args:
            decision: Decision to apply

        Returns:
            True if the backend was changed, False if the action was skipped

        Raises:
            SinkError: If the backend operation fails
        """
        action = decision.action
        dest_path = decision.dest_path

        if action == SyncAction.SKIP:
            return False

        if dest_path is None:
            raise SinkInvariantError(f"No destination path for {decision.describe()}")

        if action == SyncAction.CREATE_DIRECTORY:
            self.destination.create_directory(dest_path)
        elif action == SyncAction.COPY_FILE:
            self.destination.copy_from(
                self.source,
                self._source_path(decision),
                dest_path,
                decision.preserve_time,
            )
        elif action == SyncAction.COPY_DIRECTORY:
            self.destination.copy_directory_from(
                self.source,
                self._source_path(decision),
                dest_path,
                decision.preserve_time,
            )
        elif action == SyncAction.DELETE_FILE:
            self.destination.delete_file(dest_path)
        elif action == SyncAction.DELETE_DIRECTORY:
            return self.delete_directory_if_empty(dest_path)
        return True

    def delete_directory_if_empty(self, path: str) -> bool:
        """Delete a destination directory only if it has no children left.

        The snapshot may be stale, so the directory is listed again first.

        Returns:
            True if the directory was deleted
        """
        remaining = self.destination.list_children(path)
        if remaining:
            logger.warning(
                f"Not deleting {path}: {len(remaining)} entries remain "
                f"(e.g. {remaining[0].name})"
            )
            return False
        self.destination.delete_directory(path)
        return True

    @staticmethod
    def _source_path(decision: SyncDecision) -> str:
        if decision.source_path is None:
            raise SinkInvariantError(f"No source path for {decision.describe()}")
        return decision.source_path
