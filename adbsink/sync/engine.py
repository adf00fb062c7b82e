"""Core sync engine: plans and applies a one-way mirror."""

import logging
import time
from typing import Optional

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from ..backends.base import SyncBackend
from ..exceptions import SinkError
from ..output import OutputFormatter
from ..utils import join_path
from .comparator import FileComparator, SyncAction, SyncDecision, SyncReason
from .differ import diff_trees
from .operations import SyncOperations
from .pair import SyncPair
from .tree import Node, TreeBuilder

logger = logging.getLogger(__name__)

WARNING_REASONS = (SyncReason.KIND_CONFLICT, SyncReason.UNSUPPORTED_NAME)


class SyncEngine:
    """Mirrors a source tree onto a destination tree.

    A run builds a fresh snapshot of both sides, diffs them, derives an
    ordered list of decisions and applies it. Creates and copies come
    first, parents before children; deletions come last, files before
    directories and deepest directories first. Nothing is retried: a
    failed action aborts the run, and re-running is safe.
    """

    def __init__(
        self,
        source: SyncBackend,
        destination: SyncBackend,
        output: Optional[OutputFormatter] = None,
        verbose: bool = False,
    ):
        """Initialize sync engine.

        Args:
            source: Backend holding the source tree
            destination: Backend holding the mirror
            output: Output formatter for displaying progress/status
            verbose: Also report unchanged files
        """
        self.source = source
        self.destination = destination
        self.output = output or OutputFormatter()
        self.verbose = verbose
        self.operations = SyncOperations(source, destination)

    def sync_pair(self, pair: SyncPair, dry_run: bool = False) -> dict:
        """Synchronize one pair.

        Args:
            pair: Roots and policy for this run
            dry_run: If True, only show what would be done

        Returns:
            Dictionary with sync statistics

        Examples:
            >>> engine = SyncEngine(AndroidBackend(client), LocalBackend())
            >>> pair = SyncPair("/sdcard/DCIM", "/home/me/DCIM")
            >>> stats = engine.sync_pair(pair, dry_run=True)
            >>> print(f"Would copy {stats['copies']} files")
        """
        if not self.output.quiet:
            self.output.info(
                f"{self.source.name}:{pair.source} -> "
                f"{self.destination.name}:{pair.destination}"
            )
            if pair.mirror_deletions:
                self.output.info("Deleting files missing from source")
            if pair.ignore:
                self.output.info(f"Ignoring: {', '.join(pair.ignore)}")
            if dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        # Step 1: Snapshot, diff and plan
        if self.output.quiet or self.output.json_output:
            decisions = self.plan(pair)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                transient=True,
                console=self.output.console,
            ) as progress:
                progress.add_task("Scanning source and destination...", total=None)
                decisions = self.plan(pair)

        # Step 2: Display plan
        stats = self._categorize_decisions(decisions)
        self._display_sync_plan(stats, decisions, dry_run)

        # Step 3: Execute actions
        if not dry_run:
            self._execute_decisions(decisions, stats)

        # Step 4: Display summary
        if not self.output.quiet:
            self._display_summary(stats, dry_run)

        return stats

    def plan(self, pair: SyncPair) -> list[SyncDecision]:
        """Derive the ordered decisions for a pair without changing anything.

        Args:
            pair: Roots and policy for this run

        Returns:
            Decisions in execution order

        Raises:
            ValueError: If a root is missing or not a directory
            SinkError: If a backend fails or returns unusable data
        """
        source_entry = self.source.stat(pair.source)
        if source_entry is None:
            raise ValueError(f"Source does not exist: {pair.source}")
        if not source_entry.is_dir:
            raise ValueError(f"Source is not a directory: {pair.source}")

        start = time.time()
        source_builder = TreeBuilder(self.source, pair.is_ignored)
        source_tree = source_builder.build(source_entry, pair.source)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Source tree {pair.source}:\n{source_tree.format_tree()}")

        decisions: list[SyncDecision] = []
        dest_entry = self.destination.stat(pair.destination)

        if dest_entry is None:
            decisions.append(
                SyncDecision(
                    action=SyncAction.CREATE_DIRECTORY,
                    reason=SyncReason.NEW_ON_DEST,
                    relative_path="",
                    dest_path=pair.destination,
                )
            )
            for node in source_tree.sorted_children():
                self._plan_new(node, pair, decisions)
            logger.debug(
                f"Planned {len(decisions)} actions in {time.time() - start:.2f}s "
                f"({source_builder.listings} listings, empty destination)"
            )
            return decisions

        if not dest_entry.is_dir:
            raise ValueError(f"Destination is not a directory: {pair.destination}")

        dest_builder = TreeBuilder(self.destination, pair.is_ignored)
        dest_tree = dest_builder.build(dest_entry, pair.destination)
        diff = diff_trees(source_tree, dest_tree)

        for node in diff.only_in_a:
            self._plan_new(node, pair, decisions)

        comparator = FileComparator(preserve_times=pair.preserve_times)
        for source_file, dest_file in diff.paired_files:
            relative_path = source_file.relative_to(pair.source)
            decisions.append(comparator.compare(relative_path, source_file, dest_file))

        for source_node, dest_node in diff.kind_conflicts:
            self._warn(
                f"Skipping '{source_node.relative_path}': "
                f"{source_node.entry.kind.value} on source but "
                f"{dest_node.entry.kind.value} on destination"
            )
            decisions.append(
                SyncDecision(
                    action=SyncAction.SKIP,
                    reason=SyncReason.KIND_CONFLICT,
                    relative_path=source_node.relative_path,
                    source_path=source_node.entry.path,
                    dest_path=dest_node.entry.path,
                )
            )

        if pair.mirror_deletions:
            file_deletes: list[SyncDecision] = []
            dir_deletes: list[SyncDecision] = []
            for node in diff.only_in_b:
                self._plan_delete(node, pair, file_deletes, dir_deletes)
            decisions.extend(file_deletes)
            decisions.extend(dir_deletes)

        logger.debug(
            f"Planned {len(decisions)} actions in {time.time() - start:.2f}s "
            f"({source_builder.listings + dest_builder.listings} listings)"
        )
        return decisions

    def _plan_new(
        self, node: Node, pair: SyncPair, decisions: list[SyncDecision]
    ) -> None:
        """Plan the creation of a source entry missing on the destination."""
        relative_path = node.relative_path
        dest_path = join_path(pair.destination, relative_path)
        preserve_time = node.entry.modified_at if pair.preserve_times else None

        if not self.destination.supports_name(node.entry.name):
            self._warn(
                f"Skipping '{relative_path}': the destination cannot store "
                "names ending with a dot"
            )
            decisions.append(
                SyncDecision(
                    action=SyncAction.SKIP,
                    reason=SyncReason.UNSUPPORTED_NAME,
                    relative_path=relative_path,
                    source_path=node.entry.path,
                    dest_path=dest_path,
                )
            )
            return

        if not node.is_dir:
            decisions.append(
                SyncDecision(
                    action=SyncAction.COPY_FILE,
                    reason=SyncReason.NEW_ON_DEST,
                    relative_path=relative_path,
                    source_path=node.entry.path,
                    dest_path=dest_path,
                    preserve_time=preserve_time,
                )
            )
            return

        if self._can_copy_whole_directory(node, pair):
            decisions.append(
                SyncDecision(
                    action=SyncAction.COPY_DIRECTORY,
                    reason=SyncReason.NEW_ON_DEST,
                    relative_path=relative_path,
                    source_path=node.entry.path,
                    dest_path=dest_path,
                    preserve_time=preserve_time,
                )
            )
            return

        decisions.append(
            SyncDecision(
                action=SyncAction.CREATE_DIRECTORY,
                reason=SyncReason.NEW_ON_DEST,
                relative_path=relative_path,
                dest_path=dest_path,
            )
        )
        for child in node.sorted_children():
            self._plan_new(child, pair, decisions)

    def _can_copy_whole_directory(self, node: Node, pair: SyncPair) -> bool:
        """Whether a missing directory can be copied in a single call.

        Empty directories are never copied this way (adb push drops them),
        nor are subtrees holding ignored or unstorable entries.
        """
        if not pair.whole_directory_copy or not node.children:
            return False
        if not self.destination.can_copy_directory_from(self.source):
            return False
        if pair.has_ignored_beneath(node.relative_path):
            return False
        for descendant in node.walk():
            if not self.destination.supports_name(descendant.entry.name):
                return False
            if descendant.is_dir and not descendant.children:
                return False
        return True

    def _plan_delete(
        self,
        node: Node,
        pair: SyncPair,
        file_deletes: list[SyncDecision],
        dir_deletes: list[SyncDecision],
    ) -> None:
        """Plan removal of a destination-only entry, children first."""
        for target in node.walk_post_order():
            if not target.is_dir:
                action = SyncAction.DELETE_FILE
                bucket = file_deletes
            elif pair.has_ignored_beneath(target.relative_path):
                logger.debug(
                    f"Keeping {target.relative_path}: may hold ignored entries"
                )
                continue
            else:
                action = SyncAction.DELETE_DIRECTORY
                bucket = dir_deletes
            bucket.append(
                SyncDecision(
                    action=action,
                    reason=SyncReason.REMOVED_FROM_SOURCE,
                    relative_path=target.relative_path,
                    dest_path=target.entry.path,
                )
            )

    def _warn(self, message: str) -> None:
        logger.debug(message)
        self.output.warning(message)

    def _categorize_decisions(self, decisions: list[SyncDecision]) -> dict:
        """Categorize decisions into statistics.

        Args:
            decisions: List of sync decisions

        Returns:
            Dictionary with statistics
        """
        stats = {
            "directories_created": 0,
            "copies": 0,
            "directory_copies": 0,
            "deletes": 0,
            "directory_deletes": 0,
            "skips": 0,
            "warnings": 0,
        }

        for decision in decisions:
            if decision.action == SyncAction.CREATE_DIRECTORY:
                stats["directories_created"] += 1
            elif decision.action == SyncAction.COPY_FILE:
                stats["copies"] += 1
            elif decision.action == SyncAction.COPY_DIRECTORY:
                stats["directory_copies"] += 1
            elif decision.action == SyncAction.DELETE_FILE:
                stats["deletes"] += 1
            elif decision.action == SyncAction.DELETE_DIRECTORY:
                stats["directory_deletes"] += 1
            elif decision.action == SyncAction.SKIP:
                stats["skips"] += 1
                if decision.reason in WARNING_REASONS:
                    stats["warnings"] += 1

        return stats

    def _display_sync_plan(
        self,
        stats: dict,
        decisions: list[SyncDecision],
        dry_run: bool,
    ) -> None:
        """Display sync plan to user.

        Args:
            stats: Statistics dictionary
            decisions: List of sync decisions
            dry_run: Whether this is a dry run
        """
        if self.output.quiet:
            return

        if dry_run or self.verbose:
            for decision in decisions:
                if decision.action.is_mutation:
                    self.output.info(f"  {decision.describe()}")
                elif self.verbose and decision.reason == SyncReason.UNCHANGED:
                    self.output.info(f"  {decision.describe()}")

        self.output.info("Sync plan:")
        if stats["directories_created"] > 0:
            self.output.info(
                f"  + Create directory: {stats['directories_created']} dir(s)"
            )
        if stats["copies"] > 0:
            self.output.info(f"  → Copy: {stats['copies']} file(s)")
        if stats["directory_copies"] > 0:
            self.output.info(
                f"  → Copy whole directory: {stats['directory_copies']} dir(s)"
            )
        if stats["deletes"] > 0:
            self.output.info(f"  ✗ Delete: {stats['deletes']} file(s)")
        if stats["directory_deletes"] > 0:
            self.output.info(
                f"  ✗ Delete directory: {stats['directory_deletes']} dir(s)"
            )
        if stats["skips"] > 0:
            self.output.info(f"  = Skip: {stats['skips']} file(s)")
        if stats["warnings"] > 0:
            self.output.warning(f"  ⚠ Skipped with warnings: {stats['warnings']}")

        self.output.print("")

    def _execute_decisions(self, decisions: list[SyncDecision], stats: dict) -> None:
        """Execute decisions in order, aborting on the first failure.

        Args:
            decisions: Decisions in execution order
            stats: Statistics, adjusted for directories left in place
        """
        actionable = [d for d in decisions if d.action.is_mutation]
        if not actionable:
            return

        if self.output.quiet or self.output.json_output:
            for decision in actionable:
                self._execute_single_decision(decision, stats)
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=self.output.console,
            transient=True,
        ) as progress:
            task = progress.add_task("Syncing...", total=len(actionable))
            for decision in actionable:
                progress.update(task, description=decision.describe())
                self._execute_single_decision(decision, stats)
                progress.update(task, advance=1)

    def _execute_single_decision(self, decision: SyncDecision, stats: dict) -> None:
        """Execute one decision, reporting failures with their context."""
        try:
            action_start = time.time()
            changed = self.operations.execute(decision)
            logger.debug(
                f"{decision.describe()} took {time.time() - action_start:.2f}s"
            )
        except SinkError as e:
            self.output.error(f"Failed to {decision.describe()}: {e}")
            raise

        if changed:
            self.output.info(decision.describe())
        elif decision.action == SyncAction.DELETE_DIRECTORY:
            stats["directory_deletes"] -= 1
            stats["warnings"] += 1
            self.output.warning(
                f"Kept '{decision.relative_path}': directory is not empty"
            )

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        self.output.print("")
        if dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        total_actions = (
            stats["directories_created"]
            + stats["copies"]
            + stats["directory_copies"]
            + stats["deletes"]
            + stats["directory_deletes"]
        )

        if total_actions > 0:
            self.output.info(f"Total actions: {total_actions}")
            if stats["directories_created"] > 0:
                self.output.info(
                    f"  Directories created: {stats['directories_created']}"
                )
            if stats["copies"] > 0:
                self.output.info(f"  Copied: {stats['copies']}")
            if stats["directory_copies"] > 0:
                self.output.info(f"  Directories copied: {stats['directory_copies']}")
            if stats["deletes"] > 0:
                self.output.info(f"  Deleted: {stats['deletes']}")
            if stats["directory_deletes"] > 0:
                self.output.info(f"  Directories deleted: {stats['directory_deletes']}")
        else:
            self.output.info("No changes needed - everything is in sync!")
