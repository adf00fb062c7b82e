"""CLI interface for adbsink."""

import logging
from typing import Any, Optional

import click

from .adb import AdbClient
from .backends import AndroidBackend, LocalBackend, SyncBackend
from .config import config
from .exceptions import SinkError
from .output import OutputFormatter
from .sync import SyncEngine, SyncPair

logger = logging.getLogger(__name__)


def connect_device(ctx: Any) -> AndroidBackend:
    """Start the adb server and bind a backend to the single selected device.

    Args:
        ctx: Click context holding the global options

    Returns:
        Device backend

    Raises:
        SinkError: If adb is missing or the device selection is ambiguous
    """
    client = AdbClient(
        adb_path=ctx.obj["adb_path"] or config.adb_path,
        serial=ctx.obj["serial"] or config.serial,
        timeout=config.timeout,
        verbose=ctx.obj["verbose"],
    )
    client.start_server()
    client.serial = client.ensure_device()
    return AndroidBackend(client, compression=config.compression)


def run_sync(
    ctx: Any,
    source: SyncBackend,
    destination: SyncBackend,
    pair: SyncPair,
    dry_run: bool,
) -> None:
    """Run one sync and report the result, exiting 1 on failure."""
    out: OutputFormatter = ctx.obj["out"]
    engine = SyncEngine(source, destination, output=out, verbose=ctx.obj["verbose"])
    try:
        stats = engine.sync_pair(pair, dry_run=dry_run)
    except KeyboardInterrupt:
        out.warning("Sync cancelled by user")
        ctx.exit(130)
    except (SinkError, ValueError) as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(stats)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output sync statistics in JSON format")
@click.option(
    "--serial",
    "-s",
    envvar="ANDROID_SERIAL",
    help="Serial of the device to use (required with several devices)",
)
@click.option("--adb", "adb_path", help="Path to the adb binary")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option()
@click.pass_context
def main(
    ctx: Any,
    quiet: bool,
    json: bool,
    serial: Optional[str],
    adb_path: Optional[str],
    verbose: bool,
) -> None:
    """adbsink - Mirror directories to and from an Android device over adb."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["serial"] = serial
    ctx.obj["adb_path"] = adb_path
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("adbsink").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("source")
@click.argument("dest", required=False, default=".")
@click.option(
    "--delete-if-dne",
    "-d",
    is_flag=True,
    help="Delete local files and directories that no longer exist on the device",
)
@click.option(
    "--ignore-dir",
    "-i",
    multiple=True,
    help="Relative path prefix to ignore (can be used multiple times)",
)
@click.option(
    "--set-times",
    "-t",
    is_flag=True,
    help="Preserve device modification times on pulled files",
)
@click.option(
    "--dry-run", "-n", is_flag=True, help="Show what would be done without doing it"
)
@click.option(
    "--no-dir-copy",
    is_flag=True,
    help="Copy missing directories file by file instead of in one transfer",
)
@click.pass_context
def pull(
    ctx: Any,
    source: str,
    dest: str,
    delete_if_dne: bool,
    ignore_dir: tuple[str, ...],
    set_times: bool,
    dry_run: bool,
    no_dir_copy: bool,
) -> None:
    """Mirror a device directory into a local directory.

    SOURCE is a directory on the device. It is mirrored into DEST/<name of
    SOURCE>; DEST defaults to the current directory.

    Examples:
        adbsink pull /sdcard/DCIM ~/backup           # -> ~/backup/DCIM
        adbsink pull /sdcard/Music . -d -i .thumbnails
        adbsink pull /sdcard/Documents -t --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]
    local = LocalBackend()
    try:
        device = connect_device(ctx)
        pair = SyncPair.for_transfer(
            device.normalize_path(source),
            local.normalize_path(dest),
            mirror_deletions=delete_if_dne,
            preserve_times=set_times,
            ignore=list(ignore_dir),
            whole_directory_copy=not no_dir_copy,
        )
    except (SinkError, ValueError) as e:
        out.error(str(e))
        ctx.exit(1)

    run_sync(ctx, device, local, pair, dry_run)


@main.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False))
@click.argument("dest")
@click.option(
    "--delete-if-dne",
    "-d",
    is_flag=True,
    help="Delete device files and directories that no longer exist locally",
)
@click.option(
    "--ignore-dir",
    "-i",
    multiple=True,
    help="Relative path prefix to ignore (can be used multiple times)",
)
@click.option(
    "--dry-run", "-n", is_flag=True, help="Show what would be done without doing it"
)
@click.option(
    "--no-dir-copy",
    is_flag=True,
    help="Copy missing directories file by file instead of in one transfer",
)
@click.pass_context
def push(
    ctx: Any,
    source: str,
    dest: str,
    delete_if_dne: bool,
    ignore_dir: tuple[str, ...],
    dry_run: bool,
    no_dir_copy: bool,
) -> None:
    """Mirror a local directory onto the device.

    SOURCE is a local directory. It is mirrored into DEST/<name of SOURCE>
    on the device.

    Examples:
        adbsink push ~/Music /sdcard                 # -> /sdcard/Music
        adbsink push ./photos /sdcard/DCIM -d --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]
    local = LocalBackend()
    try:
        device = connect_device(ctx)
        pair = SyncPair.for_transfer(
            local.normalize_path(source),
            device.normalize_path(dest),
            mirror_deletions=delete_if_dne,
            ignore=list(ignore_dir),
            whole_directory_copy=not no_dir_copy,
        )
    except (SinkError, ValueError) as e:
        out.error(str(e))
        ctx.exit(1)

    run_sync(ctx, local, device, pair, dry_run)


if __name__ == "__main__":
    main()
