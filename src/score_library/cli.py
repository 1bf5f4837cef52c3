"""
Score Library CLI - Entry point

Manages the local composer library and pushes/pulls composers to and from
the remote catalog.
"""

import argparse
import errno
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.table import Table

from score_library.context import LibraryContext
from score_library.core.config import Config, ensure_directories, load_config
from score_library.core.console import get_console, print_composer_table, sync_progress
from score_library.core.output import log, setup_from_config
from score_library.domain.assets import AssetError, format_size
from score_library.domain.library import (
    ATTACH_KINDS,
    LibraryError,
    attach_file,
    delete_composer,
)
from score_library.domain.sync import SyncError, SyncReport


def _print_report(report: SyncReport) -> None:
    log(f"Done: {report.summary()}")
    for step in report.failures:
        log(
            f"  ✗ {step.kind.value} {step.entity_id}: {step.reason}",
            level="warning",
        )


def _existing_file(value: Optional[str]) -> Optional[Path]:
    """Checked path of an optional --image/--file argument."""
    if not value:
        return None
    path = Path(value)
    if not path.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), value)
    return path


def _print_composer_detail(side: str, composer) -> None:
    console = get_console()
    console.print(f"[bold]{composer.name}[/bold] ({composer.period or 'unknown period'})")
    console.print(f"ID: {composer.id}")
    if composer.image:
        console.print(f"Image: {composer.image}")

    works = Table(title=f"{side} works")
    works.add_column("ID", style="dim", no_wrap=True)
    works.add_column("Title", style="bold")
    works.add_column("Edition")
    works.add_column("Year")
    works.add_column("File")
    for work in composer.works:
        works.add_row(work.id, work.title, work.edition, work.year, work.file_url)
    console.print(works)

    recordings = Table(title=f"{side} recordings")
    recordings.add_column("ID", style="dim", no_wrap=True)
    recordings.add_column("Title", style="bold")
    recordings.add_column("Performer")
    recordings.add_column("Duration")
    recordings.add_column("Year")
    recordings.add_column("File")
    for recording in composer.recordings:
        recordings.add_row(
            recording.id,
            recording.title,
            recording.performer,
            recording.duration,
            recording.year,
            recording.file_url,
        )
    console.print(recordings)


# =============================================
# Local library commands
# =============================================


def cmd_init(ctx: LibraryContext, args: argparse.Namespace) -> int:
    log(f"Local library ready at {ctx.local_assets.base_dir}")
    if ctx.has_remote:
        log(f"Remote catalog ready at {ctx.config.remote.storage_url}")
    else:
        log("Remote catalog not configured (see [remote] in config.toml)")
    return 0


def cmd_composers(ctx: LibraryContext, args: argparse.Namespace) -> int:
    composers = ctx.local_repo.list_composers()
    if not composers:
        log("No composers yet. Add one with: score-library add-composer <name>")
        return 0
    print_composer_table(composers, "Local composers")
    return 0


def cmd_show(ctx: LibraryContext, args: argparse.Namespace) -> int:
    composer = ctx.local_repo.get_composer_with_children(args.composer_id)
    _print_composer_detail("Local", composer)
    return 0


def cmd_add_composer(ctx: LibraryContext, args: argparse.Namespace) -> int:
    image = _existing_file(args.image)
    composer = ctx.local_repo.create_composer(name=args.name, period=args.period)
    if image:
        attach_file(ctx.local_repo, ctx.local_assets, "composer", composer.id, image)
    log(f"✓ Added composer {composer.name} ({composer.id})")
    return 0


def cmd_add_work(ctx: LibraryContext, args: argparse.Namespace) -> int:
    score = _existing_file(args.file)
    work = ctx.local_repo.create_work(
        composer_id=args.composer_id,
        title=args.title,
        edition=args.edition,
        year=args.year,
    )
    if score:
        attach_file(ctx.local_repo, ctx.local_assets, "work", work.id, score)
    log(f"✓ Added work {work.title} ({work.id})")
    return 0


def cmd_add_recording(ctx: LibraryContext, args: argparse.Namespace) -> int:
    audio = _existing_file(args.file)
    recording = ctx.local_repo.create_recording(
        composer_id=args.composer_id,
        title=args.title,
        performer=args.performer,
        duration=args.duration,
        year=args.year,
    )
    if audio:
        attach_file(ctx.local_repo, ctx.local_assets, "recording", recording.id, audio)
    log(f"✓ Added recording {recording.title} ({recording.id})")
    return 0


def cmd_attach(ctx: LibraryContext, args: argparse.Namespace) -> int:
    reference = attach_file(
        ctx.local_repo, ctx.local_assets, args.kind, args.entity_id, Path(args.file)
    )
    log(f"✓ Attached {args.file} as {reference}")
    return 0


def cmd_delete_composer(ctx: LibraryContext, args: argparse.Namespace) -> int:
    delete_composer(ctx.local_repo, ctx.local_assets, args.composer_id)
    log(f"✓ Deleted composer {args.composer_id}")
    return 0


def cmd_usage(ctx: LibraryContext, args: argparse.Namespace) -> int:
    usage = ctx.local_assets.storage_usage()

    table = Table(title="Local storage")
    table.add_column("Category")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")
    for category, category_usage in usage.categories.items():
        table.add_row(
            category.value, str(category_usage.count), format_size(category_usage.size)
        )
    table.add_row("total", "", format_size(usage.total), style="bold")
    get_console().print(table)
    return 0


# =============================================
# Remote commands
# =============================================


def cmd_remote_list(ctx: LibraryContext, args: argparse.Namespace) -> int:
    composers = ctx.orchestrator().list_remote_composers()
    if not composers:
        log("Remote catalog is empty")
        return 0
    print_composer_table(composers, "Remote composers")
    return 0


def cmd_remote_show(ctx: LibraryContext, args: argparse.Namespace) -> int:
    composer = ctx.orchestrator().get_remote_composer(args.composer_id)
    _print_composer_detail("Remote", composer)
    return 0


def cmd_push(ctx: LibraryContext, args: argparse.Namespace) -> int:
    orchestrator = ctx.orchestrator()
    composer = ctx.local_repo.get_composer_with_children(args.composer_id)

    with sync_progress() as progress:
        task = progress.add_task(f"Pushing {composer.name}", total=100)
        report = orchestrator.push_composer(
            composer, on_progress=lambda percent: progress.update(task, completed=percent)
        )

    _print_report(report)
    return 0 if report.succeeded else 2


def cmd_pull(ctx: LibraryContext, args: argparse.Namespace) -> int:
    orchestrator = ctx.orchestrator()

    with sync_progress() as progress:
        task = progress.add_task(f"Pulling {args.composer_id}", total=100)
        report = orchestrator.pull_composer(
            args.composer_id,
            on_progress=lambda percent: progress.update(task, completed=percent),
        )

    _print_report(report)
    return 0 if report.succeeded else 2


COMMANDS: Dict[str, Callable[[LibraryContext, argparse.Namespace], int]] = {
    "init": cmd_init,
    "composers": cmd_composers,
    "show": cmd_show,
    "add-composer": cmd_add_composer,
    "add-work": cmd_add_work,
    "add-recording": cmd_add_recording,
    "attach": cmd_attach,
    "delete-composer": cmd_delete_composer,
    "usage": cmd_usage,
    "push": cmd_push,
    "pull": cmd_pull,
}

REMOTE_COMMANDS = {
    "list": cmd_remote_list,
    "show": cmd_remote_show,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="score-library",
        description="Composer library with push/pull to a remote catalog",
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    subparsers.add_parser("init", help="Create the local database and directories")
    subparsers.add_parser("composers", help="List local composers")

    show_parser = subparsers.add_parser("show", help="Show a local composer")
    show_parser.add_argument("composer_id")

    composer_parser = subparsers.add_parser("add-composer", help="Add a composer")
    composer_parser.add_argument("name")
    composer_parser.add_argument("--period", default="")
    composer_parser.add_argument("--image", help="Avatar image file to attach")

    work_parser = subparsers.add_parser("add-work", help="Add a work (sheet music)")
    work_parser.add_argument("composer_id")
    work_parser.add_argument("title")
    work_parser.add_argument("--edition", default="")
    work_parser.add_argument("--year", default="")
    work_parser.add_argument("--file", help="Score file to attach")

    recording_parser = subparsers.add_parser("add-recording", help="Add a recording")
    recording_parser.add_argument("composer_id")
    recording_parser.add_argument("title")
    recording_parser.add_argument("--performer", default="")
    recording_parser.add_argument("--duration", default="")
    recording_parser.add_argument("--year", default="")
    recording_parser.add_argument("--file", help="Audio file to attach")

    attach_parser = subparsers.add_parser("attach", help="Attach a file to an entity")
    attach_parser.add_argument("kind", choices=sorted(ATTACH_KINDS))
    attach_parser.add_argument("entity_id")
    attach_parser.add_argument("file")

    delete_parser = subparsers.add_parser(
        "delete-composer", help="Delete a composer with its works, recordings and files"
    )
    delete_parser.add_argument("composer_id")

    subparsers.add_parser("usage", help="Show local storage usage")

    remote_parser = subparsers.add_parser("remote", help="Browse the remote catalog")
    remote_sub = remote_parser.add_subparsers(dest="remote_command", required=True)
    remote_sub.add_parser("list", help="List remote composers")
    remote_show = remote_sub.add_parser("show", help="Show a remote composer")
    remote_show.add_argument("composer_id")

    push_parser = subparsers.add_parser("push", help="Copy a local composer to the remote catalog")
    push_parser.add_argument("composer_id")

    pull_parser = subparsers.add_parser("pull", help="Copy a remote composer into the local library")
    pull_parser.add_argument("composer_id")

    return parser


def run(args: argparse.Namespace, config: Config) -> int:
    """Execute a parsed command against a freshly opened context."""
    if args.subcommand == "remote":
        handler = REMOTE_COMMANDS[args.remote_command]
    else:
        handler = COMMANDS[args.subcommand]

    needs_remote = args.subcommand in ("remote", "push", "pull", "init")
    ctx = LibraryContext.create(config)

    try:
        ctx.open(remote=needs_remote)
        return handler(ctx, args)
    except (LibraryError, AssetError, SyncError) as e:
        log(f"❌ {e}", level="error")
        return 1
    except FileNotFoundError as e:
        log(f"❌ File not found: {e.filename}", level="error")
        return 1
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return 1
    finally:
        ctx.close()


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        sys.exit(0)

    config = load_config()
    ensure_directories(config)
    setup_from_config(config)

    sys.exit(run(args, config))


if __name__ == "__main__":
    main()
