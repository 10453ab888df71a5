"""Command-line front end: `python -m driveplayer`."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from driveplayer.auth import AuthInfo, OAuthClient, Session, fetch_user_claims, logout
from driveplayer.cache import VideoCache
from driveplayer.config import Settings, configure_logging
from driveplayer.errors import (
    DrivePlayerError,
    InvalidInputError,
    NotFoundError,
    TransientError,
    UnauthorizedError,
)
from driveplayer.presentation import count_nodes, format_file_size, render_tree
from driveplayer.progress import ProgressStore
from driveplayer.store import DirectoryBlobStore, JsonFileKeyValueStore
from driveplayer.sync import FolderTreeSynchronizer
from driveplayer.util.ids import resolve_identifier

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="driveplayer",
        description="Browse Google Drive video folders and keep an offline cache.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Authorize with Google and store the token")
    sub.add_parser("logout", help="Revoke and forget the stored token")

    tree = sub.add_parser("tree", help="Show a folder tree")
    tree.add_argument("folder", help="Drive folder link or id")

    download = sub.add_parser("download", help="Download a video into the cache")
    download.add_argument("file_id")
    download.add_argument("--name", default=None, help="Display name to store")

    cache = sub.add_parser("cache", help="Inspect or modify the offline cache")
    cache_sub = cache.add_subparsers(dest="cache_command", required=True)
    cache_sub.add_parser("list")
    cache_sub.add_parser("size")
    cache_delete = cache_sub.add_parser("delete")
    cache_delete.add_argument("file_id")

    progress = sub.add_parser("progress", help="Inspect or modify watch progress")
    progress_sub = progress.add_subparsers(dest="progress_command", required=True)
    show = progress_sub.add_parser("show")
    show.add_argument("--folder", default=None)
    complete = progress_sub.add_parser("complete")
    complete.add_argument("file_id")
    complete.add_argument("--name", default="")
    complete.add_argument("--folder", default="")
    clear = progress_sub.add_parser("clear")
    clear.add_argument("--folder", default=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        return _dispatch(args, settings)
    except InvalidInputError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except UnauthorizedError as exc:
        print(f"Not authorized: {exc}. Run `driveplayer login`.", file=sys.stderr)
        return 3
    except NotFoundError as exc:
        print(f"Not found: {exc}", file=sys.stderr)
        return 4
    except TransientError as exc:
        print(f"Temporary failure, please try again: {exc}", file=sys.stderr)
        return 5
    except DrivePlayerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def _dispatch(args: argparse.Namespace, settings: Settings) -> int:
    client = OAuthClient(AuthInfo.from_settings(settings))

    if args.command == "login":
        session = _open_session(client.get_credentials(settings.scopes), settings)
        print(f"Logged in as {session.user_id or 'unknown user'}")
        return 0

    if args.command == "logout":
        try:
            creds = client.get_credentials(settings.scopes, interactive=False)
        except UnauthorizedError:
            creds = None
        if creds is not None and creds.token:
            logout(Session.from_credentials(creds))
        client.forget_credentials()
        print("Logged out")
        return 0

    cache = VideoCache(DirectoryBlobStore(settings.cache_dir), settings=settings)

    if args.command == "cache":
        return _cache_command(args, cache)

    session = _open_session(
        client.get_credentials(settings.scopes, interactive=False), settings
    )
    user_id = session.user_id
    if not user_id:
        raise UnauthorizedError("Stored credentials carry no user identity; log in again")
    progress = ProgressStore.load(JsonFileKeyValueStore(settings.progress_dir), user_id)

    if args.command == "tree":
        folder_id = resolve_identifier(args.folder)
        if folder_id is None:
            raise InvalidInputError("Invalid folder id. Use a Google Drive link or a valid id.")
        root = FolderTreeSynchronizer(settings=settings).fetch_tree(folder_id, session)
        for line in render_tree(root, progress=progress, cache=cache):
            print(line)
        counts = count_nodes(root.children or ())
        print(
            f"{counts.folders} folders, {counts.videos} videos, {counts.others} other files; "
            f"{progress.get_completed_count(folder_id)}/{progress.get_total_count(folder_id)} watched"
        )
        return 0

    if args.command == "download":

        def report(percent: float) -> None:
            print(f"\r{percent:5.1f}%", end="", file=sys.stderr, flush=True)

        handle = cache.download(args.file_id, args.name or args.file_id, session, on_progress=report)
        print(file=sys.stderr)
        print(f"Cached {args.file_id} ({format_file_size(handle.size)})")
        cache.release(handle)
        return 0

    if args.command == "progress":
        return _progress_command(args, progress)

    raise InvalidInputError(f"Unknown command: {args.command}")


def _open_session(credentials, settings: Settings) -> Session:
    session = Session.from_credentials(credentials)
    if session.user_id is None:
        # Token files do not keep the ID token; ask userinfo instead.
        claims = fetch_user_claims(credentials, timeout=settings.request_timeout)
        session = Session(
            access_token=session.access_token,
            credential=session.credential,
            claims=claims,
        )
    return session


def _cache_command(args: argparse.Namespace, cache: VideoCache) -> int:
    if args.cache_command == "list":
        for info in sorted(cache.list_info(), key=lambda i: i.downloaded_at):
            print(f"{info.file_id}\t{format_file_size(info.size)}\t{info.file_name}")
        return 0
    if args.cache_command == "size":
        print(format_file_size(cache.total_size()) or "0 B")
        return 0
    cache.delete(args.file_id)
    print(f"Deleted {args.file_id}")
    return 0


def _progress_command(args: argparse.Namespace, progress: ProgressStore) -> int:
    if args.progress_command == "show":
        for record in sorted(progress.data.videos.values(), key=lambda v: v.last_watched):
            if args.folder and record.folder_id != args.folder:
                continue
            print(f"{record.status.value}\t{record.file_id}\t{record.file_name}")
        print(
            f"{progress.get_completed_count(args.folder)}/"
            f"{progress.get_total_count(args.folder)} completed"
        )
        return 0
    if args.progress_command == "complete":
        progress.mark_completed(args.file_id, args.name, args.folder)
        return 0
    if args.folder:
        progress.clear_for_folder(args.folder)
    else:
        progress.clear_all()
    return 0
