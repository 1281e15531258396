"""Folder ingestion.

Turns a selected directory tree into a normalized list of base64 file
entries, with environment files carved out into a separate collector
before the ignore filter runs.
"""

import base64
import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sheepit.core.exceptions import IngestionError
from sheepit.ingest.detect import DetectionResult, detect_framework
from sheepit.ingest.env import extract_env_vars, is_env_file
from sheepit.models.files import EnvFileEntry, EnvVar, FileEntry
from sheepit.utils.logging import get_logger

logger = get_logger(__name__)

IGNORED_NAMES = frozenset(
    {
        "node_modules",
        ".git",
        ".next",
        ".vercel",
        "dist",
        "build",
        ".wrangler",
        ".hono",
        ".DS_Store",
        "Thumbs.db",
        ".idea",
        ".vscode",
    }
)

# Traversal reports up to this value; the rest is left for the upload.
TRAVERSAL_PROGRESS_CAP = 90.0

ProgressCallback = Callable[[float], None]


def should_ignore(path: str) -> bool:
    """True when any path segment is an ignored name or an env file."""
    return any(part in IGNORED_NAMES or is_env_file(part) for part in path.split("/"))


@dataclass
class IngestionResult:
    """Everything collected from one folder selection."""

    files: list[FileEntry] = field(default_factory=list)
    env_files: list[EnvFileEntry] = field(default_factory=list)
    env_vars: list[EnvVar] = field(default_factory=list)
    root_name: str | None = None
    detection: DetectionResult = field(default_factory=lambda: DetectionResult(None))

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]


def _read_base64(path: Path) -> str:
    try:
        return base64.b64encode(path.read_bytes()).decode("ascii")
    except OSError as e:
        raise IngestionError(str(path), str(e)) from e


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(str(path), str(e)) from e


def traverse_entry(
    entry: Path,
    base_path: str = "",
    env_collector: list[EnvFileEntry] | None = None,
) -> list[FileEntry]:
    """Recursively collect files under one dropped entry."""
    files: list[FileEntry] = []
    path = f"{base_path}/{entry.name}" if base_path else entry.name

    # Env files are collected before the ignore filter would drop them.
    if env_collector is not None and entry.is_file() and is_env_file(entry.name):
        env_collector.append(EnvFileEntry(path=path, content=_read_text(entry)))
        return files

    if should_ignore(entry.name):
        return files

    if entry.is_file():
        files.append(FileEntry(path=path, content=_read_base64(entry)))
    elif entry.is_dir():
        try:
            children = list(entry.iterdir())
        except OSError as e:
            raise IngestionError(str(entry), str(e)) from e
        for child in children:
            files.extend(traverse_entry(child, path, env_collector))

    return files


def normalize_root(files: list[FileEntry]) -> tuple[list[FileEntry], str | None]:
    """Strip a single wrapping folder shared by every path.

    Returns the rewritten entries and the stripped folder name, which
    doubles as the default repository name.
    """
    roots = {f.path.split("/", 1)[0] for f in files}
    if len(roots) != 1 or not any("/" in f.path for f in files):
        return files, None

    root = roots.pop()
    stripped = [
        FileEntry(path=f.path[len(root) + 1 :], content=f.content)
        for f in files
    ]
    return [f for f in stripped if f.path], root


def read_package_json(files: Iterable[FileEntry]) -> dict[str, Any] | None:
    """Decode the root ``package.json`` if present and well-formed."""
    for entry in files:
        if entry.path != "package.json":
            continue
        try:
            data = json.loads(entry.decode())
        except (ValueError, UnicodeDecodeError):
            return None
        return data if isinstance(data, dict) else None
    return None


def _finish(
    files: list[FileEntry],
    env_files: list[EnvFileEntry],
    on_progress: ProgressCallback | None,
) -> IngestionResult:
    normalized, root_name = normalize_root(files)
    result = IngestionResult(
        files=normalized,
        env_files=env_files,
        env_vars=extract_env_vars(env_files),
        root_name=root_name,
        detection=detect_framework(
            [f.path for f in normalized], read_package_json(normalized)
        ),
    )
    if on_progress:
        on_progress(100.0)

    logger.info(
        "ingest.completed",
        file_count=len(result.files),
        env_file_count=len(env_files),
        env_var_count=len(result.env_vars),
        root_name=root_name,
        framework=result.detection.framework,
    )
    return result


def ingest_entries(
    entries: Iterable[Path],
    env_collector: list[EnvFileEntry] | None = None,
    on_progress: ProgressCallback | None = None,
) -> IngestionResult:
    """Ingest dropped entries (files or directories, arbitrarily nested).

    Any read error aborts the whole ingestion with :class:`IngestionError`.
    """
    entries = list(entries)
    env_files = env_collector if env_collector is not None else []
    files: list[FileEntry] = []

    for index, entry in enumerate(entries):
        files.extend(traverse_entry(entry, "", env_files))
        if on_progress:
            on_progress(min(TRAVERSAL_PROGRESS_CAP, (index + 1) / len(entries) * TRAVERSAL_PROGRESS_CAP))

    return _finish(files, env_files, on_progress)


def ingest_listing(
    listing: Iterable[tuple[str, Path]],
    on_progress: ProgressCallback | None = None,
) -> IngestionResult:
    """Ingest a flat folder-picker listing of ``(relative_path, file)`` pairs."""
    listing = list(listing)
    env_files: list[EnvFileEntry] = []
    files: list[FileEntry] = []

    for index, (relative_path, source) in enumerate(listing):
        basename = relative_path.rsplit("/", 1)[-1] or relative_path
        if is_env_file(basename):
            env_files.append(EnvFileEntry(path=relative_path, content=_read_text(source)))
            continue
        if should_ignore(relative_path):
            continue
        files.append(FileEntry(path=relative_path, content=_read_base64(source)))
        if on_progress:
            on_progress(min(TRAVERSAL_PROGRESS_CAP, (index + 1) / len(listing) * TRAVERSAL_PROGRESS_CAP))

    return _finish(files, env_files, on_progress)


def list_folder(root: Path) -> list[tuple[str, Path]]:
    """Build a folder-picker style listing for every file under ``root``.

    Relative paths start with the folder's own name, as a browser's
    directory input reports them.
    """
    return [
        (f"{root.name}/{path.relative_to(root).as_posix()}", path)
        for path in root.rglob("*")
        if path.is_file()
    ]
