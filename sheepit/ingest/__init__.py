"""Client-side folder ingestion: files, env vars and framework detection."""

from sheepit.ingest.detect import DetectionResult, detect_framework, vercel_framework_slug
from sheepit.ingest.env import (
    extract_env_vars,
    is_env_file,
    merge_env_vars,
    parse_env_file,
)
from sheepit.ingest.files import (
    IGNORED_NAMES,
    IngestionResult,
    ingest_entries,
    ingest_listing,
    list_folder,
    normalize_root,
    read_package_json,
    should_ignore,
    traverse_entry,
)

__all__ = [
    "DetectionResult",
    "detect_framework",
    "vercel_framework_slug",
    "is_env_file",
    "parse_env_file",
    "merge_env_vars",
    "extract_env_vars",
    "IGNORED_NAMES",
    "IngestionResult",
    "ingest_entries",
    "ingest_listing",
    "list_folder",
    "normalize_root",
    "read_package_json",
    "should_ignore",
    "traverse_entry",
]
