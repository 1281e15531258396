"""Environment file detection and parsing.

``.env``-style files are kept out of the pushed file list; their
variables are parsed here and handed to the deploy phase instead.
"""

import re
from collections.abc import Iterable

from sheepit.models.files import EnvFileEntry, EnvVar

ENV_FILE_NAMES = frozenset(
    {".env", ".env.local", ".env.production", ".env.development", ".dev.vars"}
)
_ENV_SUFFIX_PATTERN = re.compile(r"^\.env\.\w+$")
_QUOTES = ('"', "'")


def is_env_file(name: str) -> bool:
    """Check whether a file name (or path) names an environment file."""
    basename = name.rsplit("/", 1)[-1] or name
    return basename in ENV_FILE_NAMES or bool(_ENV_SUFFIX_PATTERN.match(basename))


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env_file(content: str) -> list[EnvVar]:
    """Parse ``KEY=value`` lines.

    Blank lines, ``#`` comments, lines without ``=`` and lines with an
    empty key are skipped. Only the first ``=`` splits key from value.
    """
    env_vars: list[EnvVar] = []
    for line in content.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, value = trimmed.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        env_vars.append(EnvVar(key=key, value=_strip_quotes(value.strip())))
    return env_vars


def merge_env_vars(batches: Iterable[list[EnvVar]]) -> list[EnvVar]:
    """Fold parsed batches by key; a later batch overwrites an earlier one."""
    merged: dict[str, EnvVar] = {}
    for batch in batches:
        for env_var in batch:
            merged[env_var.key] = env_var
    return list(merged.values())


def extract_env_vars(env_files: Iterable[EnvFileEntry]) -> list[EnvVar]:
    """Parse env files in collection order and merge them (last file wins).

    Collection order follows directory enumeration, which the filesystem
    does not guarantee, so the winner across files is best-effort.
    """
    return merge_env_vars(parse_env_file(f.content) for f in env_files)
