"""Framework detection from uploaded file paths and ``package.json``."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DetectionResult:
    """Detected framework plus advisory build metadata."""

    framework: str | None
    build_command: str | None = None
    output_directory: str | None = None


NO_FRAMEWORK = DetectionResult(framework=None)

# Vercel's framework preset slugs, where they differ from ours.
VERCEL_FRAMEWORK_SLUGS = {
    "nextjs": "nextjs",
    "sveltekit": "sveltekit-1",
    "nuxt": "nuxtjs",
    "vite": "vite",
    "remix": "remix",
    "astro": "astro",
    "create-react-app": "create-react-app",
}


def vercel_framework_slug(framework: str | None) -> str | None:
    """Vercel preset for a detected framework; ``None`` for static or unknown."""
    if framework is None:
        return None
    return VERCEL_FRAMEWORK_SLUGS.get(framework)


def _collect_dependencies(package_json: dict[str, Any] | None) -> dict[str, Any]:
    if not package_json:
        return {}
    deps: dict[str, Any] = {}
    for section in ("dependencies", "devDependencies"):
        value = package_json.get(section)
        if isinstance(value, dict):
            deps.update(value)
    return deps


def detect_framework(
    file_paths: Iterable[str],
    package_json: dict[str, Any] | None = None,
) -> DetectionResult:
    """Classify a project's framework.

    Rules are checked in priority order and the first match wins, so a
    tree with both ``next.config.js`` and ``vite.config.js`` is Next.js.
    """
    paths = list(file_paths)
    deps = _collect_dependencies(package_json)

    def has_file(*names: str) -> bool:
        return any(
            path == name or path.endswith("/" + name) for path in paths for name in names
        )

    if has_file("next.config.js", "next.config.ts", "next.config.mjs") or "next" in deps:
        return DetectionResult("nextjs", "next build", ".next")

    if has_file("vite.config.ts", "vite.config.js", "vite.config.mjs"):
        if "@sveltejs/kit" in deps:
            return DetectionResult("sveltekit", "vite build", ".svelte-kit")
        if "nuxt" in deps or "nuxt3" in deps:
            return DetectionResult("nuxt", "nuxt build", ".output")
        return DetectionResult("vite", "vite build", "dist")

    if has_file("remix.config.js", "remix.config.ts") or "@remix-run/react" in deps:
        return DetectionResult("remix", "remix build", "build")

    if has_file("astro.config.mjs", "astro.config.ts") or "astro" in deps:
        return DetectionResult("astro", "astro build", "dist")

    if "react-scripts" in deps:
        return DetectionResult("create-react-app", "react-scripts build", "build")

    if "index.html" in paths:
        return DetectionResult("static", None, ".")

    return NO_FRAMEWORK
