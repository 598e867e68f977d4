"""Bundled project templates and the one-time project setup steps."""

from __future__ import annotations

import shutil
from pathlib import Path

from .constants import (
    DEMO_APP_TEMPLATE,
    DEMO_NAME,
    ENV_EXAMPLE_NAME,
    ENV_FILE_NAME,
    FRONTEND_DIR,
    PROJECTS_DIR,
    SHARED_GUARD_DIR,
    SHARED_LIBRARIES,
)
from .manifest import write_demo_manifest

TEMPLATES_ROOT = Path(__file__).resolve().parent / "templates"


def template_dir(name: str, root: Path | None = None) -> Path:
    base = root if root is not None else TEMPLATES_ROOT
    path = base / name
    if not path.is_dir():
        raise FileNotFoundError(f"Template not packaged: {path}")
    return path


def materialize(source: Path, dest: Path) -> None:
    """Copy a template tree into dest, overwriting files that already exist.

    Not atomic: a failure part-way leaves the files copied so far in place.
    """
    dest.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, dest, dirs_exist_ok=True)


def demo_dir_for(base_dir: Path, name: str = DEMO_NAME) -> Path:
    return base_dir / PROJECTS_DIR / name


def frontend_env_path(demo_dir: Path) -> Path:
    return demo_dir.joinpath(*FRONTEND_DIR) / ENV_FILE_NAME


def ensure_shared_libraries(base_dir: Path, templates_root: Path | None = None) -> bool:
    """Materialize the shared libraries unless <base>/common already exists."""
    if (base_dir / SHARED_GUARD_DIR).exists():
        return False
    # The guard directory is written last so an interrupted copy is retried.
    for lib in sorted(SHARED_LIBRARIES, key=lambda name: name == SHARED_GUARD_DIR):
        materialize(template_dir(lib, templates_root), base_dir / lib)
    return True


def ensure_demo_project(demo_dir: Path, templates_root: Path | None = None) -> bool:
    """Create the demo project unless its directory already exists.

    The project is assembled in a sibling staging directory and renamed into
    place, so demo_dir only ever appears complete.
    """
    if demo_dir.exists():
        return False
    staging = demo_dir.with_name(f".{demo_dir.name}.partial")
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir(parents=True)
    materialize(template_dir(DEMO_APP_TEMPLATE, templates_root), staging / DEMO_APP_TEMPLATE)
    write_demo_manifest(staging)
    env_example = staging.joinpath(*FRONTEND_DIR) / ENV_EXAMPLE_NAME
    if env_example.exists():
        env_example.rename(frontend_env_path(staging))
    staging.rename(demo_dir)
    return True
