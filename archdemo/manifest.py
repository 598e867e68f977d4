"""Demo project dependency manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import tomli_w

from .constants import DEMO_MANIFEST_NAME, SHARED_LIBRARIES

DEMO_PACKAGE = {
    "name": "arch-demo-app",
    "version": "0.1.0",
    "edition": "2021",
}


def load_toml_bytes(data: bytes) -> Dict[str, Any]:
    try:
        import tomllib  # Python 3.11+
    except ImportError:  # pragma: no cover
        import tomli as tomllib  # type: ignore
    return tomllib.loads(data.decode("utf-8"))


def demo_manifest() -> Dict[str, Any]:
    # Demo lives at <base>/projects/<name>; shared libraries sit at <base>/<lib>.
    return {
        "package": dict(DEMO_PACKAGE),
        "dependencies": {lib: {"path": f"../../{lib}"} for lib in SHARED_LIBRARIES},
    }


def write_demo_manifest(demo_dir: Path) -> Path:
    path = demo_dir / DEMO_MANIFEST_NAME
    path.write_bytes(tomli_w.dumps(demo_manifest()).encode())
    return path


def load_manifest(path: str | Path) -> Dict[str, Any]:
    manifest_path = Path(path)
    if not manifest_path.exists():
        raise FileNotFoundError(f"Manifest not found: {manifest_path}")
    return load_toml_bytes(manifest_path.read_bytes())
