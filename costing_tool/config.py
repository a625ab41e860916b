from __future__ import annotations

from pathlib import Path
from typing import Any, Dict
import io
import json
import os

import yaml

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_LIBRARY_DIR = PACKAGE_DIR / "data"
DEFAULT_LIBRARY_ID = "demo"
LIBRARY_FILE_STEM = "cost-library"


def library_dir() -> Path:
    """Directory holding one sub-directory per library version."""
    env = os.environ.get("COSTING_LIBRARY_DIR")
    return Path(env) if env else DEFAULT_LIBRARY_DIR


def default_library_id() -> str:
    return os.environ.get("COSTING_LIBRARY_ID") or DEFAULT_LIBRARY_ID


def _parse(text: str, suffix: str) -> Dict[str, Any]:
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping at the top level, got {type(data).__name__}")
    return data


def load_document(
    source: str | os.PathLike | io.StringIO,
    *,
    suffix: str = ".yaml",
) -> Dict[str, Any]:
    """
    Load a YAML or JSON mapping from a path or a text stream.
    Paths pick the parser from their suffix; streams use `suffix`.
    """
    if hasattr(source, "read"):
        return _parse(str(source.read()), suffix)
    p = Path(os.fspath(source))
    return _parse(p.read_text(encoding="utf-8"), p.suffix.lower())


def find_library_file(directory: Path) -> Path | None:
    for ext in (".json", ".yaml", ".yml"):
        candidate = directory / f"{LIBRARY_FILE_STEM}{ext}"
        if candidate.is_file():
            return candidate
    return None
