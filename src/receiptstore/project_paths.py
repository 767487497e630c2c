from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .rules.loader import DEFAULT_RULES_DIR


def _resolve_from_root(root: Path, value: str) -> Path:
    candidate = Path(value)
    if candidate.is_absolute():
        return candidate
    return (root / candidate).resolve()


def find_project_root(start: Path | None = None) -> Path:
    cursor = (start or Path.cwd()).resolve()
    for candidate in [cursor, *cursor.parents]:
        if (candidate / "pyproject.toml").exists():
            return candidate
    return cursor


@dataclass(frozen=True, slots=True)
class ProjectPaths:
    root: Path
    data_dir: Path
    receipts_dir: Path
    folders_path: Path
    images_dir: Path
    rules_dir: Path

    @classmethod
    def detect(cls, start: Path | None = None) -> "ProjectPaths":
        root = find_project_root(start)
        return cls.for_data_dir(
            _resolve_from_root(root, os.getenv("RECEIPTSTORE_DATA_DIR", "data")),
            root=root,
            rules_dir=_resolve_from_root(root, os.getenv("RECEIPTSTORE_RULES_DIR", str(DEFAULT_RULES_DIR))),
        )

    @classmethod
    def for_data_dir(cls, data_dir: Path, *, root: Path | None = None, rules_dir: Path | None = None) -> "ProjectPaths":
        return cls(
            root=root or data_dir.parent,
            data_dir=data_dir,
            receipts_dir=data_dir / "receipts",
            folders_path=data_dir / "folders.json",
            images_dir=data_dir / "images",
            rules_dir=rules_dir or DEFAULT_RULES_DIR,
        )

    def ensure_dirs(self) -> None:
        self.receipts_dir.mkdir(parents=True, exist_ok=True)
        self.images_dir.mkdir(parents=True, exist_ok=True)
