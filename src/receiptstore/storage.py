from __future__ import annotations

import json
import logging
import re
import threading
import uuid
from collections.abc import Sequence
from pathlib import Path

from .models import CapturedImage, Folder, Receipt
from .project_paths import ProjectPaths


logger = logging.getLogger(__name__)

_ID = re.compile(r"^[0-9a-fA-F-]{1,64}$")

# Guards read-modify-write of folders.json and receipt folder links.
_LOCK = threading.RLock()


def slug(value: str) -> str:
    out = []
    for ch in value.casefold():
        if ch.isalnum():
            out.append(ch)
        else:
            out.append("_")
    slug_value = "".join(out)
    while "__" in slug_value:
        slug_value = slug_value.replace("__", "_")
    return slug_value.strip("_") or "unknown"


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


def read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


class ReceiptStore:
    def __init__(self, paths: ProjectPaths) -> None:
        self.paths = paths
        self.paths.ensure_dirs()

    # Images

    def save_images(self, images: Sequence[CapturedImage]) -> list[str]:
        names: list[str] = []
        try:
            for image in images:
                original = Path(image.filename or "image.jpg")
                suffix = original.suffix if original.suffix else ".jpg"
                name = f"{uuid.uuid4()}_{slug(original.stem or 'image')}{suffix}"
                names.append(name)
                (self.paths.images_dir / name).write_bytes(image.data)
        except BaseException:
            self.delete_images(names)
            raise
        return names

    def delete_images(self, names: Sequence[str]) -> None:
        for name in names:
            try:
                self.image_path(name).unlink(missing_ok=True)
            except KeyError:
                logger.warning("Skipping image outside the image store: %s", name)

    def image_path(self, name: str) -> Path:
        path = (self.paths.images_dir / name).resolve()
        if path.parent != self.paths.images_dir.resolve():
            raise KeyError(name)
        return path

    # Receipts

    def save_receipt(
        self,
        receipt: Receipt,
        *,
        image_files: Sequence[str] = (),
        raw_text: str | None = None,
        folder_id: str | None = None,
    ) -> Receipt:
        stored = receipt.model_copy(
            update={"image_files": list(image_files), "raw_text": raw_text, "folder_id": folder_id}
        )
        with _LOCK:
            if folder_id is not None:
                self.get_folder(folder_id)
            write_json(self._receipt_path(stored.id), stored.model_dump(mode="json"))
        logger.info("Stored receipt %s (%s)", stored.id, stored.display_name)
        return stored

    def get_receipt(self, receipt_id: str) -> Receipt:
        path = self._receipt_path(receipt_id)
        if not path.exists():
            raise KeyError(receipt_id)
        return Receipt.model_validate(read_json(path))

    def list_receipts(self, *, folder_id: str | None = None) -> list[Receipt]:
        receipts = [Receipt.model_validate(read_json(p)) for p in self.paths.receipts_dir.glob("*.json")]
        if folder_id is not None:
            receipts = [r for r in receipts if r.folder_id == folder_id]
        receipts.sort(key=lambda r: r.created_at, reverse=True)
        return receipts

    def update_receipt(self, receipt: Receipt) -> Receipt:
        with _LOCK:
            self.get_receipt(receipt.id)
            if receipt.folder_id is not None:
                self.get_folder(receipt.folder_id)
            write_json(self._receipt_path(receipt.id), receipt.model_dump(mode="json"))
        return receipt

    def delete_receipt(self, receipt_id: str) -> None:
        receipt = self.get_receipt(receipt_id)
        self.delete_images(receipt.image_files)
        self._receipt_path(receipt_id).unlink()
        logger.info("Deleted receipt %s", receipt_id)

    def move_receipt(self, receipt_id: str, folder_id: str | None) -> Receipt:
        with _LOCK:
            receipt = self.get_receipt(receipt_id)
            return self.update_receipt(receipt.model_copy(update={"folder_id": folder_id}))

    # Folders

    def list_folders(self) -> list[Folder]:
        if not self.paths.folders_path.exists():
            return []
        folders = [Folder.model_validate(f) for f in read_json(self.paths.folders_path) or []]
        folders.sort(key=lambda f: (f.sort_order, f.created_at))
        return folders

    def get_folder(self, folder_id: str) -> Folder:
        for folder in self.list_folders():
            if folder.id == folder_id:
                return folder
        raise KeyError(folder_id)

    def create_folder(self, name: str, *, sort_order: int | None = None) -> Folder:
        with _LOCK:
            folders = self.list_folders()
            if sort_order is None:
                sort_order = max((f.sort_order for f in folders), default=-1) + 1
            folder = Folder(name=name, sort_order=sort_order)
            self._write_folders([*folders, folder])
        return folder

    def rename_folder(self, folder_id: str, name: str) -> Folder:
        with _LOCK:
            folders = self.list_folders()
            for idx, folder in enumerate(folders):
                if folder.id == folder_id:
                    folders[idx] = Folder.model_validate({**folder.model_dump(), "name": name})
                    self._write_folders(folders)
                    return folders[idx]
        raise KeyError(folder_id)

    def delete_folder(self, folder_id: str) -> None:
        with _LOCK:
            folders = self.list_folders()
            remaining = [f for f in folders if f.id != folder_id]
            if len(remaining) == len(folders):
                raise KeyError(folder_id)
            # Receipts stay, detached from the folder.
            for receipt in self.list_receipts(folder_id=folder_id):
                write_json(
                    self._receipt_path(receipt.id),
                    receipt.model_copy(update={"folder_id": None}).model_dump(mode="json"),
                )
            self._write_folders(remaining)

    def _write_folders(self, folders: list[Folder]) -> None:
        write_json(self.paths.folders_path, [f.model_dump(mode="json") for f in folders])

    def _receipt_path(self, receipt_id: str) -> Path:
        if not _ID.match(receipt_id):
            raise KeyError(receipt_id)
        return self.paths.receipts_dir / f"{receipt_id}.json"
