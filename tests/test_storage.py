from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import pytest

from receiptstore.models import CapturedImage, Receipt
from receiptstore.project_paths import ProjectPaths
from receiptstore.storage import ReceiptStore, slug


@pytest.fixture()
def store(tmp_path: Path) -> ReceiptStore:
    return ReceiptStore(ProjectPaths.for_data_dir(tmp_path / "data"))


def test_slug() -> None:
    assert slug("IMG 0042 (copy)") == "img_0042_copy"
    assert slug("***") == "unknown"


def test_receipt_round_trip_and_delete_removes_images(store: ReceiptStore) -> None:
    names = store.save_images([CapturedImage(filename="Page 1.PNG", data=b"png")])
    saved = store.save_receipt(Receipt(store_name="Cafe"), image_files=names, raw_text="Cafe\nTotal 3.00")

    assert names[0].endswith("_page_1.PNG")
    assert store.get_receipt(saved.id) == saved
    assert [r.id for r in store.list_receipts()] == [saved.id]

    store.delete_receipt(saved.id)

    assert store.list_receipts() == []
    assert not store.image_path(names[0]).exists()
    with pytest.raises(KeyError):
        store.get_receipt(saved.id)


def test_unknown_or_invalid_ids_raise_key_error(store: ReceiptStore) -> None:
    with pytest.raises(KeyError):
        store.get_receipt("00000000-0000-0000-0000-000000000000")
    with pytest.raises(KeyError):
        store.get_receipt("../folders")
    with pytest.raises(KeyError):
        store.image_path("../folders.json")


def test_folders_are_ordered_and_renamable(store: ReceiptStore) -> None:
    work = store.create_folder("Work")
    home = store.create_folder("Home")
    first = store.create_folder("Taxes", sort_order=-1)

    assert [f.name for f in store.list_folders()] == ["Taxes", "Work", "Home"]
    assert (work.sort_order, home.sort_order, first.sort_order) == (0, 1, -1)

    store.rename_folder(home.id, "House")
    assert store.get_folder(home.id).name == "House"


def test_saving_into_unknown_folder_fails(store: ReceiptStore) -> None:
    with pytest.raises(KeyError):
        store.save_receipt(Receipt(), folder_id="11111111-1111-1111-1111-111111111111")


def test_delete_folder_detaches_receipts(store: ReceiptStore) -> None:
    folder = store.create_folder("Trip")
    inside = store.save_receipt(Receipt(store_name="Hotel"), folder_id=folder.id)
    outside = store.save_receipt(Receipt(store_name="Bakery"))

    assert [r.id for r in store.list_receipts(folder_id=folder.id)] == [inside.id]

    store.delete_folder(folder.id)

    assert store.list_folders() == []
    assert store.get_receipt(inside.id).folder_id is None
    assert store.get_receipt(outside.id).folder_id is None
    assert len(store.list_receipts()) == 2


def test_move_receipt_between_folders(store: ReceiptStore) -> None:
    folder = store.create_folder("Work")
    receipt = store.save_receipt(Receipt(store_name="Office Depot"))

    moved = store.move_receipt(receipt.id, folder.id)
    assert moved.folder_id == folder.id
    assert store.move_receipt(receipt.id, None).folder_id is None


def test_concurrent_folder_creation_keeps_every_folder(store: ReceiptStore) -> None:
    names = [f"Folder {i}" for i in range(20)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(store.create_folder, names))

    assert sorted(f.name for f in store.list_folders()) == sorted(names)
    assert sorted(f.sort_order for f in store.list_folders()) == list(range(20))
    assert [p.name for p in store.paths.data_dir.iterdir() if p.suffix == ".tmp"] == []


def test_partial_image_batch_is_removed_on_failure(store: ReceiptStore) -> None:
    images = [CapturedImage(filename="a.jpg", data=b"a"), CapturedImage(filename="b.jpg", data=b"b")]
    real_write = Path.write_bytes
    calls = []

    def failing_write(self: Path, data: bytes) -> int:
        calls.append(self)
        if len(calls) == 2:
            raise OSError("disk full")
        return real_write(self, data)

    with patch.object(Path, "write_bytes", failing_write):
        with pytest.raises(OSError):
            store.save_images(images)

    assert list(store.paths.images_dir.iterdir()) == []
