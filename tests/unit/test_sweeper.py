"""Tests for the retention sweeper."""
import os
import time
from datetime import timedelta

import pytest

from artifact_server.storage.store import ArtifactKind, ArtifactStore
from artifact_server.storage.sweeper import RetentionSweeper


def _age(path, seconds):
    old = time.time() - seconds
    os.utime(path, (old, old))


@pytest.mark.asyncio
async def test_sweep_deletes_only_expired(store):
    await store.write(ArtifactKind.DOCUMENT, "word-file-old.docx", b"old")
    await store.write(ArtifactKind.DOCUMENT, "word-file-new.docx", b"new")
    await store.write(ArtifactKind.SPREADSHEET, "maia-excel-old.xlsx", b"old")
    _age(store.directory(ArtifactKind.DOCUMENT) / "word-file-old.docx", 7200)
    _age(store.directory(ArtifactKind.SPREADSHEET) / "maia-excel-old.xlsx", 7200)

    sweeper = RetentionSweeper(store, retention=timedelta(hours=1))
    deleted = await sweeper.sweep()

    assert deleted[ArtifactKind.DOCUMENT] == 1
    assert deleted[ArtifactKind.SPREADSHEET] == 1
    assert deleted[ArtifactKind.PRESENTATION] == 0
    assert not store.exists(ArtifactKind.DOCUMENT, "word-file-old.docx")
    assert store.exists(ArtifactKind.DOCUMENT, "word-file-new.docx")


@pytest.mark.asyncio
async def test_second_sweep_is_a_no_op(store):
    await store.write(ArtifactKind.PRESENTATION, "your-presentation-1.pptx", b"x")
    _age(store.directory(ArtifactKind.PRESENTATION) / "your-presentation-1.pptx", 7200)

    sweeper = RetentionSweeper(store, retention=timedelta(hours=1))
    first = await sweeper.sweep()
    second = await sweeper.sweep()

    assert sum(first.values()) == 1
    assert sum(second.values()) == 0


@pytest.mark.asyncio
async def test_sweep_tolerates_missing_directory(exports_dir):
    from artifact_server.storage.store import ArtifactStore

    sweeper = RetentionSweeper(ArtifactStore(exports_dir / "never-created"))
    deleted = await sweeper.sweep()
    assert sum(deleted.values()) == 0


@pytest.mark.asyncio
async def test_start_and_shutdown(store):
    sweeper = RetentionSweeper(store, schedule="0 * * * *")
    sweeper.start()
    try:
        assert sweeper.running
    finally:
        sweeper.shutdown()
    assert not sweeper.running


class FlakyStore(ArtifactStore):
    """Store that cannot list one kind and cannot delete one file."""

    def __init__(self, base_dir, unlistable, undeletable):
        super().__init__(base_dir)
        self.unlistable = unlistable
        self.undeletable = undeletable

    def list(self, kind):
        if kind == self.unlistable:
            raise PermissionError(f"permission denied: {kind.value}")
        return super().list(kind)

    async def delete(self, kind, file_name):
        if file_name == self.undeletable:
            raise PermissionError(f"permission denied: {file_name}")
        return await super().delete(kind, file_name)


@pytest.mark.asyncio
async def test_failures_do_not_abort_the_sweep(exports_dir):
    store = FlakyStore(
        exports_dir,
        unlistable=ArtifactKind.PRESENTATION,
        undeletable="word-file-locked.docx",
    )
    store.ensure_all()
    await store.write(ArtifactKind.PRESENTATION, "your-presentation-1.pptx", b"p")
    await store.write(ArtifactKind.DOCUMENT, "word-file-locked.docx", b"locked")
    await store.write(ArtifactKind.DOCUMENT, "word-file-free.docx", b"free")
    await store.write(ArtifactKind.SPREADSHEET, "maia-excel-1.xlsx", b"x")
    for kind, name in [
        (ArtifactKind.PRESENTATION, "your-presentation-1.pptx"),
        (ArtifactKind.DOCUMENT, "word-file-locked.docx"),
        (ArtifactKind.DOCUMENT, "word-file-free.docx"),
        (ArtifactKind.SPREADSHEET, "maia-excel-1.xlsx"),
    ]:
        _age(store.directory(kind) / name, 7200)

    deleted = await RetentionSweeper(store, retention=timedelta(hours=1)).sweep()

    assert deleted[ArtifactKind.PRESENTATION] == 0
    assert deleted[ArtifactKind.DOCUMENT] == 1
    assert deleted[ArtifactKind.SPREADSHEET] == 1
    assert store.exists(ArtifactKind.PRESENTATION, "your-presentation-1.pptx")
    assert store.exists(ArtifactKind.DOCUMENT, "word-file-locked.docx")
    assert not store.exists(ArtifactKind.DOCUMENT, "word-file-free.docx")
    assert not store.exists(ArtifactKind.SPREADSHEET, "maia-excel-1.xlsx")
