import asyncio
from datetime import datetime
from pathlib import Path

import pytest

from app.services.compression_service import CompressionJob, CompressionResult, CompressionService, simulate_size
from app.storage.local import LocalStorage
from app.storage.registry import RegisteredFile


def _entry(path: Path, size: int) -> RegisteredFile:
    return RegisteredFile(
        file_id=path.stem,
        path=path,
        filename=path.name,
        size_bytes=size,
        created_at=datetime.utcnow(),
        mime_type="application/octet-stream",
        extension=path.suffix.lstrip("."),
    )


@pytest.mark.parametrize(
    "extension, expected",
    [("jpg", 600), ("PNG", 600), ("pdf", 700), ("pptx", 700), ("txt", 800), ("", 800)],
)
def test_simulated_size_depends_on_file_type(extension, expected):
    assert simulate_size(1_000, extension, 0, 50) == expected


def test_simulated_size_never_below_target():
    assert simulate_size(1_000, "jpg", 900, 50) == 900


def test_simulated_size_has_one_percent_floor():
    assert simulate_size(1_000, "jpg", -10, 100) == 200
    assert simulate_size(10_000, "bin", -10, 250) == 100


def test_compress_returns_original_bytes(settings, tmp_path):
    service = CompressionService(LocalStorage(settings), settings)
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"x" * 1_000)

    result = asyncio.run(service.compress(CompressionJob(_entry(source, 1_000), 0, 50)))

    assert result.path.read_bytes() == source.read_bytes()
    assert result.path != source
    assert result.outcome.achieved_size == 600
    assert result.outcome.ratio == 40


def test_batch_failure_does_not_affect_other_files(settings, tmp_path):
    service = CompressionService(LocalStorage(settings), settings)
    good = tmp_path / "report.pdf"
    good.write_bytes(b"%PDF" * 250)
    missing = tmp_path / "gone.txt"

    jobs = [
        CompressionJob(_entry(good, 1_000), 0, 50),
        CompressionJob(_entry(missing, 1_000), 0, 50),
    ]
    results = asyncio.run(service.compress_batch(jobs))

    assert isinstance(results[0], CompressionResult)
    assert results[0].outcome.achieved_size == 700
    assert isinstance(results[1], FileNotFoundError)
