import pytest

from app.utils.file_utils import format_bytes


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1_024, "1 KB"),
        (1_536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
        (1_073_741_824, "1 GB"),
    ],
)
def test_format_bytes(size, expected):
