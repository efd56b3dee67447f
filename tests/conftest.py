"""Pytest configuration and fixtures for bytescope tests."""

import tempfile
import shutil
from pathlib import Path
from typing import Dict, Generator, Union

import pytest

from bytescope.infrastructure.logging import ByteScopeLogger


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Provide a temporary directory for test files.

    Automatically cleaned up after the test completes.
    """
    temp_path = Path(tempfile.mkdtemp(prefix="bytescope_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path)


@pytest.fixture(autouse=True)
def reset_logger():
    """Give every test a fresh, unconfigured logger that propagates to caplog."""
    ByteScopeLogger.reset_instance()
    yield
    ByteScopeLogger.reset_instance()


def build_tree(root: Path, files: Dict[str, Union[bytes, str]]) -> Dict[str, bytes]:
    """
    Create files below root.

    Args:
        root: Base directory
        files: Relative path -> content (str is encoded as UTF-8)

    Returns:
        Relative path -> written bytes
    """
    written = {}
    for relative, content in files.items():
        data = content.encode("utf-8") if isinstance(content, str) else content
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        written[relative] = data
    return written


def expected_counts(*buffers: bytes) -> list:
    """Reference byte counts computed one byte at a time."""
    counts = [0] * 256
    for buffer in buffers:
        for byte_value in buffer:
            counts[byte_value] += 1
    return counts


@pytest.fixture
def sample_tree(temp_dir: Path) -> Dict[str, bytes]:
    """
    Provide a small nested tree with text, binary and empty files.

    Returns:
        Relative path -> content of every file created under temp_dir
    """
    return build_tree(temp_dir, {
        "readme.txt": "hello world\n",
        "src/main.py": 'print("bytes")\n',
        "src/util/helpers.py": "def f(x):\n\treturn x\n",
        "data/blob.bin": bytes(range(256)) * 4,
        "data/empty.dat": b"",
        "data/deep/er/still/leaf.txt": "AAAA",
    })


@pytest.fixture
def many_files_tree(temp_dir: Path) -> Path:
    """Provide a directory holding 100 files that each contain a single 'A'."""
    build_tree(temp_dir, {f"f{i:03d}.txt": b"A" for i in range(100)})
    return temp_dir
