"""Helpers for staging test-data files in scratch directories."""

import shutil
import tempfile
from pathlib import Path

TEST_DATA_DIR = Path(__file__).parent / "test-data"


def tmp_dir(parent=None):
    """Creates a fresh scratch directory and returns its path."""
    return Path(tempfile.mkdtemp(prefix="resources", suffix="data", dir=parent))


def copy_test_file(name, dest_dir=None):
    """Copies ``test-data/<name>`` into ``dest_dir`` (a new scratch dir by default).

    Returns:
        Path: The copied file.
    """
    dest_dir = Path(dest_dir) if dest_dir is not None else tmp_dir()
    target = dest_dir / Path(name).name
    with open(TEST_DATA_DIR / name, "rb") as src, open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    return target


def unpack(name, dest_dir=None):
    """Extracts the ``test-data/<name>`` archive into ``dest_dir``.

    The archive copy is removed after extraction.

    Returns:
        Path: The directory holding the extracted files.
    """
    dest_dir = Path(dest_dir) if dest_dir is not None else tmp_dir()
    archive = copy_test_file(name, dest_dir)
    shutil.unpack_archive(str(archive), str(dest_dir))
    archive.unlink()
    return dest_dir
