"""Pytest configuration for light wrapper tests."""

import shutil
import stat
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
FAKE_LINKER = Path(__file__).resolve().parent / "fake-light-real.py"

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import light_wrapper  # noqa: E402


@pytest.fixture
def install_dir(tmp_path):
    """A directory holding a copy of the wrapper installed as ``light.py``."""
    shutil.copyfile(light_wrapper.__file__, tmp_path / "light.py")
    return tmp_path


@pytest.fixture
def fake_linker(install_dir):
    """Install the fake linker as ``light-real.exe`` beside the wrapper."""
    target = install_dir / light_wrapper.REAL_EXE_NAME
    body = FAKE_LINKER.read_text()
    target.write_text("#!{}\n{}".format(sys.executable, body))
    target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return target
