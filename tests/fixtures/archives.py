"""Reusable SDK archive fixtures.

Archives are built in memory with the same top-level layout as published
aic-sdk releases: headers, libraries, plus the examples and docs trees that
the installer prunes.
"""

import io
import tarfile
import zipfile
from typing import Dict, Optional

import pytest

SDK_FILES = {
    "include/aic.h": "#pragma once\nint aic_model_process(void);\n",
    "lib/libaic.a": "!<arch>\n",
    "examples/basic.c": '#include "aic.h"\nint main(void) { return 0; }\n',
    "docs/README.md": "# aic-sdk\n",
}


def make_tarball(files: Optional[Dict[str, str]] = None) -> bytes:
    """Build a .tar.gz archive from a name -> text mapping."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in (files if files is not None else SDK_FILES).items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def make_zip(files: Optional[Dict[str, str]] = None) -> bytes:
    """Build a .zip archive from a name -> text mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in (files if files is not None else SDK_FILES).items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def sdk_tarball() -> bytes:
    """
    Create an SDK release tarball.

    Contains include/, lib/, examples/ and docs/ at the top level.
    """
    return make_tarball()


@pytest.fixture
def sdk_zip() -> bytes:
    """Create an SDK release zip with the same layout as sdk_tarball."""
    return make_zip()


@pytest.fixture
def sdk_tarball_file(tmp_path, sdk_tarball):
    """Write sdk_tarball to disk and return its path."""
    path = tmp_path / "downloads" / "aic-sdk-x86_64-unknown-linux-gnu-1.0.0.tar.gz"
    path.parent.mkdir()
    path.write_bytes(sdk_tarball)
    return path
