"""单元测试共享夹具"""

import zipfile
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pytest

# (条目名, 内容)；内容为 None 表示目录条目，条目名需以 / 结尾
ZipEntry = Tuple[str, Optional[bytes]]


@pytest.fixture
def make_zip(tmp_path):
    """按给定顺序写出 zip 文件"""

    def _make(entries: Iterable[ZipEntry], name: str = "update.zip") -> Path:
        archive_path = tmp_path / name
        with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
            for entry_name, data in entries:
                if data is None:
                    zf.writestr(zipfile.ZipInfo(entry_name), b"")
                else:
                    zf.writestr(entry_name, data)
        return archive_path

    return _make


@pytest.fixture
def sample_entries():
    """典型更新包：一个目录条目、一个平台元数据文件、两个需要安装的文件"""
    return [
        ("bin/tool", b"#!/bin/sh\necho new tool\n"),
        ("bin/", None),
        (".DS_Store", b"\x00\x00\x00\x01Bud1"),
        ("docs/guide.txt", b"new guide"),
    ]
