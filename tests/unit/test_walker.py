"""
归档遍历器单元测试

测试条目分类、忽略规则、遍历顺序、流的生命周期和错误包装。
"""

import zipfile
from unittest.mock import patch

import pytest

from hotswap.archive.walker import (
    DEFAULT_IGNORE_PATHS,
    EntryKind,
    ZipWalker,
    classify_entry,
    should_ignore,
    stream_zip,
)
from hotswap.errors import ArchiveOpenError, EntryApplyError, EntryOpenError, UpdateError


class TestShouldIgnore:
    """忽略规则测试"""

    def test_default_rules(self):
        """测试默认规则内容"""
        assert DEFAULT_IGNORE_PATHS == frozenset({".DS_Store", "__MACOSX"})

    def test_leaf_match(self):
        """测试文件名匹配"""
        assert should_ignore(".DS_Store")
        assert should_ignore("a/.DS_Store")

    def test_match_at_any_depth(self):
        """测试任意层级的目录名匹配"""
        assert should_ignore("__MACOSX/readme.txt")
        assert should_ignore("x/y/__MACOSX/z.txt")
        assert should_ignore("x/y/__MACOSX/")

    def test_partial_segment_not_matched(self):
        """测试片段必须精确相等"""
        assert not should_ignore("__MACOSXtras/readme.txt")
        assert not should_ignore("docs/my.DS_Store")
        assert not should_ignore("bin/tool")

    def test_case_sensitive(self):
        """测试区分大小写"""
        assert not should_ignore(".ds_store")
        assert not should_ignore("__macosx/z.txt")

    def test_custom_rules(self):
        """测试自定义规则集"""
        assert should_ignore("a/Thumbs.db", ["Thumbs.db"])
        assert not should_ignore("a/.DS_Store", ["Thumbs.db"])
        assert not should_ignore("a/.DS_Store", [])


class TestClassifyEntry:
    """条目分类测试"""

    def test_file(self):
        assert classify_entry(zipfile.ZipInfo("bin/tool")) is EntryKind.FILE

    def test_directory(self):
        assert classify_entry(zipfile.ZipInfo("bin/")) is EntryKind.DIRECTORY

    def test_ignored_directory(self):
        """测试被忽略的目录归为忽略而不是目录"""
        assert classify_entry(zipfile.ZipInfo("__MACOSX/")) is EntryKind.IGNORED


class TestZipWalker:
    """ZipWalker 测试"""

    def test_visits_installable_files_in_order(self, make_zip, sample_entries):
        """测试只访问需要安装的文件，并保持归档顺序"""
        archive = make_zip(sample_entries)
        visited = []

        count = ZipWalker(archive).iterate(lambda name, stream: visited.append((name, stream.read())))

        assert visited == [
            ("bin/tool", b"#!/bin/sh\necho new tool\n"),
            ("docs/guide.txt", b"new guide"),
        ]
        assert count == 2

    def test_archive_order_not_sorted(self, make_zip):
        """测试遍历顺序就是存储顺序"""
        archive = make_zip([("z.txt", b"z"), ("a.txt", b"a"), ("m/b.txt", b"b")])
        visited = []

        stream_zip(archive, lambda name, stream: visited.append(name))

        assert visited == ["z.txt", "a.txt", "m/b.txt"]

    def test_nested_ignored_entries(self, make_zip):
        """测试嵌套的忽略条目被跳过"""
        archive = make_zip([
            ("a/.DS_Store", b"x"),
            ("x/y/__MACOSX/z.txt", b"x"),
            ("__MACOSXtras/readme.txt", b"keep"),
        ])
        visited = []

        stream_zip(archive, lambda name, stream: visited.append(name))

        assert visited == ["__MACOSXtras/readme.txt"]

    def test_custom_ignore_set_replaces_default(self, make_zip):
        """测试注入的规则集替换默认规则"""
        archive = make_zip([(".DS_Store", b"x"), ("cache/skip.bin", b"x"), ("keep.txt", b"x")])
        visited = []

        ZipWalker(archive, ignore_paths={"cache"}).iterate(lambda name, stream: visited.append(name))

        assert visited == [".DS_Store", "keep.txt"]

    def test_empty_archive(self, make_zip):
        """测试空归档"""
        archive = make_zip([])
        calls = []

        assert ZipWalker(archive).iterate(lambda name, stream: calls.append(name)) == 0
        assert calls == []

    def test_only_directories_and_ignored(self, make_zip):
        """测试只有目录和忽略条目时访问者不会被调用"""
        archive = make_zip([("bin/", None), ("__MACOSX/", None), ("__MACOSX/._tool", b"x"), (".DS_Store", b"x")])
        calls = []

        assert ZipWalker(archive).iterate(lambda name, stream: calls.append(name)) == 0
        assert calls == []

    def test_stream_closed_after_visit(self, make_zip):
        """测试访问者返回后流被关闭，且同一时刻只有一个流打开"""
        archive = make_zip([("a.txt", b"a"), ("b.txt", b"b"), ("c.txt", b"c")])
        streams = []

        def visitor(name, stream):
            assert all(previous.closed for previous in streams)
            assert not stream.closed
            streams.append(stream)

        ZipWalker(archive).iterate(visitor)

        assert len(streams) == 3
        assert all(s.closed for s in streams)

    def test_visitor_may_leave_stream_unread(self, make_zip):
        """测试访问者不读取流时遍历仍继续"""
        archive = make_zip([("a.txt", b"a" * 100000), ("b.txt", b"b")])
        visited = []

        ZipWalker(archive).iterate(lambda name, stream: visited.append(name))

        assert visited == ["a.txt", "b.txt"]

    def test_visitor_error_stops_iteration(self, make_zip, sample_entries):
        """测试访问者出错后立即停止并包装异常"""
        archive = make_zip(sample_entries)
        visited = []
        streams = []
        failure = OSError("disk full")

        def visitor(name, stream):
            visited.append(name)
            streams.append(stream)
            raise failure

        with pytest.raises(EntryApplyError) as exc_info:
            ZipWalker(archive).iterate(visitor)

        assert visited == ["bin/tool"]
        assert exc_info.value.entry_name == "bin/tool"
        assert exc_info.value.phase == "apply-entry"
        assert exc_info.value.__cause__ is failure
        assert streams[0].closed

    def test_error_on_later_entry(self, make_zip):
        """测试第 N 个条目失败时后续条目不被访问"""
        archive = make_zip([("1.txt", b"1"), ("2.txt", b"2"), ("3.txt", b"3"), ("4.txt", b"4")])
        visited = []

        def visitor(name, stream):
            visited.append(name)
            if name == "2.txt":
                raise ValueError("bad entry")

        with pytest.raises(EntryApplyError):
            ZipWalker(archive).iterate(visitor)

        assert visited == ["1.txt", "2.txt"]

    def test_missing_archive(self, tmp_path):
        """测试归档不存在"""
        with pytest.raises(ArchiveOpenError) as exc_info:
            ZipWalker(tmp_path / "missing.zip").iterate(lambda name, stream: None)

        assert exc_info.value.phase == "open-archive"
        assert isinstance(exc_info.value, UpdateError)

    def test_not_a_zip(self, tmp_path):
        """测试文件不是 zip 格式"""
        bogus = tmp_path / "update.zip"
        bogus.write_text("this is not a zip archive")
        calls = []

        with pytest.raises(ArchiveOpenError) as exc_info:
            ZipWalker(bogus).iterate(lambda name, stream: calls.append(name))

        assert isinstance(exc_info.value.__cause__, zipfile.BadZipFile)
        assert calls == []

    def test_entry_open_failure(self, make_zip):
        """测试条目流无法打开"""
        archive = make_zip([("a.txt", b"a"), ("b.txt", b"b")])
        calls = []

        with patch.object(zipfile.ZipFile, "open", side_effect=zipfile.BadZipFile("bad local header")):
            with pytest.raises(EntryOpenError) as exc_info:
                ZipWalker(archive).iterate(lambda name, stream: calls.append(name))

        assert exc_info.value.entry_name == "a.txt"
        assert exc_info.value.phase == "open-entry"
        assert calls == []

    def test_encrypted_entry(self, make_zip):
        """测试加密条目（无密码时无法打开）"""
        archive = make_zip([("secret.txt", b"x")])
        with zipfile.ZipFile(archive, 'r') as zf:
            info = zf.getinfo("secret.txt")
        info.flag_bits |= 0x1

        with patch.object(zipfile.ZipFile, "infolist", return_value=[info]):
            with pytest.raises(EntryOpenError):
                ZipWalker(archive).iterate(lambda name, stream: None)

    def test_entries_classification(self, make_zip, sample_entries):
        """测试 entries 列出全部条目及分类"""
        archive = make_zip(sample_entries)

        result = [(info.filename, kind) for info, kind in ZipWalker(archive).entries()]

        assert result == [
            ("bin/tool", EntryKind.FILE),
            ("bin/", EntryKind.DIRECTORY),
            (".DS_Store", EntryKind.IGNORED),
            ("docs/guide.txt", EntryKind.FILE),
        ]
