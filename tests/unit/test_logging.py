"""
输出门面单元测试
"""

import io

import pytest

from hotswap.utils.logging import LogStage, OutputFacade, OutputLevel


class TestOutputFacade:
    """OutputFacade 测试"""

    def test_level_filter(self):
        """测试低于当前级别的消息不输出"""
        stream = io.StringIO()
        facade = OutputFacade(stream)

        facade.debug("hidden detail")
        facade.info("visible message")

        output = stream.getvalue()
        assert "hidden detail" not in output
        assert "visible message" in output

    def test_stage_tag(self):
        stream = io.StringIO()
        facade = OutputFacade(stream)
        facade.set_level(OutputLevel.DEBUG)

        facade.debug("忽略条目: __MACOSX/x", LogStage.SKIP)

        output = stream.getvalue()
        assert "SKIP" in output
        assert "__MACOSX/x" in output

    def test_brackets_not_markup(self):
        """测试消息中的方括号原样输出"""
        stream = io.StringIO()
        facade = OutputFacade(stream)

        facade.info("path [red]literal[/red]")

        assert "[red]literal[/red]" in stream.getvalue()

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            OutputFacade(io.StringIO()).set_level("TRACE")

    def test_log_file(self, tmp_path):
        """测试日志文件追加写入"""
        log_path = tmp_path / "logs" / "hotswap.log"
        facade = OutputFacade(io.StringIO())
        facade.set_log_file(log_path)

        facade.warning("旧文件无法删除", LogStage.INSTALL)
        facade.close()

        content = log_path.read_text(encoding="utf-8")
        assert "[WARNING] [INSTALL] 旧文件无法删除" in content
