"""CLI 格式化工具的单元测试"""

from searchpro.cli.utils import FormatterConfig, OutputFormatter, count_leaves


class TestOutputFormatter:
    """格式化器测试类"""

    def setup_method(self):
        self.fmt = OutputFormatter(FormatterConfig(no_color=True))

    def test_prefixes(self):
        assert self.fmt.success("ok") == "+ ok"
        assert self.fmt.error("bad") == "- bad"
        assert self.fmt.warning("hmm") == "! hmm"

    def test_colored_output(self):
        assert "\033[32m" in OutputFormatter().success("ok")

    def test_format_error_template(self):
        assert self.fmt.format_error("setting_not_found", key="a.b") == "- 配置项不存在: a.b"

    def test_format_error_missing_argument(self):
        assert "{path}" in self.fmt.format_error("read_failed")

    def test_format_value(self):
        assert self.fmt.format_value("Search...") == "Search..."
        assert self.fmt.format_value(None) == "null"
        assert self.fmt.format_value(True) == "true"
        assert self.fmt.format_value([1, 2]) == "[\n  1,\n  2\n]"

    def test_format_table(self):
        table = self.fmt.format_table(["section", "present"], [["searchBar", "yes"]])

        lines = table.splitlines()
        assert lines[0] == "section    present"
        assert lines[2] == "searchBar  yes    "

    def test_format_tab_summary(self):
        text = self.fmt.format_tab_summary("General", {
            "tab": "General",
            "sections": {"autoHide": {"mobile": False, "desktop": True}, "mobileBreakpoint": 768},
            "enabledElements": ["includeVideos"],
        })

        assert "autoHide: 2 settings" in text
        assert "mobileBreakpoint: 768" in text
        assert "enabledElements: includeVideos" in text

    def test_empty_tab_summary(self):
        assert "(no settings)" in self.fmt.format_tab_summary("Management", {"sections": {}})

    def test_count_leaves(self):
        assert count_leaves({"a": 1, "b": {"c": [1, 2], "d": None}}) == 3
