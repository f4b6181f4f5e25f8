"""内容净化器的单元测试"""

import pytest

from searchpro.core.exceptions import UnsafeContentError
from searchpro.core.sanitizer import TRUNCATION_MARKER, ContentSanitizer


@pytest.fixture
def sanitizer():
    """创建净化器实例"""
    return ContentSanitizer()


class TestSanitizeText:
    """测试 sanitize_text"""

    def test_escapes_markup(self, sanitizer):
        """测试标签被转义"""
        result = sanitizer.sanitize_text("<b>bold</b>")
        assert result == "&lt;b&gt;bold&lt;/b&gt;"
        assert "<" not in result and ">" not in result

    def test_none_becomes_empty(self, sanitizer):
        """测试 None 视为空字符串"""
        assert sanitizer.sanitize_text(None) == ""

    def test_non_string_is_coerced(self, sanitizer):
        """测试非字符串先转换"""
        assert sanitizer.sanitize_text(42) == "42"

    def test_bare_ampersand_is_escaped(self, sanitizer):
        """测试裸 & 被转义"""
        assert sanitizer.sanitize_text("Tom & Jerry") == "Tom &amp; Jerry"

    @pytest.mark.parametrize("text", [
        "<script>alert(1)</script>",
        "Tom & Jerry",
        "already &amp; escaped &lt;tag&gt;",
        "plain text",
        "&#39;quoted&#x27;",
    ])
    def test_idempotent(self, sanitizer, text):
        """测试重复净化结果不变"""
        once = sanitizer.sanitize_text(text)
        assert sanitizer.sanitize_text(once) == once

    def test_truncates_with_marker(self):
        """测试超长文本被截断并附加标记"""
        sanitizer = ContentSanitizer(max_string_length=10)
        result = sanitizer.sanitize_text("abcdefghijklmnop")

        assert len(result) == 10
        assert result.endswith(TRUNCATION_MARKER)
        assert result.startswith("abcdefghi")

    def test_per_call_limit(self, sanitizer):
        """测试单次调用的长度上限"""
        result = sanitizer.sanitize_text("x" * 200, 100)
        assert len(result) == 100

    def test_zero_limit_is_respected(self, sanitizer):
        """测试显式传入 0 时不回退到默认上限"""
        assert sanitizer.sanitize_text("abcdef", 0) == ""

    def test_truncation_never_splits_entity(self):
        """测试截断不会留下半个实体"""
        sanitizer = ContentSanitizer(max_string_length=8)
        result = sanitizer.sanitize_text("abcd<efgh")

        assert result == "abcd" + TRUNCATION_MARKER
        assert sanitizer.sanitize_text(result) == result

    def test_result_within_limit_after_escaping(self):
        """测试转义后的长度也受限制"""
        sanitizer = ContentSanitizer(max_string_length=20)
        result = sanitizer.sanitize_text("<" * 50)
        assert len(result) <= 20


class TestContentSafety:
    """测试危险内容检测"""

    @pytest.mark.parametrize("text", [
        "<script src=x>",
        "<SCRIPT>",
        "javascript:alert(1)",
        "<img onerror=alert(1)>",
        "x onclick = go()",
        "<iframe src=evil>",
        "<object data=x>",
        "<embed src=x>",
        "<form action=x>",
        "eval(code)",
        "new Function('x')",
    ])
    def test_dangerous_content(self, sanitizer, text):
        """测试危险模式被识别"""
        assert sanitizer.is_content_safe(text) is False

    @pytest.mark.parametrize("text", [
        "Search... Type * for all",
        "fontSize=14",
        "#ff0000",
        "assets/default.jpg",
        "Evaluation results",
    ])
    def test_safe_content(self, sanitizer, text):
        """测试普通文本不会被误判"""
        assert sanitizer.is_content_safe(text) is True

    def test_non_string_is_safe(self, sanitizer):
        """测试非字符串视为安全"""
        assert sanitizer.is_content_safe(12) is True
        assert sanitizer.is_content_safe(None) is True

    def test_check_content_raises(self, sanitizer):
        """测试 check_content 抛出异常并携带字段名"""
        with pytest.raises(UnsafeContentError) as exc_info:
            sanitizer.check_content("javascript:void(0)", field="searchBar.placeholder")
        assert exc_info.value.field == "searchBar.placeholder"


class TestSanitizeTree:
    """测试整树净化"""

    def test_rewrites_string_leaves(self, sanitizer):
        """测试字符串叶子和列表中的字符串被转义"""
        tree = {"a": {"b": "x < y"}, "tags": ["<b>", 1], "n": 5, "flag": True, "none": None}

        assert sanitizer.sanitize_tree_in_place(tree) is True
        assert tree == {"a": {"b": "x &lt; y"}, "tags": ["&lt;b&gt;", 1], "n": 5, "flag": True, "none": None}

    def test_rejects_reserved_key_without_mutation(self, sanitizer):
        """测试含保留键时拒绝且不修改配置树"""
        tree = {"a": "<b>", "nested": {"__proto__": {"polluted": True}}}

        assert sanitizer.sanitize_tree_in_place(tree) is False
        assert tree["a"] == "<b>"

    def test_rejects_dangerous_content(self, sanitizer):
        """测试危险内容导致拒绝"""
        assert sanitizer.sanitize_tree_in_place({"a": {"b": "javascript:alert(1)"}}) is False

    def test_rejects_dangerous_list_item(self, sanitizer):
        """测试列表中的危险内容导致拒绝"""
        assert sanitizer.sanitize_tree_in_place({"values": ["ok", "<script>"]}) is False

    def test_rejects_nested_structure_in_list(self, sanitizer):
        """测试列表中的对象被拒绝"""
        assert sanitizer.sanitize_tree_in_place({"values": [{"a": 1}]}) is False

    def test_depth_limit(self, sanitizer):
        """测试嵌套深度限制"""
        tree = {}
        node = tree
        for _ in range(12):
            node["k"] = {}
            node = node["k"]

        assert sanitizer.sanitize_tree_in_place(tree, max_depth=10) is False
        assert sanitizer.sanitize_tree_in_place(tree, max_depth=20) is True

    def test_non_mapping_is_rejected(self, sanitizer):
        """测试非字典被拒绝"""
        assert sanitizer.sanitize_tree_in_place(["a"]) is False

    def test_sanitize_value(self, sanitizer):
        """测试标量和列表净化"""
        assert sanitizer.sanitize_value("<i>") == "&lt;i&gt;"
        assert sanitizer.sanitize_value(["<i>", 2]) == ["&lt;i&gt;", 2]
        assert sanitizer.sanitize_value(3.5) == 3.5

    @pytest.mark.parametrize("value,expected", [
        (["a", 1, None], True),
        ([], True),
        ("text", True),
        ([{"a": 1}], False),
        (["a", ["b"]], False),
    ])
    def test_is_flat_list(self, sanitizer, value, expected):
        assert sanitizer.is_flat_list(value) is expected
