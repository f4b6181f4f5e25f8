"""配置树访问器的单元测试"""

import pytest

from searchpro.core.path_codec import parse
from searchpro.core.tree_accessor import TreeAccessor


@pytest.fixture
def accessor():
    """创建访问器实例"""
    return TreeAccessor()


@pytest.fixture
def tree():
    """示例配置树"""
    return {
        "searchBar": {"width": 350, "position": {"top": 70, "left": None}},
        "filter": {"allowedValues": ["a", "b"]},
        "debugMode": False,
    }


class TestGet:
    """测试读取"""

    def test_get_nested_value(self, accessor, tree):
        """测试读取嵌套值"""
        assert accessor.get(tree, "searchBar.position.top") == 70
        assert accessor.get(tree, parse("searchBar.width")) == 350

    def test_get_missing_returns_none(self, accessor, tree):
        """测试缺失路径返回 None"""
        assert accessor.get(tree, "searchBar.height") is None
        assert accessor.get(tree, "nothing.here") is None

    def test_get_through_scalar_returns_none(self, accessor, tree):
        """测试中间节点不是字典时返回 None"""
        assert accessor.get(tree, "searchBar.width.value") is None

    def test_get_blocked_segment_returns_none(self, accessor, tree):
        """测试保留键读取被拒绝"""
        assert accessor.get(tree, "searchBar.__proto__") is None
        assert accessor.get(tree, "constructor.prototype") is None

    def test_get_malformed_returns_none(self, accessor, tree):
        """测试格式错误的路径返回 None"""
        assert accessor.get(tree, "searchBar..width") is None
        assert accessor.get(tree, "") is None

    def test_get_from_non_mapping(self, accessor):
        """测试在非字典上读取"""
        assert accessor.get(None, "a") is None

    def test_contains_distinguishes_none(self, accessor, tree):
        """测试值为 None 的路径也算存在"""
        assert accessor.contains(tree, "searchBar.position.left") is True
        assert accessor.contains(tree, "searchBar.position.right") is False


class TestSet:
    """测试写入"""

    def test_set_then_get(self, accessor, tree):
        """测试写入后可以读回"""
        assert accessor.set(tree, "searchBar.position.top", 90) is True
        assert accessor.get(tree, "searchBar.position.top") == 90

    def test_set_creates_intermediate_nodes(self, accessor):
        """测试自动创建中间节点"""
        tree = {}
        assert accessor.set(tree, "a.b.c", "x") is True
        assert tree == {"a": {"b": {"c": "x"}}}

    def test_set_replaces_scalar_intermediate(self, accessor, tree):
        """测试标量中间节点被替换为字典"""
        assert accessor.set(tree, "debugMode.level", 2) is True
        assert tree["debugMode"] == {"level": 2}

    def test_set_sanitizes_strings(self, accessor, tree):
        """测试字符串在写入前被净化"""
        accessor.set(tree, "searchBar.placeholder", "<b>Find</b>")
        assert tree["searchBar"]["placeholder"] == "&lt;b&gt;Find&lt;/b&gt;"

    def test_set_sanitizes_list_items(self, accessor, tree):
        """测试列表中的字符串被净化"""
        accessor.set(tree, "filter.allowedValues", ["<x>", "y"])
        assert tree["filter"]["allowedValues"] == ["&lt;x&gt;", "y"]

    @pytest.mark.parametrize("path", [
        "__proto__.polluted",
        "constructor.prototype.polluted",
        "searchBar.__defineGetter__",
        "a." + "k" * 101,
    ])
    def test_blocked_path_leaves_tree_unchanged(self, accessor, tree, path):
        """测试被拒绝的路径不修改配置树"""
        before = {"searchBar": dict(tree["searchBar"]), "filter": dict(tree["filter"]), "debugMode": False}

        assert accessor.set(tree, path, True) is False
        assert tree == before

    def test_blocked_leaf_does_not_create_parents(self, accessor):
        """测试最后一段被拒绝时不会留下新建的中间节点"""
        tree = {}
        assert accessor.set(tree, "a.b.__proto__", 1) is False
        assert tree == {}

    def test_malformed_path_rejected(self, accessor, tree):
        """测试格式错误的路径"""
        assert accessor.set(tree, "a..b", 1) is False
        assert "a" not in tree

    def test_dict_value_with_unsafe_keys_is_rejected(self, accessor):
        """测试对象值中含有不安全键时整体拒绝写入"""
        tree = {"section": {"ok": 0}}

        assert accessor.set(tree, "section", {"ok": 1, "__proto__": {"x": 1}, "constructor": 2}) is False
        assert tree == {"section": {"ok": 0}}

    def test_deep_unsafe_key_in_dict_value_is_rejected(self, accessor):
        tree = {}
        assert accessor.set(tree, "section", {"a": {"b": {"prototype": 1}}}) is False
        assert tree == {}

    def test_list_of_mappings_is_rejected(self, accessor, tree):
        """测试列表中嵌套对象时拒绝写入"""
        assert accessor.set(tree, "filter.values", [{"__proto__": {"x": 1}}]) is False
        assert accessor.set(tree, "filter.values", ["ok", ["nested"]]) is False
        assert tree["filter"] == {"allowedValues": ["a", "b"]}

    def test_dict_value_with_list_of_mappings_is_rejected(self, accessor):
        tree = {}
        assert accessor.set(tree, "filter", {"values": [{"constructor": 1}]}) is False
        assert tree == {}

    def test_dict_value_is_copied(self, accessor):
        """测试对象值被复制而不是共享引用"""
        value = {"inner": {"n": 1}}
        tree = {}
        accessor.set(tree, "section", value)
        value["inner"]["n"] = 2
        assert tree["section"]["inner"]["n"] == 1


class TestMerge:
    """测试合并"""

    def test_merge_is_non_destructive(self, accessor):
        """测试合并不修改输入"""
        target = {"a": {"b": 1, "c": 2}}
        source = {"a": {"c": 3}, "d": 4}

        result = accessor.merge(target, source)

        assert result == {"a": {"b": 1, "c": 3}, "d": 4}
        assert target == {"a": {"b": 1, "c": 2}}
        assert source == {"a": {"c": 3}, "d": 4}

    def test_merge_skips_unsafe_keys(self, accessor):
        """测试合并跳过不安全键"""
        result = accessor.merge({}, {"__proto__": {"polluted": True}, "safe": 1, "__hidden": 2})
        assert result == {"safe": 1}

    def test_merge_sanitizes_strings(self, accessor):
        """测试合并时净化字符串"""
        assert accessor.merge({}, {"a": "<i>"}) == {"a": "&lt;i&gt;"}

    def test_merge_depth_limit(self, accessor):
        """测试超过深度的子树被跳过"""
        source = {"l1": {"l2": {"l3": {"value": 1}}}}
        result = accessor.merge({}, source, max_depth=1)
        assert result == {"l1": {}}

    def test_merge_depth_limit_keeps_existing_value(self, accessor):
        """测试被跳过的子树不覆盖目标中已有的值"""
        target = {"l1": {"l2": {"kept": True}}}
        source = {"l1": {"l2": {"l3": {"value": 1}}, "flag": 1}}

        result = accessor.merge(target, source, max_depth=1)

        assert result == {"l1": {"l2": {"kept": True}, "flag": 1}}

    def test_merge_skips_list_of_mappings(self, accessor):
        """测试列表中的对象不会被合并进配置树"""
        source = {"items": [{"__proto__": {"polluted": True}, "constructor": 1}], "ok": ["x"]}

        result = accessor.merge({"a": 1}, source)

        assert result == {"a": 1, "ok": ["x"]}

    def test_merge_skips_nested_list(self, accessor):
        result = accessor.merge({"items": ["kept"]}, {"items": [["nested"]]})
        assert result == {"items": ["kept"]}

    def test_merge_replaces_scalar_with_mapping(self, accessor):
        """测试对象覆盖标量"""
        assert accessor.merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}
