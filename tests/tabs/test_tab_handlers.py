"""内置标签页处理器的单元测试"""

import pytest

from searchpro.core.control_panel import ControlPanelCore
from searchpro.core.exceptions import TabHandlerException
from searchpro.core.form import CHECKBOX, NUMBER, RANGE, FormContainer, FormField
from searchpro.core.logger import Logger
from searchpro.core.notifier import RecordingNotifier
from searchpro.core.scheduler import ManualScheduler
from searchpro.tabs.catalog import BUILTIN_TABS, register_builtin_tabs
from searchpro.tabs.general import GeneralTabHandler


@pytest.fixture
def core():
    panel = ControlPanelCore(scheduler=ManualScheduler(), notifier=RecordingNotifier())
    yield panel
    Logger.clear_context()


@pytest.fixture
def handlers(core):
    return register_builtin_tabs(core)


def _activate(core, tab_id, *fields):
    container = FormContainer(tab_id, list(fields))
    assert core.registry.activate(tab_id, container)
    return container


class TestCatalog:
    """测试内置标签页目录"""

    def test_all_tabs_registered(self, core, handlers):
        assert core.registry.tab_ids() == [cls.TAB_ID for cls in BUILTIN_TABS]
        assert "data-sources" in handlers

    def test_summary_covers_every_tab(self, core, handlers):
        summary = core.registry.collect_config_summary()

        assert set(summary) == set(handlers)
        assert summary["general"]["sections"]["searchBar"]["width"] == 350
        assert summary["management"]["sections"] == {}
        assert summary["advanced"]["animationsEnabled"] is False
        assert "includePanoramas" in summary["content"]["enabledElements"]
        assert summary["appearance"]["colorCount"] > 0

    def test_handler_without_core(self):
        with pytest.raises(TabHandlerException):
            GeneralTabHandler().init(FormContainer())


class TestGeneralTab:
    """测试通用标签页"""

    def test_populates_on_activate(self, core, handlers):
        container = _activate(core, "general", FormField("searchBar.width"))
        assert container.get("searchBar.width").value == "350px"

    def test_pixel_width_stored_as_number(self, core, handlers):
        """测试 400px 写入为数字 400"""
        container = _activate(core, "general", FormField("searchBar.width"))

        container.change("searchBar.width", "400px")
        core.scheduler.advance(300)

        assert core.get_nested_property("searchBar.width") == 400
        assert core.preview.last_snapshot.config["searchBar"]["width"] == 400

    def test_percent_width_kept_as_text(self, core, handlers):
        container = _activate(core, "general", FormField("searchBar.width"))

        container.change("searchBar.width", "95%")

        assert core.get_nested_property("searchBar.width") == "95%"

    def test_min_search_chars_mirrored(self, core, handlers):
        container = _activate(core, "general", FormField("minSearchChars", type=NUMBER))

        container.change("minSearchChars", "4")

        assert core.get_nested_property("minSearchLength") == 4

    def test_invalid_width(self, core, handlers):
        container = _activate(core, "general", FormField("searchBar.width"))
        container.get("searchBar.width").value = "very wide"

        assert handlers["general"].validate_form() is False
        assert container.get("searchBar.width").message == "Enter a valid width (e.g., 350px or 95%)"

    def test_reset_to_defaults(self, core, handlers):
        container = _activate(core, "general", FormField("searchBar.width"))
        container.change("searchBar.width", "999")
        core.safe_set_nested_property("minSearchLength", 9)
        core.safe_set_nested_property("maxResults", 77)

        handlers["general"].reset_to_defaults()

        assert core.get_nested_property("searchBar.width") == 350
        assert core.get_nested_property("minSearchLength") == 2
        assert core.get_nested_property("maxResults") == 77
        assert container.get("searchBar.width").value == "350px"


class TestDataSourcesTab:
    """测试数据源标签页"""

    def test_sources_are_exclusive(self, core, handlers):
        """测试启用一个数据源会关闭另一个"""
        container = _activate(
            core, "data-sources",
            FormField("googleSheets.useGoogleSheetData", type=CHECKBOX),
            FormField("googleSheets.useLocalCSV", type=CHECKBOX),
        )

        container.change("googleSheets.useLocalCSV", True)
        container.change("googleSheets.useGoogleSheetData", True)

        assert core.get_nested_property("googleSheets.useGoogleSheetData") is True
        assert core.get_nested_property("googleSheets.useLocalCSV") is False
        assert container.get("googleSheets.useLocalCSV").checked is False

    def test_url_must_be_http(self, core, handlers):
        container = _activate(core, "data-sources", FormField("googleSheets.googleSheetUrl"))
        container.get("googleSheets.googleSheetUrl").value = "ftp://example.com/sheet"

        assert handlers["data-sources"].validate_form() is False
        assert container.get("googleSheets.googleSheetUrl").message == "Enter a full http(s) URL"


class TestAdvancedTab:
    """测试高级标签页的滑块防抖"""

    def test_range_written_after_pause(self, core, handlers):
        """测试滑块停顿 150 毫秒后才写入配置"""
        container = _activate(
            core, "advanced",
            FormField("animations.duration.fast", type=RANGE, min=0, max=1000),
        )
        advanced = handlers["advanced"]

        container.input("animations.duration.fast", "180")
        core.scheduler.advance(100)
        container.input("animations.duration.fast", "200")
        core.scheduler.advance(149)

        assert core.get_nested_property("animations.duration.fast") == 150
        assert advanced.pending_ranges == 1

        core.scheduler.advance(1)
        assert core.get_nested_property("animations.duration.fast") == 200
        assert advanced.pending_ranges == 0

        core.scheduler.advance(150)
        assert core.preview.commit_count == 1

    def test_cleanup_cancels_range_timers(self, core, handlers):
        container = _activate(
            core, "advanced",
            FormField("animations.duration.slow", type=RANGE, min=0, max=2000),
        )
        container.input("animations.duration.slow", "900")

        handlers["advanced"].cleanup()
        core.scheduler.advance(1000)

        assert core.get_nested_property("animations.duration.slow") == 400


class TestOtherTabs:
    """测试其他标签页的规则"""

    def test_media_indexes_must_be_numbers(self, core, handlers):
        container = _activate(core, "filtering", FormField("filter.mediaIndexes.allowed"))
        container.get("filter.mediaIndexes.allowed").value = "1, 2, three"

        assert handlers["filtering"].validate_form() is False

    def test_filter_mode(self, core, handlers):
        container = _activate(core, "filtering", FormField("filter.tagFiltering.mode"))
        field = container.get("filter.tagFiltering.mode")

        field.value = "whitelist"
        assert handlers["filtering"].validate_form() is True
        field.value = "sometimes"
        assert handlers["filtering"].validate_form() is False

    def test_border_radius_range(self, core, handlers):
        container = _activate(
            core, "appearance",
            FormField("appearance.tags.borderRadius", type=NUMBER),
        )
        container.get("appearance.tags.borderRadius").value = "60"

        assert handlers["appearance"].validate_form() is False

    def test_reset_appearance_group(self, core, handlers):
        container = _activate(core, "appearance", FormField("appearance.colors.searchText"))
        container.change("appearance.colors.searchText", "#ff0000")
        core.safe_set_nested_property("appearance.tags.borderRadius", 3)

        assert handlers["appearance"].reset_group("colors") is True
        assert container.get("appearance.colors.searchText").value == "#1a1a1a"
        assert core.get_nested_property("appearance.tags.borderRadius") == 3

    def test_thumbnail_path_cannot_escape_assets(self, core, handlers):
        container = _activate(core, "display", FormField("thumbnailSettings.defaultImages.Video"))
        container.get("thumbnailSettings.defaultImages.Video").value = "../secret.jpg"

        assert handlers["display"].validate_form() is False

    def test_management_tab_is_inert(self, core, handlers):
        management = handlers["management"]
        _activate(core, "management")

        assert management.validate_form() is True
        management.reset_to_defaults()
        assert management.get_config_summary() == {"tab": "Management", "sections": {}}
