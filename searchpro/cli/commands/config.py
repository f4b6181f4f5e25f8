"""searchpro 配置命令实现

在命令行中查看、修改、重置、校验和导出搜索组件配置文件。"""

import copy
import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import yaml

from searchpro.cli.utils.formatting import FormatterConfig, OutputFormatter
from searchpro.core.config_store import ConfigStore
from searchpro.core.control_panel import ControlPanelCore
from searchpro.core.exceptions import (
    ConfigException,
    ConfigIOError,
    ConfigParseError,
    ConfigValidationError,
)
from searchpro.core.logger import get_logger
from searchpro.tabs.catalog import register_builtin_tabs

logger = get_logger("config_command")


def _finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ConfigValidationError("Not a finite number", details=text)
    return number


def _reject_constant(name: str) -> None:
    raise ConfigValidationError("Not a finite number", details=name)


def parse_cli_value(raw: str) -> Any:
    """把命令行参数解析为 JSON 值，无法解析时按字符串处理

    Raises:
        ConfigValidationError: 参数是 NaN、Infinity 或超出浮点范围的数字
    """
    try:
        return json.loads(raw, parse_float=_finite_float, parse_constant=_reject_constant)
    except ValueError:
        return raw


class ConfigCommand:
    """配置管理命令处理器"""

    def __init__(self, config_file: Optional[Path] = None):
        """初始化命令处理器

        Args:
            config_file: 配置文件路径，提供时立即载入
        """
        self.store = ConfigStore()
        self.config_file = Path(config_file) if config_file else None
        if self.config_file is not None:
            self.load(self.config_file)

    def load(self, path: Path) -> None:
        """载入配置文件到配置存储

        Raises:
            ConfigIOError: 文件读取失败
            ConfigParseError: 文件解析失败
            ConfigValidationError: 配置未通过校验
        """
        candidate = self.store.load_file(path)
        if not self.store.load_tree(candidate):
            raise ConfigValidationError("Configuration failed validation", details=str(path))

    def execute_get(self, key: str) -> Any:
        """获取配置项

        Raises:
            ConfigException: 配置项不存在
        """
        if not self.store.accessor.contains(self.store.tree, key):
            raise ConfigException("Setting not found", details=key)
        return self.store.get(key)

    def execute_set(self, key: str, raw_value: str, output: Optional[Path] = None) -> Path:
        """设置配置项并写回文件"""
        try:
            value = parse_cli_value(raw_value)
        except ConfigValidationError:
            raise ConfigValidationError("Setting rejected", details=key)
        if not self.store.set(key, value):
            raise ConfigValidationError("Setting rejected", details=key)
        return self._save(output)

    def execute_reset(self, section: str, output: Optional[Path] = None) -> Path:
        """把配置段恢复为默认值并写回文件"""
        if not self.store.reset_subtree(section):
            raise ConfigException("No factory default for section", details=section)
        return self._save(output)

    def execute_export(self, output: Path) -> Path:
        """导出配置，格式由扩展名决定"""
        self.store.save_file(output)
        return Path(output)

    def execute_validate(self, path: Path) -> Dict[str, Any]:
        """校验配置文件，不修改任何状态

        Returns:
            包含 structure_ok、security_ok 和各常见配置段是否存在的报告
        """
        candidate = self.store.load_file(path)
        structure_ok = self.store.validate_structure(candidate)

        working = copy.deepcopy(candidate)
        security_ok = self.store.sanitizer.sanitize_tree_in_place(working, self.store.max_depth)

        sections: List[List[str]] = []
        for names in ConfigStore.WELL_KNOWN_SECTIONS:
            present = next((name for name in names if name in candidate), None)
            sections.append([names[0], "yes" if present else "no"])

        return {
            "structure_ok": structure_ok,
            "security_ok": security_ok,
            "is_valid": structure_ok and security_ok,
            "sections": sections,
        }

    def execute_summary(self) -> Dict[str, Any]:
        """按标签页汇总当前配置"""
        core = ControlPanelCore(store=self.store)
        register_builtin_tabs(core)
        return core.registry.collect_config_summary()

    def _save(self, output: Optional[Path]) -> Path:
        target = Path(output) if output else self.config_file
        if target is None:
            raise ConfigIOError("No output file given")
        self.store.save_file(target)
        return target


def _formatter(ctx: click.Context) -> OutputFormatter:
    options = (ctx.obj or {}).get('formatter_config', {})
    return OutputFormatter(FormatterConfig(**options))


def _fail(ctx: click.Context, message: str) -> None:
    click.echo(message, err=True)
    ctx.exit(1)


def _report_error(ctx: click.Context, error: ConfigException, path: Optional[Path] = None) -> None:
    fmt = _formatter(ctx)
    if isinstance(error, ConfigIOError):
        _fail(ctx, fmt.format_error('read_failed', path=path, reason=error.details or error.message))
    elif isinstance(error, ConfigParseError):
        _fail(ctx, fmt.format_error('parse_failed', path=path, reason=error.details or error.message))
    elif isinstance(error, ConfigValidationError):
        _fail(ctx, fmt.format_error('validation_failed', path=path))
    else:
        _fail(ctx, fmt.error(f"{error.message}: {error.details}" if error.details else error.message))


def _dump(value: Any, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.safe_dump(value, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip()
    return json.dumps(value, ensure_ascii=False, indent=2)


file_argument = click.argument("config_file", type=click.Path(dir_okay=False, path_type=Path))
output_option = click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="写入到其他文件（默认覆盖原文件）",
)
format_option = click.option(
    "--format", "output_format",
    type=click.Choice(["json", "yaml"]),
    default="json",
    help="输出格式",
)


@click.command("defaults")
@format_option
def defaults_cmd(output_format: str):
    """打印出厂默认配置"""
    click.echo(_dump(ConfigStore().factory_defaults(), output_format))


@click.command("validate")
@file_argument
@click.pass_context
def validate_cmd(ctx, config_file: Path):
    """校验配置文件的结构和内容安全"""
    fmt = _formatter(ctx)
    try:
        report = ConfigCommand().execute_validate(config_file)
    except ConfigException as e:
        _report_error(ctx, e, config_file)
        return

    click.echo(fmt.format_table(["section", "present"], report["sections"]))
    for name, present in report["sections"]:
        if present == "no":
            click.echo(fmt.warning(f"缺少常见配置段 {name}，将使用默认值"))

    if report["is_valid"]:
        click.echo(fmt.success(f"{config_file} 校验通过"))
        return

    if not report["structure_ok"]:
        click.echo(fmt.error("结构校验失败（不是对象或超过大小限制）"))
    if not report["security_ok"]:
        click.echo(fmt.error("安全校验失败（危险属性名、危险内容或嵌套过深）"))
    ctx.exit(1)


@click.command("get")
@file_argument
@click.argument("key")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json", "yaml"]),
    default="text",
    help="输出格式",
)
@click.pass_context
def get_cmd(ctx, config_file: Path, key: str, output_format: str):
    """读取配置项，例如 searchBar.width"""
    fmt = _formatter(ctx)
    try:
        value = ConfigCommand(config_file).execute_get(key)
    except ConfigException as e:
        if e.message == "Setting not found":
            _fail(ctx, fmt.format_error('setting_not_found', key=key))
        else:
            _report_error(ctx, e, config_file)
        return

    if output_format == "text":
        click.echo(fmt.format_value(value))
    else:
        click.echo(_dump(value, output_format))


@click.command("set")
@file_argument
@click.argument("key")
@click.argument("value")
@output_option
@click.pass_context
def set_cmd(ctx, config_file: Path, key: str, value: str, output: Optional[Path]):
    """设置配置项，VALUE 按 JSON 解析，失败时视为字符串"""
    fmt = _formatter(ctx)
    try:
        target = ConfigCommand(config_file).execute_set(key, value, output)
    except ConfigException as e:
        if e.message == "Setting rejected":
            _fail(ctx, fmt.format_error('setting_rejected', key=key))
        else:
            _report_error(ctx, e, config_file)
        return
    click.echo(fmt.success(f"{key} 已更新 -> {target}"))


@click.command("reset")
@file_argument
@click.argument("section")
@output_option
@click.pass_context
def reset_cmd(ctx, config_file: Path, section: str, output: Optional[Path]):
    """把配置段恢复为出厂默认值，例如 animations"""
    fmt = _formatter(ctx)
    try:
        target = ConfigCommand(config_file).execute_reset(section, output)
    except ConfigException as e:
        if e.message == "No factory default for section":
            _fail(ctx, fmt.format_error('section_not_found', section=section))
        else:
            _report_error(ctx, e, config_file)
        return
    click.echo(fmt.success(f"{section} 已恢复默认值 -> {target}"))


@click.command("export")
@file_argument
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_cmd(ctx, config_file: Path, output: Path):
    """导出配置，.js 生成可直接引入页面的 search-config.js"""
    fmt = _formatter(ctx)
    try:
        target = ConfigCommand(config_file).execute_export(output)
    except ConfigException as e:
        _report_error(ctx, e, config_file)
        return
    click.echo(fmt.success(f"配置已导出 -> {target}"))


@click.command("summary")
@file_argument
@click.pass_context
def summary_cmd(ctx, config_file: Path):
    """按标签页汇总配置"""
    fmt = _formatter(ctx)
    try:
        summary = ConfigCommand(config_file).execute_summary()
    except ConfigException as e:
        _report_error(ctx, e, config_file)
        return

    for tab_id, tab_summary in summary.items():
        if not isinstance(tab_summary, dict):
            continue
        click.echo(fmt.format_tab_summary(tab_summary.get("tab") or tab_id, tab_summary))
