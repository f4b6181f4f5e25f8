"""结构化日志系统

基于 structlog 的结构化日志记录器。每条日志自动附加编辑会话与当前标签页，
安全拒绝事件通过 security() 统一记录。日志中的字段值可能来自用户输入，
过长的字符串会被截断。"""

import contextvars
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog


_session_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    'session_id', default=""
)
_tab_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    'tab_id', default=""
)

# 日志中单个字符串值的最大长度
MAX_LOGGED_VALUE_LENGTH = 200


class LoggerConfig:
    """日志配置类"""

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        level: str = "INFO",
        json_output: bool = False,
        console_output: bool = False,
        max_value_length: int = MAX_LOGGED_VALUE_LENGTH,
    ):
        """初始化日志配置
        Args:
            log_dir: 日志目录，如果为 None 则不写入文件
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
            json_output: 是否输出 JSON 格式
            console_output: 是否输出到控制台
            max_value_length: 字符串字段值的最大长度
        """
        self.log_dir = log_dir
        self.level = level
        self.json_output = json_output
        self.console_output = console_output
        self.max_value_length = max_value_length


def clip_long_values(max_length: int):
    """生成截断过长字符串字段的 structlog 处理器"""
    def processor(logger, method_name, event_dict):
        for key, value in event_dict.items():
            if key != "event" and isinstance(value, str) and len(value) > max_length:
                event_dict[key] = value[:max_length] + f"...(+{len(value) - max_length} chars)"
        return event_dict
    return processor


def _configure_structlog(config: LoggerConfig) -> None:
    handlers: List[logging.Handler] = []

    if config.console_output:
        handlers.append(logging.StreamHandler())

    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "searchpro.log"))

    if handlers:
        logging.basicConfig(
            handlers=handlers,
            level=getattr(logging, config.level, logging.INFO),
            format="%(message)s",
            force=True,
        )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            clip_long_values(config.max_value_length),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
            if config.json_output
            else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


class Logger:
    """结构化日志记录器

    包装 structlog，自动附加会话和标签页上下文。
    """

    def __init__(self, name: str = "searchpro", config: Optional[LoggerConfig] = None):
        """初始化日志记录器并配置 structlog

        Args:
            name: 日志记录器名称
            config: 日志配置对象
        """
        self.name = name
        self.config = config or LoggerConfig()
        _configure_structlog(self.config)
        self.logger = structlog.get_logger(name)

    def debug(self, event: str, **kwargs) -> None:
        self._log("debug", event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        self._log("info", event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        self._log("warning", event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        self._log("error", event, **kwargs)

    def security(self, event: str, **kwargs) -> None:
        """记录安全拒绝事件

        所有被守卫或净化器拒绝的操作都通过这里记录，便于集中审计。
        """
        self._log("warning", event, security=True, **kwargs)

    def bind(self, **kwargs) -> 'Logger':
        """返回绑定了额外上下文的记录器，共享同一份 structlog 配置

        Args:
            **kwargs: 要绑定的上下文信息，例如 component="tab_registry"
        """
        bound = Logger.__new__(Logger)
        bound.name = self.name
        bound.config = self.config
        bound.logger = self.logger.bind(**kwargs)
        return bound

    def _log(self, level: str, event: str, **kwargs) -> None:
        getattr(self.logger, level)(event, **self._build_context(**kwargs))

    def _build_context(self, **kwargs) -> Dict[str, Any]:
        context = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }

        session_id = _session_id.get()
        if session_id:
            context['session_id'] = session_id

        tab_id = _tab_id.get()
        if tab_id:
            context['tab_id'] = tab_id

        context.update(kwargs)
        return context

    @staticmethod
    def set_session_id(session_id: str) -> None:
        """设置编辑会话 ID"""
        _session_id.set(session_id)

    @staticmethod
    def set_tab_id(tab_id: str) -> None:
        """设置当前活动标签页 ID"""
        _tab_id.set(tab_id)

    @staticmethod
    def clear_context() -> None:
        _session_id.set("")
        _tab_id.set("")


# 全局默认记录器实例
_default_logger: Optional[Logger] = None


def get_logger(
    name: str = "searchpro",
    config: Optional[LoggerConfig] = None,
) -> Logger:
    """获取日志记录器实例

    全局只保留一个记录器，后续调用直接返回已有实例，name 与 config 只在首次调用时生效。
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = Logger(name, config)
    return _default_logger


def configure_logger(config: LoggerConfig) -> None:
    """用新的配置替换全局日志记录器

    已经 bind 出来的记录器保留原来的上下文，日志级别随新配置生效。
    """
    global _default_logger
    _default_logger = Logger("searchpro", config)
