"""结构化日志系统

基于 structlog 的日志记录器，支持操作追踪与耗时统计。默认输出控制台格式，可切换为 JSON。"""

import logging
import time
import uuid
import contextvars
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pathlib import Path

import structlog


# 当前操作 ID
_operation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    'operation_id', default=""
)


class LoggerConfig:
    """日志配置类"""

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        level: str = "INFO",
        json_output: bool = False,
        console_output: bool = False,
    ):
        """初始化日志配置
        Args:
            log_dir: 日志目录，如果为 None 则不写入文件
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
            json_output: 是否输出 JSON 格式
            console_output: 是否输出到控制台
        """
        self.log_dir = log_dir
        self.level = level.upper()
        self.json_output = json_output
        self.console_output = console_output


class Logger:
    """结构化日志记录器"""

    def __init__(self, name: str = "wgmeta", config: Optional[LoggerConfig] = None):
        """初始化日志记录器

        Args:
            name: 日志记录器名称
            config: 日志配置对象
        """
        self.name = name
        self.config = config or LoggerConfig()
        self._setup_structlog()
        self.logger = structlog.get_logger(name)

    def _setup_structlog(self) -> None:
        """配置 structlog"""
        handlers = []

        if self.config.console_output:
            handlers.append(logging.StreamHandler())

        if self.config.log_dir:
            log_dir = Path(self.config.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_dir / "wg-meta.log"))

        if handlers:
            logging.basicConfig(
                handlers=handlers,
                level=getattr(logging, self.config.level, logging.INFO),
                format="%(message)s",
                force=True,
            )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer()
                if self.config.json_output
                else structlog.dev.ConsoleRenderer(colors=False),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

    def debug(self, event: str, **kwargs) -> None:
        """记录 DEBUG 级别日志"""
        self._log("debug", event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        """记录 INFO 级别日志"""
        self._log("info", event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        """记录 WARNING 级别日志"""
        self._log("warning", event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        """记录 ERROR 级别日志"""
        self._log("error", event, **kwargs)

    def bind(self, **kwargs) -> 'Logger':
        """绑定上下文信息，返回新的日志记录器"""
        new_logger = Logger(self.name, self.config)
        new_logger.logger = self.logger.bind(**kwargs)
        return new_logger

    def _log(self, level: str, event: str, **kwargs) -> None:
        operation_id = _operation_id.get()
        if operation_id:
            kwargs.setdefault('operation_id', operation_id)
        getattr(self.logger, level)(event, **kwargs)


class OperationScope:
    """操作范围上下文管理器

    进入时记录 `<name>_started`，退出时记录 `<name>_succeeded` 或 `<name>_failed` 及耗时。
    异常不会被吞掉。
    """

    def __init__(
        self,
        operation_name: str,
        context: Optional[Dict[str, Any]] = None,
        logger: Optional[Logger] = None,
        operation_id: Optional[str] = None,
    ):
        self.operation_name = operation_name
        self.context = context or {}
        self.logger = logger or get_logger()
        self.operation_id = operation_id or str(uuid.uuid4())
        self.started_at: Optional[datetime] = None
        self.duration_ms: Optional[int] = None
        self.status = "pending"
        self._start = 0.0
        self._token = None

    def __enter__(self) -> 'OperationScope':
        self._token = _operation_id.set(self.operation_id)
        self._start = time.time()
        self.started_at = datetime.now(timezone.utc)
        self.status = "running"
        self.logger.info(f"{self.operation_name}_started", **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.duration_ms = int((time.time() - self._start) * 1000)
        if exc_type is not None:
            self.status = "failure"
            self.logger.error(
                f"{self.operation_name}_failed",
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **self.context,
            )
        else:
            self.status = "success"
            self.logger.info(
                f"{self.operation_name}_succeeded",
                duration_ms=self.duration_ms,
                **self.context,
            )
        _operation_id.reset(self._token)
        return False


_loggers: Dict[str, Logger] = {}
_default_config: Optional[LoggerConfig] = None


def get_logger(name: str = "wgmeta", config: Optional[LoggerConfig] = None) -> Logger:
    """获取日志记录器实例

    同名记录器只创建一次；`config` 仅在首次创建时生效。
    """
    if name not in _loggers:
        _loggers[name] = Logger(name, config or _default_config)
    return _loggers[name]


def configure_logger(config: LoggerConfig) -> None:
    """配置全局日志记录器，已创建的记录器同步更新"""
    global _default_config
    _default_config = config
    Logger("wgmeta", config)
    # 已缓存的 structlog 代理需要重新获取才能使用新的处理器
    for name, existing in _loggers.items():
        existing.config = config
        existing.logger = structlog.get_logger(name)
