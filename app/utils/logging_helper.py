"""
構造化ログヘルパー
Design原則: 6. 一貫性 - ログ形式を統一
"""
import logging
import json

class StructuredLogger:
    """
    構造化ログ（JSON形式）
    component名を自動付与
    """

    def __init__(self, component: str):
        self.component = component
        self.logger = logging.getLogger(f"soxwrap.{component}")

    def _log(self, level: int, message: str, **extra):
        """構造化ログ出力"""
        if not self.logger.isEnabledFor(level):
            return

        log_data = {
            "component": self.component,
            "message": message,
            **extra
        }
        self.logger.log(level, json.dumps(log_data, ensure_ascii=False, default=str))

    def info(self, message: str, **extra):
        self._log(logging.INFO, message, **extra)

    def warning(self, message: str, **extra):
        self._log(logging.WARNING, message, **extra)

    def error(self, message: str, **extra):
        self._log(logging.ERROR, message, **extra)

    def debug(self, message: str, **extra):
        self._log(logging.DEBUG, message, **extra)
