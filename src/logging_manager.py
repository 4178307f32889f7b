#!/usr/bin/env python
import gzip
import logging
import logging.handlers
import os
import shutil
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class CompressingRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    A rotating file handler whose backups are gzipped: app.log.1.gz is the
    newest, and at most backupCount archives are kept.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.namer = lambda name: f"{name}.gz"
        self.rotator = self.compress_log

    @staticmethod
    def compress_log(source: str, dest: str) -> None:
        with open(source, "rb") as f_in, gzip.open(dest, "wb") as f_out:
            shutil.copyfileobj(f_in, f_out)
        os.remove(source)


class LoggingManager:
    """
    Manages application logging configuration.
    """
    def __init__(self, log_file: Path) -> None:
        self.log_file = log_file
        self.handler: Optional[CompressingRotatingFileHandler] = None

    def setup(self, level: int = logging.INFO, max_bytes: int = 10 * 1024 * 1024, backup_count: int = 10) -> None:
        """
        Route the root logger to a rotating, compressing log file.

        Args:
            level: Logging level
            max_bytes: Maximum log file size before rotation
            backup_count: Number of compressed backups to keep
        """
        self.handler = CompressingRotatingFileHandler(
            filename=str(self.log_file),
            mode="a",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        self.handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Drop existing handlers to prevent duplicate logs
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        root_logger.addHandler(self.handler)
        logging.info("Logging system initialized")

    def shutdown(self) -> None:
        """
        Detach and close the log handler.
        """
        if self.handler:
            logging.info("Logging system shutdown")
            logging.getLogger().removeHandler(self.handler)
            self.handler.close()
            self.handler = None
