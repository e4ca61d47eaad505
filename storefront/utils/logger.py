import logging
import json
import os
from pathlib import Path
import threading


ROOT_LOGGER_NAME = "storefront"


class SingletonLogger:
    """
    Singleton logger that ensures the storefront handlers are configured once per process.

    Modules ask for named children (``storefront.ordering``, ``storefront.inventory``...)
    which propagate to the handlers attached here.
    """
    _instance = None
    _lock = threading.Lock()
    _logger = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._logger = None
                    self._initialized = True

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        """
        Get a logger under the configured storefront root.

        Args:
            name (str): Dotted logger name; names outside the ``storefront``
                namespace are nested under it

        Returns:
            logging.Logger: The root logger or one of its children
        """
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._create_logger()
        if not name or name == ROOT_LOGGER_NAME:
            return self._logger
        if not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    def _create_logger(self) -> logging.Logger:
        """
        Create the root storefront logger with file and console handlers.

        ``STOREFRONT_LOG_DIR`` selects the directory for the log files
        (default ``logs``); an empty value disables file output.
        ``STOREFRONT_LOG_LEVEL`` sets the console level (default ``DEBUG``).

        Returns:
            logging.Logger: Configured logger instance
        """
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # Clear any existing handlers
        logger.handlers.clear()

        formatter = JsonFormatter({
            "timestamp": "asctime",
            "level": "levelname",
            "logger": "name",
            "module": "module",
            "function": "funcName",
            "line": "lineno",
            "thread": "threadName",
            "message": "message"
        })

        logs_dir = os.environ.get("STOREFRONT_LOG_DIR", "logs")
        if logs_dir:
            logs_path = Path(logs_dir)
            logs_path.mkdir(parents=True, exist_ok=True)

            # Fixed filenames, cleared on each run
            file_handler = logging.FileHandler(logs_path / "storefront.log", mode='w', encoding='utf-8')
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            error_file_handler = logging.FileHandler(logs_path / "errors.log", mode='w', encoding='utf-8')
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(formatter)
            logger.addHandler(error_file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, os.environ.get("STOREFRONT_LOG_LEVEL", "DEBUG").upper(), logging.DEBUG))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        return logger


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.

    @param dict fmt_dict: Key: logging format attribute pairs. Defaults to {"message": "message"}.
    @param str time_format: time.strftime() format string. Default: "%Y-%m-%dT%H:%M:%S"
    @param str msec_format: Microsecond formatting. Appended at the end. Default: "%s.%03dZ"
    """
    def __init__(self, fmt_dict: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S", msec_format: str = "%s.%03dZ"):
        super().__init__()
        self.fmt_dict = fmt_dict if fmt_dict is not None else {"message": "message"}
        self.default_time_format = time_format
        self.default_msec_format = msec_format
        self.datefmt = None

    def usesTime(self) -> bool:
        """
        Overwritten to look for the attribute in the format dict values instead of the fmt string.
        """
        return "asctime" in self.fmt_dict.values()

    def formatMessage(self, record) -> dict:
        """
        Overwritten to return a dictionary of the relevant LogRecord attributes instead of a string.
        KeyError is raised if an unknown attribute is provided in the fmt_dict.
        """
        return {fmt_key: record.__dict__[fmt_val] for fmt_key, fmt_val in self.fmt_dict.items()}

    def format(self, record) -> str:
        """
        Same as the parent's method, except that a dict is built and dumped as JSON.
        """
        record.message = record.getMessage()

        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        message_dict = self.formatMessage(record)

        if record.exc_info:
            # Cache the traceback text to avoid converting it multiple times
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)

        if record.exc_text:
            message_dict["exc_info"] = record.exc_text

        if record.stack_info:
            message_dict["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(message_dict, default=str)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger attached to the singleton storefront handlers.

    Args:
        name (str): Logger name, e.g. ``storefront.ordering``

    Returns:
        logging.Logger: Configured logger
    """
    return SingletonLogger().get_logger(name)
