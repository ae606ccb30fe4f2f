import logging
import logging.handlers
import time
from pathlib import Path

from warehouse_inventory.config import config

APP_LOGGER_NAME = 'warehouse_inventory.cli'
RUN_LOGGER_NAME = 'warehouse_inventory.runs'

class Logger:
    """Logging manager for the Warehouse Inventory system.

    Handlers are installed once per process: a console handler on the root
    logger from configure(), and a rotating file per named logger from
    get_logger() when file output is enabled.
    """

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._settings = config.log_config
        self._log_dir = Path(self._settings['directory'])
        self._formatter = logging.Formatter(self._settings['format'])
        self._initialized = True

    @property
    def level(self):
        """Configured level as a logging constant; unknown names fall back to INFO."""
        return getattr(logging, self._settings['level'].upper(), logging.INFO)

    def configure(self, level=None):
        """Install the console handler on the root logger.

        Modules log through logging.getLogger(__name__) and propagate here.
        Only entry points call this.

        Args:
            level: Optional level overriding the configured one
        """
        root_logger = logging.getLogger()
        root_logger.setLevel(self.level if level is None else level)

        for handler in list(root_logger.handlers):
            if getattr(handler, '_inventory_console', False):
                root_logger.removeHandler(handler)

        if self._settings['console_output']:
            console = logging.StreamHandler()
            console.setFormatter(self._formatter)
            console._inventory_console = True
            root_logger.addHandler(console)

    def get_logger(self, name):
        """Get a named logger, with its own rotating log file if enabled.

        Args:
            name: Logger name; also the log file stem

        Returns:
            logging.Logger
        """
        if name in self._loggers:
            return self._loggers[name]

        named = logging.getLogger(name)
        if self._settings['file_output']:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                self._log_dir / f"{name}.log",
                maxBytes=self._settings['max_size_mb'] * 1024 * 1024,
                backupCount=self._settings['backup_count']
            )
            file_handler.setFormatter(self._formatter)
            named.addHandler(file_handler)

        self._loggers[name] = named
        return named

    @property
    def app_logger(self):
        """Logger used by the command line entry point."""
        return self.get_logger(APP_LOGGER_NAME)

    def batch_start_log(self, process_name, additional_info=None):
        """Record the start of a run over many entries, such as a stock count.

        Returns:
            Token to hand to batch_end_log
        """
        self.get_logger(RUN_LOGGER_NAME).info(
            f"{process_name} started" + (f" ({additional_info})" if additional_info else "")
        )
        return {'process_name': process_name, 'started': time.monotonic()}

    def batch_end_log(self, log_info, success=True, result_info=None):
        """Record the end of a run started with batch_start_log.

        Args:
            log_info: Token returned by batch_start_log
            success: False when any entry of the run failed
            result_info: Optional counts to report
        """
        run_logger = self.get_logger(RUN_LOGGER_NAME)
        elapsed = time.monotonic() - log_info.get('started', time.monotonic())
        outcome = "finished" if success else "finished with failures"
        message = f"{log_info.get('process_name', 'run')} {outcome} in {elapsed:.3f}s"
        if result_info:
            message += f": {result_info}"

        if success:
            run_logger.info(message)
        else:
            run_logger.warning(message)

# Global logger instance
logger = Logger()
