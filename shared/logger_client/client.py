import logging

from .formatter import format_log, render

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(level="INFO"):
    logging.basicConfig(
        level=str(level).upper(),
        format=LOG_FORMAT,
    )


class LoggerClient:
    def __init__(self, service_name):
        self.service_name = service_name
        self._logger = logging.getLogger(service_name)

    def _log(self, level, message, trace_id=None, extra=None, exc_info=False):
        record = format_log(
            level=level,
            service=self.service_name,
            message=message,
            trace_id=trace_id,
            extra=extra,
        )
        self._logger.log(LEVELS[level], render(record), exc_info=exc_info)
        return record

    def debug(self, msg, **kw): return self._log("DEBUG", msg, **kw)
    def info(self, msg, **kw):  return self._log("INFO", msg, **kw)
    def warn(self, msg, **kw):  return self._log("WARN", msg, **kw)
    def error(self, msg, **kw): return self._log("ERROR", msg, **kw)
