from .client import LoggerClient, setup_logging

__all__ = ["LoggerClient", "setup_logging"]
