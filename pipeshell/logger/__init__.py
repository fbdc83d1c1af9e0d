from pipeshell.logger.logger_helper import configure_logging

__all__ = ["configure_logging"]
