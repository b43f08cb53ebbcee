from .logging_config import JsonFormatter, TextFormatter, add_logging_args, configure_logging

__all__ = ["JsonFormatter", "TextFormatter", "add_logging_args", "configure_logging"]
