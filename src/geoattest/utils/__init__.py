from .logger_util import get_logger, level_from_env

__all__ = ["get_logger", "level_from_env"]
