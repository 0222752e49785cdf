"""
Utilities package.
"""
from .config_loader import get_config, load_config, reload_config, Config
from .logging_config import get_logger, reconfigure_logging, setup_logging
from .exceptions import (
    FaceMeasureException,
    DetectorExecutionError,
    MalformedInputError,
    ConfigurationError,
)

__all__ = [
    'get_config', 'load_config', 'reload_config', 'Config',
    'get_logger', 'setup_logging', 'reconfigure_logging',
    'FaceMeasureException', 'DetectorExecutionError',
    'MalformedInputError', 'ConfigurationError',
]
