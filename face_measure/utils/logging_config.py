"""
face_measure 로깅 설정

config.yaml의 logging 섹션으로 콘솔 / 회전 파일 핸들러를 붙인다.
"""
import logging
import logging.handlers
from pathlib import Path

from .config_loader import get_config

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# setup_logging이 핸들러를 붙인 로거 이름
_configured = set()


def _level(value, default: int) -> int:
    """'debug', 'INFO' 같은 문자열을 logging 레벨로 (모르는 값이면 default)"""
    return getattr(logging, str(value).upper(), default)


def _console_handler(config, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(_level(config.get('logging.console.level', 'INFO'), logging.INFO))
    handler.setFormatter(formatter)
    return handler


def _file_handler(config, formatter: logging.Formatter) -> logging.Handler:
    """logging.file 설정으로 RotatingFileHandler 생성 (디렉토리는 없으면 만든다)"""
    log_dir = Path(config.get('logging.file.directory', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_dir / config.get('logging.file.filename', 'face_measure.log'),
        maxBytes=config.get('logging.file.max_bytes', 10 * 1024 * 1024),
        backupCount=config.get('logging.file.backup_count', 5),
        encoding='utf-8'
    )
    handler.setLevel(_level(config.get('logging.file.level', 'DEBUG'), logging.DEBUG))
    handler.setFormatter(formatter)
    return handler


def setup_logging(name: str = None) -> logging.Logger:
    """
    이름별 로거를 설정해서 반환

    같은 이름으로 여러 번 불려도 핸들러는 한 번만 붙는다.

    Args:
        name: 로거 이름 (보통 __name__)
    """
    logger = logging.getLogger(name or 'face_measure')
    if logger.handlers:
        return logger

    config = get_config()
    logger.setLevel(_level(config.get('logging.level', 'INFO'), logging.INFO))

    formatter = logging.Formatter(
        config.get('logging.format', DEFAULT_FORMAT),
        datefmt=config.get('logging.date_format', DEFAULT_DATE_FORMAT)
    )
    if config.get('logging.console.enabled', True):
        logger.addHandler(_console_handler(config, formatter))
    if config.get('logging.file.enabled', False):
        logger.addHandler(_file_handler(config, formatter))

    _configured.add(logger.name)
    return logger


def reconfigure_logging():
    """
    전역 설정이 바뀐 뒤 (load_config) 이미 만든 로거의 핸들러를 다시 구성

    모듈 로드 시점의 get_logger는 기본 config.yaml 기준이므로
    --config로 넘긴 logging 섹션을 반영하려면 이 함수를 불러야 한다.
    """
    for name in sorted(_configured):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        setup_logging(name)


def get_logger(name: str = None) -> logging.Logger:
    """setup_logging 간편 함수"""
    return setup_logging(name)
