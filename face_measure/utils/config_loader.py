"""
YAML 설정 로더

패키지 기본 config.yaml (또는 FACE_MEASURE_CONFIG_PATH가 가리키는 파일)을 읽어
'section.key' 경로나 속성 접근으로 값을 꺼낸다.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigurationError

CONFIG_ENV_VAR = 'FACE_MEASURE_CONFIG_PATH'
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"


def _wrap(value: Any) -> Any:
    """dict 값은 ConfigSection으로 감싸서 속성 접근 가능하게"""
    return ConfigSection(value) if isinstance(value, dict) else value


class ConfigSection:
    """config.yaml 하위 섹션 (예: config.stream.detect_interval)"""

    def __init__(self, data: Dict[str, Any]):
        self._data = data

    def __getattr__(self, name: str):
        if name.startswith('_') or name not in self._data:
            raise AttributeError(f"Config section has no key '{name}'")
        return _wrap(self._data[name])

    def get(self, key: str, default: Any = None) -> Any:
        return _wrap(self._data.get(key, default))


class Config(ConfigSection):
    """
    측정 시스템 설정

    Usage:
        config = Config()
        interval = config.get('stream.detect_interval', 0.5)
        margin = config.detection.landmark_crop_margin
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Args:
            config_path: YAML 파일 경로 (None이면 FACE_MEASURE_CONFIG_PATH → 패키지 기본값)

        Raises:
            ConfigurationError: 파일이 없거나 YAML 형식이 잘못된 경우
        """
        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH

        self.config_path = Path(config_path)
        super().__init__({})
        self.reload()

    def reload(self):
        """파일에서 설정 다시 읽기"""
        if not self.config_path.is_file():
            raise ConfigurationError(
                f"Config file not found: {self.config_path} "
                f"(set {CONFIG_ENV_VAR} to use another file)"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {self.config_path} must be a mapping")
        self._data = data

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        점(.)으로 구분된 경로로 값 조회

        Example:
            >>> config.get('fallback.min_feature_size')
            0.15
        """
        value: Any = self._data
        for key in key_path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value

    def __repr__(self):
        return f"Config(path={self.config_path})"


# 전역 설정 (lazy singleton)
_global_config: Optional[Config] = None


def get_config() -> Config:
    """전역 Config 반환 (최초 호출 시 로드)"""
    global _global_config
    if _global_config is None:
        _global_config = Config()
    return _global_config


def load_config(config_path: Union[str, Path]) -> Config:
    """지정한 파일로 전역 설정 교체 (CLI --config 용)"""
    global _global_config
    _global_config = Config(config_path)
    return _global_config


def reload_config():
    """전역 설정 파일 다시 읽기"""
    if _global_config is not None:
        _global_config.reload()
