"""시스템 설정 클래스 정의"""

import os
from dataclasses import dataclass
from typing import Optional

from ..utils.config_loader import Config, get_config
from ..utils.exceptions import ConfigurationError
from .constants import (
    CONSTRAINED_ENV_VAR,
    DEFAULT_DETECT_INTERVAL,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_MIN_FEATURE_SIZE,
)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').strip().lower() in ('1', 'true', 'yes')


@dataclass
class DetectionConfig:
    """얼굴 검출 설정"""

    # MediaPipe Face Detection 설정
    model_selection: int = 1  # 0: 근거리, 1: 원거리
    min_detection_confidence: float = 0.5

    # MediaPipe FaceMesh 설정
    min_landmark_confidence: float = 0.5
    refine_landmarks: bool = True
    landmark_crop_margin: float = 0.25

    # Haar cascade fallback 설정
    cascade_scale_factor: float = 1.1
    cascade_min_neighbors: int = 5
    min_feature_size: float = DEFAULT_MIN_FEATURE_SIZE

    # 정지 이미지 전처리
    max_dimension: int = DEFAULT_MAX_DIMENSION

    # 1차 검출기를 사용할 수 없는 환경 (preview sandbox 등)
    constrained_context: bool = False

    def __post_init__(self):
        """설정 값 검증"""
        if self.model_selection not in (0, 1):
            raise ConfigurationError("model_selection must be 0 or 1")
        if not 0.0 <= self.min_detection_confidence <= 1.0:
            raise ConfigurationError("min_detection_confidence must be between 0 and 1")
        if not 0.0 <= self.min_landmark_confidence <= 1.0:
            raise ConfigurationError("min_landmark_confidence must be between 0 and 1")
        if self.landmark_crop_margin < 0.0:
            raise ConfigurationError("landmark_crop_margin must be >= 0")
        if self.cascade_scale_factor <= 1.0:
            raise ConfigurationError("cascade_scale_factor must be > 1.0")
        if self.cascade_min_neighbors < 0:
            raise ConfigurationError("cascade_min_neighbors must be >= 0")
        if not 0.0 < self.min_feature_size <= 1.0:
            raise ConfigurationError("min_feature_size must be in (0, 1]")
        if self.max_dimension < 1:
            raise ConfigurationError("max_dimension must be >= 1")

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'DetectionConfig':
        """config.yaml의 detection / fallback / image 섹션으로 생성"""
        config = config or get_config()
        return cls(
            model_selection=config.get('detection.model_selection', 1),
            min_detection_confidence=config.get('detection.min_detection_confidence', 0.5),
            min_landmark_confidence=config.get('detection.min_landmark_confidence', 0.5),
            refine_landmarks=config.get('detection.refine_landmarks', True),
            landmark_crop_margin=config.get('detection.landmark_crop_margin', 0.25),
            cascade_scale_factor=config.get('fallback.scale_factor', 1.1),
            cascade_min_neighbors=config.get('fallback.min_neighbors', 5),
            min_feature_size=config.get('fallback.min_feature_size', DEFAULT_MIN_FEATURE_SIZE),
            max_dimension=config.get('image.max_dimension', DEFAULT_MAX_DIMENSION),
            constrained_context=(
                bool(config.get('detection.constrained_context', False))
                or _env_flag(CONSTRAINED_ENV_VAR)
            ),
        )


@dataclass
class StreamConfig:
    """스트림(비디오) 처리 설정"""

    detect_interval: float = DEFAULT_DETECT_INTERVAL

    def __post_init__(self):
        if self.detect_interval < 0.0:
            raise ConfigurationError("detect_interval must be >= 0")

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'StreamConfig':
        config = config or get_config()
        return cls(detect_interval=config.get('stream.detect_interval', DEFAULT_DETECT_INTERVAL))
