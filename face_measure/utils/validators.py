"""입력 검증 유틸리티 함수"""

from typing import Tuple

import numpy as np

from .exceptions import MalformedInputError


def validate_image(image: np.ndarray) -> None:
    """
    이미지 유효성 검증

    Args:
        image: 검증할 이미지 (numpy array)

    Raises:
        MalformedInputError: 이미지가 유효하지 않은 경우
    """
    if image is None:
        raise MalformedInputError("Image is None")

    if not isinstance(image, np.ndarray):
        raise MalformedInputError(f"Image must be numpy.ndarray, got {type(image)}")

    if len(image.shape) not in [2, 3]:
        raise MalformedInputError(f"Image must be 2D or 3D, got shape {image.shape}")

    if image.size == 0 or image.shape[0] == 0 or image.shape[1] == 0:
        raise MalformedInputError(f"Image has zero area, got shape {image.shape}")

    if len(image.shape) == 3 and image.shape[2] not in [1, 3, 4]:
        raise MalformedInputError(f"Image channels must be 1, 3, or 4, got {image.shape[2]}")


def validate_image_size(image_size: Tuple[int, int]) -> None:
    """이미지 크기 (width, height) 검증"""
    width, height = image_size
    if width <= 0 or height <= 0:
        raise MalformedInputError(f"Image size must be positive, got {width}x{height}")


def validate_confidence(confidence: float, param_name: str = "confidence") -> None:
    """신뢰도 값 검증 (0.0 ~ 1.0)"""
    if not 0.0 <= confidence <= 1.0:
        raise ValueError(f"{param_name} must be between 0.0 and 1.0, got {confidence}")
