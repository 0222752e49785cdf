# -*- coding: utf-8 -*-
"""
Image utility functions: 로드, orientation 보정, 다운스케일
"""

from pathlib import Path
from typing import Tuple, Union

import cv2
import numpy as np
from PIL import Image, ImageOps

from ..models import Orientation
from .exceptions import MalformedInputError
from .logging_config import get_logger
from .validators import validate_image

logger = get_logger(__name__)


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Grayscale / BGRA 이미지를 BGR 3채널로 변환"""
    if len(image.shape) == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


def to_gray(image: np.ndarray) -> np.ndarray:
    """BGR / BGRA / 1채널 이미지를 2차원 grayscale로 변환"""
    if len(image.shape) == 2:
        return image
    if image.shape[2] == 1:
        return image[:, :, 0]
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def apply_orientation(image: np.ndarray, orientation: Orientation = Orientation.UP) -> np.ndarray:
    """
    EXIF orientation에 따라 이미지를 똑바로 세움 (검출 전 정규화)

    Args:
        image: 입력 이미지
        orientation: 선언된 orientation

    Returns:
        upright 이미지
    """
    if orientation == Orientation.UP:
        return image
    if orientation == Orientation.UP_MIRRORED:
        return cv2.flip(image, 1)
    if orientation == Orientation.DOWN:
        return cv2.rotate(image, cv2.ROTATE_180)
    if orientation == Orientation.DOWN_MIRRORED:
        return cv2.flip(image, 0)
    if orientation == Orientation.LEFT_MIRRORED:
        return cv2.transpose(image)
    if orientation == Orientation.RIGHT:
        return cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)
    if orientation == Orientation.RIGHT_MIRRORED:
        return cv2.rotate(cv2.transpose(image), cv2.ROTATE_180)
    # Orientation.LEFT
    return cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE)


def downscale(image: np.ndarray, max_dimension: int = 1600) -> np.ndarray:
    """
    긴 변이 max_dimension을 넘으면 비율 유지하며 축소

    Args:
        image: 입력 이미지
        max_dimension: 긴 변 최대 픽셀

    Returns:
        축소된 이미지 (필요 없으면 원본)
    """
    h, w = image.shape[:2]
    scale = min(1.0, max_dimension / max(w, h))
    if scale >= 1.0:
        return image

    dst_w, dst_h = int(round(w * scale)), int(round(h * scale))
    logger.debug(f"Downscale {w}x{h} -> {dst_w}x{dst_h}")
    return cv2.resize(image, (dst_w, dst_h), interpolation=cv2.INTER_AREA)


def image_size(image: np.ndarray) -> Tuple[int, int]:
    """(width, height) 반환"""
    h, w = image.shape[:2]
    return (int(w), int(h))


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    이미지 파일 로드 (EXIF orientation 적용 후 BGR 반환)

    Args:
        image_path: 이미지 파일 경로

    Returns:
        BGR 이미지 (numpy array)

    Raises:
        MalformedInputError: 파일을 읽을 수 없는 경우
    """
    try:
        with Image.open(image_path) as pil_image:
            upright = ImageOps.exif_transpose(pil_image).convert('RGB')
            rgb = np.asarray(upright)
    except (OSError, ValueError) as e:
        raise MalformedInputError(f"Failed to load image: {image_path} ({e})")

    bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    validate_image(bgr)
    logger.debug(f"Loaded image {image_path}: {bgr.shape[1]}x{bgr.shape[0]}")
    return bgr
