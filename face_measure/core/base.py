"""Detector protocol definitions.

Implementations should be swappable without changing pipeline logic:
the MediaPipe / OpenCV adapters in this package, or fakes in tests.
"""

from typing import List, Protocol

import numpy as np

from ..models import CoarseFace, FaceCandidate, FaceLandmarks


class FaceRectDetector(Protocol):
    """1차 얼굴 영역 검출기 (bounding box + quality)"""

    def detect(self, image: np.ndarray) -> List[FaceCandidate]:
        """Detect face rectangles in a BGR image.

        Raises:
            DetectorExecutionError: the backend failed to run.
        """
        ...

    def close(self) -> None:
        ...


class LandmarkDetector(Protocol):
    """지정한 얼굴 영역 안에서 정밀 랜드마크 검출"""

    def detect(self, image: np.ndarray, face: FaceCandidate) -> List[FaceLandmarks]:
        """Detect landmark groups constrained to ``face``.

        Returns:
            One entry per localized face (empty if nothing was found).

        Raises:
            DetectorExecutionError: the backend failed to run.
        """
        ...

    def close(self) -> None:
        ...


class CoarseFaceDetector(Protocol):
    """Fallback 검출기: 얼굴 영역 + 눈/입 위치"""

    def detect(self, image: np.ndarray) -> List[CoarseFace]:
        """Detect faces with coarse feature points on the full image."""
        ...

    def close(self) -> None:
        ...


__all__ = ["FaceRectDetector", "LandmarkDetector", "CoarseFaceDetector"]
