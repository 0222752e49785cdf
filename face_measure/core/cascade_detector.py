"""OpenCV Haar cascade 기반 fallback 검출기 (얼굴 + 눈/입 위치)"""

from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..config.constants import EYE_CASCADE_FILE, FACE_CASCADE_FILE, MOUTH_CASCADE_FILE
from ..config.settings import DetectionConfig
from ..models import BoundingBox, CoarseFace, DetectorSource, FaceCandidate, Point
from ..processing.geometry import GeometryCalculator
from ..utils import get_logger
from ..utils.exceptions import ConfigurationError, DetectorExecutionError
from ..utils.image_utils import to_gray

logger = get_logger(__name__)

Rect = Tuple[int, int, int, int]


def _load_cascade(filename: str) -> cv2.CascadeClassifier:
    cascade = cv2.CascadeClassifier(cv2.data.haarcascades + filename)
    if cascade.empty():
        raise ConfigurationError(f"Failed to load Haar cascade: {filename}")
    return cascade


class CascadeFaceDetector:
    """
    Haar cascade 얼굴 검출기

    정밀 랜드마크는 없고 눈 중심, 입 중심 같은 대략적인 특징점만 제공한다.
    quality 점수가 없으므로 FaceCandidate.quality는 None.
    """

    def __init__(self, config: DetectionConfig):
        self.config = config
        self.face_cascade = _load_cascade(FACE_CASCADE_FILE)
        self.eye_cascade = _load_cascade(EYE_CASCADE_FILE)
        self.mouth_cascade = _load_cascade(MOUTH_CASCADE_FILE)
        logger.info("Haar cascade fallback detector initialized")

    def detect(self, image: np.ndarray) -> List[CoarseFace]:
        """
        얼굴 + 눈/입 위치 검출

        Args:
            image: BGR / BGRA / grayscale (2차원 또는 1채널) 이미지

        Returns:
            CoarseFace 리스트 (detector space)

        Raises:
            DetectorExecutionError: OpenCV 실행 실패
        """
        h, w = image.shape[:2]
        min_side = max(1, int(min(w, h) * self.config.min_feature_size))

        try:
            gray = cv2.equalizeHist(to_gray(image))
            rects = self.face_cascade.detectMultiScale(
                gray,
                scaleFactor=self.config.cascade_scale_factor,
                minNeighbors=self.config.cascade_min_neighbors,
                flags=cv2.CASCADE_SCALE_IMAGE,
                minSize=(min_side, min_side)
            )
            faces = [self._describe_face(gray, tuple(int(v) for v in r)) for r in rects]
        except cv2.error as e:
            raise DetectorExecutionError(f"Haar cascade detection failed: {e}") from e

        logger.debug(f"Fallback faces: {len(faces)}")
        return faces

    def _describe_face(self, gray: np.ndarray, rect: Rect) -> CoarseFace:
        """얼굴 영역 안에서 눈/입 위치 찾기"""
        img_h, img_w = gray.shape[:2]
        x, y, fw, fh = rect

        # 눈: 얼굴 상단 절반, 입: 하단 1/3
        eyes = self._centers(self.eye_cascade, gray, (x, y, fw, fh // 2), limit=2)
        mouths = self._centers(self.mouth_cascade, gray, (x, y + (fh * 2) // 3, fw, fh - (fh * 2) // 3),
                               limit=1)

        left_eye = right_eye = None
        if len(eyes) == 2:
            left_px, right_px = sorted(eyes, key=lambda c: c[0])
            left_eye = self._to_detector(left_px, img_w, img_h)
            right_eye = self._to_detector(right_px, img_w, img_h)

        mouth = self._to_detector(mouths[0], img_w, img_h) if mouths else None

        box = GeometryCalculator.flip_to_detector(
            BoundingBox(x / img_w, y / img_h, fw / img_w, fh / img_h)
        )
        return CoarseFace(
            candidate=FaceCandidate(box=box, quality=None, source=DetectorSource.FALLBACK),
            left_eye=left_eye,
            right_eye=right_eye,
            mouth=mouth,
        )

    def _centers(
        self,
        cascade: cv2.CascadeClassifier,
        gray: np.ndarray,
        roi: Rect,
        limit: int
    ) -> List[Tuple[float, float]]:
        """ROI 안에서 cascade 검출 → 큰 순서대로 limit개의 중심 (픽셀, 원점 좌상단)"""
        rx, ry, rw, rh = roi
        if rw <= 0 or rh <= 0:
            return []

        found: Sequence = cascade.detectMultiScale(
            gray[ry:ry + rh, rx:rx + rw],
            scaleFactor=self.config.cascade_scale_factor,
            minNeighbors=self.config.cascade_min_neighbors
        )
        largest = sorted(found, key=lambda r: int(r[2]) * int(r[3]), reverse=True)[:limit]
        return [(rx + ex + ew / 2.0, ry + ey + eh / 2.0) for ex, ey, ew, eh in largest]

    @staticmethod
    def _to_detector(center: Optional[Tuple[float, float]], img_w: int, img_h: int) -> Optional[Point]:
        if center is None:
            return None
        return GeometryCalculator.flip_point_to_detector(Point(center[0] / img_w, center[1] / img_h))

    def close(self):
        """CascadeClassifier는 별도 해제가 필요 없음"""
        pass
