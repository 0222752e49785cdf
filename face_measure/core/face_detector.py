"""MediaPipe Face Detection 기반 1차 얼굴 영역 검출기"""

import time
from typing import List

import cv2
import mediapipe as mp
import numpy as np

from ..config.settings import DetectionConfig
from ..models import BoundingBox, DetectorSource, FaceCandidate
from ..processing.geometry import GeometryCalculator
from ..utils import get_logger
from ..utils.exceptions import ConfigurationError, DetectorExecutionError
from ..utils.image_utils import to_bgr

logger = get_logger(__name__)


class MediaPipeFaceDetector:
    """MediaPipe Face Detection 기반 얼굴 영역 검출기 (detection score = quality)"""

    def __init__(self, config: DetectionConfig):
        """
        초기화

        Args:
            config: 검출 설정

        Raises:
            ConfigurationError: MediaPipe 초기화 실패
        """
        self.config = config

        try:
            self.face_detection = mp.solutions.face_detection.FaceDetection(
                model_selection=config.model_selection,
                min_detection_confidence=config.min_detection_confidence
            )
            logger.info(f"MediaPipe FaceDetection initialized (model={config.model_selection})")
        except Exception as e:
            raise ConfigurationError(f"Failed to initialize MediaPipe FaceDetection: {e}")

    def detect(self, image: np.ndarray) -> List[FaceCandidate]:
        """
        얼굴 영역 검출

        Args:
            image: BGR 이미지 (H, W, 3)

        Returns:
            FaceCandidate 리스트 (detector space box)

        Raises:
            DetectorExecutionError: MediaPipe 실행 실패
        """
        start_time = time.time()

        try:
            # BGR → RGB 변환 (MediaPipe 요구사항)
            image_rgb = cv2.cvtColor(to_bgr(image), cv2.COLOR_BGR2RGB)
            results = self.face_detection.process(image_rgb)
        except Exception as e:
            raise DetectorExecutionError(f"MediaPipe FaceDetection failed: {e}") from e

        candidates = []
        for detection in results.detections or []:
            rel = detection.location_data.relative_bounding_box
            box = self._clip(BoundingBox(rel.xmin, rel.ymin, rel.width, rel.height))
            if box.width <= 0 or box.height <= 0:
                continue
            score = float(detection.score[0]) if detection.score else None
            candidates.append(FaceCandidate(
                box=GeometryCalculator.flip_to_detector(box),
                quality=score,
                source=DetectorSource.PRIMARY,
            ))

        processing_time = (time.time() - start_time) * 1000
        logger.debug(f"Rect faces: {len(candidates)} ({processing_time:.1f}ms)")
        return candidates

    @staticmethod
    def _clip(box: BoundingBox) -> BoundingBox:
        """이미지 밖으로 나간 box 잘라내기 (원점 좌상단 기준)"""
        x0 = min(max(box.x, 0.0), 1.0)
        y0 = min(max(box.y, 0.0), 1.0)
        x1 = min(max(box.x + box.width, 0.0), 1.0)
        y1 = min(max(box.y + box.height, 0.0), 1.0)
        return BoundingBox(x0, y0, x1 - x0, y1 - y0)

    def close(self):
        """리소스 해제"""
        if hasattr(self, 'face_detection'):
            self.face_detection.close()
            logger.debug("MediaPipe FaceDetection closed")
