"""MediaPipe FaceMesh 기반 정밀 랜드마크 검출기 (얼굴 영역 제한)"""

from typing import Dict, List, Tuple

import cv2
import mediapipe as mp
import numpy as np

from ..config.constants import FACE_MESH_GROUPS
from ..config.settings import DetectionConfig
from ..models import BoundingBox, FaceCandidate, FaceLandmarks, LandmarkSet, Point
from ..processing.geometry import GeometryCalculator
from ..utils import get_logger
from ..utils.exceptions import ConfigurationError, DetectorExecutionError
from ..utils.image_utils import to_bgr

logger = get_logger(__name__)


class MediaPipeLandmarkDetector:
    """
    MediaPipe FaceMesh 기반 랜드마크 검출기

    요청된 얼굴 box 주변(여백 포함)만 잘라서 FaceMesh를 실행하고,
    결과 좌표를 요청 box 기준 region-local 좌표(원점 좌하단)로 돌려준다.
    """

    def __init__(self, config: DetectionConfig):
        """
        초기화

        Args:
            config: 검출 설정

        Raises:
            ConfigurationError: MediaPipe 초기화 실패
        """
        self.config = config
        self.margin = config.landmark_crop_margin

        try:
            self.face_mesh = mp.solutions.face_mesh.FaceMesh(
                static_image_mode=True,  # crop마다 위치가 달라 tracking 사용 안 함
                max_num_faces=1,
                refine_landmarks=config.refine_landmarks,
                min_detection_confidence=config.min_landmark_confidence
            )
            logger.info("MediaPipe FaceMesh initialized successfully")
        except Exception as e:
            raise ConfigurationError(f"Failed to initialize MediaPipe FaceMesh: {e}")

    def detect(self, image: np.ndarray, face: FaceCandidate) -> List[FaceLandmarks]:
        """
        얼굴 영역 안에서 랜드마크 검출

        Args:
            image: BGR 이미지 (H, W, 3)
            face: 랜드마크를 찾을 얼굴 후보 (detector space)

        Returns:
            FaceLandmarks 리스트 (못 찾으면 빈 리스트)

        Raises:
            DetectorExecutionError: MediaPipe 실행 실패
        """
        h, w = image.shape[:2]
        crop_x, crop_y, crop_w, crop_h = self._crop_rect(face.box, w, h, self.margin)
        if crop_w <= 0 or crop_h <= 0:
            logger.debug("Face region outside image, no landmarks")
            return []

        crop = to_bgr(image)[crop_y:crop_y + crop_h, crop_x:crop_x + crop_w]

        try:
            results = self.face_mesh.process(cv2.cvtColor(crop, cv2.COLOR_BGR2RGB))
        except Exception as e:
            raise DetectorExecutionError(f"MediaPipe FaceMesh failed: {e}") from e

        if not results.multi_face_landmarks:
            logger.debug("No face landmarks in region")
            return []

        # 요청 box (원점 좌상단 기준)
        top_left = GeometryCalculator.flip_to_detector(face.box)

        faces = []
        for face_landmarks in results.multi_face_landmarks:
            mesh = face_landmarks.landmark
            local: Dict[str, Tuple[Point, ...]] = {}
            for group, indices in FACE_MESH_GROUPS.items():
                local[group] = tuple(
                    self._to_region_local(mesh[i].x, mesh[i].y,
                                          (crop_x, crop_y, crop_w, crop_h), (w, h), top_left)
                    for i in indices if i < len(mesh)
                )
            faces.append(FaceLandmarks(box=face.box, landmarks=LandmarkSet(**local)))

        logger.debug(f"Landmarks localized for {len(faces)} face(s)")
        return faces

    @staticmethod
    def _crop_rect(box: BoundingBox, width: int, height: int, margin: float) -> Tuple[int, int, int, int]:
        """detector space box → 여백 포함 픽셀 crop 영역 (x, y, w, h)"""
        top_left = GeometryCalculator.flip_to_detector(box)
        mx, my = box.width * margin, box.height * margin

        x0 = int(max(0.0, (top_left.x - mx) * width))
        y0 = int(max(0.0, (top_left.y - my) * height))
        x1 = int(min(float(width), (top_left.x + top_left.width + mx) * width))
        y1 = int(min(float(height), (top_left.y + top_left.height + my) * height))
        return x0, y0, x1 - x0, y1 - y0

    @staticmethod
    def _to_region_local(
        u: float,
        v: float,
        crop: Tuple[int, int, int, int],
        image_size: Tuple[int, int],
        top_left: BoundingBox
    ) -> Point:
        """crop 기준 mesh 좌표 → 요청 box 기준 region-local 좌표 (원점 좌하단)"""
        crop_x, crop_y, crop_w, crop_h = crop
        img_w, img_h = image_size

        # 전체 이미지 정규화 좌표 (원점 좌상단)
        gx = (crop_x + u * crop_w) / img_w
        gy = (crop_y + v * crop_h) / img_h

        local_top_left = Point((gx - top_left.x) / top_left.width,
                               (gy - top_left.y) / top_left.height)
        return GeometryCalculator.flip_point_to_detector(local_top_left)

    def close(self):
        """리소스 해제"""
        if hasattr(self, 'face_mesh'):
            self.face_mesh.close()
            logger.debug("MediaPipe FaceMesh closed")
