"""공통 테스트 fixture: 가짜 검출기와 빈 이미지"""

from typing import List, Optional, Sequence

import numpy as np
import pytest

from face_measure.config.settings import DetectionConfig, StreamConfig
from face_measure.models import (
    BoundingBox,
    CoarseFace,
    DetectorSource,
    FaceCandidate,
    FaceLandmarks,
    LandmarkSet,
    Point,
)
from face_measure.processing.pipeline import DetectionPipeline
from face_measure.utils.exceptions import DetectorExecutionError

FACE_BOX = BoundingBox(0.25, 0.5, 0.5, 0.5)


class FakeFaceDetector:
    """FaceRectDetector 대역 (고정 결과 또는 예외)"""

    def __init__(self, faces: Optional[Sequence[FaceCandidate]] = None, error: Optional[Exception] = None):
        self.faces = list(faces or [])
        self.error = error
        self.calls = 0
        self.closed = False

    def detect(self, image: np.ndarray) -> List[FaceCandidate]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.faces)

    def close(self):
        self.closed = True


class FakeLandmarkDetector:
    """LandmarkDetector 대역: 요청된 box에 고정 랜드마크를 붙여 반환"""

    def __init__(self, landmarks: Optional[Sequence[LandmarkSet]] = None, error: Optional[Exception] = None):
        self.landmarks = list(landmarks or [])
        self.error = error
        self.requests: List[FaceCandidate] = []
        self.closed = False

    def detect(self, image: np.ndarray, face: FaceCandidate) -> List[FaceLandmarks]:
        self.requests.append(face)
        if self.error is not None:
            raise self.error
        return [FaceLandmarks(box=face.box, landmarks=lms) for lms in self.landmarks]

    def close(self):
        self.closed = True


class FakeCoarseDetector:
    """CoarseFaceDetector 대역"""

    def __init__(self, faces: Optional[Sequence[CoarseFace]] = None, error: Optional[Exception] = None):
        self.faces = list(faces or [])
        self.error = error
        self.calls = 0
        self.closed = False

    def detect(self, image: np.ndarray) -> List[CoarseFace]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.faces)

    def close(self):
        self.closed = True


def make_landmarks() -> LandmarkSet:
    """FACE_BOX 기준 측정값이 손으로 계산 가능한 랜드마크

    1000x1000 이미지에서:
        IPD = 400px (unit 좌표 (0.3, 0.4) ↔ (0.7, 0.4))
        코 너비 = 100px, 입 너비 = 200px, 턱선 = 500 * sqrt(2) px
    """
    return LandmarkSet(
        left_eye=(Point(0.05, 0.2), Point(0.15, 0.2), Point(0.1, 0.25), Point(0.1, 0.15)),
        right_eye=(Point(0.85, 0.2), Point(0.95, 0.2), Point(0.9, 0.25), Point(0.9, 0.15)),
        nose=(Point(0.5, 0.5), Point(0.4, 0.45), Point(0.6, 0.45)),
        outer_lips=(Point(0.3, 0.7), Point(0.5, 0.75), Point(0.7, 0.7)),
        face_contour=(Point(0.0, 0.5), Point(0.5, 1.0), Point(1.0, 0.5)),
    )


def make_coarse_face(box: BoundingBox = BoundingBox(0.2, 0.3, 0.4, 0.4)) -> CoarseFace:
    """눈 사이 거리 300px (1000x1000 기준), 얼굴 너비 400px"""
    return CoarseFace(
        candidate=FaceCandidate(box=box, quality=None, source=DetectorSource.FALLBACK),
        left_eye=Point(0.25, 0.6),
        right_eye=Point(0.55, 0.6),
        mouth=Point(0.4, 0.4),
    )


@pytest.fixture
def blank_image() -> np.ndarray:
    return np.zeros((1000, 1000, 3), dtype=np.uint8)


@pytest.fixture
def primary_face() -> FaceCandidate:
    return FaceCandidate(box=FACE_BOX, quality=0.9)


@pytest.fixture
def detection_config() -> DetectionConfig:
    return DetectionConfig()


@pytest.fixture
def make_pipeline(detection_config):
    """가짜 검출기로 파이프라인 생성하는 factory"""

    def _make(face_detector=None, landmark_detector=None, fallback_detector=None,
              config=None, detect_interval=0.5):
        return DetectionPipeline(
            face_detector if face_detector is not None else FakeFaceDetector(),
            landmark_detector if landmark_detector is not None else FakeLandmarkDetector(),
            fallback_detector if fallback_detector is not None else FakeCoarseDetector(),
            config=config or detection_config,
            stream_config=StreamConfig(detect_interval=detect_interval),
        )

    return _make


@pytest.fixture
def detector_error() -> DetectorExecutionError:
    return DetectorExecutionError("backend crashed")
