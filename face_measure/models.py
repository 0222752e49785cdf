"""데이터 모델 정의

좌표계 규약:
    - detector space: 0~1 정규화, 원점 좌하단 (y 위로 증가)
    - region-local: 얼굴 bounding box 기준 0~1 정규화, 원점 좌하단
    - unit-square (display): 전체 이미지 기준 0~1, 원점 좌상단 (y 아래로 증가)
    - pixel: unit-square * (width, height)
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .utils.validators import validate_confidence


class Point(NamedTuple):
    """2D 좌표"""
    x: float
    y: float


Line = Tuple[Point, Point]


class BoundingBox(NamedTuple):
    """정규화 bounding box (detector space, 원점 좌하단)"""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


FULL_IMAGE_BOX = BoundingBox(0.0, 0.0, 1.0, 1.0)


class DetectorSource(Enum):
    """얼굴 후보를 만든 검출기"""
    PRIMARY = "primary"      # MediaPipe (정밀 랜드마크 가능)
    FALLBACK = "fallback"    # Haar cascade (눈/입 위치만)


class Orientation(Enum):
    """EXIF orientation (1~8)"""
    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8


class PipelineState(Enum):
    """검출 파이프라인 상태"""
    NO_FACE = "no_face"
    DETECTING = "detecting"
    FACE_FOUND = "face_found"
    LANDMARKS_REQUESTED = "landmarks_requested"
    LANDMARKS_FOUND = "landmarks_found"
    LANDMARKS_FALLBACK = "landmarks_fallback"
    DONE = "done"


@dataclass(frozen=True)
class FaceCandidate:
    """검출된 얼굴 후보 (검출 1회마다 새로 생성)"""

    box: BoundingBox
    quality: Optional[float] = None  # capture quality / detection score
    source: DetectorSource = DetectorSource.PRIMARY

    def __post_init__(self):
        if self.quality is not None:
            validate_confidence(self.quality, "quality")

    @property
    def sort_key(self) -> Tuple[float, float]:
        """best face 선택 키: (quality, area)"""
        return (self.quality if self.quality is not None else 0.0, self.box.area)


@dataclass(frozen=True)
class CoarseFace:
    """Fallback 검출기 결과 (눈/입 위치만, detector space, 눈은 이미지 기준 좌우)"""

    candidate: FaceCandidate
    left_eye: Optional[Point] = None
    right_eye: Optional[Point] = None
    mouth: Optional[Point] = None


@dataclass(frozen=True)
class LandmarkSet:
    """
    얼굴 1개의 랜드마크 그룹 (region-local 좌표, 빈 tuple = 그룹 없음)

    left_eye / right_eye는 이미지 기준 왼쪽 / 오른쪽 눈이다.
    """

    left_eye: Tuple[Point, ...] = ()
    right_eye: Tuple[Point, ...] = ()
    nose: Tuple[Point, ...] = ()
    outer_lips: Tuple[Point, ...] = ()
    face_contour: Tuple[Point, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.left_eye or self.right_eye or self.nose
                    or self.outer_lips or self.face_contour)


@dataclass(frozen=True)
class FaceLandmarks:
    """랜드마크 검출 결과: 기준 box + 랜드마크"""

    box: BoundingBox
    landmarks: LandmarkSet


@dataclass(frozen=True)
class Measure:
    """얼굴 1개의 측정 결과 (픽셀 거리 + 얼굴 너비 대비 비율)"""

    face_id: int
    image_size: Tuple[int, int]  # (width, height)
    ipd_px: Optional[float] = None
    nose_width_px: Optional[float] = None
    mouth_width_px: Optional[float] = None
    jaw_length_px: Optional[float] = None
    ipd_ratio: Optional[float] = None
    nose_ratio: Optional[float] = None
    mouth_ratio: Optional[float] = None
    jaw_ratio: Optional[float] = None
    points01: Tuple[Point, ...] = ()
    measure_lines01: Tuple[Line, ...] = ()

    @property
    def has_landmarks(self) -> bool:
        """하나 이상의 거리가 측정되었는지"""
        return any(v is not None for v in (
            self.ipd_px, self.nose_width_px, self.mouth_width_px, self.jaw_length_px
        ))

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (JSON 출력용)"""
        return {
            'face_id': self.face_id,
            'image_size': {'width': self.image_size[0], 'height': self.image_size[1]},
            'ipd_px': self.ipd_px,
            'nose_width_px': self.nose_width_px,
            'mouth_width_px': self.mouth_width_px,
            'jaw_length_px': self.jaw_length_px,
            'ipd_ratio': self.ipd_ratio,
            'nose_ratio': self.nose_ratio,
            'mouth_ratio': self.mouth_ratio,
            'jaw_ratio': self.jaw_ratio,
            'points01': [[p.x, p.y] for p in self.points01],
            'measure_lines01': [[[a.x, a.y], [b.x, b.y]] for a, b in self.measure_lines01],
        }


@dataclass(frozen=True)
class PipelineResult:
    """파이프라인 실행 결과 + 상태 전이 기록"""

    measures: List[Measure]
    trace: Tuple[PipelineState, ...] = ()


@dataclass(frozen=True)
class StreamState:
    """스트림 처리 상태 (프레임마다 새 값으로 교체)"""

    faces: Tuple[FaceCandidate, ...] = ()
    last_detect_time: float = 0.0
    image_size: Optional[Tuple[int, int]] = None


@dataclass
class MetricSnapshot:
    """저장용 측정값 (픽셀 단위, 없는 값은 None)"""

    ipd_px: Optional[float] = None
    nose_width_px: Optional[float] = None
    nose_height_px: Optional[float] = None
    mouth_width_px: Optional[float] = None
    jaw_length_px: Optional[float] = None
    forehead_width_px: Optional[float] = None
    forehead_height_px: Optional[float] = None
    eye_left_width_px: Optional[float] = None
    eye_left_height_px: Optional[float] = None
    eye_right_width_px: Optional[float] = None
    eye_right_height_px: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {kind.key: kind.value_from(self) for kind in MetricKind}


class MetricKind(Enum):
    """측정 항목 (차트/선택용)"""
    IPD_PX = ("ipd_px", "IPD")
    NOSE_WIDTH_PX = ("nose_width_px", "Nose width")
    NOSE_HEIGHT_PX = ("nose_height_px", "Nose height")
    MOUTH_WIDTH_PX = ("mouth_width_px", "Mouth width")
    JAW_LENGTH_PX = ("jaw_length_px", "Jaw length")
    FOREHEAD_WIDTH_PX = ("forehead_width_px", "Forehead width")
    FOREHEAD_HEIGHT_PX = ("forehead_height_px", "Forehead height")
    EYE_LEFT_WIDTH_PX = ("eye_left_width_px", "Left eye width")
    EYE_LEFT_HEIGHT_PX = ("eye_left_height_px", "Left eye height")
    EYE_RIGHT_WIDTH_PX = ("eye_right_width_px", "Right eye width")
    EYE_RIGHT_HEIGHT_PX = ("eye_right_height_px", "Right eye height")

    def __init__(self, key: str, label: str):
        self.key = key
        self.label = label

    @property
    def unit(self) -> str:
        return "px"

    def value_from(self, snapshot: MetricSnapshot) -> Optional[float]:
        """snapshot에서 해당 항목 값 꺼내기"""
        return getattr(snapshot, self.key)


@dataclass
class FaceRecord:
    """저장된 측정 기록"""

    date: datetime
    subject: str
    procedure: str
    metrics: MetricSnapshot = field(default_factory=MetricSnapshot)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'subject': self.subject,
            'procedure': self.procedure,
            'metrics': self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class FrameMeasurement:
    """이미지/프레임 1장의 측정 결과 (배치, 비디오 처리용)"""

    frame_index: int
    timestamp: float
    measures: List[Measure]
    source: Optional[str] = None  # 이미지 또는 비디오 경로

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frame_index': self.frame_index,
            'timestamp': self.timestamp,
            'source': self.source,
            'measures': [m.to_dict() for m in self.measures],
        }
