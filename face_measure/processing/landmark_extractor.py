"""랜드마크 → 측정값(Measure) 변환"""

from typing import List, Optional, Sequence, Tuple

from ..models import (
    FULL_IMAGE_BOX,
    BoundingBox,
    CoarseFace,
    FaceLandmarks,
    Line,
    Measure,
    Point,
)
from ..utils.validators import validate_image_size
from .geometry import GeometryCalculator


class LandmarkExtractor:
    """
    얼굴 1개의 랜드마크 그룹에서 픽셀 거리, 비율, overlay 좌표 계산

    측정 항목:
    - IPD: 양쪽 눈 그룹 무게중심 사이 거리
    - 코 너비 / 입 너비: 그룹의 가장 왼쪽-오른쪽 점 사이 거리
    - 턱선 길이: face contour 폴리라인 길이
    """

    def __init__(self):
        self.geometry = GeometryCalculator()

    def extract(
        self,
        face: FaceLandmarks,
        image_size: Tuple[int, int],
        face_id: int = 0
    ) -> Measure:
        """
        정밀 랜드마크로 Measure 생성

        Args:
            face: 기준 box + 랜드마크 그룹
            image_size: 전체 이미지 (width, height) 픽셀
            face_id: 이번 검출에서의 얼굴 인덱스

        Returns:
            Measure (랜드마크가 하나도 없으면 거리/비율이 모두 None)
        """
        validate_image_size(image_size)
        img_w, img_h = image_size
        box = face.box
        lms = face.landmarks
        face_w = self.geometry.face_width_px(box, img_w)

        ipd_px, ipd_line = None, None
        if lms.left_eye and lms.right_eye:
            ipd_line = (self._to_image(self.geometry.centroid(lms.left_eye), box),
                        self._to_image(self.geometry.centroid(lms.right_eye), box))
            ipd_px = self._line_length_px(ipd_line, image_size)

        nose_px, nose_line = self._extremal_width(lms.nose, box, image_size)
        mouth_px, mouth_line = self._extremal_width(lms.outer_lips, box, image_size)

        jaw_px = None
        contour01 = [self._to_image(p, box) for p in lms.face_contour]
        if lms.face_contour:
            jaw_px = self.geometry.polyline_length(
                [self.geometry.to_pixels(p, img_w, img_h) for p in contour01]
            )

        points01: List[Point] = []
        if ipd_line is not None:
            points01.extend(ipd_line)
        points01.extend(contour01)

        lines01 = [line for line in (ipd_line, nose_line, mouth_line) if line is not None]

        return Measure(
            face_id=face_id,
            image_size=(img_w, img_h),
            ipd_px=ipd_px,
            nose_width_px=nose_px,
            mouth_width_px=mouth_px,
            jaw_length_px=jaw_px,
            ipd_ratio=self._ratio(ipd_px, face_w),
            nose_ratio=self._ratio(nose_px, face_w),
            mouth_ratio=self._ratio(mouth_px, face_w),
            jaw_ratio=self._ratio(jaw_px, face_w),
            points01=tuple(points01),
            measure_lines01=tuple(lines01),
        )

    def extract_coarse(
        self,
        face: CoarseFace,
        image_size: Tuple[int, int],
        face_id: int = 0
    ) -> Measure:
        """
        Fallback 검출기의 눈/입 위치로 저정밀 Measure 생성 (IPD만)

        Args:
            face: 눈/입 위치 (detector space, 전체 이미지 기준)
            image_size: 전체 이미지 (width, height) 픽셀
            face_id: 얼굴 인덱스

        Returns:
            IPD 외 항목이 모두 None인 Measure
        """
        validate_image_size(image_size)
        img_w, _ = image_size
        face_w = self.geometry.face_width_px(face.candidate.box, img_w)

        left01 = self._to_image(face.left_eye, FULL_IMAGE_BOX) if face.left_eye else None
        right01 = self._to_image(face.right_eye, FULL_IMAGE_BOX) if face.right_eye else None
        mouth01 = self._to_image(face.mouth, FULL_IMAGE_BOX) if face.mouth else None

        ipd_px, ipd_line = None, None
        if left01 is not None and right01 is not None:
            ipd_line = (left01, right01)
            ipd_px = self._line_length_px(ipd_line, image_size)

        points01 = tuple(p for p in (left01, right01, mouth01) if p is not None)

        return Measure(
            face_id=face_id,
            image_size=image_size,
            ipd_px=ipd_px,
            ipd_ratio=self._ratio(ipd_px, face_w),
            points01=points01,
            measure_lines01=(ipd_line,) if ipd_line is not None else (),
        )

    def _to_image(self, p: Point, box: BoundingBox) -> Point:
        return self.geometry.denormalize_to_image(p, box)

    def _line_length_px(self, line: Line, image_size: Tuple[int, int]) -> float:
        img_w, img_h = image_size
        a = self.geometry.to_pixels(line[0], img_w, img_h)
        b = self.geometry.to_pixels(line[1], img_w, img_h)
        return self.geometry.distance(a, b)

    def _extremal_width(
        self,
        points: Sequence[Point],
        box: BoundingBox,
        image_size: Tuple[int, int]
    ) -> Tuple[Optional[float], Optional[Line]]:
        """그룹의 좌우 끝점 사이 픽셀 거리와 overlay 선분"""
        pair = self.geometry.extremal_pair(points)
        if pair is None:
            return None, None

        line = (self._to_image(pair[0], box), self._to_image(pair[1], box))
        return self._line_length_px(line, image_size), line

    @staticmethod
    def _ratio(value: Optional[float], face_width_px: float) -> Optional[float]:
        return None if value is None else value / face_width_px
