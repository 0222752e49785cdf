"""측정용 기하학 계산 유틸리티

좌표계 변환(특히 y축 반전)은 모두 이 모듈에서만 수행한다.
"""

import math
from typing import Optional, Sequence, Tuple

from ..config.constants import MIN_FACE_WIDTH_PX
from ..models import BoundingBox, Point


class GeometryCalculator:
    """측정 기하학 계산"""

    @staticmethod
    def centroid(points: Sequence[Point]) -> Point:
        """
        점 집합의 무게중심 (x, y 산술 평균)

        Args:
            points: 좌표 리스트 (비어 있으면 안 됨)

        Returns:
            무게중심 Point

        Raises:
            ValueError: 빈 입력
        """
        if not points:
            raise ValueError("centroid of empty point set is undefined")

        n = len(points)
        sx = sum(p.x for p in points)
        sy = sum(p.y for p in points)
        return Point(sx / n, sy / n)

    @staticmethod
    def extremal_pair(points: Sequence[Point]) -> Optional[Tuple[Point, Point]]:
        """
        가장 왼쪽 / 가장 오른쪽 점 선택

        한 번의 순회로 min-x, max-x를 추적하며 동률이면 먼저 나온 점이 유지된다.

        Args:
            points: 좌표 리스트

        Returns:
            (leftmost, rightmost) 또는 빈 입력이면 None
        """
        if not points:
            return None

        min_x = math.inf
        max_x = -math.inf
        leftmost = rightmost = points[0]
        for p in points:
            if p.x < min_x:
                min_x = p.x
                leftmost = p
            if p.x > max_x:
                max_x = p.x
                rightmost = p
        return (leftmost, rightmost)

    @staticmethod
    def distance(a: Point, b: Point) -> float:
        """두 점 사이 유클리드 거리"""
        return math.hypot(b.x - a.x, b.y - a.y)

    @staticmethod
    def polyline_length(points: Sequence[Point]) -> float:
        """
        폴리라인 길이 (연속한 점 사이 거리 합)

        Returns:
            길이 (점이 0~1개면 0.0)
        """
        if len(points) < 2:
            return 0.0

        total = 0.0
        prev = points[0]
        for cur in points[1:]:
            total += GeometryCalculator.distance(prev, cur)
            prev = cur
        return total

    @staticmethod
    def denormalize_to_image(p: Point, box: BoundingBox) -> Point:
        """
        box 기준 정규화 좌표 → 전체 이미지 unit-square 좌표

        detector 규약(원점 좌하단)에서 display 규약(원점 좌상단)으로 y축을 반전한다.

        Args:
            p: region-local 좌표 (0~1, 원점 좌하단)
            box: detector space bounding box

        Returns:
            unit-square 좌표 (0~1, 원점 좌상단)
        """
        return Point(box.x + p.x * box.width,
                     1.0 - (box.y + p.y * box.height))

    @staticmethod
    def to_pixels(p01: Point, image_width: float, image_height: float) -> Point:
        """unit-square 좌표 → 픽셀 좌표"""
        return Point(p01.x * image_width, p01.y * image_height)

    @staticmethod
    def flip_to_detector(box: BoundingBox) -> BoundingBox:
        """원점 좌상단 정규화 box → detector space box"""
        return BoundingBox(box.x, 1.0 - box.y - box.height, box.width, box.height)

    @staticmethod
    def flip_point_to_detector(p: Point) -> Point:
        """원점 좌상단 정규화 좌표 → 원점 좌하단 좌표 (전체 이미지 또는 region-local 공통)"""
        return Point(p.x, 1.0 - p.y)

    @staticmethod
    def face_width_px(box: BoundingBox, image_width: float) -> float:
        """얼굴 너비 (픽셀, 최소 1px)"""
        return max(box.width * image_width, MIN_FACE_WIDTH_PX)
