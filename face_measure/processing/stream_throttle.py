"""스트림 재검출 간격 제어"""

from typing import Optional, Sequence, Tuple

from ..config.constants import DEFAULT_DETECT_INTERVAL
from ..models import FaceCandidate, StreamState


class StreamThrottle:
    """
    프레임마다 얼굴 영역을 다시 찾을지 결정

    재검출 사이에는 이전 얼굴 후보를 그대로 재사용한다 (재검증 없음).
    상태는 StreamState 값으로 주고받고, 이 객체는 간격 외에 아무것도 저장하지 않는다.
    """

    def __init__(self, interval: float = DEFAULT_DETECT_INTERVAL):
        if interval < 0.0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.interval = interval

    def begin_frame(self, state: StreamState, image_size: Tuple[int, int]) -> StreamState:
        """
        새 프레임 크기 기록 (크기가 바뀌면 검출 시각 초기화)

        Args:
            state: 이전 스트림 상태
            image_size: 이번 프레임 (width, height)

        Returns:
            갱신된 스트림 상태
        """
        if state.image_size == image_size:
            return state
        return StreamState(faces=state.faces, last_detect_time=0.0, image_size=image_size)

    def should_detect(
        self,
        state: StreamState,
        now: float,
        image_size: Optional[Tuple[int, int]] = None
    ) -> bool:
        """
        이번 프레임에서 얼굴 검출을 새로 돌려야 하는지

        Args:
            state: 현재 스트림 상태
            now: 현재 시각 (초)
            image_size: 이번 프레임 크기 (None이면 크기 비교 생략)

        Returns:
            재검출 필요 여부
        """
        if image_size is not None and state.image_size != image_size:
            return True
        if not state.faces:
            return True
        return now - state.last_detect_time > self.interval

    def after_detection(
        self,
        state: StreamState,
        faces: Sequence[FaceCandidate],
        now: float
    ) -> StreamState:
        """검출 성공 후 얼굴 후보와 검출 시각 저장"""
        return StreamState(faces=tuple(faces), last_detect_time=now, image_size=state.image_size)
