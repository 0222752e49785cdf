"""
Detection pipeline

1차 얼굴 검출 → 최적 얼굴 선택 → 영역 제한 랜드마크 검출 → 측정값 계산.
각 단계가 실패하면 Haar cascade fallback (IPD만) 또는 빈 결과로 내려간다.
MalformedInputError 외에는 어떤 예외도 밖으로 나가지 않는다.
"""

import time
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config.settings import DetectionConfig, StreamConfig
from ..models import (
    CoarseFace,
    FaceCandidate,
    Measure,
    Orientation,
    PipelineResult,
    PipelineState,
    StreamState,
)
from ..utils import get_logger
from ..utils.config_loader import Config
from ..utils.image_utils import apply_orientation, downscale, image_size
from ..utils.validators import validate_image
from .landmark_extractor import LandmarkExtractor
from .stream_throttle import StreamThrottle

logger = get_logger(__name__)


def select_best_face(faces: Sequence[FaceCandidate]) -> Optional[FaceCandidate]:
    """
    (quality, area) 최대 얼굴 선택

    quality가 없으면 0으로 취급. 완전히 같은 키면 먼저 나온 얼굴 유지.
    """
    best = None
    for face in faces:
        if best is None or face.sort_key > best.sort_key:
            best = face
    return best


def _best_coarse_face(faces: Sequence[CoarseFace]) -> Tuple[int, Optional[CoarseFace]]:
    best_index, best = -1, None
    for index, face in enumerate(faces):
        if best is None or face.candidate.sort_key > best.candidate.sort_key:
            best_index, best = index, face
    return best_index, best


class DetectionPipeline:
    """
    얼굴 측정 파이프라인

    Example:
        >>> with DetectionPipeline.from_config() as pipeline:
        ...     measures = pipeline.process_image(image)
    """

    def __init__(
        self,
        face_detector,
        landmark_detector,
        fallback_detector,
        config: Optional[DetectionConfig] = None,
        stream_config: Optional[StreamConfig] = None
    ):
        """
        초기화

        Args:
            face_detector: 1차 얼굴 영역 검출기 (FaceRectDetector, None이면 사용 불가)
            landmark_detector: 영역 제한 랜드마크 검출기 (LandmarkDetector)
            fallback_detector: 저정밀 검출기 (CoarseFaceDetector)
            config: 검출 설정
            stream_config: 스트림 설정
        """
        self.face_detector = face_detector
        self.landmark_detector = landmark_detector
        self.fallback_detector = fallback_detector
        self.config = config or DetectionConfig()
        self.throttle = StreamThrottle((stream_config or StreamConfig()).detect_interval)
        self.extractor = LandmarkExtractor()

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        constrained: Optional[bool] = None
    ) -> 'DetectionPipeline':
        """
        config.yaml 설정으로 MediaPipe / OpenCV 검출기를 만들어 파이프라인 생성

        constrained context면 MediaPipe 검출기는 만들지 않는다.

        Args:
            config: Config 인스턴스 (None이면 전역 설정)
            constrained: constrained context 강제 여부 (None이면 설정값)

        Raises:
            ConfigurationError: 설정 오류 또는 검출기 초기화 실패
        """
        from ..core.cascade_detector import CascadeFaceDetector

        detection_config = DetectionConfig.from_config(config)
        if constrained is not None:
            detection_config.constrained_context = constrained
        stream_config = StreamConfig.from_config(config)

        face_detector = landmark_detector = None
        if not detection_config.constrained_context:
            from ..core.face_detector import MediaPipeFaceDetector
            from ..core.landmark_detector import MediaPipeLandmarkDetector

            face_detector = MediaPipeFaceDetector(detection_config)
            landmark_detector = MediaPipeLandmarkDetector(detection_config)
        else:
            logger.info("Constrained context: primary detectors disabled")

        return cls(
            face_detector,
            landmark_detector,
            CascadeFaceDetector(detection_config),
            config=detection_config,
            stream_config=stream_config,
        )

    # ------------------------------------------------------------------
    # 정지 이미지
    # ------------------------------------------------------------------

    def process_image(
        self,
        image: np.ndarray,
        orientation: Orientation = Orientation.UP,
        constrained: Optional[bool] = None
    ) -> List[Measure]:
        """
        정지 이미지 측정

        Args:
            image: BGR / grayscale / BGRA 이미지
            orientation: 이미지의 EXIF orientation
            constrained: constrained context 강제 여부 (None이면 설정값)

        Returns:
            Measure 리스트 (최대 1개, 얼굴이 없으면 빈 리스트)

        Raises:
            MalformedInputError: 이미지가 유효하지 않은 경우
        """
        return self.run_image(image, orientation, constrained).measures

    def run_image(
        self,
        image: np.ndarray,
        orientation: Orientation = Orientation.UP,
        constrained: Optional[bool] = None
    ) -> PipelineResult:
        """process_image와 같지만 상태 전이 기록을 함께 반환"""
        validate_image(image)
        prepared = downscale(apply_orientation(image, orientation), self.config.max_dimension)
        size = image_size(prepared)
        trace = [PipelineState.DETECTING]

        if self._is_constrained(constrained):
            measures = self._run_coarse(prepared, size, trace)
        else:
            faces = self._detect_faces(prepared)
            if faces:
                measures = self._measure_best(prepared, size, faces, trace)
            else:
                measures = self._run_coarse(prepared, size, trace)

        trace.append(PipelineState.DONE)
        logger.debug(f"Pipeline trace: {[s.value for s in trace]}")
        return PipelineResult(measures=measures, trace=tuple(trace))

    # ------------------------------------------------------------------
    # 스트림
    # ------------------------------------------------------------------

    def process_frame(
        self,
        frame: np.ndarray,
        state: StreamState,
        now: Optional[float] = None,
        orientation: Orientation = Orientation.UP
    ) -> Tuple[List[Measure], StreamState]:
        """
        스트림 프레임 측정 (재검출 간격 적용)

        Args:
            frame: 프레임 이미지
            state: 이전 프레임까지의 스트림 상태
            now: 현재 시각 (초, None이면 time.monotonic())
            orientation: 프레임 orientation

        Returns:
            (Measure 리스트, 다음 프레임에 넘길 StreamState)

        Raises:
            MalformedInputError: 프레임이 유효하지 않은 경우
        """
        validate_image(frame)
        now = time.monotonic() if now is None else now
        prepared = apply_orientation(frame, orientation)
        size = image_size(prepared)
        trace = [PipelineState.DETECTING]

        detect = self.throttle.should_detect(state, now, size)
        state = self.throttle.begin_frame(state, size)

        if self._is_constrained(None):
            return self._run_coarse(prepared, size, trace), state

        faces = state.faces
        if detect:
            try:
                faces = tuple(self.face_detector.detect(prepared))
                state = self.throttle.after_detection(state, faces, now)
            except Exception as e:
                # 이전 얼굴이 있으면 그대로 사용 (검출 시각은 갱신하지 않음)
                logger.warning(f"Face detection failed on frame, keeping {len(state.faces)} held face(s): {e}")
                faces = state.faces

        if not faces:
            return self._run_coarse(prepared, size, trace), state

        return self._measure_best(prepared, size, faces, trace), state

    # ------------------------------------------------------------------
    # 내부 단계
    # ------------------------------------------------------------------

    def _is_constrained(self, override: Optional[bool]) -> bool:
        if self.face_detector is None or self.landmark_detector is None:
            return True
        return self.config.constrained_context if override is None else override

    def _detect_faces(self, image: np.ndarray) -> List[FaceCandidate]:
        """1차 검출 (실패하면 얼굴 없음으로 처리)"""
        try:
            return list(self.face_detector.detect(image))
        except Exception as e:
            logger.warning(f"Primary face detection failed, using fallback: {e}")
            return []

    def _measure_best(
        self,
        image: np.ndarray,
        size: Tuple[int, int],
        faces: Sequence[FaceCandidate],
        trace: List[PipelineState]
    ) -> List[Measure]:
        """최적 얼굴 영역 랜드마크 → Measure (실패 시 fallback)"""
        best = select_best_face(faces)
        trace.append(PipelineState.FACE_FOUND)
        logger.debug(f"Best face: box={best.box}, quality={best.quality}")

        trace.append(PipelineState.LANDMARKS_REQUESTED)
        try:
            localized = self.landmark_detector.detect(image, best)
        except Exception as e:
            logger.warning(f"Landmark detection failed, using fallback: {e}")
            localized = []

        if not localized:
            logger.info("No landmarks localized, falling back to coarse features")
            return self._run_coarse(image, size, trace, from_landmarks=True)

        trace.append(PipelineState.LANDMARKS_FOUND)
        measures = [
            self.extractor.extract(face, size, face_id=index)
            for index, face in enumerate(localized)
        ]
        return measures[:1]

    def _run_coarse(
        self,
        image: np.ndarray,
        size: Tuple[int, int],
        trace: List[PipelineState],
        from_landmarks: bool = False
    ) -> List[Measure]:
        """Fallback 검출기로 저정밀 Measure 생성 (얼굴이 없으면 빈 리스트)"""
        if from_landmarks:
            trace.append(PipelineState.LANDMARKS_FALLBACK)

        try:
            coarse = self.fallback_detector.detect(image)
        except Exception as e:
            logger.warning(f"Fallback detection failed: {e}")
            coarse = []

        index, best = _best_coarse_face(coarse)
        if best is None:
            trace.append(PipelineState.NO_FACE)
            logger.info("No face found")
            return []

        if not from_landmarks:
            trace.append(PipelineState.FACE_FOUND)
            trace.append(PipelineState.LANDMARKS_FALLBACK)

        return [self.extractor.extract_coarse(best, size, face_id=index)]

    def close(self):
        """검출기 리소스 해제"""
        for detector in (self.face_detector, self.landmark_detector, self.fallback_detector):
            if detector is not None:
                detector.close()
        logger.debug("DetectionPipeline closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


__all__ = ['DetectionPipeline', 'select_best_face']
