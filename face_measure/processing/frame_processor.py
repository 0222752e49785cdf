"""이미지 파일 / 프레임 시퀀스 / 비디오 측정"""

import time
from pathlib import Path
from typing import Generator, Iterable, List, Optional, Sequence, Union

import cv2
import numpy as np

from ..models import FrameMeasurement, StreamState
from ..utils import get_logger
from ..utils.exceptions import MalformedInputError
from ..utils.image_utils import load_image
from .pipeline import DetectionPipeline

logger = get_logger(__name__)

PathLike = Union[str, Path]


class FrameProcessor:
    """DetectionPipeline을 파일/비디오 입력에 연결"""

    def __init__(self, pipeline: DetectionPipeline):
        """
        초기화

        Args:
            pipeline: DetectionPipeline 인스턴스
        """
        self.pipeline = pipeline

    def process_image(self, image_path: PathLike, frame_index: int = 0) -> FrameMeasurement:
        """
        단일 이미지 파일 측정

        Args:
            image_path: 이미지 파일 경로 (EXIF orientation은 로드 시 적용)
            frame_index: 결과에 기록할 인덱스

        Returns:
            FrameMeasurement

        Raises:
            MalformedInputError: 이미지 로드 실패
        """
        image = load_image(image_path)
        measures = self.pipeline.process_image(image)
        logger.info(f"{Path(image_path).name}: {len(measures)} face(s) measured")

        return FrameMeasurement(
            frame_index=frame_index,
            timestamp=time.time(),
            measures=measures,
            source=str(image_path),
        )

    def process_batch(self, image_paths: Sequence[PathLike]) -> List[FrameMeasurement]:
        """
        배치 이미지 처리

        Args:
            image_paths: 이미지 경로 리스트

        Returns:
            처리 결과 리스트
        """
        return [self.process_image(path, index) for index, path in enumerate(image_paths)]

    def process_frames(
        self,
        frames: Iterable[np.ndarray],
        timestamps: Optional[Iterable[float]] = None
    ) -> Generator[FrameMeasurement, None, None]:
        """
        프레임 시퀀스 처리 (제너레이터, 재검출 간격 적용)

        Args:
            frames: 프레임 이터러블
            timestamps: 프레임별 시각 (초, None이면 처리 시점 time.monotonic())

        Yields:
            FrameMeasurement: 각 프레임의 측정 결과
        """
        state = StreamState()
        times = iter(timestamps) if timestamps is not None else None

        for frame_index, frame in enumerate(frames):
            now = next(times) if times is not None else time.monotonic()
            measures, state = self.pipeline.process_frame(frame, state, now=now)
            yield FrameMeasurement(frame_index=frame_index, timestamp=now, measures=measures)

    def process_video(self, video_path: PathLike) -> Generator[FrameMeasurement, None, None]:
        """
        비디오 파일 처리 (제너레이터)

        Args:
            video_path: 비디오 파일 경로

        Yields:
            FrameMeasurement: 각 프레임의 측정 결과 (timestamp = 비디오 내 위치, 초)

        Raises:
            MalformedInputError: 비디오 열기 실패
        """
        cap = cv2.VideoCapture(str(video_path))
        if not cap.isOpened():
            raise MalformedInputError(f"Failed to open video: {video_path}")

        state = StreamState()
        frame_index = 0

        try:
            while cap.isOpened():
                ret, frame = cap.read()
                if not ret:
                    break

                now = cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
                measures, state = self.pipeline.process_frame(frame, state, now=now)

                yield FrameMeasurement(
                    frame_index=frame_index,
                    timestamp=now,
                    measures=measures,
                    source=str(video_path),
                )
                frame_index += 1

        finally:
            cap.release()
            logger.info(f"Video processed: {frame_index} frame(s) from {video_path}")
