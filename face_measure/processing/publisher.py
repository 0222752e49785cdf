# -*- coding: utf-8 -*-
"""
Thread-safe publication of measures for streaming input
"""

import threading
import time
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..models import Measure, Orientation, StreamState
from ..utils import get_logger

logger = get_logger(__name__)


class MeasureBoard:
    """
    최신 Measure 리스트 게시판

    - 게시된 리스트는 tuple로 통째로 교체 (부분 갱신 없음)
    - 읽는 쪽은 항상 이전 또는 새 리스트 전체를 본다
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._measures: Tuple[Measure, ...] = ()
        self.publish_count = 0

    def publish(self, measures: List[Measure]):
        """측정 결과 게시"""
        snapshot = tuple(measures)
        with self.lock:
            self._measures = snapshot
            self.publish_count += 1

    def latest(self) -> Tuple[Measure, ...]:
        """가장 최근 게시된 측정 결과"""
        with self.lock:
            return self._measures


class LatestFrameSlot:
    """
    1칸짜리 "최신 프레임 우선" 큐

    처리 중에 들어온 프레임은 새 프레임으로 덮어쓰고 drop 횟수를 센다.
    """

    def __init__(self):
        self.condition = threading.Condition()
        self._frame: Optional[Tuple[np.ndarray, Orientation]] = None
        self.put_count = 0
        self.drop_count = 0

    def put(self, frame: np.ndarray, orientation: Orientation = Orientation.UP):
        """프레임 넣기 (소비되지 않은 프레임은 버림)"""
        with self.condition:
            if self._frame is not None:
                self.drop_count += 1
                logger.debug(f"Frame dropped (total: {self.drop_count})")
            self._frame = (frame, orientation)
            self.put_count += 1
            self.condition.notify()

    def take(self, timeout: Optional[float] = None) -> Optional[Tuple[np.ndarray, Orientation]]:
        """
        다음 프레임 꺼내기

        Args:
            timeout: 최대 대기 시간 (초, None이면 무한 대기)

        Returns:
            (프레임, orientation), 시간 초과 시 None
        """
        with self.condition:
            if self._frame is None:
                self.condition.wait_for(lambda: self._frame is not None, timeout=timeout)
            frame, self._frame = self._frame, None
            return frame


class StreamWorker:
    """
    스트림 처리 백그라운드 스레드

    LatestFrameSlot에서 프레임을 꺼내 process_frame에 StreamState를 이어 넘기고,
    결과를 MeasureBoard에 게시한다. 한 스트림의 처리는 이 스레드 하나에서만 돈다.

    Example:
        >>> with StreamWorker(pipeline) as worker:
        ...     worker.slot.put(frame)
        ...     measures = worker.board.latest()
    """

    def __init__(
        self,
        pipeline,
        slot: Optional[LatestFrameSlot] = None,
        board: Optional[MeasureBoard] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "StreamWorker",
        poll_interval: float = 0.1
    ):
        """
        Args:
            pipeline: DetectionPipeline
            slot: 입력 프레임 슬롯
            board: 결과 게시판
            clock: 현재 시각 함수 (초)
            name: 로그용 이름
            poll_interval: 프레임 대기 중 종료 확인 주기 (초)
        """
        self.pipeline = pipeline
        self.slot = slot or LatestFrameSlot()
        self.board = board or MeasureBoard()
        self.clock = clock
        self.name = name
        self.poll_interval = poll_interval
        self.state = StreamState()
        self.frames_processed = 0
        self.is_running = False
        self.thread = None
        logger.info(f"{self.name} initialized")

    def _run(self):
        """프레임 처리 루프"""
        while self.is_running:
            item = self.slot.take(timeout=self.poll_interval)
            if item is None:
                continue

            frame, orientation = item
            try:
                measures, self.state = self.pipeline.process_frame(
                    frame, self.state, now=self.clock(), orientation=orientation
                )
            except Exception as e:
                logger.error(f"{self.name} frame skipped: {e}")
                continue

            self.board.publish(measures)
            self.frames_processed += 1

    def start(self):
        """백그라운드 스레드 시작"""
        if self.is_running:
            logger.warning(f"{self.name} already running")
            return

        self.is_running = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()
        logger.info(f"{self.name} started in background thread")

    def stop(self):
        """스레드 종료"""
        if not self.is_running:
            return

        logger.info(f"Stopping {self.name}...")
        self.is_running = False

        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=5.0)

        logger.info(f"{self.name} stopped (frames: {self.frames_processed}, dropped: {self.slot.drop_count})")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
