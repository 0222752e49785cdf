"""
Record Store - 측정 기록 관리
"""
from datetime import datetime
from typing import List, Optional, Tuple

from ..models import FaceRecord, Measure, MetricKind, MetricSnapshot
from ..utils import get_logger

logger = get_logger(__name__)


def snapshot_from_measure(measure: Measure) -> MetricSnapshot:
    """
    Measure → 저장용 MetricSnapshot

    측정 파이프라인이 만드는 4개 항목만 채우고 나머지 슬롯은 항상 None.
    """
    return MetricSnapshot(
        ipd_px=measure.ipd_px,
        nose_width_px=measure.nose_width_px,
        mouth_width_px=measure.mouth_width_px,
        jaw_length_px=measure.jaw_length_px,
    )


class RecordStore:
    """
    측정 기록 저장소 (메모리)
    최신 기록이 앞에 오도록 유지합니다.
    """

    def __init__(self):
        self.records: List[FaceRecord] = []

    def add_from_measure(
        self,
        measure: Measure,
        subject: str,
        procedure: str,
        date: Optional[datetime] = None
    ) -> FaceRecord:
        """
        측정 결과를 기록으로 추가

        Args:
            measure: 파이프라인 측정 결과
            subject: 대상자
            procedure: 시술/절차 이름
            date: 기록 시각 (None이면 현재 시각)

        Returns:
            FaceRecord: 추가된 기록
        """
        record = FaceRecord(
            date=date or datetime.now(),
            subject=subject,
            procedure=procedure,
            metrics=snapshot_from_measure(measure),
        )
        self.records.insert(0, record)
        logger.info(f"Record added: {subject} / {procedure}")
        return record

    def add_manual(
        self,
        date: datetime,
        subject: str,
        procedure: str,
        metrics: Optional[MetricSnapshot] = None
    ) -> FaceRecord:
        """직접 입력한 값으로 기록 추가"""
        record = FaceRecord(
            date=date,
            subject=subject,
            procedure=procedure,
            metrics=metrics or MetricSnapshot(),
        )
        self.records.insert(0, record)
        logger.debug(f"Manual record added: {subject} / {procedure}")
        return record

    @property
    def subjects(self) -> List[str]:
        """기록된 대상자 목록 (정렬, 중복 제거)"""
        return sorted({r.subject for r in self.records})

    @property
    def procedures(self) -> List[str]:
        """기록된 절차 목록 (정렬, 중복 제거)"""
        return sorted({r.procedure for r in self.records})

    @property
    def last_subject(self) -> str:
        """가장 최근 기록의 대상자 (기록이 없으면 빈 문자열)"""
        return self.records[0].subject if self.records else ""

    def chart_series(
        self,
        subject: Optional[str],
        procedure: Optional[str],
        metric: MetricKind
    ) -> List[Tuple[datetime, float]]:
        """
        차트용 (날짜, 값) 시계열

        Args:
            subject: 대상자 필터 (None 또는 빈 문자열이면 전체)
            procedure: 절차 필터 (None 또는 빈 문자열이면 전체)
            metric: 측정 항목

        Returns:
            날짜순 정렬된 (date, value) 리스트 (값이 없는 기록은 제외)
        """
        series = []
        for record in self.records:
            if subject and record.subject != subject:
                continue
            if procedure and record.procedure != procedure:
                continue
            value = metric.value_from(record.metrics)
            if value is not None:
                series.append((record.date, value))

        series.sort(key=lambda point: point[0])
        return series
