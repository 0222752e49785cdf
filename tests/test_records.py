"""RecordStore / snapshot_from_measure 테스트"""

from datetime import datetime

import pytest

from face_measure.models import Measure, MetricKind, MetricSnapshot
from face_measure.store.records import RecordStore, snapshot_from_measure


@pytest.fixture
def measure() -> Measure:
    return Measure(
        face_id=0,
        image_size=(1000, 1000),
        ipd_px=400.0,
        nose_width_px=100.0,
        mouth_width_px=200.0,
        jaw_length_px=None,
        ipd_ratio=0.8,
    )


def test_snapshot_populates_only_extracted_slots(measure):
    snapshot = snapshot_from_measure(measure)

    assert snapshot.ipd_px == 400.0
    assert snapshot.nose_width_px == 100.0
    assert snapshot.mouth_width_px == 200.0
    assert snapshot.jaw_length_px is None
    for kind in (MetricKind.NOSE_HEIGHT_PX, MetricKind.FOREHEAD_WIDTH_PX,
                 MetricKind.FOREHEAD_HEIGHT_PX, MetricKind.EYE_LEFT_WIDTH_PX,
                 MetricKind.EYE_LEFT_HEIGHT_PX, MetricKind.EYE_RIGHT_WIDTH_PX,
                 MetricKind.EYE_RIGHT_HEIGHT_PX):
        assert kind.value_from(snapshot) is None


def test_metric_kind_covers_every_snapshot_slot():
    assert len(MetricKind) == 11
    assert set(MetricSnapshot().to_dict()) == {kind.key for kind in MetricKind}
    assert all(kind.unit == "px" for kind in MetricKind)


def test_add_from_measure_newest_first(measure):
    store = RecordStore()
    store.add_from_measure(measure, "alice", "botox", date=datetime(2024, 1, 1))
    latest = store.add_from_measure(measure, "bob", "filler", date=datetime(2024, 2, 1))

    assert store.records[0] is latest
    assert store.last_subject == "bob"
    assert latest.metrics.ipd_px == 400.0


def test_empty_store():
    store = RecordStore()
    assert store.last_subject == ""
    assert store.subjects == []
    assert store.procedures == []


def test_subjects_and_procedures_sorted_unique():
    store = RecordStore()
    for subject, procedure in [("carol", "b"), ("alice", "a"), ("carol", "a")]:
        store.add_manual(datetime(2024, 1, 1), subject, procedure)

    assert store.subjects == ["alice", "carol"]
    assert store.procedures == ["a", "b"]


class TestChartSeries:
    @pytest.fixture
    def store(self):
        store = RecordStore()
        store.add_manual(datetime(2024, 3, 1), "alice", "botox", MetricSnapshot(ipd_px=61.0))
        store.add_manual(datetime(2024, 1, 1), "alice", "botox", MetricSnapshot(ipd_px=60.0))
        store.add_manual(datetime(2024, 2, 1), "alice", "filler", MetricSnapshot(ipd_px=62.0))
        store.add_manual(datetime(2024, 2, 15), "bob", "botox", MetricSnapshot(ipd_px=58.0))
        store.add_manual(datetime(2024, 4, 1), "alice", "botox", MetricSnapshot())
        return store

    def test_filtered_and_sorted_by_date(self, store):
        series = store.chart_series("alice", "botox", MetricKind.IPD_PX)
        assert series == [(datetime(2024, 1, 1), 60.0), (datetime(2024, 3, 1), 61.0)]

    @pytest.mark.parametrize("subject", [None, ""])
    def test_empty_filter_means_all(self, store, subject):
        series = store.chart_series(subject, "botox", MetricKind.IPD_PX)
        assert [value for _, value in series] == [60.0, 58.0, 61.0]

    def test_absent_values_skipped(self, store):
        assert store.chart_series(None, None, MetricKind.JAW_LENGTH_PX) == []


def test_record_to_dict(measure):
    record = RecordStore().add_from_measure(measure, "alice", "botox", date=datetime(2024, 1, 1, 9, 30))
    data = record.to_dict()

    assert data['date'] == "2024-01-01T09:30:00"
    assert data['subject'] == "alice"
    assert data['metrics']['ipd_px'] == 400.0
    assert data['metrics']['forehead_width_px'] is None
    assert data['id']
