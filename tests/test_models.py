"""데이터 모델 테스트"""

import pytest

from face_measure.models import (
    BoundingBox,
    FaceCandidate,
    FrameMeasurement,
    LandmarkSet,
    Measure,
    Point,
)


def test_face_candidate_sort_key():
    face = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.5, 0.4), quality=0.7)
    assert face.sort_key == pytest.approx((0.7, 0.2))


def test_face_candidate_without_quality():
    face = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.5, 0.4))
    assert face.sort_key[0] == 0.0


def test_face_candidate_rejects_out_of_range_quality():
    with pytest.raises(ValueError):
        FaceCandidate(box=BoundingBox(0.0, 0.0, 0.5, 0.5), quality=1.2)


def test_landmark_set_is_empty():
    assert LandmarkSet().is_empty
    assert not LandmarkSet(nose=(Point(0.5, 0.5),)).is_empty


def test_measure_to_dict():
    measure = Measure(
        face_id=0,
        image_size=(640, 480),
        ipd_px=100.0,
        ipd_ratio=0.5,
        points01=(Point(0.1, 0.2), Point(0.3, 0.2)),
        measure_lines01=((Point(0.1, 0.2), Point(0.3, 0.2)),),
    )
    data = measure.to_dict()

    assert data['image_size'] == {'width': 640, 'height': 480}
    assert data['ipd_px'] == 100.0
    assert data['nose_width_px'] is None
    assert data['points01'] == [[0.1, 0.2], [0.3, 0.2]]
    assert data['measure_lines01'] == [[[0.1, 0.2], [0.3, 0.2]]]
    assert measure.has_landmarks


def test_frame_measurement_to_dict():
    result = FrameMeasurement(frame_index=2, timestamp=1.5,
                              measures=[Measure(face_id=0, image_size=(1, 1))], source="a.png")
    data = result.to_dict()

    assert data['frame_index'] == 2
    assert data['source'] == "a.png"
    assert len(data['measures']) == 1
