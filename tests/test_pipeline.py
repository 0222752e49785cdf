"""DetectionPipeline 상태 전이 / fallback 테스트"""

import numpy as np
import pytest

from conftest import (
    FACE_BOX,
    FakeCoarseDetector,
    FakeFaceDetector,
    FakeLandmarkDetector,
    make_coarse_face,
    make_landmarks,
)
from face_measure.config.settings import DetectionConfig
from face_measure.models import BoundingBox, FaceCandidate, Orientation, PipelineState
from face_measure.processing.pipeline import select_best_face
from face_measure.utils.exceptions import MalformedInputError


class TestSelectBestFace:
    def test_quality_wins_over_area(self):
        """quality 우선, area는 보조 키"""
        high_quality = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.1, 1.0), quality=0.9)
        large = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.3, 1.0), quality=0.2)
        assert select_best_face([large, high_quality]) is high_quality

    def test_area_breaks_quality_tie(self):
        small = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.1, 0.1), quality=0.5)
        large = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.5, 0.5), quality=0.5)
        assert select_best_face([small, large]) is large

    def test_missing_quality_counts_as_zero(self):
        unknown = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.9, 0.9), quality=None)
        scored = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.1, 0.1), quality=0.1)
        assert select_best_face([unknown, scored]) is scored

    def test_exact_tie_keeps_first(self):
        first = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.2, 0.2), quality=0.5)
        second = FaceCandidate(box=BoundingBox(0.5, 0.5, 0.2, 0.2), quality=0.5)
        assert select_best_face([first, second]) is first

    def test_empty(self):
        assert select_best_face([]) is None


class TestStillImage:
    def test_landmarks_found(self, make_pipeline, blank_image, primary_face):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([make_landmarks()]),
        )
        result = pipeline.run_image(blank_image)

        assert len(result.measures) == 1
        assert result.measures[0].ipd_px == pytest.approx(400.0)
        assert result.measures[0].ipd_ratio == pytest.approx(0.8)
        assert result.trace == (
            PipelineState.DETECTING,
            PipelineState.FACE_FOUND,
            PipelineState.LANDMARKS_REQUESTED,
            PipelineState.LANDMARKS_FOUND,
            PipelineState.DONE,
        )

    def test_no_face_anywhere_returns_empty(self, make_pipeline, blank_image):
        fallback = FakeCoarseDetector()
        pipeline = make_pipeline(fallback_detector=fallback)
        result = pipeline.run_image(blank_image)

        assert result.measures == []
        assert fallback.calls == 1
        assert result.trace[-2:] == (PipelineState.NO_FACE, PipelineState.DONE)

    def test_fallback_faces_skip_landmarks(self, make_pipeline, blank_image):
        landmarks = FakeLandmarkDetector([make_landmarks()])
        pipeline = make_pipeline(
            landmark_detector=landmarks,
            fallback_detector=FakeCoarseDetector([make_coarse_face()]),
        )
        result = pipeline.run_image(blank_image)

        assert len(result.measures) == 1
        assert result.measures[0].ipd_px == pytest.approx(300.0)
        assert result.measures[0].nose_width_px is None
        assert landmarks.requests == []
        assert PipelineState.LANDMARKS_FALLBACK in result.trace
        assert PipelineState.LANDMARKS_REQUESTED not in result.trace

    def test_landmark_miss_degrades_to_single_coarse_measure(self, make_pipeline, blank_image, primary_face):
        fallback = FakeCoarseDetector([make_coarse_face()])
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([]),
            fallback_detector=fallback,
        )
        result = pipeline.run_image(blank_image)

        assert len(result.measures) == 1
        measure = result.measures[0]
        assert measure.ipd_px == pytest.approx(300.0)
        assert measure.nose_width_px is None
        assert measure.mouth_width_px is None
        assert measure.jaw_length_px is None
        assert fallback.calls == 1
        assert result.trace[-2:] == (PipelineState.LANDMARKS_FALLBACK, PipelineState.DONE)

    def test_landmark_miss_and_no_coarse_face(self, make_pipeline, blank_image, primary_face):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([]),
        )
        assert pipeline.process_image(blank_image) == []

    def test_landmark_error_degrades(self, make_pipeline, blank_image, primary_face, detector_error):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector(error=detector_error),
            fallback_detector=FakeCoarseDetector([make_coarse_face()]),
        )
        measures = pipeline.process_image(blank_image)

        assert len(measures) == 1
        assert measures[0].ipd_px == pytest.approx(300.0)

    def test_primary_error_uses_fallback(self, make_pipeline, blank_image, detector_error):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector(error=detector_error),
            fallback_detector=FakeCoarseDetector([make_coarse_face()]),
        )
        measures = pipeline.process_image(blank_image)

        assert len(measures) == 1
        assert measures[0].ipd_ratio == pytest.approx(0.75)

    def test_unexpected_backend_error_is_absorbed(self, make_pipeline, blank_image):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector(error=RuntimeError("boom")),
            fallback_detector=FakeCoarseDetector(error=RuntimeError("boom")),
        )
        assert pipeline.process_image(blank_image) == []

    def test_landmarks_requested_for_best_face(self, make_pipeline, blank_image):
        weak = FaceCandidate(box=BoundingBox(0.0, 0.0, 0.5, 0.5), quality=0.2)
        strong = FaceCandidate(box=FACE_BOX, quality=0.9)
        landmarks = FakeLandmarkDetector([make_landmarks()])
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([weak, strong]),
            landmark_detector=landmarks,
        )
        pipeline.process_image(blank_image)

        assert landmarks.requests == [strong]

    def test_output_truncated_to_first_face(self, make_pipeline, blank_image, primary_face):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([make_landmarks(), make_landmarks()]),
        )
        measures = pipeline.process_image(blank_image)

        assert len(measures) == 1
        assert measures[0].face_id == 0

    def test_idempotent(self, make_pipeline, blank_image, primary_face):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([make_landmarks()]),
        )
        assert pipeline.process_image(blank_image) == pipeline.process_image(blank_image)

    def test_orientation_applied_before_detection(self, make_pipeline, primary_face):
        """RIGHT orientation은 90도 회전 → 측정 이미지 크기가 (H, W)로 바뀜"""
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([make_landmarks()]),
        )
        image = np.zeros((400, 600, 3), dtype=np.uint8)
        measures = pipeline.process_image(image, orientation=Orientation.RIGHT)

        assert measures[0].image_size == (400, 600)

    def test_large_still_is_downscaled(self, make_pipeline, primary_face):
        pipeline = make_pipeline(
            face_detector=FakeFaceDetector([primary_face]),
            landmark_detector=FakeLandmarkDetector([make_landmarks()]),
            config=DetectionConfig(max_dimension=500),
        )
        measures = pipeline.process_image(np.zeros((1000, 1000, 3), dtype=np.uint8))

        assert measures[0].image_size == (500, 500)
        assert measures[0].ipd_px == pytest.approx(200.0)
        assert measures[0].ipd_ratio == pytest.approx(0.8)


class TestConstrainedContext:
    def test_config_flag_skips_primary(self, make_pipeline, blank_image, primary_face):
        primary = FakeFaceDetector([primary_face])
        pipeline = make_pipeline(
            face_detector=primary,
            fallback_detector=FakeCoarseDetector([make_coarse_face()]),
            config=DetectionConfig(constrained_context=True),
        )
        measures = pipeline.process_image(blank_image)

        assert primary.calls == 0
        assert measures[0].ipd_px == pytest.approx(300.0)

    def test_per_call_override(self, make_pipeline, blank_image, primary_face):
        primary = FakeFaceDetector([primary_face])
        pipeline = make_pipeline(
            face_detector=primary,
            landmark_detector=FakeLandmarkDetector([make_landmarks()]),
            fallback_detector=FakeCoarseDetector([make_coarse_face()]),
        )

        degraded = pipeline.process_image(blank_image, constrained=True)
        full = pipeline.process_image(blank_image)

        assert degraded[0].nose_width_px is None
        assert full[0].nose_width_px == pytest.approx(100.0)
        assert primary.calls == 1

    def test_missing_primary_detector_is_constrained(self, blank_image):
        from face_measure.processing.pipeline import DetectionPipeline

        pipeline = DetectionPipeline(None, None, FakeCoarseDetector([make_coarse_face()]))
        measures = pipeline.process_image(blank_image)

        assert len(measures) == 1
        assert measures[0].ipd_px == pytest.approx(300.0)


class TestMalformedInput:
    @pytest.mark.parametrize("image", [
        None,
        [[0, 0], [0, 0]],
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros((10, 0, 3), dtype=np.uint8),
        np.zeros((10, 10, 2), dtype=np.uint8),
    ])
    def test_raises_before_detection(self, make_pipeline, image):
        primary = FakeFaceDetector()
        pipeline = make_pipeline(face_detector=primary)

        with pytest.raises(MalformedInputError):
            pipeline.process_image(image)
        assert primary.calls == 0


def test_close_releases_detectors(make_pipeline):
    primary, landmarks, fallback = FakeFaceDetector(), FakeLandmarkDetector(), FakeCoarseDetector()
    with make_pipeline(face_detector=primary, landmark_detector=landmarks, fallback_detector=fallback):
        pass

    assert primary.closed and landmarks.closed and fallback.closed
