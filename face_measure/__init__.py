"""
Face Measure
MediaPipe 기반 얼굴 측정 시스템 (IPD, 코/입 너비, 턱선 길이)
"""

__version__ = "0.1.0"

from .models import (
    BoundingBox,
    FaceCandidate,
    FaceRecord,
    FrameMeasurement,
    Measure,
    MetricKind,
    MetricSnapshot,
    Orientation,
    PipelineResult,
    PipelineState,
    Point,
    StreamState,
)
from .config.settings import DetectionConfig, StreamConfig
from .processing.pipeline import DetectionPipeline
from .store.records import RecordStore, snapshot_from_measure
from .utils.exceptions import (
    ConfigurationError,
    DetectorExecutionError,
    FaceMeasureException,
    MalformedInputError,
)

__all__ = [
    'BoundingBox', 'FaceCandidate', 'FaceRecord', 'FrameMeasurement', 'Measure',
    'MetricKind', 'MetricSnapshot', 'Orientation', 'PipelineResult', 'PipelineState',
    'Point', 'StreamState',
    'DetectionConfig', 'StreamConfig',
    'DetectionPipeline',
    'RecordStore', 'snapshot_from_measure',
    'FaceMeasureException', 'DetectorExecutionError', 'MalformedInputError', 'ConfigurationError',
]
