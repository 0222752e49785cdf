"""Processing layer components"""

from .geometry import GeometryCalculator
from .landmark_extractor import LandmarkExtractor
from .stream_throttle import StreamThrottle
from .pipeline import DetectionPipeline, select_best_face
from .publisher import LatestFrameSlot, MeasureBoard, StreamWorker
from .frame_processor import FrameProcessor

__all__ = [
    'GeometryCalculator',
    'LandmarkExtractor',
    'StreamThrottle',
    'DetectionPipeline',
    'select_best_face',
    'MeasureBoard',
    'LatestFrameSlot',
    'StreamWorker',
    'FrameProcessor',
]
