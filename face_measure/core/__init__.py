"""
Detector adapters package.
"""
# MediaPipe / OpenCV 어댑터는 lazy import (mediapipe 없이도 protocol 사용 가능)
# 필요할 때 모듈에서 직접 import

from .base import CoarseFaceDetector, FaceRectDetector, LandmarkDetector

__all__ = [
    'FaceRectDetector', 'LandmarkDetector', 'CoarseFaceDetector',
    'MediaPipeFaceDetector', 'MediaPipeLandmarkDetector', 'CascadeFaceDetector',
]


def __getattr__(name):
    if name == 'MediaPipeFaceDetector':
        from .face_detector import MediaPipeFaceDetector
        return MediaPipeFaceDetector
    if name == 'MediaPipeLandmarkDetector':
        from .landmark_detector import MediaPipeLandmarkDetector
        return MediaPipeLandmarkDetector
    if name == 'CascadeFaceDetector':
        from .cascade_detector import CascadeFaceDetector
        return CascadeFaceDetector
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
