"""Configuration package"""

from .settings import DetectionConfig, StreamConfig

__all__ = ['DetectionConfig', 'StreamConfig']
