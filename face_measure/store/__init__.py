"""Measurement record storage"""

from .records import RecordStore, snapshot_from_measure

__all__ = ['RecordStore', 'snapshot_from_measure']
