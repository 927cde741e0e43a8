"""
Cadence Tracker - session cadence tracking, storage and statistics.
"""
__version__ = "1.0.0"
