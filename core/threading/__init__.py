"""
POSTURECOACH Threading Module
"""

from .worker_pool import (
    WorkerPool,
    frame_worker_pool,
    get_frame_pool,
    get_video_pool,
    video_worker_pool,
)

__all__ = [
    'WorkerPool',
    'video_worker_pool',
    'frame_worker_pool',
    'get_video_pool',
    'get_frame_pool',
]
