"""
Celery Tasks

Background tasks for LinkDrop.
"""

from .sweep_task import SWEEP_TASK_NAME, register_sweep_task, run_sweep

__all__ = ["SWEEP_TASK_NAME", "register_sweep_task", "run_sweep"]
