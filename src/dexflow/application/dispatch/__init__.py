"""Order job dispatch"""

from .dispatcher import JobDispatcher, JobRecord, JobState

__all__ = ["JobDispatcher", "JobRecord", "JobState"]
