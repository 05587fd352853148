"""Runtime collaborators built on the guard's primitives."""

from .jobs import BaseJobQueue, JobHandler, JobQueueOptions, JobRecord

__all__ = ["BaseJobQueue", "JobHandler", "JobQueueOptions", "JobRecord"]
