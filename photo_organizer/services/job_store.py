"""Thread-safe store for background batch jobs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List
import threading
import time
import uuid


def now_ts() -> int:
    return int(time.time())


@dataclass
class Job:
    job_id: str
    kind: str
    data: Dict[str, Any] = field(default_factory=dict)


class JobStore:
    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, kind: str, **initial) -> str:
        job_id = uuid.uuid4().hex
        data = {"state": "pending", "processed": 0, "total": 0, "errors": [], "created_time": now_ts()}
        data.update(initial)
        with self._lock:
            self._jobs[job_id] = Job(job_id=job_id, kind=kind, data=data)
        return job_id

    def update(self, job_id: str, **kwargs) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job:
                job.data.update(kwargs)

    def append(self, job_id: str, key: str, item: Any) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job:
                items: List[Any] = job.data.setdefault(key, [])
                items.append(item)

    def get(self, job_id: str, kind: str | None = None) -> Dict[str, Any] | None:
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or (kind and job.kind != kind):
                return None
            snapshot = dict(job.data)
            for key, value in snapshot.items():
                if isinstance(value, list):
                    snapshot[key] = list(value)
            return snapshot
