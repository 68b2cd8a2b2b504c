"""Background batch jobs: dry-run previews and real organize runs."""
from __future__ import annotations

import logging
import threading

from photo_organizer.errors import PhotoOrganizerError
from photo_organizer.organizer import FileOutcome, Organizer
from photo_organizer.services.job_store import JobStore, now_ts


def _worker(store: JobStore, job_id: str, organizer: Organizer):
    try:
        files = organizer.files()
    except (PhotoOrganizerError, OSError) as exc:
        store.update(job_id, state="error", error=str(exc), finished_time=now_ts())
        return

    if organizer.settings.dry_run:
        files = files[:organizer.settings.dry_run_number_of_files]
    store.update(job_id, state="running", total=len(files), start_time=now_ts(), last_update=now_ts())

    def progress(done: int, outcome: FileOutcome):
        store.append(job_id, "results", outcome.to_dict())
        if outcome.error:
            store.append(job_id, "errors", f"{outcome.source}: {outcome.error}")
        store.update(job_id, processed=done, current_file=str(outcome.source), last_update=now_ts())

    try:
        summary = organizer.run(files=files, progress_cb=progress)
    except Exception as exc:
        logging.exception("Job %s crashed", job_id)
        store.update(job_id, state="error", error=str(exc), finished_time=now_ts())
        return

    store.update(job_id,
                 state="done",
                 current_file=None,
                 organized=summary.organized,
                 duplicates=summary.duplicates,
                 skipped=summary.skipped,
                 failed=summary.failed,
                 finished_time=now_ts())


def start_job(store: JobStore, kind: str, organizer: Organizer) -> str:
    job_id = store.create(kind, template=organizer.formatter.template, results=[])
    threading.Thread(target=_worker, args=(store, job_id, organizer), daemon=True).start()
    return job_id
