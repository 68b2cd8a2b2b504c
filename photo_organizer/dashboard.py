"""Flask JSON API: parse templates, preview and run organize batches in the background.

One location cache is created with the app and shared by every job, so the
geocoding rate limit holds across concurrent jobs.
"""
from __future__ import annotations

from dataclasses import replace

from flask import Flask, current_app, jsonify, request

from photo_organizer.errors import PhotoOrganizerError
from photo_organizer.organizer import Organizer, build_location_cache
from photo_organizer.services.batch_runner import start_job
from photo_organizer.services.job_store import JobStore, now_ts
from photo_organizer.settings import Settings, load_settings
from photo_organizer.template import PLACEHOLDERS, parse_template

PREVIEW_LIMIT = 50


def _state():
    return current_app.extensions["photo_organizer"]


def _job_settings(data: dict, **extra) -> Settings:
    base: Settings = _state()["settings"]
    overrides = {
        "source": data.get("source"),
        "destination": data.get("dest"),
        "recursive": data.get("recursive"),
        "extensions": data.get("extensions"),
        "strategy": data.get("strategy"),
        "drop_duplicates": data.get("drop_duplicates"),
    }
    overrides.update(extra)
    # the template from a request describes the whole relative path
    return replace(base.merged(overrides), folder_format=None, filename_format=data.get("template"))


def _start(kind: str, settings: Settings):
    try:
        organizer = Organizer.from_settings(settings, locations=_state()["locations"])
    except PhotoOrganizerError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"job": start_job(_state()["jobs"], kind, organizer)})


def _status(kind: str):
    job_id = request.args.get("job")
    if not job_id:
        return jsonify({"error": "job id required"}), 400
    job = _state()["jobs"].get(job_id, kind)
    if not job:
        return jsonify({"error": "job not found"}), 404
    total = job.get("total") or 0
    processed = job.get("processed") or 0
    response = dict(job)
    start = job.get("start_time")
    elapsed = (job.get("finished_time") or now_ts()) - start if start else None
    response["elapsed_seconds"] = elapsed
    response["percent"] = round(processed / total * 100, 2) if total else None
    return jsonify(response)


def create_app(settings: Settings | None = None) -> Flask:
    settings = settings or load_settings()
    app = Flask(__name__)
    app.extensions["photo_organizer"] = {
        "settings": settings,
        "locations": build_location_cache(settings),
        "jobs": JobStore(),
    }

    @app.route("/api/placeholders", methods=["GET"])
    def api_placeholders():
        return jsonify({"placeholders": sorted(PLACEHOLDERS)})

    @app.route("/api/parse", methods=["POST"])
    def api_parse():
        data = request.get_json() or {}
        template = data.get("template")
        if template is None:
            return jsonify({"error": "template required"}), 400
        parsed = parse_template(template)
        req = parsed.requirements
        return jsonify({
            "groups": parsed.placeholder_map(),
            "needs_exif": req.needs_exif,
            "needs_filesystem_time": req.needs_filesystem_time,
            "needs_location": req.needs_location,
        })

    @app.route("/api/preview_async", methods=["POST"])
    def api_preview_async():
        data = request.get_json() or {}
        if not data.get("source") or not data.get("template"):
            return jsonify({"error": "source and template required"}), 400
        limit = data.get("limit") or PREVIEW_LIMIT
        return _start("preview", _job_settings(data, dry_run=True, dry_run_number_of_files=int(limit)))

    @app.route("/api/preview_status", methods=["GET"])
    def api_preview_status():
        return _status("preview")

    @app.route("/api/run_async", methods=["POST"])
    def api_run_async():
        data = request.get_json() or {}
        if not data.get("source") or not data.get("dest") or not data.get("template"):
            return jsonify({"error": "source, dest and template required"}), 400
        return _start("run", _job_settings(data, dry_run=False))

    @app.route("/api/status", methods=["GET"])
    def api_status():
        return _status("run")

    return app


def main():
    create_app().run(host="127.0.0.1", port=5000)


if __name__ == "__main__":
    main()
