"""HTTP front end: submit URLs, poll the run, read reports and manual progress.

Each run is a child ``accessibility.py`` process writing into
``REPORTS_BASE/<id>``; a watcher thread records its outcome in ``RUN_STATUS``.
"""

import logging
import os
import subprocess
import sys
import threading
import time
import uuid
from pathlib import Path

from flask import (
    Flask, abort, current_app, jsonify, render_template_string, request, send_from_directory,
)

import manual_progress
import settings
from report import generate_report
from url_sources import collect_urls

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["REPORTS_BASE"] = settings.REPORTS_BASE
app.config["MAX_CONTENT_LENGTH"] = 1024 * 1024

RUN_STATUS = {}
RUN_STATUS_LOCK = threading.Lock()

REPORT_POLL_ATTEMPTS = 5
REPORT_POLL_INTERVAL = 0.5
MAX_TRACKED_RUNS = 100


def set_status(run_id, status, urls, error=None):
    with RUN_STATUS_LOCK:
        RUN_STATUS.pop(run_id, None)
        RUN_STATUS[run_id] = {"status": status, "urls": urls, "error": error}
        # oldest finished runs go first; running ones are kept
        finished = [key for key, value in RUN_STATUS.items() if value["status"] != "running"]
        for key in finished[: max(0, len(RUN_STATUS) - MAX_TRACKED_RUNS)]:
            del RUN_STATUS[key]


def get_status(run_id):
    with RUN_STATUS_LOCK:
        status = RUN_STATUS.get(run_id)
        return dict(status) if status else None


def discard_status(run_id):
    with RUN_STATUS_LOCK:
        RUN_STATUS.pop(run_id, None)


def reports_base() -> Path:
    return Path(current_app.config["REPORTS_BASE"])


def finish_run(run_id, returncode, stderr, report_dir: Path, url_count,
               poll_attempts=REPORT_POLL_ATTEMPTS, poll_interval=REPORT_POLL_INTERVAL):
    """Record the outcome of a finished child process.

    A successful run without a report file gets a short grace period and is
    then re-rendered from its results file.
    """
    if returncode != 0:
        set_status(run_id, "error", url_count, stderr or f"Process exited with code {returncode}")
        return

    report_path = report_dir / settings.REPORT_FILENAME
    for _ in range(poll_attempts):
        if report_path.exists():
            set_status(run_id, "done", url_count)
            return
        time.sleep(poll_interval)

    if not (report_dir / settings.RESULTS_FILENAME).exists():
        set_status(run_id, "error", url_count, "Report file was not created.")
        return

    try:
        generate_report(output_dir=report_dir, report_id=run_id)
    except Exception as exc:
        logger.exception("Report generation for %s failed", run_id)
        set_status(run_id, "error", url_count, str(exc) or "Report generation failed.")
        return

    if report_path.exists():
        set_status(run_id, "done", url_count)
    else:
        set_status(run_id, "error", url_count, "Report generation failed.")


def _watch(run_id, process, report_dir, url_count):
    _, stderr = process.communicate()
    logger.info("Run %s exited with code %s", run_id, process.returncode)
    finish_run(run_id, process.returncode, (stderr or b"").decode("utf-8", errors="replace"),
               report_dir, url_count)


def start_run(run_id, urls, base: Path):
    report_dir = base / run_id
    report_dir.mkdir(parents=True, exist_ok=True)
    set_status(run_id, "running", len(urls))

    command = [
        sys.executable,
        str(settings.BASE_DIR / "accessibility.py"),
        "--report",
        "--urls", "\n".join(urls),
        "--output-id", run_id,
    ]
    env = dict(os.environ, REPORTS_BASE=str(base))
    try:
        process = subprocess.Popen(
            command,
            cwd=str(settings.BASE_DIR),
            env=env,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        logger.error("Could not start run %s: %s", run_id, exc)
        set_status(run_id, "error", len(urls), str(exc))
        return

    logger.info("Run %s started for %d URL(s)", run_id, len(urls))
    threading.Thread(
        target=_watch, args=(run_id, process, report_dir, len(urls)), daemon=True
    ).start()


@app.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = settings.ALLOWED_ORIGIN
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@app.route("/api/run", methods=["POST"])
def api_run():
    upload = request.files.get("file")
    urls = collect_urls(
        request.form.get("urls", ""),
        upload.filename if upload else None,
        upload.read() if upload else None,
    )
    if not urls:
        return jsonify(
            error="No valid URLs provided. Add URLs in the text area or upload a CSV/XML file."
        ), 400

    run_id = str(uuid.uuid4())[:8]
    start_run(run_id, urls, reports_base())
    return jsonify(id=run_id, urls=len(urls))


@app.route("/api/status/<run_id>")
def api_status(run_id):
    status = get_status(run_id)
    on_disk = manual_progress.is_valid_report_id(run_id) and (
        reports_base() / run_id / settings.REPORT_FILENAME
    ).exists()
    if status:
        # finished runs are answered from disk from now on
        if status["status"] == "done" and on_disk:
            discard_status(run_id)
        return jsonify(status)
    if on_disk:
        return jsonify(status="done", urls=0)
    return jsonify(error="Run not found"), 404


@app.route("/api/report/<report_id>/manual-progress", methods=["GET"])
def get_manual_progress(report_id):
    if not manual_progress.is_valid_report_id(report_id):
        return jsonify(error="Invalid report ID"), 400
    return jsonify(checked=manual_progress.fetch_progress(report_id, reports_base()))


@app.route("/api/report/<report_id>/manual-progress", methods=["PUT"])
def put_manual_progress(report_id):
    if not manual_progress.is_valid_report_id(report_id):
        return jsonify(error="Invalid report ID"), 400
    report_dir = reports_base() / report_id
    if not report_dir.is_dir():
        return jsonify(error="Report not found"), 404
    body = request.get_json(silent=True) or {}
    checked = body.get("checked") if isinstance(body, dict) else None
    if not isinstance(checked, list):
        return jsonify(error="Body must include checked array"), 400

    try:
        path = manual_progress.save_progress(report_dir, checked)
    except OSError as exc:
        logger.error("Saving manual progress for %s failed: %s", report_id, exc)
        return jsonify(error=str(exc)), 500

    threading.Thread(
        target=manual_progress.ftp_upload,
        args=(path, manual_progress.remote_name(report_id)),
        daemon=True,
    ).start()
    return jsonify(ok=True)


RUNNING_PAGE = """<!DOCTYPE html>
<html lang="en"><head><meta charset="UTF-8"><title>Report in progress</title></head>
<body style="font-family:sans-serif;padding:2rem;text-align:center;">
  <h1>Tests are running</h1>
  <p role="status">Run ID: {{ run_id }}. This page reloads when the report is ready.</p>
  <script>
    (function poll() {
      fetch('/api/status/' + {{ run_id|tojson }}).then(function (r) { return r.json(); }).then(function (s) {
        if (s.status === 'running') { setTimeout(poll, 3000); } else { window.location.reload(); }
      }).catch(function () { setTimeout(poll, 5000); });
    })();
  </script>
</body></html>
"""

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html lang="en"><head><meta charset="UTF-8"><title>Report Not Found</title></head>
<body style="font-family:sans-serif;padding:2rem;text-align:center;">
  <h1>Report not found</h1>
  <p>Run ID: {{ run_id }}</p>
  {% if error %}<p>{{ error }}</p>{% endif %}
  <p><a href="/">Start a new test</a></p>
</body></html>
"""


@app.route("/report/<report_id>")
def show_report(report_id):
    if manual_progress.is_valid_report_id(report_id):
        report_dir = reports_base() / report_id
        if (report_dir / settings.REPORT_FILENAME).exists():
            return send_from_directory(report_dir, settings.REPORT_FILENAME)

    status = get_status(report_id)
    if status and status["status"] == "running":
        return render_template_string(RUNNING_PAGE, run_id=report_id), 202
    error = status.get("error") if status else None
    return render_template_string(NOT_FOUND_PAGE, run_id=report_id, error=error), 404


@app.route("/report/<report_id>/<path:filename>")
def report_file(report_id, filename):
    if not manual_progress.is_valid_report_id(report_id):
        abort(404)
    return send_from_directory(reports_base() / report_id, filename)


INDEX_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Accessibility tests</title>
  <style>
    body { font-family: system-ui, sans-serif; max-width: 720px; margin: 0 auto; padding: 2rem; }
    label { display: block; font-weight: 600; margin: 1rem 0 .25rem; }
    textarea { width: 100%; min-height: 8rem; }
    button { margin-top: 1rem; padding: .5rem 1rem; }
  </style>
</head>
<body>
  <main>
    <h1>Accessibility tests</h1>
    <form id="run-form" action="/api/run" method="post" enctype="multipart/form-data">
      <label for="urls">URLs (one per line)</label>
      <textarea id="urls" name="urls"></textarea>
      <label for="file">Or upload a CSV or sitemap XML file</label>
      <input id="file" name="file" type="file" accept=".csv,.xml,.txt">
      <button type="submit">Run tests</button>
    </form>
    <p id="message" role="status"></p>
  </main>
  <script>
    document.getElementById('run-form').addEventListener('submit', function (event) {
      event.preventDefault();
      var message = document.getElementById('message');
      message.textContent = 'Starting...';
      fetch('/api/run', { method: 'POST', body: new FormData(event.target) })
        .then(function (r) { return r.json(); })
        .then(function (data) {
          if (data.error) { message.textContent = data.error; return; }
          window.location.href = '/report/' + data.id;
        })
        .catch(function (err) { message.textContent = err.message; });
    });
  </script>
</body>
</html>
"""


@app.route("/")
def index():
    return INDEX_PAGE


def main():
    logging.basicConfig(format="[%(levelname)s] %(message)s", level=logging.INFO)
    logger.info("Accessibility test server running at http://localhost:%s", settings.PORT)
    app.run(host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
