import io
import json

import pytest

import server
import settings


@pytest.fixture
def client(tmp_path, monkeypatch):
    started = []
    monkeypatch.setattr(settings, "ftp_config", lambda: None)
    monkeypatch.setattr(server, "start_run", lambda run_id, urls, base: started.append((run_id, urls, base)))
    monkeypatch.setitem(server.app.config, "REPORTS_BASE", tmp_path)
    server.app.config["TESTING"] = True
    server.RUN_STATUS.clear()
    with server.app.test_client() as test_client:
        test_client.started = started
        yield test_client
    server.RUN_STATUS.clear()


def _make_report_dir(base, report_id, html="<html>report</html>"):
    report_dir = base / report_id
    report_dir.mkdir()
    if html is not None:
        (report_dir / settings.REPORT_FILENAME).write_text(html, encoding="utf-8")
    return report_dir


def test_run_without_urls_is_rejected(client):
    response = client.post("/api/run", data={"urls": "nothing useful"})
    assert response.status_code == 400
    assert "No valid URLs provided" in response.get_json()["error"]
    assert client.started == []


def test_run_starts_child_for_text_and_upload(client, tmp_path):
    response = client.post(
        "/api/run",
        data={
            "urls": "https://a.example/",
            "file": (io.BytesIO(b"https://b.example/,https://a.example/"), "urls.csv"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["urls"] == 2
    assert len(body["id"]) == 8
    assert client.started == [(body["id"], ["https://a.example/", "https://b.example/"], tmp_path)]


def test_status_unknown_run(client):
    response = client.get("/api/status/ab12cd34")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Run not found"}


def test_status_from_memory(client):
    server.set_status("ab12cd34", "running", 3)
    assert client.get("/api/status/ab12cd34").get_json() == {"status": "running", "urls": 3, "error": None}


def test_status_of_finished_report_on_disk(client, tmp_path):
    _make_report_dir(tmp_path, "ab12cd34")
    assert client.get("/api/status/ab12cd34").get_json() == {"status": "done", "urls": 0}


def test_get_manual_progress(client, tmp_path):
    report_dir = _make_report_dir(tmp_path, "ab12cd34")
    (report_dir / settings.PROGRESS_FILENAME).write_text('{"checked": [true, false]}', encoding="utf-8")
    assert client.get("/api/report/ab12cd34/manual-progress").get_json() == {"checked": [True, False]}
    assert client.get("/api/report/missing1/manual-progress").get_json() == {"checked": []}


def test_manual_progress_rejects_bad_ids(client):
    assert client.get("/api/report/bad_id!/manual-progress").status_code == 400
    response = client.put("/api/report/" + "a" * 40 + "/manual-progress", json={"checked": []})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid report ID"}


def test_put_manual_progress_requires_existing_report(client):
    response = client.put("/api/report/ab12cd34/manual-progress", json={"checked": [True]})
    assert response.status_code == 404
    assert response.get_json() == {"error": "Report not found"}


@pytest.mark.parametrize("body", [{}, {"checked": "yes"}, [True]])
def test_put_manual_progress_requires_checked_array(client, tmp_path, body):
    _make_report_dir(tmp_path, "ab12cd34")
    response = client.put("/api/report/ab12cd34/manual-progress", json=body)
    assert response.status_code == 400
    assert response.get_json() == {"error": "Body must include checked array"}


def test_put_manual_progress_saves_locally(client, tmp_path):
    report_dir = _make_report_dir(tmp_path, "ab12cd34")
    response = client.put("/api/report/ab12cd34/manual-progress", json={"checked": [True, False, True]})
    assert response.get_json() == {"ok": True}
    saved = json.loads((report_dir / settings.PROGRESS_FILENAME).read_text(encoding="utf-8"))
    assert saved == {"checked": [True, False, True]}


def test_report_is_served(client, tmp_path):
    report_dir = _make_report_dir(tmp_path, "ab12cd34")
    (report_dir / "screenshots").mkdir()
    (report_dir / "screenshots" / "screenshot-0-laptop.png").write_bytes(b"\x89PNG")
    assert client.get("/report/ab12cd34").data == b"<html>report</html>"
    assert client.get("/report/ab12cd34/screenshots/screenshot-0-laptop.png").data == b"\x89PNG"
    assert client.get("/report/ab12cd34/missing.png").status_code == 404


def test_report_while_running(client):
    server.set_status("ab12cd34", "running", 1)
    response = client.get("/report/ab12cd34")
    assert response.status_code == 202
    assert b"Tests are running" in response.data


def test_report_not_found_shows_run_error(client):
    server.set_status("ab12cd34", "error", 1, "<Timeout>")
    response = client.get("/report/ab12cd34")
    assert response.status_code == 404
    assert b"&lt;Timeout&gt;" in response.data


def test_cors_headers(client):
    response = client.get("/")
    assert response.headers["Access-Control-Allow-Origin"] == settings.ALLOWED_ORIGIN
    assert "PUT" in response.headers["Access-Control-Allow-Methods"]
    assert client.options("/api/run").status_code == 200


def test_finish_run_with_failed_child(tmp_path):
    server.finish_run("run1", 2, "", tmp_path, 3, poll_interval=0)
    assert server.get_status("run1") == {"status": "error", "urls": 3, "error": "Process exited with code 2"}
    server.finish_run("run1", 1, "Traceback ...", tmp_path, 3, poll_interval=0)
    assert server.get_status("run1")["error"] == "Traceback ..."


def test_finish_run_with_report(tmp_path):
    (tmp_path / settings.REPORT_FILENAME).write_text("<html></html>", encoding="utf-8")
    server.finish_run("run2", 0, "", tmp_path, 1, poll_interval=0)
    assert server.get_status("run2")["status"] == "done"


def test_finish_run_without_any_output(tmp_path):
    server.finish_run("run3", 0, "", tmp_path, 1, poll_attempts=2, poll_interval=0)
    assert server.get_status("run3") == {"status": "error", "urls": 1, "error": "Report file was not created."}


def test_finish_run_regenerates_report_from_results(tmp_path, sample_report):
    (tmp_path / settings.RESULTS_FILENAME).write_text(json.dumps(sample_report), encoding="utf-8")
    server.finish_run("run4", 0, "", tmp_path, 2, poll_attempts=1, poll_interval=0)
    assert server.get_status("run4")["status"] == "done"
    assert (tmp_path / settings.REPORT_FILENAME).exists()


def test_running_page_escapes_the_run_id(client):
    server.set_status("<b>x", "running", 1)
    response = client.get("/report/%3Cb%3Ex")
    assert response.status_code == 202
    assert b"<b>x" not in response.data
    assert b"Run ID: &lt;b&gt;x." in response.data
    assert b"'/api/status/' + \"\\u003cb\\u003ex\"" in response.data


def test_finished_run_is_evicted_once_its_report_is_on_disk(client, tmp_path):
    _make_report_dir(tmp_path, "ab12cd34")
    server.set_status("ab12cd34", "done", 3)
    assert client.get("/api/status/ab12cd34").get_json() == {"status": "done", "urls": 3, "error": None}
    assert server.get_status("ab12cd34") is None
    assert client.get("/api/status/ab12cd34").get_json() == {"status": "done", "urls": 0}


def test_run_status_keeps_running_runs_and_drops_oldest_finished(monkeypatch):
    monkeypatch.setattr(server, "MAX_TRACKED_RUNS", 3)
    server.RUN_STATUS.clear()
    server.set_status("busy", "running", 1)
    for index in range(4):
        server.set_status(f"run{index}", "done", 1)
    assert list(server.RUN_STATUS) == ["busy", "run2", "run3"]
    server.RUN_STATUS.clear()
