import json
from types import SimpleNamespace

import accessibility
import page_checks
import settings
from accessibility import AXE_RUN_JS


def _violation(rule_id, tags):
    return {"id": rule_id, "help": f"{rule_id} help", "description": "", "tags": tags, "nodes": [{}]}


def test_three_urls_one_failing(tmp_path, fake_page, fake_browser, clean_page_responses):
    with_issues = dict(clean_page_responses)
    with_issues[AXE_RUN_JS] = {
        "violations": [_violation("color-contrast", ["cat.color"])],
        "incomplete": [],
        "passes": [_violation("document-title", ["cat.text-alternatives"])],
    }
    with_issues[page_checks.HTML_LANG_JS] = ""

    pages = [
        fake_page(clean_page_responses),
        fake_page({}, goto_error="net::ERR_NAME_NOT_RESOLVED at https://down.example/"),
        fake_page(with_issues),
    ]
    browser = fake_browser(pages)
    urls = ["https://ok.example/", "https://down.example/", "https://issues.example/"]

    report = accessibility.audit_urls(browser, urls, tmp_path, axe_source="/opt/axe.min.js")

    assert report["urls"] == ["https://ok.example/", "https://issues.example/"]
    assert set(report["axeResults"]) == set(report["urls"])
    load_errors = [r for r in report["customResults"] if r["id"] == "page-load"]
    assert len(load_errors) == 1
    assert load_errors[0]["url"] == "https://down.example/"
    assert "chapter" not in load_errors[0]
    assert report["summary"]["fail"] >= 1
    assert all(context.closed for context in browser.contexts)

    axe_entry = report["axeResults"]["https://issues.example/"]
    assert axe_entry["byChapter"]["visualDesign"]["violations"][0]["id"] == "color-contrast"
    assert axe_entry["byChapter"]["images"]["passes"][0]["id"] == "document-title"
    assert pages[2].scripts == [{"path": "/opt/axe.min.js"}]


def test_summary_matches_custom_results(tmp_path, fake_page, fake_browser, clean_page_responses):
    browser = fake_browser([fake_page(clean_page_responses)])
    report = accessibility.audit_urls(browser, ["https://ok.example/"], tmp_path, axe_source="/opt/axe.min.js")
    custom = report["customResults"]
    assert report["summary"]["pass"] == sum(1 for r in custom if r["status"] == "pass")
    assert report["summary"]["fail"] == sum(1 for r in custom if r["status"] == "fail")
    assert report["summary"]["warn"] == sum(1 for r in custom if r["status"] in ("warn", "info"))


def test_screenshots_only_for_pages_with_issues(tmp_path, fake_page, fake_browser, clean_page_responses):
    # dynamic-announcements and focus-indicator are info, so a clean page has no issues
    clean = fake_page(clean_page_responses)
    failing_responses = dict(clean_page_responses)
    failing_responses[page_checks.META_REFRESH_JS] = True
    failing = fake_page(failing_responses)
    browser = fake_browser([clean, failing])

    report = accessibility.audit_urls(
        browser, ["https://a.example/", "https://b.example/"], tmp_path, axe_source="/opt/axe.min.js"
    )

    assert clean.screenshots == []
    assert report["screenshots"] == {
        "https://b.example/": [
            {"file": "screenshot-1-laptop.png", "label": "Laptop (1366×768)"},
            {"file": "screenshot-1-desktop.png", "label": "Desktop (1920×1080)"},
        ]
    }
    assert failing.screenshots == [
        str(tmp_path / "screenshots" / "screenshot-1-laptop.png"),
        str(tmp_path / "screenshots" / "screenshot-1-desktop.png"),
    ]


def test_run_axe_scan_uses_cdn_url(fake_page, clean_page_responses):
    page = fake_page(clean_page_responses)
    data = accessibility.run_axe_scan(page, "https://a.example/", axe_source="https://cdn.example/axe.js")
    assert page.scripts == [{"url": "https://cdn.example/axe.js"}]
    assert data["url"] == "https://a.example/"
    assert set(data) == {"url", "timestamp", "violations", "incomplete", "passes", "byChapter"}


def test_write_results_keeps_previous_snapshot(tmp_path):
    first = {"generatedAt": "first"}
    second = {"generatedAt": "second"}
    accessibility.write_results(first, tmp_path)
    assert not (tmp_path / settings.PREVIOUS_RESULTS_FILENAME).exists()
    path = accessibility.write_results(second, tmp_path)
    assert json.loads(path.read_text(encoding="utf-8")) == second
    previous = tmp_path / settings.PREVIOUS_RESULTS_FILENAME
    assert json.loads(previous.read_text(encoding="utf-8")) == first


def test_is_internal_link():
    assert accessibility.is_internal_link("https://example.com/", "https://example.com/a")
    assert accessibility.is_internal_link("https://example.com/", "/relative")
    assert not accessibility.is_internal_link("https://example.com/", "https://other.com/")


def test_find_internal_links(monkeypatch):
    html = """
    <a href="/about">About</a>
    <a href="/about#team">Team</a>
    <a href="https://example.com/contact">Contact</a>
    <a href="https://elsewhere.org/">Out</a>
    <a href="mailto:hi@example.com">Mail</a>
    """

    def fake_get(url, **kwargs):
        return SimpleNamespace(text=html, raise_for_status=lambda: None)

    monkeypatch.setattr(accessibility.requests, "get", fake_get)
    assert accessibility.find_internal_links("https://example.com/") == [
        "https://example.com/about",
        "https://example.com/contact",
    ]


def test_find_internal_links_network_error(monkeypatch):
    def fake_get(url, **kwargs):
        raise accessibility.requests.ConnectionError("refused")

    monkeypatch.setattr(accessibility.requests, "get", fake_get)
    assert accessibility.find_internal_links("https://example.com/") == []


def test_gather_urls_merges_sources(tmp_path):
    urls_file = tmp_path / "urls.csv"
    urls_file.write_text("name,url\nhome,https://a.example/\nabout,https://b.example/\n", encoding="utf-8")
    args = accessibility.parse_args([
        "--urls", "https://a.example/, https://c.example/ not-a-url",
        "--urls-file", str(urls_file),
        "--max-pages", "2",
    ])
    assert accessibility.gather_urls(args) == ["https://a.example/", "https://c.example/"]


def test_main_without_urls_exits_with_1(capsys):
    assert accessibility.main([]) == 1
    assert "No URLs" in capsys.readouterr().out


def test_main_rejects_bad_output_id(capsys):
    assert accessibility.main(["--urls", "https://a.example/", "--output-id", "../escape"]) == 1


def test_missing_local_axe_file_fails_only_that_url(tmp_path, fake_page, fake_browser, clean_page_responses):
    missing = FileNotFoundError(2, "No such file or directory", "/opt/missing-axe.js")
    pages = [fake_page(clean_page_responses, script_error=missing), fake_page(clean_page_responses)]
    browser = fake_browser(pages)

    report = accessibility.audit_urls(
        browser, ["https://a.example/", "https://b.example/"], tmp_path, axe_source="/opt/axe.min.js"
    )

    assert report["urls"] == ["https://b.example/"]
    load_errors = [r for r in report["customResults"] if r["id"] == "page-load"]
    assert [r["url"] for r in load_errors] == ["https://a.example/"]
    assert "No such file or directory" in load_errors[0]["message"]
    assert all(context.closed for context in browser.contexts)


def test_parse_url_list_requires_a_scheme():
    assert accessibility.parse_url_list("httpfoo, https://a.example/ http://b.example/\nhttp:/broken") == [
        "https://a.example/",
        "http://b.example/",
    ]
