import pytest
from playwright.sync_api import Error as PlaywrightError

import page_checks
from accessibility import AXE_RUN_JS
from checklists import bucket_axe_results

GENERATED_AT = "2026-03-02T10:15:00.000Z"

CONTRAST = {
    "id": "color-contrast",
    "help": "Elements must meet minimum color contrast ratio thresholds",
    "description": "Ensures the contrast between foreground and background colors meets WCAG 2 AA",
    "impact": "serious",
    "tags": ["cat.color", "wcag2aa"],
    "nodes": [{"target": ["p.lead"]}, {"target": ["a.more"]}],
}

IMAGE_ALT = {
    "id": "image-alt",
    "help": "Images must have alternate text",
    "description": "Ensures <img> elements have alternate text or a role of none or presentation",
    "impact": "critical",
    "tags": ["cat.text-alternatives", "wcag2a"],
    "nodes": [{"target": ["img.hero"]}],
}


def _axe_entry(url, violations):
    results = {"violations": violations, "incomplete": [], "passes": []}
    return dict(results, url=url, timestamp=GENERATED_AT, byChapter=bucket_axe_results(results))


def _check(check_id, rule, status, chapter, url):
    return {"id": check_id, "rule": rule, "status": status, "message": f"{check_id} {status}",
            "chapter": chapter, "url": url}


@pytest.fixture
def sample_report():
    """Two tested pages, one page that failed to load."""
    home = "https://example.com/"
    about = "https://example.com/about"
    broken = "https://example.com/broken"
    return {
        "generatedAt": GENERATED_AT,
        "urls": [home, about],
        "axeResults": {
            home: _axe_entry(home, [CONTRAST]),
            about: _axe_entry(about, [IMAGE_ALT]),
        },
        "customResults": [
            _check("page-title-exists", "Page MUST have a title with text", "pass", "semantics", home),
            _check("html-lang", "Primary language MUST be identified on html element", "fail", "semantics", home),
            _check("skip-link", "Skip link SHOULD be provided for keyboard users", "warn", "semantics", home),
            _check("img-alt", "Informative images MUST have programmatically-discernible alternative text",
                   "fail", "images", home),
            _check("focus-indicator", "Focusable elements MUST have visible focus indicator (axe covers contrast)",
                   "info", "visualDesign", home),
            _check("page-title-exists", "Page MUST have a title with text", "pass", "semantics", about),
            _check("html-lang", "Primary language MUST be identified on html element", "fail", "semantics", about),
            _check("video-captions", "Prerecorded video MUST include synchronized captions", "fail",
                   "multimedia", about),
            {"id": "page-load", "rule": "Page load", "status": "fail",
             "message": "net::ERR_NAME_NOT_RESOLVED", "url": broken},
        ],
        "summary": {"pass": 2, "fail": 5, "warn": 2},
        "screenshots": {
            home: [
                {"file": "screenshot-0-laptop.png", "label": "Laptop (1366×768)"},
                {"file": "screenshot-0-desktop.png", "label": "Desktop (1920×1080)"},
            ],
        },
    }


@pytest.fixture
def failed_report():
    return {
        "generatedAt": GENERATED_AT,
        "urls": [],
        "axeResults": {},
        "customResults": [
            {"id": "page-load", "rule": "Page load", "status": "fail", "message": "Timeout 60000ms exceeded",
             "url": "https://slow.example"},
        ],
        "summary": {"pass": 0, "fail": 1, "warn": 0},
        "screenshots": {},
    }


@pytest.fixture
def clean_page_responses():
    """page.evaluate answers for a page without accessibility problems."""
    return {
        page_checks.HTML_LANG_JS: "en",
        page_checks.LANDMARK_COUNT_JS: 4,
        page_checks.MAIN_COUNT_JS: 1,
        page_checks.HEADINGS_JS: {"total": 3, "skips": 0, "h1Count": 1},
        page_checks.LINKS_JS: {"total": 5, "emptyText": 0, "genericText": 0},
        page_checks.SKIP_LINK_JS: True,
        page_checks.TABLES_JS: {"total": 0, "noTh": 0},
        page_checks.ORPHAN_LI_JS: 0,
        page_checks.IFRAMES_JS: {"total": 0, "noTitle": 0},
        page_checks.DUPLICATE_IDS_JS: [],
        page_checks.IMAGES_JS: {"total": 2, "missingAlt": 0, "longAlt": 0},
        page_checks.SVGS_JS: {"total": 0, "noRole": 0, "noName": 0},
        page_checks.CANVAS_JS: {"total": 0, "noRole": 0, "noAlt": 0},
        page_checks.IMAGE_MAPS_JS: {"total": 0, "areaNoAlt": 0},
        page_checks.LINK_STYLES_JS: {"total": 5, "colorOnly": 0},
        page_checks.FOCUSABLE_COUNT_JS: 7,
        page_checks.OVERFLOW_JS: {"docWidth": 320, "viewWidth": 320, "overflow": False},
        page_checks.VIEWPORT_META_JS: {"present": True, "content": "width=device-width", "allowsZoom": True},
        page_checks.VIDEOS_JS: {"total": 0, "noCaptions": 0, "autoplay": 0},
        page_checks.AUDIO_AUTOPLAY_JS: 0,
        page_checks.FLASH_JS: 0,
        page_checks.POSITIVE_TABINDEX_JS: 0,
        page_checks.SMALL_TARGETS_JS: {"total": 5, "tooSmall": 0},
        page_checks.FORM_FIELDS_JS: {"total": 1, "missingLabel": 0, "placeholderOnly": 0},
        page_checks.META_REFRESH_JS: False,
        page_checks.LIVE_REGIONS_JS: 1,
        AXE_RUN_JS: {"violations": [], "incomplete": [], "passes": []},
    }


class FakePage:
    """Answers page.evaluate from a dict keyed by the JS source."""

    def __init__(self, responses, title="Home | Example", goto_error=None, script_error=None):
        self.responses = dict(responses)
        self._title = title
        self.goto_error = goto_error
        self.script_error = script_error
        self.viewports = []
        self.screenshots = []
        self.scripts = []

    def goto(self, url, **kwargs):
        if self.goto_error:
            raise PlaywrightError(self.goto_error)

    def wait_for_load_state(self, state):
        pass

    def add_script_tag(self, **kwargs):
        if self.script_error:
            raise self.script_error
        self.scripts.append(kwargs)

    def title(self):
        return self._title

    def set_viewport_size(self, size):
        self.viewports.append(size)

    def screenshot(self, path, full_page=False):
        self.screenshots.append(path)

    def evaluate(self, script):
        value = self.responses[script]
        if isinstance(value, Exception):
            raise value
        return value


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.closed = False

    def new_page(self):
        return self.page

    def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, pages):
        self.pages = list(pages)
        self.contexts = []

    def new_context(self, **kwargs):
        context = FakeContext(self.pages.pop(0))
        self.contexts.append(context)
        return context


@pytest.fixture
def fake_page():
    return FakePage


@pytest.fixture
def fake_browser():
    return FakeBrowser
