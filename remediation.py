"""WCAG references, fix snippets and impact/effort ratings per check.

Custom check ids are looked up first, axe rule ids second. Anything unknown
gets a generic entry so every issue can be shown with a fix suggestion.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import checklists

W3C_BASE = "https://www.w3.org/WAI/WCAG21/Understanding/"
W3C_QUICKREF = "https://www.w3.org/WAI/WCAG21/quickref/"

# WCAG 2.1 success criterion -> slug of its Understanding page
SC_TO_SLUG = MappingProxyType({
    "1.1.1": "non-text-content",
    "1.2.2": "captions-prerecorded",
    "1.3.1": "info-and-relationships",
    "1.3.2": "meaningful-sequence",
    "1.4.1": "use-of-color",
    "1.4.2": "audio-control",
    "1.4.3": "contrast-minimum",
    "1.4.4": "resize-text",
    "1.4.10": "reflow",
    "1.4.11": "non-text-contrast",
    "1.4.12": "text-spacing",
    "2.1.1": "keyboard",
    "2.1.2": "no-keyboard-trap",
    "2.2.2": "pause-stop-hide",
    "2.4.1": "bypass-blocks",
    "2.4.2": "page-titled",
    "2.4.3": "focus-order",
    "2.4.4": "link-purpose-in-context",
    "2.4.6": "headings-and-labels",
    "2.4.7": "focus-visible",
    "2.5.5": "target-size",
    "3.1.1": "language-of-page",
    "3.2.2": "on-input",
    "3.3.1": "error-identification",
    "3.3.2": "labels-or-instructions",
    "4.1.1": "parsing",
    "4.1.2": "name-role-value",
    "4.1.3": "status-messages",
})

IMPACTS = ("high", "medium", "low")
EFFORTS = ("simple", "moderate", "complex")

# Priority order: impact (high first) then effort (simple first)
IMPACT_ORDER = MappingProxyType({"high": 0, "medium": 1, "low": 2})
EFFORT_ORDER = MappingProxyType({"simple": 0, "moderate": 1, "complex": 2})


def _entry(wcag, snippet, impact, effort):
    return MappingProxyType({
        "wcag": tuple(wcag),
        "snippet": snippet,
        "impact": impact,
        "effort": effort,
    })


REMEDIATION_MAP = MappingProxyType({
    "page-title-exists": _entry(
        ["2.4.2"], "<title>Descriptive page title - e.g. Home | Company Name</title>", "high", "simple"),
    "html-lang": _entry(["3.1.1"], '<html lang="en">', "high", "simple"),
    "landmarks-present": _entry(
        ["1.3.1", "2.4.1"],
        '<main>, <nav>, <header>, <footer>, <aside>, or role="main", role="navigation", etc.',
        "medium", "moderate"),
    "single-main": _entry(
        ["1.3.1", "2.4.1"], 'Use exactly one <main> or [role="main"] for primary content.', "medium", "simple"),
    "heading-structure": _entry(
        ["1.3.1", "2.4.6"], "Start with <h1>, then <h2>, <h3>… without skipping levels.", "medium", "moderate"),
    "link-text": _entry(
        ["2.4.4", "4.1.2"], '<a href="...">Descriptive text</a> - avoid empty links or "click here".',
        "high", "simple"),
    "link-meaningful": _entry(
        ["2.4.4"],
        'Link text should describe the destination. Replace "click here" with e.g. "Download the guide".',
        "medium", "moderate"),
    "skip-link": _entry(
        ["2.4.1"], '<a href="#main" class="skip-link">Skip to main content</a>', "high", "simple"),
    "table-headers": _entry(
        ["1.3.1"], '<th scope="col">Header</th> or <th scope="row">Row label</th>', "high", "moderate"),
    "list-markup": _entry(
        ["1.3.1"], "<ul><li>...</li></ul> or <ol><li>...</li></ol> for lists.", "medium", "simple"),
    "iframe-titles": _entry(
        ["4.1.2"], '<iframe title="Description of iframe content" src="...">', "high", "simple"),
    "unique-ids": _entry(
        ["4.1.1"], "Ensure every id attribute is unique within the page.", "high", "moderate"),
    "img-alt": _entry(
        ["1.1.1"], '<img src="photo.jpg" alt="Description of the image">', "high", "simple"),
    "img-alt-length": _entry(
        ["1.1.1"],
        "Keep alt concise (under ~125 chars). Use longdesc or surrounding text for long descriptions.",
        "medium", "simple"),
    "svg-role": _entry(
        ["1.1.1", "4.1.2"],
        '<svg role="img" aria-labelledby="chart-title"> or role="presentation" for decorative.',
        "high", "simple"),
    "svg-accessible-name": _entry(
        ["1.1.1"], '<svg aria-label="Chart showing..." > or <title> inside <svg>.', "high", "simple"),
    "canvas-alt": _entry(
        ["1.1.1"], '<canvas id="c">…</canvas> + accessible alternative (text or link).', "high", "moderate"),
    "image-map-alt": _entry(
        ["1.1.1"], '<area alt="Region description" shape="rect" coords="...">', "high", "moderate"),
    "link-differentiation": _entry(
        ["1.4.1"], "Don't rely on color alone. Add underline, icon, or text (e.g. \"opens in new tab\").",
        "medium", "simple"),
    "focus-indicator": _entry(
        ["2.4.7"], ":focus { outline: 2px solid currentColor; outline-offset: 2px; }", "high", "simple"),
    "no-horizontal-scroll": _entry(
        ["1.4.10"], "Use max-width: 100%, overflow-wrap: break-word. Avoid fixed pixel widths.",
        "medium", "moderate"),
    "viewport-zoom": _entry(
        ["1.4.4"], 'Ensure user-scalable=yes (or omit) in <meta name="viewport">.', "high", "simple"),
    "video-captions": _entry(
        ["1.2.2"], '<track kind="captions" src="captions.vtt" srclang="en">', "high", "complex"),
    "video-autoplay": _entry(
        ["1.4.2"], "Don't autoplay with sound, or provide pause/mute controls.", "medium", "simple"),
    "audio-autoplay": _entry(
        ["1.4.2"], "Avoid autoplay. If needed, provide immediate pause control.", "medium", "simple"),
    "flash-alternative": _entry(
        ["1.1.1"], "Provide HTML alternative or ensure content is accessible without Flash.", "high", "complex"),
    "tabindex-positive": _entry(
        ["2.4.3"], 'Remove tabindex > 0. Use natural DOM order or tabindex="0" for focusable widgets.',
        "high", "simple"),
    "touch-target-size": _entry(
        ["2.5.5"], "Min 44×44px touch targets with spacing. padding or min-height/min-width.",
        "medium", "moderate"),
    "form-labels": _entry(
        ["3.3.2", "4.1.2"], '<label for="id">Label</label><input id="id"> or aria-label="Label"',
        "high", "simple"),
    "placeholder-not-only-label": _entry(
        ["3.3.2"], "Use <label> or aria-label. Placeholder is a hint, not a replacement.", "high", "simple"),
    "no-auto-refresh": _entry(
        ["2.2.2"], "Avoid auto-refresh. If required, allow user to extend time.", "medium", "moderate"),
    "dynamic-announcements": _entry(
        ["4.1.3"], 'Use aria-live="polite" or aria-live="assertive" on live regions.', "high", "moderate"),
    "page-load": _entry(
        [], "Check URL, network, bot protection, and server availability.", "high", "complex"),
})

# axe provides helpUrl; this adds SC references, snippet, impact and effort.
AXE_REMEDIATION = MappingProxyType({
    "document-title": REMEDIATION_MAP["page-title-exists"],
    "html-has-lang": REMEDIATION_MAP["html-lang"],
    "image-alt": REMEDIATION_MAP["img-alt"],
    "label": REMEDIATION_MAP["form-labels"],
    "link-name": REMEDIATION_MAP["link-text"],
    "button-name": _entry(
        ["2.1.1", "4.1.2"], '<button>Label</button> or aria-label="Label"', "high", "simple"),
    "color-contrast": _entry(
        ["1.4.3"], "Increase contrast to 4.5:1 (normal) or 3:1 (large). Use WebAIM contrast checker.",
        "high", "moderate"),
    "landmark-one-main": REMEDIATION_MAP["single-main"],
    "region": _entry(
        ["1.3.1", "2.4.1"], "Use landmarks: main, nav, header, footer, aside.", "medium", "moderate"),
    "landmark-unique": _entry(
        ["1.3.1"], "Give landmarks unique aria-label if multiple of same type.", "medium", "simple"),
    "frame-title": REMEDIATION_MAP["iframe-titles"],
    "duplicate-id": REMEDIATION_MAP["unique-ids"],
    "heading-order": REMEDIATION_MAP["heading-structure"],
    "list": REMEDIATION_MAP["list-markup"],
    "tabindex": REMEDIATION_MAP["tabindex-positive"],
    "focus-order-semantics": _entry(
        ["2.4.3"], "Ensure DOM order matches visual order. Avoid positive tabindex.", "medium", "moderate"),
    "meta-viewport": REMEDIATION_MAP["viewport-zoom"],
    "aria-valid-attr": _entry(
        ["4.1.2"], "Use only valid ARIA attributes. See MDN ARIA reference.", "high", "simple"),
    "aria-valid-attr-value": _entry(
        ["4.1.2"], 'Ensure ARIA attribute values are valid (e.g. aria-expanded="true" or "false").',
        "high", "simple"),
    "aria-required-attr": _entry(
        ["4.1.2"], "Add all required ARIA attributes for the role (e.g. combobox needs aria-expanded).",
        "high", "moderate"),
    "input-button-name": REMEDIATION_MAP["form-labels"],
    "form-field-multiple-labels": _entry(
        ["3.3.2"], "Each form control should have one associated label.", "medium", "simple"),
})

GENERIC_REMEDIATION = _entry(
    [], "Review the issue and apply appropriate fix. See W3C WCAG guidelines.", "medium", "moderate")


@dataclass(frozen=True)
class Catalog:
    """Read-only lookup tables handed to the aggregation and report code."""

    chapters: Mapping
    tag_to_chapters: Mapping
    remediation: Mapping
    axe_remediation: Mapping
    check_disabilities: Mapping
    disabilities: Tuple[str, ...]
    manual_checklist: Tuple[Mapping, ...]

    @property
    def chapter_keys(self) -> Tuple[str, ...]:
        return tuple(self.chapters)


def load_catalog(**overrides) -> Catalog:
    """Bundle the static tables. Keyword arguments replace single tables (tests)."""
    tables = {
        "chapters": checklists.CHECKLIST_CHAPTERS,
        "tag_to_chapters": checklists.AXE_TAG_TO_CHAPTER,
        "remediation": REMEDIATION_MAP,
        "axe_remediation": AXE_REMEDIATION,
        "check_disabilities": checklists.CHECK_DISABILITIES,
        "disabilities": checklists.DISABILITIES,
        "manual_checklist": checklists.MANUAL_CHECKLIST,
    }
    tables.update(overrides)
    unknown = sorted(
        {ch for targets in tables["tag_to_chapters"].values() for ch in targets} - set(tables["chapters"])
    )
    if unknown:
        raise ValueError(f"Tag map points to unknown chapters: {', '.join(unknown)}")
    return Catalog(**tables)


DEFAULT_CATALOG = load_catalog()


def get_remediation(check_id: Optional[str], axe_rule_id: Optional[str] = None,
                    catalog: Catalog = DEFAULT_CATALOG) -> Mapping:
    entry = catalog.remediation.get(check_id) if check_id else None
    if entry is None and axe_rule_id:
        entry = catalog.axe_remediation.get(axe_rule_id)
    return entry if entry is not None else GENERIC_REMEDIATION


def fix_order_score(item) -> int:
    """Lower sorts first. Unknown ratings count as medium / moderate."""
    impact = IMPACT_ORDER.get(item.get("impact"), 1)
    effort = EFFORT_ORDER.get(item.get("effort"), 1)
    return impact * 10 + effort


def wcag_sc_url(sc: str) -> str:
    slug = SC_TO_SLUG.get(sc)
    if slug:
        return f"{W3C_BASE}{slug}.html"
    return W3C_QUICKREF
