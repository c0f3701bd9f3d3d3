"""Checklist structure: the 8 chapters, axe tag routing and manual checks.

The chapters follow the Deque University testing checklists. Every result
produced by a custom check carries one of the chapter keys below, and every
axe record is routed into one or more chapters through its tags.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

DEQUE_DOCS = "https://media.dequeuniversity.com/courses/generic/testing-basic-method-and-tools/2.0/en/docs/"

CHECKLIST_CHAPTERS = MappingProxyType({
    "semantics": MappingProxyType({
        "id": "1",
        "name": "Semantic Structure and Navigation",
        "source": DEQUE_DOCS + "module-semantic-checklist.pdf",
    }),
    "images": MappingProxyType({
        "id": "2",
        "name": "Images, Canvas, SVG, and Non-Text Content",
        "source": DEQUE_DOCS + "module-images-checklist.pdf",
    }),
    "visualDesign": MappingProxyType({
        "id": "3",
        "name": "Visual Design and Colors",
        "source": DEQUE_DOCS + "module-visual-design-checklist.pdf",
    }),
    "responsive": MappingProxyType({
        "id": "4",
        "name": "Responsive Design and Zoom",
        "source": DEQUE_DOCS + "module-responsive-zoom-checklist.pdf",
    }),
    "multimedia": MappingProxyType({
        "id": "5",
        "name": "Multimedia, Animations, and Motion",
        "source": DEQUE_DOCS + "module-multimedia-checklist.pdf",
    }),
    "inputMethods": MappingProxyType({
        "id": "6",
        "name": "Device-Independent Input Methods",
        "source": DEQUE_DOCS + "module-input-methods-checklist.pdf",
    }),
    "forms": MappingProxyType({
        "id": "7",
        "name": "Form Labels, Instructions, and Validation",
        "source": DEQUE_DOCS + "module-forms-checklist.pdf",
    }),
    "dynamicUpdates": MappingProxyType({
        "id": "8",
        "name": "Dynamic Updates, AJAX, and SPAs",
        "source": DEQUE_DOCS + "module-dynamic-updates-checklist.pdf",
    }),
})

CHAPTER_KEYS: Tuple[str, ...] = tuple(CHECKLIST_CHAPTERS)

DEFAULT_CHAPTER = "semantics"

# One axe tag can route a record into several chapters.
AXE_TAG_TO_CHAPTER = MappingProxyType({
    "wcag2a": ("semantics", "images", "forms", "inputMethods"),
    "wcag2aa": ("semantics", "images", "visualDesign", "forms", "inputMethods"),
    "wcag21a": ("semantics", "images", "forms", "inputMethods"),
    "wcag21aa": ("semantics", "images", "visualDesign", "forms", "inputMethods"),
    "wcag22aa": ("semantics", "images", "visualDesign", "forms", "inputMethods"),
    "best-practice": ("semantics", "images", "forms", "inputMethods", "dynamicUpdates"),
    "cat.semantics": ("semantics",),
    "cat.name-role-value": ("semantics", "forms", "inputMethods"),
    "cat.structure": ("semantics",),
    "cat.color": ("visualDesign",),
    "cat.parsing": ("semantics",),
    "cat.aria": ("semantics", "forms", "inputMethods", "dynamicUpdates"),
    "cat.forms": ("forms",),
    "cat.keyboard": ("inputMethods",),
    "cat.focus": ("inputMethods", "semantics"),
    "cat.language": ("semantics",),
    "cat.text-alternatives": ("images",),
    "cat.time-based-media": ("multimedia",),
    "cat.sensory-and-visual-cues": ("visualDesign",),
    "cat.layout": ("responsive", "visualDesign"),
    "cat.motion": ("multimedia",),
})

AXE_RECORD_KINDS = ("violations", "incomplete", "passes")

DISABILITIES: Tuple[str, ...] = (
    "Blindness",
    "Low Vision",
    "Colorblindness",
    "Deafness/Hard-of-Hearing",
    "Deafblindness",
    "Dexterity/Motor",
    "Speech",
    "Cognitive",
    "Reading",
    "Seizure",
    "Various",
)

CATCH_ALL_DISABILITY = "Various"

# Rough relevance of each custom check for stakeholder communication.
CHECK_DISABILITIES = MappingProxyType({
    "page-title-exists": ("Blindness", "Cognitive", "Reading"),
    "html-lang": ("Blindness", "Reading", "Deafblindness"),
    "landmarks-present": ("Blindness", "Deafblindness", "Dexterity/Motor"),
    "single-main": ("Blindness", "Deafblindness"),
    "heading-structure": ("Blindness", "Cognitive", "Reading"),
    "link-text": ("Blindness", "Deafblindness", "Cognitive"),
    "link-meaningful": ("Blindness", "Cognitive", "Reading"),
    "skip-link": ("Blindness", "Dexterity/Motor"),
    "table-headers": ("Blindness", "Deafblindness"),
    "list-markup": ("Blindness", "Cognitive"),
    "iframe-titles": ("Blindness", "Deafblindness"),
    "unique-ids": ("Blindness",),
    "img-alt": ("Blindness", "Deafblindness", "Low Vision"),
    "img-alt-length": ("Blindness", "Cognitive"),
    "svg-role": ("Blindness",),
    "svg-accessible-name": ("Blindness", "Deafblindness"),
    "canvas-alt": ("Blindness", "Deafblindness"),
    "image-map-alt": ("Blindness", "Dexterity/Motor"),
    "link-differentiation": ("Colorblindness", "Low Vision"),
    "focus-indicator": ("Low Vision", "Dexterity/Motor", "Cognitive"),
    "no-horizontal-scroll": ("Low Vision", "Dexterity/Motor"),
    "viewport-zoom": ("Low Vision",),
    "video-captions": ("Deafness/Hard-of-Hearing", "Deafblindness"),
    "video-autoplay": ("Blindness", "Cognitive", "Seizure"),
    "audio-autoplay": ("Blindness", "Cognitive"),
    "flash-alternative": ("Blindness", "Dexterity/Motor"),
    "tabindex-positive": ("Blindness", "Dexterity/Motor"),
    "touch-target-size": ("Dexterity/Motor", "Low Vision"),
    "form-labels": ("Blindness", "Cognitive", "Speech"),
    "placeholder-not-only-label": ("Cognitive", "Low Vision", "Reading"),
    "no-auto-refresh": ("Blindness", "Cognitive", "Reading"),
    "dynamic-announcements": ("Blindness", "Deafblindness", "Cognitive"),
})

# Checks no automated tool can settle. The order is the index used by the
# persisted progress blob, so new items are only ever appended.
MANUAL_CHECKLIST: Tuple[Mapping, ...] = tuple(MappingProxyType(item) for item in (
    {"text": "All functionality is operable with the keyboard alone, without traps.",
     "disabilities": ("Blindness", "Dexterity/Motor")},
    {"text": "Focus order follows the visual reading order and focus is always visible.",
     "disabilities": ("Low Vision", "Dexterity/Motor", "Cognitive")},
    {"text": "Screen reader (NVDA, JAWS or VoiceOver) announces headings, landmarks and controls correctly.",
     "disabilities": ("Blindness", "Deafblindness")},
    {"text": "Alternative text is meaningful for informative images and empty for decorative ones.",
     "disabilities": ("Blindness", "Deafblindness")},
    {"text": "Content reflows and stays usable at 200% and 400% zoom.",
     "disabilities": ("Low Vision",)},
    {"text": "Information is never conveyed by color, shape or position alone.",
     "disabilities": ("Colorblindness", "Blindness", "Cognitive")},
    {"text": "Captions and transcripts are accurate and synchronized for all media.",
     "disabilities": ("Deafness/Hard-of-Hearing", "Deafblindness")},
    {"text": "Nothing flashes more than three times per second; motion can be paused.",
     "disabilities": ("Seizure", "Cognitive")},
    {"text": "Form errors are identified in text and suggestions for correction are given.",
     "disabilities": ("Blindness", "Cognitive", "Reading")},
    {"text": "Dynamic updates and status messages are announced without moving focus.",
     "disabilities": ("Blindness", "Deafblindness", "Cognitive")},
    {"text": "Time limits can be turned off, adjusted or extended.",
     "disabilities": ("Dexterity/Motor", "Cognitive", "Reading")},
    {"text": "Voice control users can activate controls by their visible label.",
     "disabilities": ("Dexterity/Motor", "Speech")},
    {"text": "Language is clear and instructions do not rely on sensory characteristics.",
     "disabilities": ("Cognitive", "Reading")},
))


def classify(tags: Iterable[str], tag_map: Mapping = AXE_TAG_TO_CHAPTER) -> Tuple[str, ...]:
    """Return the chapters a set of axe tags belongs to.

    Never empty: records whose tags match no chapter land in
    ``DEFAULT_CHAPTER``. The result is ordered like ``CHAPTER_KEYS``.
    """
    matched = set()
    for tag in tags or ():
        matched.update(tag_map.get(tag, ()))
    if not matched:
        return (DEFAULT_CHAPTER,)
    ordered = tuple(ch for ch in CHAPTER_KEYS if ch in matched)
    # chapters unknown to the taxonomy (custom tag maps) go last, sorted
    extra = tuple(sorted(matched.difference(CHAPTER_KEYS)))
    return ordered + extra


def bucket_by_chapter(records, chapters: Iterable[str] = CHAPTER_KEYS,
                      tag_map: Mapping = AXE_TAG_TO_CHAPTER) -> Dict[str, List[dict]]:
    """Fan every record out into each chapter its tags map to.

    All chapter keys are present in the result, empty or not. A record none
    of whose chapters is among ``chapters`` goes to ``DEFAULT_CHAPTER``, or
    to the first chapter when that one is not listed either.
    """
    buckets = {ch: [] for ch in chapters}
    fallback = DEFAULT_CHAPTER if DEFAULT_CHAPTER in buckets else next(iter(buckets), None)
    for record in records or ():
        placed = [ch for ch in classify(record.get("tags", ()), tag_map) if ch in buckets]
        if not placed and fallback is not None:
            placed = [fallback]
        for ch in placed:
            buckets[ch].append(record)
    return buckets


def bucket_axe_results(results, chapters: Iterable[str] = CHAPTER_KEYS,
                       tag_map: Mapping = AXE_TAG_TO_CHAPTER) -> Dict[str, Dict[str, List[dict]]]:
    """Build the ``byChapter`` map for one axe run."""
    chapters = tuple(chapters)
    by_chapter = {ch: {kind: [] for kind in AXE_RECORD_KINDS} for ch in chapters}
    for kind in AXE_RECORD_KINDS:
        buckets = bucket_by_chapter(results.get(kind) or [], chapters, tag_map)
        for ch, records in buckets.items():
            by_chapter[ch][kind] = records
    return by_chapter
