import pytest

from checklists import (
    AXE_TAG_TO_CHAPTER,
    CHAPTER_KEYS,
    CHECK_DISABILITIES,
    CHECKLIST_CHAPTERS,
    DISABILITIES,
    MANUAL_CHECKLIST,
    bucket_axe_results,
    bucket_by_chapter,
    classify,
)


def test_taxonomy_has_eight_chapters_in_order():
    assert CHAPTER_KEYS == (
        "semantics", "images", "visualDesign", "responsive",
        "multimedia", "inputMethods", "forms", "dynamicUpdates",
    )
    assert [CHECKLIST_CHAPTERS[k]["id"] for k in CHAPTER_KEYS] == [str(i) for i in range(1, 9)]


@pytest.mark.parametrize("tags", [[], None, ["experimental"], ["wcag999", "cat.unknown"]])
def test_classify_falls_back_to_semantics(tags):
    assert classify(tags) == ("semantics",)


def test_classify_is_a_union_in_taxonomy_order():
    assert classify(["cat.layout", "cat.color"]) == ("visualDesign", "responsive")
    assert classify(["cat.time-based-media", "cat.forms", "cat.keyboard"]) == (
        "multimedia", "inputMethods", "forms",
    )


def test_classify_never_returns_empty_for_any_known_tag():
    for tag in AXE_TAG_TO_CHAPTER:
        chapters = classify([tag])
        assert chapters
        assert set(chapters) <= set(CHAPTER_KEYS)


def test_classify_with_substituted_tag_map():
    assert classify(["x"], {"x": ("forms",)}) == ("forms",)
    assert classify(["y"], {"x": ("forms",)}) == ("semantics",)


def test_bucket_by_chapter_contains_every_chapter_even_when_empty():
    buckets = bucket_by_chapter([])
    assert list(buckets) == list(CHAPTER_KEYS)
    assert all(records == [] for records in buckets.values())


def test_bucket_by_chapter_fans_out_records():
    record = {"id": "label", "tags": ["cat.forms", "cat.keyboard"]}
    untagged = {"id": "mystery", "tags": []}
    buckets = bucket_by_chapter([record, untagged])
    assert buckets["forms"] == [record]
    assert buckets["inputMethods"] == [record]
    assert buckets["semantics"] == [untagged]
    assert buckets["images"] == []


def test_bucket_axe_results_builds_all_kinds_per_chapter():
    violation = {"id": "color-contrast", "tags": ["cat.color"]}
    passed = {"id": "document-title", "tags": ["cat.text-alternatives"]}
    by_chapter = bucket_axe_results({"violations": [violation], "passes": [passed]})
    assert set(by_chapter) == set(CHAPTER_KEYS)
    assert by_chapter["visualDesign"] == {"violations": [violation], "incomplete": [], "passes": []}
    assert by_chapter["images"]["passes"] == [passed]


def test_catalogs_are_read_only():
    with pytest.raises(TypeError):
        CHECKLIST_CHAPTERS["extra"] = {}
    with pytest.raises(TypeError):
        AXE_TAG_TO_CHAPTER["cat.color"] = ("forms",)


def test_disability_tags_are_known_categories():
    for check_id, names in CHECK_DISABILITIES.items():
        assert set(names) <= set(DISABILITIES), check_id
    for item in MANUAL_CHECKLIST:
        assert item["text"]
        assert set(item["disabilities"]) <= set(DISABILITIES)


def test_bucket_by_chapter_never_drops_records_outside_the_chapter_list():
    record = {"id": "custom-rule", "tags": ["cat.custom"]}
    buckets = bucket_by_chapter([record], CHAPTER_KEYS, {"cat.custom": ("newChapter",)})
    assert "newChapter" not in buckets
    assert buckets["semantics"] == [record]


def test_bucket_by_chapter_without_the_default_chapter():
    chapters = [ch for ch in CHAPTER_KEYS if ch != "semantics"]
    record = {"id": "mystery", "tags": ["unknown"]}
    buckets = bucket_by_chapter([record], chapters)
    assert buckets[chapters[0]] == [record]
    assert sum(len(records) for records in buckets.values()) == 1
