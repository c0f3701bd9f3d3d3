"""Fold a run's custom check results and axe results into the report model.

Everything here is a pure function of a RunReport dict (as written to
``accessibility-results.json``) and a :class:`remediation.Catalog`.
"""

import json
import math
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List

import settings
from checklists import CATCH_ALL_DISABILITY
from remediation import DEFAULT_CATALOG, fix_order_score, get_remediation

ISSUE_STATUSES = ("fail", "warn")


class ResultsNotFoundError(FileNotFoundError):
    """No prior run data exists for the requested output directory."""


def results_path(output_dir) -> Path:
    return Path(output_dir) / settings.RESULTS_FILENAME


def load_results(output_dir):
    """Load the RunReport persisted in ``output_dir``."""
    path = results_path(output_dir)
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        raise ResultsNotFoundError(f"No results found in {path}") from exc


def summarize(custom_results) -> Dict[str, int]:
    """Count results by status. Anything not pass/fail counts as a warning."""
    summary = {"pass": 0, "fail": 0, "warn": 0}
    for result in custom_results:
        status = result.get("status")
        if status == "pass":
            summary["pass"] += 1
        elif status == "fail":
            summary["fail"] += 1
        else:
            summary["warn"] += 1
    return summary


def axe_counts_by_url(report) -> Dict[str, int]:
    axe_results = report.get("axeResults") or {}
    counts = OrderedDict()
    for url in report.get("urls") or []:
        counts[url] = len((axe_results.get(url) or {}).get("violations") or [])
    return counts


def total_axe_violations(report) -> int:
    return sum(axe_counts_by_url(report).values())


def load_errors(report) -> List[dict]:
    return [r for r in report.get("customResults") or [] if r.get("id") == "page-load"]


def compute_score(pass_, fail, warn, axe_violations) -> int:
    total = pass_ + fail + warn + axe_violations
    if total == 0:
        return 100
    # halves round up, not to even
    score = math.floor(100 * pass_ / total + 0.5)
    return max(0, min(100, score))


def _fix_item(check_id, rule, status, url, entry, source):
    return {
        "id": check_id,
        "rule": rule,
        "status": status,
        "impact": entry["impact"],
        "effort": entry["effort"],
        "url": url,
        "wcag": list(entry["wcag"]),
        "snippet": entry["snippet"],
        "source": source,
    }


def build_fix_order(report, catalog=DEFAULT_CATALOG) -> List[dict]:
    """Every fail/warn check and every axe violation, quick wins first."""
    items = []
    for result in report.get("customResults") or []:
        if result.get("status") not in ISSUE_STATUSES:
            continue
        entry = get_remediation(result.get("id"), catalog=catalog)
        items.append(_fix_item(
            result.get("id"), result.get("rule"), result.get("status"),
            result.get("url"), entry, "custom",
        ))

    axe_results = report.get("axeResults") or {}
    for url in report.get("urls") or []:
        for violation in (axe_results.get(url) or {}).get("violations") or []:
            rule_id = violation.get("id")
            entry = get_remediation(None, rule_id, catalog)
            items.append(_fix_item(
                rule_id, violation.get("help") or rule_id, "fail", url, entry, "axe",
            ))

    # sorted() is stable, so equal scores keep encounter order
    return sorted(items, key=fix_order_score)


def dedupe_by_rule(items) -> List[dict]:
    seen = set()
    unique = []
    for item in items:
        if item["rule"] in seen:
            continue
        seen.add(item["rule"])
        unique.append(item)
    return unique


def occurrences_by_rule(items):
    """Map rule -> {"count", "urls"} over the full, undeduplicated list."""
    occurrences = OrderedDict()
    for item in items:
        entry = occurrences.setdefault(item["rule"], {"count": 0, "urls": []})
        entry["count"] += 1
        url = item.get("url")
        if url and url not in entry["urls"]:
            entry["urls"].append(url)
    return occurrences


def phase_for(impact, effort) -> int:
    if impact == "high" and effort == "simple":
        return 1
    if (impact == "high" and effort != "simple") or (impact == "medium" and effort == "simple"):
        return 2
    return 3


def group_phases(items) -> Dict[int, List[dict]]:
    """Split the deduplicated items into the three remediation phases."""
    phases = {1: [], 2: [], 3: []}
    for item in dedupe_by_rule(items):
        phases[phase_for(item.get("impact"), item.get("effort"))].append(item)
    return phases


def compute_disability_stats(custom_results, manual_items, axe_counts, catalog=DEFAULT_CATALOG):
    stats = OrderedDict((name, 0) for name in catalog.disabilities)

    for result in custom_results:
        mapped = catalog.check_disabilities.get(result.get("id"))
        if not mapped:
            stats[CATCH_ALL_DISABILITY] = stats.get(CATCH_ALL_DISABILITY, 0) + 1
            continue
        for name in mapped:
            stats[name] = stats.get(name, 0) + 1

    for item in manual_items:
        for name in item["disabilities"]:
            stats[name] = stats.get(name, 0) + 1

    # axe rules carry no disability mapping; a coarse catch-all per URL
    url_count = len(axe_counts)
    for count in axe_counts.values():
        stats[CATCH_ALL_DISABILITY] = stats.get(CATCH_ALL_DISABILITY, 0) + count * max(1, url_count)

    return stats


def build_report_context(report, catalog=DEFAULT_CATALOG):
    """Compute everything the renderers need from one RunReport."""
    custom_results = report.get("customResults") or []
    summary = report.get("summary") or summarize(custom_results)
    pass_ = summary.get("pass", 0)
    fail = summary.get("fail", 0)
    warn = summary.get("warn", 0)
    axe_counts = axe_counts_by_url(report)
    axe_total = sum(axe_counts.values())
    fix_order = build_fix_order(report, catalog)

    return {
        "pass": pass_,
        "fail": fail,
        "warn": warn,
        "total_axe_violations": axe_total,
        "total": pass_ + fail + warn + axe_total,
        "score": compute_score(pass_, fail, warn, axe_total),
        "fix_order": fix_order,
        "phases": group_phases(fix_order),
        "occurrences": occurrences_by_rule(fix_order),
        "disability_stats": compute_disability_stats(
            custom_results, catalog.manual_checklist, axe_counts, catalog
        ),
        "load_errors": load_errors(report),
    }
