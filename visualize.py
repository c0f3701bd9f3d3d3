import argparse
import sys
from collections import Counter, OrderedDict
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

import settings  # noqa: E402
from aggregate import ResultsNotFoundError, build_report_context, load_results  # noqa: E402
from checklists import CATCH_ALL_DISABILITY  # noqa: E402
from remediation import DEFAULT_CATALOG  # noqa: E402

CHARTS_DIRNAME = "charts"
SUMMARY_FILENAME = "visualization_summary.txt"


def count_chapter_issues(report, catalog=DEFAULT_CATALOG):
    """Return failed/warned custom checks and axe violations per chapter."""
    counts = OrderedDict((ch, {"custom": 0, "axe": 0}) for ch in catalog.chapter_keys)
    for result in report.get("customResults") or []:
        chapter = result.get("chapter")
        if chapter in counts and result.get("status") in ("fail", "warn"):
            counts[chapter]["custom"] += 1

    axe_results = report.get("axeResults") or {}
    for url in report.get("urls") or []:
        by_chapter = (axe_results.get(url) or {}).get("byChapter") or {}
        for chapter, bucket in by_chapter.items():
            if chapter in counts:
                counts[chapter]["axe"] += len(bucket.get("violations") or [])
    return counts


def count_common_issues(fix_order):
    """Return Counter of rule names across all fix-order items."""
    return Counter(item["rule"] for item in fix_order if item.get("rule"))


def _chapter_label(chapter, catalog):
    meta = catalog.chapters[chapter]
    return f"Ch.{meta['id']} {meta['name'].split(' ')[0]}"


def write_summary_text(report, chapter_counts, counter, disability_stats, output: Path,
                       catalog=DEFAULT_CATALOG):
    """Write a textual summary of the charts for screen readers."""
    with output.open("w", encoding="utf-8") as f:
        f.write(f"Pages tested: {len(report.get('urls') or [])}\n\n")
        f.write("Issues per chapter:\n")
        for chapter, c in chapter_counts.items():
            f.write(f"{_chapter_label(chapter, catalog)}: custom={c['custom']}, axe={c['axe']}\n")
        f.write("\nMost common issues:\n")
        for rule, num in counter.most_common(10):
            f.write(f"{num}x {rule}\n")
        f.write("\nImpact by disability:\n")
        for name, num in disability_stats.items():
            if num > 0:
                f.write(f"{name}: {num}\n")


def plot_chapter_issues(chapter_counts, output: Path, catalog=DEFAULT_CATALOG):
    """Create a bar chart of issues per checklist chapter."""
    labels = [_chapter_label(ch, catalog) for ch in chapter_counts]
    custom = [c["custom"] for c in chapter_counts.values()]
    axe = [c["axe"] for c in chapter_counts.values()]

    colors = plt.get_cmap("tab10").colors

    x = range(len(labels))
    width = 0.35
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.bar([p - width / 2 for p in x], custom, width, label="custom checks", color=colors[0])
    ax.bar([p + width / 2 for p in x], axe, width, label="axe violations", color=colors[1])
    ax.set_xticks(list(x))
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_ylabel("Number of issues")
    ax.set_title("Accessibility issues per chapter")
    ax.legend()
    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    print(f"Chapter chart saved to {output}")


def plot_common_issues(counter: Counter, output: Path, top_n: int = 10):
    """Plot the most frequent accessibility issues."""
    most_common = counter.most_common(top_n)
    labels = [m[0][:50] + ("..." if len(m[0]) > 50 else "") for m in most_common]
    values = [m[1] for m in most_common]

    colors = plt.get_cmap("tab10").colors

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.barh(labels, values, color=colors[4])
    ax.invert_yaxis()
    ax.set_xlabel("Occurrences")
    ax.set_title(f"Top {top_n} frequent issues")
    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    print(f"Common issues plot saved to {output}")


def plot_disability_impact(disability_stats, output: Path):
    """Plot affected user groups, leaving out the catch-all category."""
    shown = [(k, v) for k, v in disability_stats.items() if v > 0 and k != CATCH_ALL_DISABILITY]
    labels = [k for k, _ in shown]
    values = [v for _, v in shown]

    colors = plt.get_cmap("tab10").colors

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.barh(labels, values, color=colors[2])
    ax.invert_yaxis()
    ax.set_xlabel("Related checks")
    ax.set_title("Impact by disability")
    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    print(f"Disability chart saved to {output}")


def create_charts(report, context, output_dir, catalog=DEFAULT_CATALOG):
    """Write all charts plus the text summary; return the chart entries for the report."""
    charts_dir = Path(output_dir) / CHARTS_DIRNAME
    charts_dir.mkdir(parents=True, exist_ok=True)

    chapter_counts = count_chapter_issues(report, catalog)
    counter = count_common_issues(context["fix_order"])
    stats = context["disability_stats"]

    charts = []
    plot_chapter_issues(chapter_counts, charts_dir / "chapter_issues.png", catalog)
    charts.append({
        "file": f"{CHARTS_DIRNAME}/chapter_issues.png",
        "alt": "Bar chart of custom check issues and axe violations per checklist chapter",
    })

    if counter:
        plot_common_issues(counter, charts_dir / "common_issues.png")
        charts.append({
            "file": f"{CHARTS_DIRNAME}/common_issues.png",
            "alt": "Bar chart of the most frequent issues",
        })
    else:
        print("No issues found; skipping common issues plot.")

    if any(v > 0 for k, v in stats.items() if k != CATCH_ALL_DISABILITY):
        plot_disability_impact(stats, charts_dir / "disability_impact.png")
        charts.append({
            "file": f"{CHARTS_DIRNAME}/disability_impact.png",
            "alt": "Bar chart of related checks per disability category",
        })

    write_summary_text(report, chapter_counts, counter, stats, charts_dir / SUMMARY_FILENAME, catalog)
    return charts


def main(argv=None):
    parser = argparse.ArgumentParser(description="Charts and a text summary for an accessibility run.")
    parser.add_argument("--output-dir", type=Path, default=settings.REPORTS_BASE / "latest")
    args = parser.parse_args(argv)

    try:
        report = load_results(args.output_dir)
    except ResultsNotFoundError:
        print("No results found. Run: python accessibility.py")
        return 1

    context = build_report_context(report, DEFAULT_CATALOG)
    print("Issues per chapter:")
    for chapter, c in count_chapter_issues(report).items():
        print(f"{chapter}: {c}")
    print()
    print("Most common issues:")
    for rule, num in count_common_issues(context["fix_order"]).most_common(5):
        print(f"{num}x {rule}")

    create_charts(report, context, args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
