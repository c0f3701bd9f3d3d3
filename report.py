"""Technical accessibility report: every chapter, every URL, every check.

Run after ``accessibility.py`` to re-render from the stored results::

    python report.py --output-dir reports/latest
"""

import argparse
import sys
from pathlib import Path

import settings
from aggregate import ResultsNotFoundError, build_report_context, load_results
from deliverables import (
    CLIENT_FILENAME,
    DEVELOPER_FILENAME,
    STATEMENT_FILENAME,
    esc,
    format_timestamp,
    generate_all_deliverables,
)
from manual_progress import is_valid_report_id, load_progress, normalize_progress
from remediation import DEFAULT_CATALOG
from visualize import CHARTS_DIRNAME, SUMMARY_FILENAME, create_charts

STYLES = """
    :root { --pass: #2e7d32; --fail: #c62828; --warn: #ed6c02; --info: #1565c0; }
    * { box-sizing: border-box; }
    body { font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 24px; background: #f5f5f5; color: #212121; }
    .container { max-width: 960px; margin: 0 auto; background: #fff; border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,.08); overflow: hidden; }
    header { background: #1a237e; color: #fff; padding: 24px; }
    header h1 { margin: 0 0 8px; font-size: 1.5rem; }
    header p { margin: 0; opacity: .9; font-size: .9rem; }
    header a { color: #fff; }
    .summary { display: flex; gap: 16px; padding: 20px; background: #fafafa; border-bottom: 1px solid #eee; flex-wrap: wrap; }
    .summary-item { padding: 12px 20px; border-radius: 6px; background: #fff; border: 1px solid #e0e0e0; }
    .summary-item.pass { border-color: var(--pass); background: #e8f5e9; }
    .summary-item.fail { border-color: var(--fail); background: #ffebee; }
    .summary-item.warn { border-color: var(--warn); background: #fff3e0; }
    .summary-item span { display: block; font-size: 1.5rem; font-weight: 700; }
    .summary-item small { color: #666; }
    nav { padding: 16px 24px; border-bottom: 1px solid #eee; background: #fafafa; }
    nav a { margin-right: 16px; color: #1a237e; text-decoration: none; font-weight: 500; }
    nav a:hover, nav a:focus { text-decoration: underline; }
    .alert { padding: 16px 24px; margin: 24px 24px 0; border-radius: 6px; }
    .alert-warning { background: #fff3e0; border-left: 4px solid var(--warn); }
    .alert-error { background: #ffebee; border-left: 4px solid var(--fail); }
    section { padding: 24px; }
    section h2 { margin: 0 0 16px; font-size: 1.25rem; color: #1a237e; }
    .url-section { margin-bottom: 32px; }
    .url-section h3 { margin: 0 0 12px; font-size: 1rem; color: #333; word-break: break-all; }
    table { width: 100%; border-collapse: collapse; font-size: .9rem; }
    th, td { padding: 10px 12px; text-align: left; border-bottom: 1px solid #eee; }
    th { background: #f5f5f5; font-weight: 600; }
    .badge { display: inline-block; padding: 2px 8px; border-radius: 4px; font-size: .75rem; font-weight: 600; }
    .badge.pass { background: #e8f5e9; color: var(--pass); }
    .badge.fail { background: #ffebee; color: var(--fail); }
    .badge.warn { background: #fff3e0; color: var(--warn); }
    .badge.info { background: #e3f2fd; color: var(--info); }
    .violation { margin-bottom: 16px; padding: 12px; background: #fff8e1; border-left: 4px solid var(--warn); border-radius: 4px; font-size: .9rem; }
    .violation strong { display: block; margin-bottom: 4px; }
    figure { margin: 0 0 16px; }
    figure img { max-width: 100%; border: 1px solid #e0e0e0; }
    .manual-checklist { list-style: none; padding: 0; }
    .manual-checklist li { padding: 8px 0; border-bottom: 1px solid #eee; }
    .manual-checklist small { display: block; color: #666; margin-left: 28px; }
    footer { padding: 16px 24px; font-size: .85rem; color: #666; border-top: 1px solid #eee; }
"""

PROGRESS_SCRIPT = """
  <script>
    (function () {
      var endpoint = '/api/report/__REPORT_ID__/manual-progress';
      var boxes = Array.prototype.slice.call(document.querySelectorAll('.manual-checklist input[type="checkbox"]'));
      fetch(endpoint)
        .then(function (res) { return res.ok ? res.json() : { checked: [] }; })
        .then(function (data) {
          var checked = Array.isArray(data.checked) ? data.checked : [];
          boxes.forEach(function (box, i) { box.checked = checked[i] === true; });
        })
        .catch(function () {});
      boxes.forEach(function (box) {
        box.addEventListener('change', function () {
          fetch(endpoint, {
            method: 'PUT',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ checked: boxes.map(function (b) { return b.checked; }) })
          }).catch(function () {});
        });
      });
    })();
  </script>"""


def _alerts(report, context):
    urls = report.get("urls") or []
    errors = context["load_errors"]
    items = "".join(
        f"<li><strong>{esc(e.get('url'))}</strong>: {esc(e.get('message'))}</li>" for e in errors
    )

    if errors and not urls:
        return f"""
    <div class="alert alert-error" role="alert">
      <strong>No pages could be loaded.</strong> All {len(errors)} URL(s) failed. Possible causes: site blocks headless browsers, bot protection, timeout, or network issues.
      <ul style="margin: 12px 0 0 20px;">{items}</ul>
      <p style="margin: 12px 0 0;">Fix these issues and re-run <code>python accessibility.py --report</code></p>
    </div>"""
    if not urls:
        return """
    <div class="alert alert-warning">
      <strong>No pages were tested.</strong> Pass URLs with <code>--urls</code> or <code>--urls-file</code> and run <code>python accessibility.py --report</code>
    </div>"""
    if errors:
        return f"""
    <div class="alert alert-warning">
      <strong>{len(errors)} URL(s) could not be loaded</strong> and are not part of the results below.
      <ul style="margin: 12px 0 0 20px;">{items}</ul>
    </div>"""
    return ""


def _chapter_sections(report, catalog):
    urls = report.get("urls") or []
    axe_results = report.get("axeResults") or {}
    custom_results = report.get("customResults") or []
    html = []

    for chapter, meta in catalog.chapters.items():
        html.append(f'      <h2 id="ch{meta["id"]}">Chapter {meta["id"]}: {esc(meta["name"])}</h2>')
        if not urls:
            html.append(
                "<p><em>No pages were successfully tested. Resolve the page load errors above "
                "and re-run the tests.</em></p>"
            )

        for url in urls:
            html.append(f'<div class="url-section"><h3>{esc(url)}</h3>')
            custom = [r for r in custom_results if r.get("chapter") == chapter and r.get("url") == url]
            by_chapter = (axe_results.get(url) or {}).get("byChapter") or {}
            violations = (by_chapter.get(chapter) or {}).get("violations") or []

            if custom:
                html.append("<table><thead><tr><th>Rule</th><th>Status</th><th>Message</th></tr></thead><tbody>")
                for r in custom:
                    html.append(
                        f"<tr><td>{esc(r.get('rule'))}</td>"
                        f'<td><span class="badge {esc(r.get("status"))}">{esc(r.get("status"))}</span></td>'
                        f"<td>{esc(r.get('message'))}</td></tr>"
                    )
                html.append("</tbody></table>")

            for v in violations:
                html.append('<div class="violation">')
                html.append(f"<strong>{esc(v.get('id'))}: {esc(v.get('help'))}</strong>")
                if v.get("description"):
                    html.append(f"<p>{esc(v['description'])}</p>")
                if v.get("nodes"):
                    html.append(f"<p><strong>Affected:</strong> {len(v['nodes'])} element(s)</p>")
                html.append("</div>")

            if not custom and not violations:
                html.append("<p>No issues found for this chapter.</p>")
            html.append("</div>")

    return "\n".join(html)


def _screenshots(report):
    screenshots = report.get("screenshots") or {}
    if not screenshots:
        return ""
    html = ['      <h2 id="screenshots">Screenshots</h2>']
    for url, shots in screenshots.items():
        html.append(f'<div class="url-section"><h3>{esc(url)}</h3>')
        for shot in shots:
            html.append(
                f'<figure><img src="screenshots/{esc(shot.get("file"))}" '
                f'alt="Screenshot of {esc(url)} at {esc(shot.get("label"))}">'
                f"<figcaption>{esc(shot.get('label'))}</figcaption></figure>"
            )
        html.append("</div>")
    return "\n".join(html)


def _charts(charts):
    if not charts:
        return ""
    html = ['      <h2 id="charts">Charts</h2>']
    for chart in charts:
        html.append(f'<figure><img src="{esc(chart["file"])}" alt="{esc(chart["alt"])}"></figure>')
    html.append(
        f'<p><a href="{CHARTS_DIRNAME}/{SUMMARY_FILENAME}">Text summary of the charts</a></p>'
    )
    return "\n".join(html)


def _manual_checklist(catalog, progress):
    items = catalog.manual_checklist
    checked = normalize_progress(progress, len(items))
    html = [
        '      <h2 id="manual">Requires manual verification</h2>',
        "<p>Automated tools cannot settle these checks. Tick each item once it has been verified.</p>",
        '<ul class="manual-checklist">',
    ]
    for index, (item, done) in enumerate(zip(items, checked)):
        state = " checked" if done else ""
        html.append(
            f'<li><input type="checkbox" id="manual-{index}" data-index="{index}"{state}> '
            f'<label for="manual-{index}">{esc(item["text"])}</label>'
            f"<small>{esc(', '.join(item['disabilities']))}</small></li>"
        )
    html.append("</ul>")
    return "\n".join(html)


def render_technical_report(report, context, catalog=DEFAULT_CATALOG, progress=None,
                            report_id=None, charts=()):
    generated = report.get("generatedAt")
    nav = "".join(
        f'<a href="#ch{meta["id"]}">Ch.{meta["id"]} {esc(meta["name"].split(" ")[0])}</a>'
        for meta in catalog.chapters.values()
    )
    if report.get("screenshots"):
        nav += '<a href="#screenshots">Screenshots</a>'
    if charts:
        nav += '<a href="#charts">Charts</a>'
    nav += '<a href="#manual">Manual checks</a>'

    script = ""
    if report_id and is_valid_report_id(report_id):
        script = PROGRESS_SCRIPT.replace("__REPORT_ID__", report_id)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Accessibility Report - {esc(format_timestamp(generated, with_time=False))}</title>
  <style>{STYLES}</style>
</head>
<body>
  <div class="container">
    <header>
      <h1>Accessibility Audit Report</h1>
      <p>Based on Deque University Testing Checklists · Generated {esc(format_timestamp(generated))}</p>
      <p><a href="{DEVELOPER_FILENAME}">Developer guide</a> · <a href="{CLIENT_FILENAME}">Client summary</a> · <a href="{STATEMENT_FILENAME}">Statement draft</a></p>
    </header>

    <div class="summary">
      <div class="summary-item pass"><span>{context["pass"]}</span><small>Checks Passed</small></div>
      <div class="summary-item warn"><span>{context["warn"]}</span><small>Warnings</small></div>
      <div class="summary-item fail"><span>{context["fail"]}</span><small>Failures</small></div>
      <div class="summary-item"><span>{context["total_axe_violations"]}</span><small>Axe Violations</small></div>
      <div class="summary-item"><span>{len(report.get("urls") or [])}</span><small>Pages Tested</small></div>
      <div class="summary-item"><span>{context["score"]}</span><small>Score</small></div>
    </div>
{_alerts(report, context)}
    <nav aria-label="Chapters">{nav}</nav>

    <section>
{_chapter_sections(report, catalog)}
{_screenshots(report)}
{_charts(charts)}
{_manual_checklist(catalog, progress)}
    </section>

    <footer>
      <p>This report was generated by an automated accessibility testing suite based on Deque University checklists.
      Some checks require manual verification. For full checklists, see the PDF sources linked in the project documentation.</p>
    </footer>
  </div>{script}
</body>
</html>
"""


def write_report(html, output_dir) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / settings.REPORT_FILENAME
    path.write_text(html, encoding="utf-8")
    return path


def generate_report(report=None, output_dir=None, catalog=DEFAULT_CATALOG, report_id=None,
                    charts=False):
    """Render the technical report and the deliverables into ``output_dir``.

    Loads the stored results when ``report`` is not given; raises
    ``ResultsNotFoundError`` when there are none.
    """
    output_dir = Path(output_dir or settings.REPORTS_BASE / "latest")
    if report is None:
        report = load_results(output_dir)

    context = build_report_context(report, catalog)
    chart_entries = create_charts(report, context, output_dir, catalog) if charts else []
    html = render_technical_report(
        report,
        context,
        catalog,
        progress=load_progress(output_dir),
        report_id=report_id,
        charts=chart_entries,
    )
    path = write_report(html, output_dir)
    generate_all_deliverables(report, context, output_dir)
    return path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render the HTML report from stored results.")
    parser.add_argument("--output-dir", type=Path, default=settings.REPORTS_BASE / "latest")
    parser.add_argument("--report-id", help="enable manual progress sync through the server API")
    parser.add_argument("--charts", action="store_true", help="also render matplotlib charts")
    args = parser.parse_args(argv)

    try:
        path = generate_report(
            output_dir=args.output_dir, report_id=args.report_id, charts=args.charts
        )
    except ResultsNotFoundError:
        print("No results found. Run: python accessibility.py")
        return 1
    print(f"Report saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
