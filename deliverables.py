"""Stakeholder deliverables built from a RunReport and its report context.

* developer guide: deduplicated fix list with snippets and WCAG links
* client summary: score, statistics, phased plan and disability impact
* accessibility statement: a DRAFT to be completed before publishing
"""

from datetime import datetime
from html import escape
from pathlib import Path

from aggregate import dedupe_by_rule
from checklists import CATCH_ALL_DISABILITY
from remediation import wcag_sc_url

DEVELOPER_FILENAME = "accessibility-developers.html"
CLIENT_FILENAME = "accessibility-client.html"
STATEMENT_FILENAME = "accessibility-statement.html"

KNOWN_LIMITATIONS_LIMIT = 15

PHASES = (
    (1, "Quick wins", "High-impact, simple fixes. Estimated: 1-2 days."),
    (2, "Medium effort", "Important fixes requiring some development. Estimated: 1-2 weeks."),
    (3, "Long-term", "Complex changes or lower-priority items. Plan over several weeks."),
)

STYLES = """
  :root { --pass: #2e7d32; --fail: #c62828; --warn: #ed6c02; --accent: #2d9d78; --bg: #f8f7f4; --surface: #fff; --text: #1a1a1a; --text-muted: #5c5c5c; --border: #e8e6e1; }
  * { box-sizing: border-box; }
  body { font-family: system-ui, sans-serif; margin: 0; padding: 0; background: var(--bg); color: var(--text); line-height: 1.6; }
  .container { max-width: 900px; margin: 0 auto; padding: 32px; background: var(--surface); border-radius: 12px; box-shadow: 0 2px 16px rgba(0,0,0,.06); }
  h1 { font-size: 1.6rem; margin: 0 0 8px; }
  h2 { font-size: 1.2rem; margin: 24px 0 12px; }
  h3 { font-size: 1rem; margin: 16px 0 8px; }
  p { margin: 0 0 12px; color: var(--text-muted); }
  .meta { font-size: 0.9rem; color: var(--text-muted); margin-bottom: 24px; }
  pre { background: #1e1e1e; color: #d4d4d4; padding: 12px; border-radius: 8px; overflow-x: auto; font-size: 0.85rem; white-space: pre-wrap; }
  .badge { display: inline-block; padding: 4px 8px; border-radius: 6px; font-size: 0.75rem; font-weight: 600; }
  .badge.fail { background: #ffebee; color: var(--fail); }
  .badge.warn { background: #fff3e0; color: var(--warn); }
  .badge.impact { background: #e3f2fd; }
  .issue { margin-bottom: 24px; padding-bottom: 24px; border-bottom: 1px solid var(--border); }
  a { color: var(--accent); }
"""


def esc(value):
    if value is None:
        return ""
    return escape(str(value), quote=True)


def format_timestamp(value, with_time=True):
    """Render an ISO timestamp from the results file; unparsable values pass through."""
    try:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value or "")
    return moment.strftime("%Y-%m-%d %H:%M" if with_time else "%Y-%m-%d")


def _page(title, body, extra_styles=""):
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{esc(title)}</title>
  <style>{STYLES}{extra_styles}</style>
</head>
<body>
  <div class="container">
{body}
  </div>
</body>
</html>
"""


def render_developer_guide(report, context):
    occurrences = context["occurrences"]
    html = [
        "    <h1>Developer guide</h1>",
        f'    <p class="meta">Accessibility issues and how to fix them · Generated '
        f'{esc(format_timestamp(report.get("generatedAt")))}</p>',
        "    <p>Prioritize high-impact, simple fixes first. Each issue includes WCAG references "
        "and copy-paste solutions.</p>",
    ]

    items = dedupe_by_rule(context["fix_order"])
    if not items:
        html.append("    <p>No issues requiring fixes were found.</p>")

    for number, item in enumerate(items, start=1):
        seen = occurrences.get(item["rule"], {"count": 1, "urls": []})
        badge = "fail" if item["status"] == "fail" else "warn"
        wcag_links = ", ".join(
            f'<a href="{esc(wcag_sc_url(sc))}" target="_blank" rel="noopener">{esc(sc)}</a>'
            for sc in item.get("wcag") or []
        )
        html.append('    <div class="issue">')
        html.append(f"      <h3>{number}. {esc(item['rule'])}</h3>")
        html.append(
            f'      <p><span class="badge {badge}">{esc(item["status"])}</span> '
            f'<span class="badge impact">Impact: {esc(item["impact"])}</span> '
            f'<span class="badge impact">Effort: {esc(item["effort"])}</span></p>'
        )
        html.append(
            f"      <p>Found {seen['count']} time(s) on {len(seen['urls'])} page(s).</p>"
        )
        if seen["urls"]:
            html.append("      <ul>")
            html.extend(f"        <li><small>{esc(url)}</small></li>" for url in seen["urls"])
            html.append("      </ul>")
        if wcag_links:
            html.append(f"      <p>WCAG: {wcag_links}</p>")
        html.append("      <p><strong>Fix:</strong></p>")
        html.append(f"      <pre>{esc(item.get('snippet') or 'See WCAG guidelines.')}</pre>")
        html.append("    </div>")

    return _page("Developer guide - Accessibility fixes", "\n".join(html))


CLIENT_STYLES = """
  .score-hero { text-align: center; padding: 32px; background: var(--bg); border-radius: 12px; margin: 24px 0; }
  .score-value { font-size: 4rem; font-weight: 700; }
  .score-value.good { color: var(--pass); }
  .score-value.mid { color: var(--warn); }
  .score-value.low { color: var(--fail); }
  .stats-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(120px, 1fr)); gap: 12px; margin: 20px 0; }
  .stat-card { padding: 16px; background: var(--bg); border-radius: 8px; text-align: center; }
  .stat-card span { display: block; font-size: 1.8rem; font-weight: 700; }
  .stat-card small { font-size: 0.85rem; color: var(--text-muted); }
  .phase { padding: 16px; margin: 12px 0; border-left: 4px solid var(--accent); background: #f0f7f4; border-radius: 0 8px 8px 0; }
  .phase h3 { margin-top: 0; }
  ul { margin: 8px 0; padding-left: 24px; }
"""


def score_class(score):
    if score >= 80:
        return "good"
    if score >= 50:
        return "mid"
    return "low"


def render_client_summary(report, context):
    score = context["score"]
    html = [
        "    <h1>Accessibility summary</h1>",
        f'    <p class="meta">Generated {esc(format_timestamp(report.get("generatedAt")))}</p>',
        "    <h2>Overall score</h2>",
        '    <div class="score-hero">',
        f'      <div class="score-value {score_class(score)}">{score}</div>',
        '      <p style="margin:8px 0 0;">out of 100</p>',
        "    </div>",
        "    <h2>Statistics</h2>",
        '    <div class="stats-grid">',
        f'      <div class="stat-card"><span style="color:var(--pass)">{context["pass"]}</span><small>Passed</small></div>',
        f'      <div class="stat-card"><span style="color:var(--warn)">{context["warn"]}</span><small>Warnings</small></div>',
        f'      <div class="stat-card"><span style="color:var(--fail)">{context["fail"]}</span><small>Failures</small></div>',
        f'      <div class="stat-card"><span style="color:var(--fail)">{context["total_axe_violations"]}</span>'
        "<small>Axe violations</small></div>",
        f'      <div class="stat-card"><span>{context["total"]}</span><small>Total checks</small></div>',
        "    </div>",
        "    <h2>Step-by-step remediation plan</h2>",
        "    <p>We recommend addressing issues in three phases, starting with quick wins.</p>",
    ]

    for number, title, description in PHASES:
        items = context["phases"][number]
        html.append('    <div class="phase">')
        html.append(f"      <h3>Phase {number}: {title} ({len(items)} items)</h3>")
        html.append(f"      <p>{description}</p>")
        html.append("      <ul>")
        if items:
            html.extend(f"        <li>{esc(item['rule'])}</li>" for item in items)
        else:
            html.append("        <li>None</li>")
        html.append("      </ul>")
        html.append("    </div>")

    html.append("    <h2>Impact by disability</h2>")
    html.append("    <p>These accessibility improvements will help users with the following:</p>")
    html.append('    <div class="stats-grid">')
    for name, count in context["disability_stats"].items():
        if count > 0 and name != CATCH_ALL_DISABILITY:
            html.append(f'      <div class="stat-card"><span>{count}</span><small>{esc(name)}</small></div>')
    html.append("    </div>")
    html.append(
        '    <p style="margin-top: 32px; font-size: 0.9rem;">For the full technical report and '
        "developer fix guide, see the main report.</p>"
    )

    return _page("Accessibility summary - Client presentation", "\n".join(html), CLIENT_STYLES)


STATEMENT_STYLES = """
  .statement-section { margin: 24px 0; }
  .statement-section h2 { margin-top: 32px; }
  ul { padding-left: 24px; }
  .placeholder { background: #fff8e1; padding: 8px 12px; border-radius: 6px; margin: 8px 0; font-size: 0.9rem; }
  .draft { background: #ffebee; color: var(--fail); padding: 8px 12px; border-radius: 6px; font-weight: 600; }
"""


def known_limitations(context, limit=KNOWN_LIMITATIONS_LIMIT):
    return list(context["occurrences"])[:limit]


def render_statement(report, context):
    # dated from the run so a re-render of the stored results is identical
    date = esc(format_timestamp(report.get("generatedAt"), with_time=False))
    tested = "".join(f"<li>{esc(url)}</li>" for url in report.get("urls") or [])
    limitations = "".join(f"<li>{esc(rule)}</li>" for rule in known_limitations(context))

    body = f"""    <h1>Accessibility statement</h1>
    <p class="draft">DRAFT - not a compliance guarantee. Review and complete every placeholder before publishing.</p>
    <p class="meta">Draft generated {date} · Customize placeholders before publishing</p>

    <div class="statement-section">
      <h2>Our commitment</h2>
      <p><strong>[ORGANIZATION NAME]</strong> is committed to ensuring digital accessibility for people with disabilities. We are continually improving the user experience for everyone and applying the relevant accessibility standards.</p>
    </div>

    <div class="statement-section">
      <h2>Conformance status</h2>
      <p>The <a href="https://www.w3.org/WAI/standards-guidelines/wcag/" target="_blank" rel="noopener">Web Content Accessibility Guidelines (WCAG)</a> define requirements for designers and developers to improve accessibility.</p>
      <p class="placeholder">This website is <strong>[partially conformant]</strong> with <strong>WCAG 2.1 Level AA</strong>. Confirm the conformance level after a manual review.</p>
      <p>This assessment was conducted on {date} using automated testing. The following pages were evaluated:</p>
      <ul>{tested or "<li>No pages could be evaluated.</li>"}</ul>
    </div>

    <div class="statement-section">
      <h2>Known limitations</h2>
      <p>Despite our best efforts to ensure accessibility, the following limitations were identified during our assessment. We are working to address them.</p>
      <ul>{limitations or "<li>None identified.</li>"}</ul>
      <p class="placeholder">Add specific workarounds or timelines for each limitation if appropriate.</p>
    </div>

    <div class="statement-section">
      <h2>Feedback</h2>
      <p>We welcome your feedback on the accessibility of this website. Please let us know if you encounter accessibility barriers:</p>
      <p class="placeholder"><strong>Contact:</strong> [Add email, phone, or contact form URL]</p>
      <p>We aim to respond to accessibility feedback within [X] business days.</p>
    </div>

    <div class="statement-section">
      <h2>Technical specifications</h2>
      <p>Accessibility of this website relies on the following technologies: HTML, WAI-ARIA, CSS, and JavaScript.</p>
    </div>

    <div class="statement-section">
      <h2>Assessment approach</h2>
      <p>This accessibility statement was prepared based on an evaluation conducted using automated accessibility testing tools and manual checks, following Deque University accessibility checklists.</p>
    </div>

    <p style="margin-top: 32px; font-size: 0.85rem;">This statement was generated on {date}. It should be reviewed and customized before publication. See the <a href="https://www.w3.org/WAI/planning/statements/" target="_blank" rel="noopener">W3C Accessibility Statement Guide</a> for more information.</p>"""

    return _page("Accessibility statement", body, STATEMENT_STYLES)


def write_html(html, output_dir, filename) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / filename
    path.write_text(html, encoding="utf-8")
    return path


def generate_all_deliverables(report, context, output_dir):
    return {
        "developers": write_html(render_developer_guide(report, context), output_dir, DEVELOPER_FILENAME),
        "client": write_html(render_client_summary(report, context), output_dir, CLIENT_FILENAME),
        "statement": write_html(render_statement(report, context), output_dir, STATEMENT_FILENAME),
    }
