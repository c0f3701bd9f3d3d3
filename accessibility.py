import argparse
import json
import re
import shutil
import sys
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urldefrag, urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

import settings
import url_sources
from aggregate import summarize, total_axe_violations
from checklists import bucket_axe_results
from manual_progress import is_valid_report_id
from page_checks import run_custom_checks
from remediation import DEFAULT_CATALOG
from report import generate_report

VIEWPORTS = (
    {"width": 1366, "height": 768, "label": "Laptop", "suffix": "laptop"},
    {"width": 1920, "height": 1080, "label": "Desktop", "suffix": "desktop"},
)

AXE_RUN_JS = "() => axe.run(document)"


def utc_timestamp():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_internal_link(base_url, link):
    base_domain = urlparse(base_url).netloc
    target_domain = urlparse(link).netloc
    return target_domain == "" or target_domain == base_domain


def find_internal_links(start_url):
    """Return same-host links found on ``start_url``, in page order."""
    links = []
    try:
        response = requests.get(start_url, timeout=30, headers={"User-Agent": settings.USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        print(f"Could not fetch {start_url}: {e}")
        return []

    soup = BeautifulSoup(response.text, "html.parser")
    for a_tag in soup.find_all("a", href=True):
        full_url, _ = urldefrag(urljoin(start_url, a_tag["href"]))
        if not full_url.startswith(("http://", "https://")):
            continue
        if is_internal_link(start_url, full_url) and full_url not in links:
            links.append(full_url)
    return links


def run_axe_scan(page, url, catalog=DEFAULT_CATALOG, axe_source=None):
    """Inject axe-core into ``page`` and bucket its results by chapter."""
    axe_source = axe_source or settings.AXE_SOURCE
    if axe_source.startswith(("http://", "https://")):
        page.add_script_tag(url=axe_source)
    else:
        page.add_script_tag(path=axe_source)
    results = page.evaluate(AXE_RUN_JS)

    return {
        "url": url,
        "timestamp": utc_timestamp(),
        "violations": results.get("violations") or [],
        "incomplete": results.get("incomplete") or [],
        "passes": results.get("passes") or [],
        "byChapter": bucket_axe_results(results, catalog.chapter_keys, catalog.tag_to_chapters),
    }


def take_screenshots(page, screenshots_dir: Path, index):
    screenshots_dir.mkdir(parents=True, exist_ok=True)
    shots = []
    for vp in VIEWPORTS:
        filename = f"screenshot-{index}-{vp['suffix']}.png"
        try:
            page.set_viewport_size({"width": vp["width"], "height": vp["height"]})
            page.screenshot(path=str(screenshots_dir / filename), full_page=False)
        except PlaywrightError as e:
            print(f"  Screenshot {vp['suffix']} failed: {e}")
            continue
        shots.append({"file": filename, "label": f"{vp['label']} ({vp['width']}×{vp['height']})"})
    return shots


def page_load_result(url, exc):
    return {
        "id": "page-load",
        "rule": "Page load",
        "status": "fail",
        "message": str(exc),
        "url": url,
    }


def new_report():
    return {
        "generatedAt": utc_timestamp(),
        "urls": [],
        "axeResults": {},
        "customResults": [],
        "summary": {"pass": 0, "fail": 0, "warn": 0},
        "screenshots": {},
    }


def audit_urls(browser, urls, output_dir, catalog=DEFAULT_CATALOG, axe_source=None):
    """Test every URL in its own browser context and collect a RunReport."""
    report = new_report()
    screenshots_dir = Path(output_dir) / "screenshots"

    for url in urls:
        print(f"\nTesting: {url}")
        context = browser.new_context(
            user_agent=settings.USER_AGENT,
            viewport={"width": VIEWPORTS[0]["width"], "height": VIEWPORTS[0]["height"]},
        )
        page = context.new_page()
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=settings.NAVIGATION_TIMEOUT_MS)
            try:
                page.wait_for_load_state("networkidle")
            except PlaywrightTimeoutError:
                print("  Network did not settle, testing the loaded DOM")

            axe_data = run_axe_scan(page, url, catalog, axe_source)
            report["axeResults"][url] = axe_data
            report["urls"].append(url)

            custom = run_custom_checks(page, url)
            report["customResults"].extend(custom)
            for status, count in summarize(custom).items():
                report["summary"][status] += count

            has_issues = bool(axe_data["violations"]) or any(
                r["status"] in ("fail", "warn") for r in custom
            )
            if has_issues:
                shots = take_screenshots(page, screenshots_dir, len(report["urls"]) - 1)
                if shots:
                    report["screenshots"][url] = shots
        except Exception as e:
            print(f"  Error: {e}")
            report["customResults"].append(page_load_result(url, e))
            report["summary"]["fail"] += 1
        finally:
            context.close()

    return report


def run_browser(urls, output_dir, catalog=DEFAULT_CATALOG):
    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=True, args=["--disable-blink-features=AutomationControlled"]
        )
        try:
            return audit_urls(browser, urls, output_dir, catalog)
        finally:
            browser.close()


def write_results(report, output_dir) -> Path:
    """Write the RunReport, keeping the previous run's file as a snapshot."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / settings.RESULTS_FILENAME
    if results_file.exists():
        shutil.copyfile(results_file, output_dir / settings.PREVIOUS_RESULTS_FILENAME)
    with results_file.open("w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2, ensure_ascii=False)
    return results_file


def parse_url_list(value):
    tokens = (u.strip() for u in re.split(r"[\n,\s]+", value or ""))
    return [u for u in tokens if u.startswith(("http://", "https://"))]


def gather_urls(args):
    urls = parse_url_list(args.urls)
    if args.urls_file:
        path = Path(args.urls_file)
        urls += url_sources.urls_from_upload(path.name, path.read_bytes())
    if args.crawl:
        urls += [args.crawl] + find_internal_links(args.crawl)

    unique = []
    for url in urls:
        if url not in unique:
            unique.append(url)
    if args.max_pages:
        unique = unique[: args.max_pages]
    return unique


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Checklist-based accessibility tests with Playwright and axe-core.")
    parser.add_argument("--urls", help="URLs separated by commas, spaces or newlines")
    parser.add_argument("--urls-file", help="text, CSV or sitemap XML file with URLs")
    parser.add_argument("--crawl", metavar="START_URL", help="test START_URL and the internal links found on it")
    parser.add_argument("--max-pages", type=int, default=0, help="limit the number of pages (0 for all)")
    parser.add_argument("--output-id", help="write into reports/<id> instead of reports/latest")
    parser.add_argument("--report", action="store_true", help="render the HTML report and deliverables")
    parser.add_argument("--charts", action="store_true", help="add matplotlib charts to the report")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.output_id and not is_valid_report_id(args.output_id):
        print("Invalid --output-id. Use letters, digits and dashes (max 32 characters).")
        return 1

    urls = gather_urls(args)
    if not urls:
        print('No URLs. Use --urls "url1,url2", --urls-file FILE or --crawl START_URL')
        return 1

    output_dir = settings.REPORTS_BASE / (args.output_id or "latest")
    output_dir.mkdir(parents=True, exist_ok=True)

    print("Starting accessibility tests...")
    print(f"URLs to test: {len(urls)}")
    report = run_browser(urls, output_dir)

    results_file = write_results(report, output_dir)
    print(f"\nResults saved to {results_file}")

    if args.report:
        generate_report(report, output_dir, report_id=args.output_id, charts=args.charts)
        print(f"HTML report generated in {output_dir}")

    summary = report["summary"]
    print(f"\nSummary: {summary['pass']} pass, {summary['warn']} warn, {summary['fail']} fail")
    print(f"Axe violations: {total_axe_violations(report)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
