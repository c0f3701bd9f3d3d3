"""Pull the URLs to test out of pasted text, CSV exports and sitemaps."""

import re

from bs4 import BeautifulSoup

URL_RE = re.compile(r"""https?://[^\s"'<>,|]+""")
TRAILING_PUNCTUATION = ".,;:!?)"


def _unique(urls):
    seen = set()
    result = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            result.append(url)
    return result


def _decode(data):
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data or ""


def extract_urls_from_text(text):
    if not text or not isinstance(text, str):
        return []
    return _unique(match.rstrip(TRAILING_PUNCTUATION) for match in URL_RE.findall(text))


def parse_csv(data):
    """Return every cell that starts with ``http`` from comma or tab separated rows."""
    urls = []
    for line in _decode(data).splitlines():
        if not line.strip():
            continue
        for cell in re.split(r"[,\t]", line):
            cell = re.sub(r"^[\"']|[\"']$", "", cell.strip())
            if cell.startswith("http"):
                urls.append(cell)
    return _unique(urls)


def parse_xml(data):
    """Return the ``<loc>`` entries of a sitemap, plus bare ``<url>`` text nodes."""
    soup = BeautifulSoup(_decode(data), "html.parser")
    urls = [tag.get_text(strip=True) for tag in soup.find_all("loc")]
    for tag in soup.find_all("url"):
        # <url> wrapping <loc> is the sitemap format, already covered above
        if tag.find("loc") is None:
            urls.append(tag.get_text(strip=True))
    return _unique(urls)


def urls_from_upload(filename, data):
    name = (filename or "").lower()
    if name.endswith(".csv"):
        return parse_csv(data)
    if name.endswith(".xml"):
        return parse_xml(data)
    return extract_urls_from_text(_decode(data))


def collect_urls(text="", filename=None, data=None):
    """Merge URLs from a text field and an optional upload, http(s) only."""
    urls = extract_urls_from_text(text) if text and text.strip() else []
    if data is not None:
        urls += urls_from_upload(filename, data)
    return [u for u in _unique(urls) if u.startswith("http")]
