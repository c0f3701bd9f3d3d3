from url_sources import collect_urls, extract_urls_from_text, parse_csv, parse_xml, urls_from_upload


def test_extract_urls_from_text_strips_punctuation_and_dedupes():
    text = (
        "Check https://example.com/, then (see https://example.com/about). "
        "Again: https://example.com/ and http://legacy.example/page?x=1|y"
    )
    assert extract_urls_from_text(text) == [
        "https://example.com/",
        "https://example.com/about",
        "http://legacy.example/page?x=1",
    ]


def test_extract_urls_from_text_ignores_non_strings():
    assert extract_urls_from_text(None) == []
    assert extract_urls_from_text("") == []
    assert extract_urls_from_text("no links here") == []


def test_parse_csv():
    data = b'name,url\n"Home","https://a.example/"\nAbout\thttps://b.example/\n\n"dup",https://a.example/\n'
    assert parse_csv(data) == ["https://a.example/", "https://b.example/"]


def test_parse_xml_sitemap():
    data = b"""<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc> https://a.example/ </loc><lastmod>2026-01-01</lastmod></url>
  <url><loc>https://b.example/</loc></url>
</urlset>"""
    assert parse_xml(data) == ["https://a.example/", "https://b.example/"]


def test_parse_xml_bare_url_elements():
    assert parse_xml("<urls><url>https://c.example/</url></urls>") == ["https://c.example/"]


def test_urls_from_upload_picks_parser_by_extension():
    assert urls_from_upload("LIST.CSV", b"https://a.example/,x") == ["https://a.example/"]
    assert urls_from_upload("map.xml", b"<loc>https://b.example/</loc>") == ["https://b.example/"]
    assert urls_from_upload("notes.txt", b"see https://c.example/.") == ["https://c.example/"]


def test_collect_urls_merges_text_and_upload():
    urls = collect_urls("https://a.example/\nhttps://b.example/", "list.csv", b"https://b.example/\nftp://x")
    assert urls == ["https://a.example/", "https://b.example/"]
    assert collect_urls("   ") == []
