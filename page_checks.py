"""Custom DOM checks, one function per checklist chapter.

Every function takes an already loaded Playwright ``Page`` and returns a list
of check results. DOM probes run through ``page.evaluate`` one after the
other so the page state stays stable between them.
"""

from checklists import CHECKLIST_CHAPTERS

STATUSES = ("pass", "fail", "warn", "info")

REFLOW_VIEWPORT = {"width": 320, "height": 568}


def make_result(check_id, rule, status, message, chapter, url=None):
    if status not in STATUSES:
        raise ValueError(f"unknown check status {status!r} for {check_id}")
    if chapter not in CHECKLIST_CHAPTERS:
        raise ValueError(f"unknown chapter {chapter!r} for {check_id}")
    result = {
        "id": check_id,
        "rule": rule,
        "status": status,
        "message": message,
        "chapter": chapter,
    }
    if url is not None:
        result["url"] = url
    return result


def _ellipsis(text, limit):
    return text[:limit] + ("..." if len(text) > limit else "")


# ------------------------------------------------------------------------------
# Chapter 1: Semantic Structure and Navigation

HTML_LANG_JS = "() => document.documentElement.getAttribute('lang')"

LANDMARK_COUNT_JS = """() => document.querySelectorAll(
  'main, [role="main"], nav, [role="navigation"], header, [role="banner"], ' +
  'footer, [role="contentinfo"], aside, [role="complementary"], [role="region"]'
).length"""

MAIN_COUNT_JS = """() => document.querySelectorAll('main, [role="main"]').length"""

HEADINGS_JS = """() => {
  const headings = Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'));
  const levels = headings.map((h) => parseInt(h.tagName.charAt(1)));
  const skips = levels.filter((lev, i) => i > 0 && lev - levels[i - 1] > 1);
  const h1Count = levels.filter((l) => l === 1).length;
  return { total: headings.length, skips: skips.length, h1Count };
}"""

LINKS_JS = """() => {
  const links = document.querySelectorAll('a[href]');
  let emptyText = 0;
  let genericText = 0;
  links.forEach((link) => {
    const text = (link.textContent || '').trim();
    const name = text || link.getAttribute('aria-label') || link.getAttribute('title') || '';
    if (!name) emptyText++;
    if (/^(click here|read more|link|here|learn more)$/i.test(name)) genericText++;
  });
  return { total: links.length, emptyText, genericText };
}"""

SKIP_LINK_JS = """() => !!document.querySelector(
  'a[href="#main"], a[href="#content"], a[href*="main"], a[href*="content"]'
)"""

TABLES_JS = """() => {
  const tables = document.querySelectorAll('table');
  let noTh = 0;
  tables.forEach((table) => { if (!table.querySelector('th')) noTh++; });
  return { total: tables.length, noTh };
}"""

ORPHAN_LI_JS = """() => document.querySelectorAll('li:not(ul li):not(ol li)').length"""

IFRAMES_JS = """() => {
  const iframes = document.querySelectorAll('iframe');
  let noTitle = 0;
  iframes.forEach((iframe) => {
    const title = iframe.getAttribute('title');
    if (!title || title.trim() === '') noTitle++;
  });
  return { total: iframes.length, noTitle };
}"""

DUPLICATE_IDS_JS = """() => {
  const ids = {};
  document.querySelectorAll('[id]').forEach((el) => { ids[el.id] = (ids[el.id] || 0) + 1; });
  return Object.entries(ids).filter(([, count]) => count > 1).map(([id]) => id);
}"""


def run_semantic_checks(page):
    chapter = "semantics"
    results = []

    title = page.title() or ""
    results.append(make_result(
        "page-title-exists",
        "Page MUST have a title with text",
        "pass" if title.strip() else "fail",
        f'Title: "{_ellipsis(title, 80)}"' if title else "Page has no title",
        chapter,
    ))

    lang = page.evaluate(HTML_LANG_JS)
    results.append(make_result(
        "html-lang",
        "Primary language MUST be identified on html element",
        "pass" if lang and lang.strip() else "fail",
        f'lang="{lang}"' if lang else "Missing or empty lang attribute on <html>",
        chapter,
    ))

    landmarks = page.evaluate(LANDMARK_COUNT_JS)
    results.append(make_result(
        "landmarks-present",
        "Landmarks SHOULD be used for layout (main, nav, header, footer, etc.)",
        "pass" if landmarks > 0 else "warn",
        f"Found {landmarks} landmark element(s)",
        chapter,
    ))

    mains = page.evaluate(MAIN_COUNT_JS)
    if mains == 1:
        status = "pass"
    elif mains == 0:
        status = "warn"
    else:
        status = "fail"
    results.append(make_result(
        "single-main",
        "Page SHOULD have only one main landmark",
        status,
        f"Found {mains} main landmark(s)",
        chapter,
    ))

    headings = page.evaluate(HEADINGS_JS)
    results.append(make_result(
        "heading-structure",
        "Main content SHOULD start with h1, headings SHOULD NOT skip levels",
        "pass" if headings["skips"] == 0 and headings["h1Count"] >= 1 else "warn",
        f"Headings: {headings['total']} total, {headings['h1Count']} h1(s), "
        f"{headings['skips']} level skip(s)",
        chapter,
    ))

    links = page.evaluate(LINKS_JS)
    results.append(make_result(
        "link-text",
        "Links MUST have programmatically-discernible text",
        "pass" if links["emptyText"] == 0 else "fail",
        f"{links['emptyText']} link(s) with no accessible text"
        if links["emptyText"] else f"{links['total']} links checked",
        chapter,
    ))
    if links["genericText"] > 0:
        results.append(make_result(
            "link-meaningful",
            "Link purpose SHOULD be determinable from link text alone",
            "warn",
            f'{links["genericText"]} link(s) with generic text (e.g. "click here")',
            chapter,
        ))

    has_skip_link = page.evaluate(SKIP_LINK_JS)
    results.append(make_result(
        "skip-link",
        "Skip link SHOULD be provided for keyboard users",
        "pass" if has_skip_link else "warn",
        "Skip link found" if has_skip_link else "No skip link detected",
        chapter,
    ))

    tables = page.evaluate(TABLES_JS)
    if tables["total"] > 0:
        results.append(make_result(
            "table-headers",
            "Data tables MUST have header cells (th)",
            "pass" if tables["noTh"] == 0 else "fail",
            f"{tables['noTh']} table(s) without th" if tables["noTh"] else "All tables have headers",
            chapter,
        ))

    orphans = page.evaluate(ORPHAN_LI_JS)
    if orphans > 0:
        results.append(make_result(
            "list-markup",
            "Lists MUST use semantic markup (ul/ol)",
            "fail",
            f"{orphans} orphan li element(s) found",
            chapter,
        ))

    iframes = page.evaluate(IFRAMES_JS)
    if iframes["total"] > 0:
        results.append(make_result(
            "iframe-titles",
            "Iframes MUST have non-empty title attribute",
            "pass" if iframes["noTitle"] == 0 else "fail",
            f"{iframes['noTitle']} iframe(s) without title"
            if iframes["noTitle"] else "All iframes have titles",
            chapter,
        ))

    duplicates = page.evaluate(DUPLICATE_IDS_JS)
    if duplicates:
        results.append(make_result(
            "unique-ids",
            "IDs MUST be unique within the page",
            "fail",
            f"Duplicate IDs: {', '.join(duplicates)}",
            chapter,
        ))

    return results


# ------------------------------------------------------------------------------
# Chapter 2: Images, Canvas, SVG, and Non-Text Content

IMAGES_JS = """() => {
  const imgs = document.querySelectorAll('img');
  let missingAlt = 0;
  let longAlt = 0;
  imgs.forEach((img) => {
    const alt = img.getAttribute('alt');
    if (alt === null) missingAlt++;
    else if (alt.length > 250) longAlt++;
  });
  return { total: imgs.length, missingAlt, longAlt };
}"""

SVGS_JS = """() => {
  const svgs = document.querySelectorAll('svg');
  let noRole = 0;
  let noName = 0;
  svgs.forEach((svg) => {
    const title = svg.querySelector('title');
    const named = !!(svg.getAttribute('aria-label') || svg.getAttribute('aria-labelledby') ||
      (title && title.textContent && title.textContent.trim()));
    if (svg.getAttribute('role') !== 'img') noRole++;
    if (!named) noName++;
  });
  return { total: svgs.length, noRole, noName };
}"""

CANVAS_JS = """() => {
  const canvases = document.querySelectorAll('canvas');
  let noRole = 0;
  let noAlt = 0;
  canvases.forEach((canvas) => {
    if (canvas.getAttribute('role') !== 'img') noRole++;
    if (!canvas.getAttribute('aria-label') && !canvas.getAttribute('aria-labelledby')) noAlt++;
  });
  return { total: canvases.length, noRole, noAlt };
}"""

IMAGE_MAPS_JS = """() => {
  const imgWithMap = document.querySelectorAll('img[usemap]');
  let areaNoAlt = 0;
  imgWithMap.forEach((img) => {
    const mapName = (img.getAttribute('usemap') || '').replace('#', '');
    const mapEl = document.querySelector(`map[name="${mapName}"]`);
    if (mapEl) {
      mapEl.querySelectorAll('area').forEach((area) => {
        if (area.getAttribute('alt') === null) areaNoAlt++;
      });
    }
  });
  return { total: imgWithMap.length, areaNoAlt };
}"""


def run_image_checks(page):
    chapter = "images"
    results = []

    images = page.evaluate(IMAGES_JS)
    if images["total"] > 0:
        results.append(make_result(
            "img-alt",
            "Informative images MUST have programmatically-discernible alternative text",
            "pass" if images["missingAlt"] == 0 else "fail",
            f"{images['missingAlt']} image(s) missing alt attribute"
            if images["missingAlt"] else f"{images['total']} images have alt text",
            chapter,
        ))
        if images["longAlt"] > 0:
            results.append(make_result(
                "img-alt-length",
                "Alternative text SHOULD be concise (≤250 characters)",
                "warn",
                f"{images['longAlt']} image(s) with alt > 250 chars",
                chapter,
            ))

    svgs = page.evaluate(SVGS_JS)
    if svgs["total"] > 0:
        results.append(make_result(
            "svg-role",
            'SVG elements SHOULD have role="img"',
            "pass" if svgs["noRole"] == 0 else "warn",
            f'{svgs["noRole"]} SVG(s) without role="img"' if svgs["noRole"] else "All SVGs have role",
            chapter,
        ))
        results.append(make_result(
            "svg-accessible-name",
            "Informative/actionable SVGs MUST have meaningful alternative text",
            "pass" if svgs["noName"] == 0 else "warn",
            f"{svgs['noName']} SVG(s) without accessible name"
            if svgs["noName"] else "All SVGs have accessible names",
            chapter,
        ))

    canvases = page.evaluate(CANVAS_JS)
    if canvases["total"] > 0:
        ok = canvases["noAlt"] == 0 and canvases["noRole"] == 0
        results.append(make_result(
            "canvas-alt",
            'Canvas elements MUST have role="img" and text alternative',
            "pass" if ok else "fail",
            "All canvases have role and alt"
            if ok else f"{canvases['total']} canvas element(s) need role and alternative text",
            chapter,
        ))

    maps = page.evaluate(IMAGE_MAPS_JS)
    if maps["total"] > 0 and maps["areaNoAlt"] > 0:
        results.append(make_result(
            "image-map-alt",
            "Image map areas MUST have alternative text",
            "fail",
            f"{maps['areaNoAlt']} area(s) in image map without alt",
            chapter,
        ))

    return results


# ------------------------------------------------------------------------------
# Chapter 3: Visual Design and Colors
# Contrast is left to axe; these are supplementary heuristics.

LINK_STYLES_JS = """() => {
  const links = document.querySelectorAll('a[href]');
  let colorOnly = 0;
  links.forEach((link) => {
    const style = window.getComputedStyle(link);
    const underline = (style.textDecoration || '').includes('underline');
    const border = parseInt(style.borderBottomWidth) > 0 || parseInt(style.borderWidth) > 0;
    if (!underline && !border) colorOnly++;
  });
  return { total: links.length, colorOnly };
}"""

FOCUSABLE_COUNT_JS = """() => document.querySelectorAll(
  'a[href], button, input, select, textarea, [tabindex]:not([tabindex="-1"])'
).length"""


def run_visual_checks(page):
    chapter = "visualDesign"
    results = []

    links = page.evaluate(LINK_STYLES_JS)
    if links["colorOnly"] > 0:
        results.append(make_result(
            "link-differentiation",
            "Links MUST not rely on color alone; provide underline/outline on hover/focus",
            "warn",
            f"{links['colorOnly']} link(s) may rely on color only (no underline/border)",
            chapter,
        ))

    focusable = page.evaluate(FOCUSABLE_COUNT_JS)
    results.append(make_result(
        "focus-indicator",
        "Focusable elements MUST have visible focus indicator (axe covers contrast)",
        "info",
        f"{focusable} focusable elements - verify focus styles in axe results",
        chapter,
    ))

    return results


# ------------------------------------------------------------------------------
# Chapter 4: Responsive Design and Zoom

OVERFLOW_JS = """() => {
  const docWidth = Math.max(document.body.scrollWidth, document.documentElement.scrollWidth);
  const viewWidth = window.innerWidth;
  return { docWidth, viewWidth, overflow: docWidth > viewWidth };
}"""

VIEWPORT_META_JS = """() => {
  const meta = document.querySelector('meta[name="viewport"]');
  if (!meta) return { present: false, content: null, allowsZoom: true };
  const content = meta.getAttribute('content') || '';
  const userScalable = !/user-scalable\\s*=\\s*no/i.test(content);
  const maxScale = content.match(/maximum-scale\\s*=\\s*([\\d.]+)/i);
  const allowsZoom = userScalable && (!maxScale || parseFloat(maxScale[1]) >= 2);
  return { present: true, content, allowsZoom };
}"""


def run_responsive_checks(page, viewport=REFLOW_VIEWPORT):
    """Checks run at 320px width, the WCAG 2.1 reflow requirement."""
    chapter = "responsive"
    results = []

    page.set_viewport_size(viewport)

    overflow = page.evaluate(OVERFLOW_JS)
    results.append(make_result(
        "no-horizontal-scroll",
        f"Content MUST NOT require horizontal scrolling at {viewport['width']}px width",
        "fail" if overflow["overflow"] else "pass",
        f"Horizontal overflow: content {overflow['docWidth']}px vs viewport {overflow['viewWidth']}px"
        if overflow["overflow"] else f"No horizontal overflow at {viewport['width']}px",
        chapter,
    ))

    meta = page.evaluate(VIEWPORT_META_JS)
    if not meta["present"]:
        status, message = "info", "No viewport meta tag"
    elif meta["allowsZoom"]:
        status, message = "pass", "Viewport allows zoom"
    else:
        status, message = "warn", f"Viewport may restrict zoom: {meta['content']}"
    results.append(make_result(
        "viewport-zoom",
        "Page MUST allow users to zoom on mobile (no user-scalable=no)",
        status,
        message,
        chapter,
    ))

    return results


# ------------------------------------------------------------------------------
# Chapter 5: Multimedia, Animations, and Motion

VIDEOS_JS = """() => {
  const videos = document.querySelectorAll('video');
  let noCaptions = 0;
  let autoplay = 0;
  videos.forEach((video) => {
    const tracks = Array.from(video.querySelectorAll('track'));
    if (!tracks.some((t) => /captions|subtitles/i.test(t.getAttribute('kind') || ''))) noCaptions++;
    if (video.autoplay) autoplay++;
  });
  return { total: videos.length, noCaptions, autoplay };
}"""

AUDIO_AUTOPLAY_JS = """() => Array.from(document.querySelectorAll('audio')).filter((a) => a.autoplay).length"""

FLASH_JS = """() => Array.from(document.querySelectorAll('object, embed')).filter((o) =>
  (o.getAttribute('type') || '').includes('flash') ||
  (o.getAttribute('data') || o.getAttribute('src') || '').includes('.swf')
).length"""


def run_multimedia_checks(page):
    chapter = "multimedia"
    results = []

    videos = page.evaluate(VIDEOS_JS)
    if videos["total"] > 0:
        results.append(make_result(
            "video-captions",
            "Prerecorded video MUST include synchronized captions",
            "pass" if videos["noCaptions"] == 0 else "fail",
            f"{videos['noCaptions']} video(s) without caption track"
            if videos["noCaptions"] else "All videos have caption tracks",
            chapter,
        ))
        if videos["autoplay"] > 0:
            results.append(make_result(
                "video-autoplay",
                "Auto-play video (>5s) MUST have pause/stop mechanism",
                "warn",
                f"{videos['autoplay']} video(s) with autoplay - verify pause control exists",
                chapter,
            ))

    audio_autoplay = page.evaluate(AUDIO_AUTOPLAY_JS)
    if audio_autoplay > 0:
        results.append(make_result(
            "audio-autoplay",
            "Audio auto-playing >3s MUST have stop/pause/mute control",
            "warn",
            f"{audio_autoplay} audio element(s) with autoplay",
            chapter,
        ))

    flash = page.evaluate(FLASH_JS)
    if flash > 0:
        results.append(make_result(
            "flash-alternative",
            "Flash/Silverlight SHOULD have HTML alternative",
            "warn",
            f"{flash} Flash/plugin object(s) found - ensure accessible alternative",
            chapter,
        ))

    return results


# ------------------------------------------------------------------------------
# Chapter 6: Device-Independent Input Methods

POSITIVE_TABINDEX_JS = """() => Array.from(document.querySelectorAll('[tabindex]'))
  .filter((el) => parseInt(el.getAttribute('tabindex'), 10) > 0).length"""

SMALL_TARGETS_JS = """() => {
  const interactive = document.querySelectorAll(
    'a[href], button, input, select, textarea, [role="button"], [role="link"], [onclick]'
  );
  let tooSmall = 0;
  interactive.forEach((el) => {
    const rect = el.getBoundingClientRect();
    if (rect.width > 0 && rect.height > 0 && (rect.width < 44 || rect.height < 44)) tooSmall++;
  });
  return { total: interactive.length, tooSmall };
}"""


def run_input_method_checks(page):
    chapter = "inputMethods"
    results = []

    positive = page.evaluate(POSITIVE_TABINDEX_JS)
    results.append(make_result(
        "tabindex-positive",
        "tabindex with positive values SHOULD NOT be used",
        "pass" if positive == 0 else "warn",
        f"{positive} element(s) with positive tabindex" if positive else "No positive tabindex values",
        chapter,
    ))

    targets = page.evaluate(SMALL_TARGETS_JS)
    if targets["tooSmall"] > 0:
        results.append(make_result(
            "touch-target-size",
            "Touch targets SHOULD be at least 44x44 pixels",
            "warn",
            f"{targets['tooSmall']} interactive element(s) below 44x44px",
            chapter,
        ))

    return results


# ------------------------------------------------------------------------------
# Chapter 7: Form Labels, Instructions, and Validation

FORM_FIELDS_JS = """() => {
  const inputs = document.querySelectorAll(
    'input:not([type="hidden"]):not([type="submit"]):not([type="button"]):not([type="image"]), textarea, select'
  );
  let missingLabel = 0;
  let placeholderOnly = 0;
  inputs.forEach((input) => {
    const id = input.getAttribute('id');
    const label = id ? document.querySelector(`label[for="${id}"]`) : input.closest('label');
    const labelText = label && label.textContent ? label.textContent.trim() : '';
    const aria = input.getAttribute('aria-label') || input.getAttribute('aria-labelledby');
    if (!labelText && !aria) {
      missingLabel++;
      if (input.getAttribute('placeholder')) placeholderOnly++;
    }
  });
  return { total: inputs.length, missingLabel, placeholderOnly };
}"""


def run_form_checks(page):
    chapter = "forms"
    results = []

    fields = page.evaluate(FORM_FIELDS_JS)
    if fields["total"] > 0:
        results.append(make_result(
            "form-labels",
            "Form inputs MUST have programmatically-associated labels",
            "pass" if fields["missingLabel"] == 0 else "fail",
            f"{fields['missingLabel']} input(s) without proper label"
            if fields["missingLabel"] else "All inputs have labels",
            chapter,
        ))
        results.append(make_result(
            "placeholder-not-only-label",
            "Placeholder MUST NOT be the only label for inputs",
            "pass" if fields["placeholderOnly"] == 0 else "fail",
            f"{fields['placeholderOnly']} input(s) may use placeholder as only label"
            if fields["placeholderOnly"] else "No placeholder-only labels",
            chapter,
        ))

    return results


# ------------------------------------------------------------------------------
# Chapter 8: Dynamic Updates, AJAX, and Single-Page Applications

META_REFRESH_JS = """() => !!document.querySelector('meta[http-equiv="refresh"]')"""

LIVE_REGIONS_JS = """() => document.querySelectorAll('[aria-live]').length"""


def run_dynamic_checks(page):
    chapter = "dynamicUpdates"
    results = []

    refresh = page.evaluate(META_REFRESH_JS)
    results.append(make_result(
        "no-auto-refresh",
        "Page MUST NOT refresh or reload automatically",
        "fail" if refresh else "pass",
        "Meta refresh found - may auto-reload page" if refresh else "No meta refresh",
        chapter,
    ))

    live = page.evaluate(LIVE_REGIONS_JS)
    results.append(make_result(
        "dynamic-announcements",
        "Dynamic content changes SHOULD be announced (aria-live, etc.)",
        "info",
        f"Found {live} aria-live region(s) - verify status messages are announced",
        chapter,
    ))

    return results


CHAPTER_CHECKS = (
    ("semantics", run_semantic_checks),
    ("images", run_image_checks),
    ("visualDesign", run_visual_checks),
    ("responsive", run_responsive_checks),
    ("multimedia", run_multimedia_checks),
    ("inputMethods", run_input_method_checks),
    ("forms", run_form_checks),
    ("dynamicUpdates", run_dynamic_checks),
)


def run_custom_checks(page, url, chapter_checks=CHAPTER_CHECKS):
    """Run every chapter against ``page``; a failing chapter becomes one fail result."""
    all_results = []
    for chapter, check in chapter_checks:
        try:
            results = check(page)
        except Exception as exc:
            all_results.append(make_result(
                f"{chapter}-error", f"{chapter} checks", "fail", str(exc), chapter, url))
            continue
        all_results.extend(dict(r, url=url) for r in results)
    return all_results
