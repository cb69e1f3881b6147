"""JavaScript snippets evaluated inside the page."""

SCROLL_HEIGHT = """() => Math.max(
    document.body ? document.body.scrollHeight : 0,
    document.documentElement ? document.documentElement.scrollHeight : 0
)"""

SCROLL_TO = "(y) => window.scrollTo(0, y)"

# Read-only pass over the document. Returns raw values; capping, JSON-LD
# parsing and sectioning happen in Python.
EXTRACT_DOCUMENT = """(opts) => {
    const clean = (s) => (s || '').replace(/\\s+/g, ' ').trim();
    const all = (sel) => Array.from(document.querySelectorAll(sel));

    const meta = all('meta').map((m) => ({
        name: m.getAttribute('name'),
        property: m.getAttribute('property'),
        httpEquiv: m.getAttribute('http-equiv'),
        content: m.getAttribute('content'),
    }));

    const jsonLd = all('script[type="application/ld+json"]').map((s) => s.textContent || '');

    const headings = all('h1, h2, h3, h4, h5, h6').map((h) => ({
        tag: h.tagName.toLowerCase(),
        text: clean(h.innerText || h.textContent) ||
            clean(Array.from(h.querySelectorAll('img[alt]')).map((img) => img.alt).join(' ')),
    }));

    const links = all('a[href]').slice(0, opts.maxLinks).map((a) => ({
        href: a.href,
        text: clean(a.innerText || a.textContent),
    }));

    const images = all('img')
        .map((img) => ({
            src: img.currentSrc || img.src || '',
            alt: img.getAttribute('alt') || '',
        }))
        .filter((img) => img.src)
        .slice(0, opts.maxImages);

    const scripts = all('script[src]').map((s) => s.src);
    const stylesheets = all('link[rel="stylesheet"][href]').map((l) => l.href);

    const result = {
        url: window.location.href,
        title: document.title || '',
        meta, jsonLd, headings, links, images, scripts, stylesheets,
    };

    if (opts.includeText) {
        const body = document.body;
        result.text = body ? (body.innerText || '') : '';
        result.blocks = all(opts.blockTags.join(', '))
            .map((el) => (el.innerText || el.textContent || ''));

        const nodes = [];
        if (body) {
            const sectionTags = new Set(opts.sectionTags.map((t) => t.toUpperCase()));
            const walker = document.createTreeWalker(body, NodeFilter.SHOW_ELEMENT);
            let el = walker.nextNode();
            while (el) {
                if (sectionTags.has(el.tagName)) {
                    nodes.push({ tag: el.tagName.toLowerCase(), text: el.innerText || el.textContent || '' });
                }
                el = walker.nextNode();
            }
        }
        result.nodes = nodes;
    }

    return result;
}"""
