"""
Shared fixtures: in-memory EPUB archives and short-interval playback engines.
"""

import io
import threading
import zipfile

import pytest

from speedreader.playback import PlaybackConfig, PlaybackEngine

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>{title}</dc:title>
    <dc:creator>{author}</dc:creator>
    <dc:language>en</dc:language>
  </metadata>
  <manifest>
{manifest}
  </manifest>
  <spine toc="ncx">
{spine}
  </spine>
</package>
"""


def chapter_html(title, body):
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml">\n'
        f'<head><title>{title}</title></head>\n'
        f'<body class="chapter">\n<h1>{title}</h1>\n<p>{body}</p>\n</body>\n</html>\n'
    )


def build_epub(
    chapters,
    spine_order=None,
    opf_path="OEBPS/content.opf",
    title="Test Book",
    author="Jane Doe",
    include_container=True,
    include_opf=True,
    extra_spine=(),
    extra_files=None,
):
    """
    Build an EPUB in memory.

    Args:
        chapters: list of (item_id, filename, html) in manifest order
        spine_order: item ids in reading order (defaults to manifest order)
    """
    opf_dir = opf_path[:opf_path.rfind('/') + 1]
    spine_order = list(spine_order or [item_id for item_id, _, _ in chapters]) + list(extra_spine)

    manifest = "\n".join(
        f'    <item id="{item_id}" href="{filename}" media-type="application/xhtml+xml"/>'
        for item_id, filename, _ in chapters
    )
    spine = "\n".join(f'    <itemref idref="{idref}"/>' for idref in spine_order)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip")
        if include_container:
            zf.writestr("META-INF/container.xml", CONTAINER_XML.format(opf_path=opf_path))
        if include_opf:
            zf.writestr(opf_path, OPF_TEMPLATE.format(
                title=title, author=author, manifest=manifest, spine=spine
            ))
        for _, filename, html in chapters:
            zf.writestr(opf_dir + filename, html)
        for name, data in (extra_files or {}).items():
            zf.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def make_epub():
    return build_epub


@pytest.fixture
def sample_epub():
    return build_epub([
        ("ch1", "chapter1.xhtml", chapter_html("One", "It was a dark night.")),
        ("ch2", "chapter2.xhtml", chapter_html("Two", "Morning came &amp; went.")),
    ])


@pytest.fixture
def fast_engine():
    """Engine with a 20ms ramp interval, closed after the test."""
    engine = PlaybackEngine(PlaybackConfig(ramp_interval_ms=20))
    yield engine
    engine.close()


def wait_for(engine, predicate, timeout=5.0):
    """Block until predicate(state) holds, returning the matching snapshot."""
    done = threading.Event()
    matched = []

    def on_change(state):
        if predicate(state) and not done.is_set():
            matched.append(state)
            done.set()

    unsubscribe = engine.subscribe(on_change)
    try:
        if predicate(engine.state):
            return engine.state
        assert done.wait(timeout), f"condition not met within {timeout}s: {engine.state}"
        return matched[0]
    finally:
        unsubscribe()
