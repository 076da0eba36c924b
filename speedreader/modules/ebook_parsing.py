"""
Ebook parsing module for speedreader.
Reads EPUB archives directly: container.xml -> OPF -> manifest/spine -> body text.
"""

import io
import logging
import re
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup

from speedreader.conf import EPUB_CONTAINER_PATH, EPUB_SPINE_SEPARATOR
from speedreader.errors import MalformedDocument

logger = logging.getLogger(__name__)


@dataclass
class Chapter:
    """Represents one spine item extracted from an ebook."""
    title: str
    content: str
    index: int
    source_file: Optional[str] = None

    def __str__(self) -> str:
        return f"Chapter {self.index}: {self.title} ({len(self.content)} chars)"


@dataclass
class EbookMetadata:
    """Metadata read from the OPF package document."""
    title: str = "Unknown"
    author: str = "Unknown"
    language: str = "en"
    description: Optional[str] = None
    publisher: Optional[str] = None
    publication_date: Optional[str] = None


@dataclass
class ParseResult:
    """Result of parsing an ebook."""
    chapters: List[Chapter]
    metadata: EbookMetadata
    source_format: str = ".epub"
    total_chars: int = field(default=0, init=False)

    def __post_init__(self):
        self.total_chars = sum(len(ch.content) for ch in self.chapters)

    @property
    def text(self) -> str:
        return EPUB_SPINE_SEPARATOR.join(ch.content for ch in self.chapters)

    def preview(self) -> str:
        """Generate a human-readable preview of the parsed ebook."""
        lines = [
            f"=== Ebook Parse Result ===",
            f"Title: {self.metadata.title}",
            f"Author: {self.metadata.author}",
            f"Language: {self.metadata.language}",
            f"Format: {self.source_format}",
            f"Chapters: {len(self.chapters)}",
            f"Total characters: {self.total_chars:,}",
            "",
            "Chapter listing:",
            "-" * 40
        ]

        for ch in self.chapters:
            lines.append(f"  {ch.index:3d}. {ch.title[:50]} ({len(ch.content):,} chars)")

        return "\n".join(lines)


class HTMLCleaner:
    """Pattern-based reduction of XHTML content documents to plain text."""

    BODY_PATTERN = re.compile(r'<body[^>]*>(.*?)</body>', re.DOTALL)
    TAG_PATTERN = re.compile(r'<[^>]*>')

    # Applied in this order
    ENTITIES = (
        ('&nbsp;', ' '),
        ('&amp;', '&'),
        ('&lt;', '<'),
        ('&gt;', '>'),
        ('&quot;', '"'),
        ('&apos;', "'"),
    )

    @classmethod
    def extract_body_text(cls, html: str) -> str:
        """Strip markup from the <body> of a document (or the whole file if it has none)."""
        match = cls.BODY_PATTERN.search(html)
        content = match.group(1) if match else html

        text = cls.TAG_PATTERN.sub(' ', content)
        return cls.unescape(text)

    @classmethod
    def unescape(cls, text: str) -> str:
        for entity, replacement in cls.ENTITIES:
            text = text.replace(entity, replacement)
        return text

    @classmethod
    def extract_title(cls, html: str, default_idx: int) -> str:
        """Extract a chapter title from the first heading of a document."""
        soup = BeautifulSoup(html, 'html.parser')

        for tag in ('h1', 'h2', 'h3', 'title'):
            elem = soup.find(tag)
            if elem and elem.get_text().strip():
                title = ' '.join(elem.get_text().split())
                if len(title) > 100:
                    title = title[:97] + "..."
                return title

        return f"Chapter {default_idx + 1}"


class EpubParser:
    """
    Structural EPUB reader.

    The archive is traversed directly instead of through a strict XML parser,
    so documents with sloppy markup still yield text. Reading order follows the
    OPF spine, not the manifest.

    Usage:
        parser = EpubParser()
        with open("book.epub", "rb") as f:
            text = parser.extract_text(f)
    """

    OPF_PATH_PATTERN = re.compile(r'full-path="([^"]+\.opf)"')
    MANIFEST_ITEM_PATTERN = re.compile(r'<item\s[^>]*>')
    SPINE_ITEMREF_PATTERN = re.compile(r'<itemref\s[^>]*>')
    ATTRIBUTE_PATTERN = re.compile(r'([\w:.-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')

    def extract_text(self, source: Union[bytes, BinaryIO]) -> str:
        """
        Extract readable text from an EPUB in spine order.

        Args:
            source: EPUB bytes or a binary stream

        Returns:
            Text of every resolved spine item, joined by newlines

        Raises:
            MalformedDocument: archive unreadable, container.xml or OPF missing
        """
        sections = self._read_spine_documents(source)
        return EPUB_SPINE_SEPARATOR.join(text for _, _, text in sections)

    def parse(self, source: Union[bytes, BinaryIO]) -> ParseResult:
        """Parse an EPUB into titled chapters plus OPF metadata."""
        files = self._read_archive(source)
        opf_path, opf_content = self._locate_opf(files)

        chapters = []
        for path, html, text in self._spine_documents(files, opf_path, opf_content):
            if not text.strip():
                continue
            chapters.append(Chapter(
                title=HTMLCleaner.extract_title(html, len(chapters)),
                content=' '.join(text.split()),
                index=len(chapters),
                source_file=path
            ))

        return ParseResult(
            chapters=chapters,
            metadata=self._extract_metadata(opf_content)
        )

    def _read_spine_documents(self, source) -> List[Tuple[str, str, str]]:
        files = self._read_archive(source)
        opf_path, opf_content = self._locate_opf(files)
        return self._spine_documents(files, opf_path, opf_content)

    def _read_archive(self, source: Union[bytes, BinaryIO]) -> Dict[str, str]:
        """Read every archive entry into a name -> text map."""
        data = source if isinstance(source, (bytes, bytearray)) else source.read()

        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise MalformedDocument(f"Not a readable EPUB archive: {e}") from e

        files = {}
        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                try:
                    files[info.filename] = archive.read(info).decode('utf-8')
                except UnicodeDecodeError:
                    logger.debug(f"Skipping non-text entry: {info.filename}")
                except (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError) as e:
                    logger.warning(f"Skipping unreadable entry {info.filename}: {e}")

        logger.debug(f"Read {len(files)} text entries from archive")
        return files

    def _locate_opf(self, files: Dict[str, str]) -> Tuple[str, str]:
        """Resolve the OPF package document through META-INF/container.xml."""
        container = files.get(EPUB_CONTAINER_PATH)
        if container is None:
            raise MalformedDocument(f"Missing {EPUB_CONTAINER_PATH}")

        match = self.OPF_PATH_PATTERN.search(container)
        if not match:
            raise MalformedDocument("container.xml does not reference an OPF file")

        opf_path = match.group(1)
        opf_content = files.get(opf_path)
        if opf_content is None:
            raise MalformedDocument(f"OPF file not found in archive: {opf_path}")

        return opf_path, opf_content

    def _spine_documents(
        self,
        files: Dict[str, str],
        opf_path: str,
        opf_content: str
    ) -> List[Tuple[str, str, str]]:
        """Return (path, html, text) for each spine item present in the archive."""
        opf_dir = opf_path[:opf_path.rfind('/') + 1]
        manifest = self.parse_manifest(opf_content)

        documents = []
        for idref in self.parse_spine(opf_content):
            href = manifest.get(idref)
            if href is None:
                logger.debug(f"Spine idref not in manifest: {idref}")
                continue

            path = opf_dir + href
            html = files.get(path)
            if html is None:
                logger.debug(f"Spine document missing from archive: {path}")
                continue

            documents.append((path, html, HTMLCleaner.extract_body_text(html)))

        logger.info(f"Resolved {len(documents)} spine document(s) from {opf_path}")
        return documents

    @classmethod
    def parse_manifest(cls, opf_content: str) -> Dict[str, str]:
        """Map manifest item ids to hrefs. Later duplicates win."""
        manifest = {}
        for tag in cls.MANIFEST_ITEM_PATTERN.findall(opf_content):
            attrs = cls._attributes(tag)
            if 'id' in attrs and 'href' in attrs:
                manifest[attrs['id']] = attrs['href']
        return manifest

    @classmethod
    def parse_spine(cls, opf_content: str) -> List[str]:
        """Spine idrefs in document order."""
        idrefs = []
        for tag in cls.SPINE_ITEMREF_PATTERN.findall(opf_content):
            idref = cls._attributes(tag).get('idref')
            if idref:
                idrefs.append(idref)
        return idrefs

    @classmethod
    def _attributes(cls, tag: str) -> Dict[str, str]:
        attrs = {}
        for match in cls.ATTRIBUTE_PATTERN.finditer(tag):
            name, double, single = match.groups()
            attrs[name] = double if double is not None else single
        return attrs

    def _extract_metadata(self, opf_content: str) -> EbookMetadata:
        """Extract Dublin Core metadata from the OPF."""
        soup = BeautifulSoup(opf_content, 'html.parser')

        def get_meta(name: str) -> Optional[str]:
            elem = soup.find(f"dc:{name}")
            if elem and elem.get_text().strip():
                return elem.get_text().strip()
            return None

        return EbookMetadata(
            title=get_meta('title') or "Unknown",
            author=get_meta('creator') or "Unknown",
            language=get_meta('language') or "en",
            description=get_meta('description'),
            publisher=get_meta('publisher'),
            publication_date=get_meta('date')
        )
