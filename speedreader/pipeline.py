"""
Reading pipeline for speedreader.
Connects document extraction and tokenization to the playback engine.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from speedreader.conf import demo_text_path
from speedreader.errors import EmptyResult
from speedreader.extractors import detect_format, extract_text
from speedreader.playback import PlaybackConfig, PlaybackEngine, SessionState

logger = logging.getLogger(__name__)


@dataclass
class LoadConfig:
    """Describes a document to load into a reading session."""
    path: str = ""
    filename: Optional[str] = None
    mime_type: Optional[str] = None

    # PDF page range, 1-based inclusive; <= 0 means unbounded
    start_page: Optional[int] = None
    end_page: Optional[int] = None

    def __post_init__(self):
        if not self.filename and self.path:
            self.filename = Path(self.path).name


class ReadingPipeline:
    """
    Loads documents into a playback engine.

    Usage:
        pipeline = ReadingPipeline()
        pipeline.load_file(LoadConfig(path="/path/to/book.epub"))

        print(pipeline.preview())
        pipeline.engine.start()
    """

    def __init__(self, engine: Optional[PlaybackEngine] = None, playback_config: Optional[PlaybackConfig] = None):
        self.engine = engine or PlaybackEngine(playback_config)
        self.source_name: Optional[str] = None

    def load_file(self, config: LoadConfig) -> SessionState:
        """
        Extract a document from disk and load its words.

        Raises:
            FileNotFoundError: if the path does not exist
            MalformedDocument: if the document cannot be read
            EmptyResult: if the document contains no text
        """
        path = Path(config.path)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {config.path}")

        with open(path, 'rb') as f:
            return self.load_stream(f, config)

    def load_stream(self, stream: BinaryIO, config: Optional[LoadConfig] = None) -> SessionState:
        """Extract a document from an open binary stream and load its words."""
        config = config or LoadConfig()

        text = extract_text(
            stream,
            filename=config.filename,
            mime_type=config.mime_type,
            start_page=config.start_page,
            end_page=config.end_page
        )

        self.source_name = config.filename
        return self.engine.load(text)

    def load_text(self, text: str) -> SessionState:
        """Load pasted text."""
        if not text or not text.strip():
            raise EmptyResult("Please paste some text.")

        self.source_name = None
        return self.engine.load(text)

    def load_demo(self) -> SessionState:
        """Load the bundled demo text with ramping and variable timing enabled."""
        text = demo_text_path.read_text(encoding='utf-8')
        self.engine.load(text)
        self.engine.configure_demo_defaults()
        self.source_name = demo_text_path.name

        logger.info("Demo session loaded")
        return self.engine.state

    def preview(self, max_words: int = 20) -> str:
        """
        Human-readable summary of the loaded word stream.

        Args:
            max_words: Number of leading words to list
        """
        state = self.engine.state

        lines = [
            "=" * 60,
            "READING SESSION PREVIEW",
            "=" * 60,
            "",
            f"Source: {self.source_name or 'pasted text'}",
            f"Words: {state.total_words:,}",
            f"Average word length: {state.avg_word_length:.2f}",
            f"Speed: {state.speed_wpm} WPM (target {state.target_speed_wpm})",
            f"Ramp: {'on' if state.is_ramp_enabled else 'off'}",
            f"Variable timing: {'on' if state.is_variable_timing_enabled else 'off'}",
            f"Estimated reading time: ~{state.time_remaining_seconds}s "
            f"({state.time_remaining_seconds / 60:.1f} min)",
            "",
            "-" * 60,
        ]

        for i, word in enumerate(state.words[:max_words]):
            marked = f"{word.before}[{word.focus}]{word.after}"
            lines.append(f"{i + 1:5d}. {marked}")

        if state.total_words > max_words:
            lines.append(f"  ... and {state.total_words - max_words:,} more words")

        lines.append("=" * 60)
        return "\n".join(lines)


def load_document(
    path: str,
    start_page: Optional[int] = None,
    end_page: Optional[int] = None,
    **kwargs
) -> PlaybackEngine:
    """
    Convenience function to open a document in a new playback engine.

    Args:
        path: Path to a .txt, .pdf or .epub file
        start_page: First PDF page (1-based)
        end_page: Last PDF page (inclusive)
        **kwargs: PlaybackConfig options

    Returns:
        PlaybackEngine with the document loaded, ready to start()
    """
    pipeline = ReadingPipeline(playback_config=PlaybackConfig(**kwargs))
    pipeline.load_file(LoadConfig(path=path, start_page=start_page, end_page=end_page))

    logger.info(f"Opened {Path(path).name} as {detect_format(path).value}")
    return pipeline.engine
