"""File-level translation: detect, extract, translate, merge, convert, save."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import TranslatorConfig
from .converter import convert
from .detector import detect
from .errors import (
    AlignmentError,
    ConversionUnsupportedError,
    ExtractionEmptyError,
    FormatError,
)
from .extractor import extract, reinsert
from .files import find_subtitle_files, read_subtitle_file, save_subtitle, validate_subtitle_file
from .filenames import generate_safe_filename, get_output_extension
from .merger import build_bilingual_ass
from .models import RawDocument, SubtitleFormat
from .providers import TranslationProvider, create_provider
from .translator import TranslationService

logger = logging.getLogger(__name__)


@dataclass
class TranslationStats:
    processed: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class TranslatedDocument:
    """Result of translating one document into one target language."""
    text: str
    source_format: SubtitleFormat
    output_format: SubtitleFormat
    line_count: int


class SubtitleTranslator:
    """
    Translates subtitle documents and files according to a TranslatorConfig.

    One instance shares a single TranslationService, so its cache spans every
    file of the run.
    """

    def __init__(
        self,
        config: TranslatorConfig,
        provider: Optional[TranslationProvider] = None,
        service: Optional[TranslationService] = None,
        show_progress: bool = False,
    ):
        self.config = config
        if service is None:
            provider = provider or create_provider(
                config.translation_method, config.provider_config(), config.llm_prompts
            )
            service = TranslationService(
                provider,
                batch_size=config.batch_size,
                parallelism=config.parallelism,
                inter_batch_delay=config.inter_batch_delay,
                show_progress=show_progress,
            )
        self.service = service
        self.stats = TranslationStats()

    def resolve_output_format(self, source_format: SubtitleFormat) -> SubtitleFormat:
        return SubtitleFormat(get_output_extension(
            source_format, self.config.bilingual_subtitle, self.config.requested_output_format
        ))

    async def translate_content(self, text: str, target_language: Optional[str] = None) -> TranslatedDocument:
        """
        Translate a subtitle document held in memory.

        Args:
            text: Subtitle document text
            target_language: Overrides the first configured target language

        Returns:
            TranslatedDocument with the output text and formats

        Raises:
            FormatError: if the format cannot be detected
            ExtractionEmptyError: if there is nothing to translate
        """
        config = self.config
        target = target_language or config.target_languages[0]
        document = RawDocument.from_text(text)

        source_format = detect(document.lines)
        if source_format == SubtitleFormat.UNRECOGNIZED:
            raise FormatError("Unsupported subtitle format")

        content_map = extract(document.lines, source_format)
        if not content_map:
            raise ExtractionEmptyError("No translatable content found")

        logger.info(f"Translating {len(content_map)} {source_format.value} lines to {target}")
        translated = await self.service.translate_batch(
            content_map.content,
            config.source_language,
            target,
            timeout=config.timeout,
        )

        output_format = self.resolve_output_format(source_format)
        bilingual_ass = (
            config.bilingual_subtitle
            and source_format in (SubtitleFormat.SRT, SubtitleFormat.VTT)
            and output_format == SubtitleFormat.ASS
        )

        if bilingual_ass:
            result = build_bilingual_ass(
                document.lines, content_map, translated, source_format, config.bilingual_position
            )
            current_format = SubtitleFormat.ASS
        else:
            lines = reinsert(
                document.lines,
                content_map,
                translated,
                source_format,
                bilingual=config.bilingual_subtitle,
                position=config.bilingual_position,
                newline=document.newline,
            )
            result = document.to_text(lines)
            current_format = source_format

        if current_format != output_format:
            try:
                result = convert(result, current_format, output_format)
            except ConversionUnsupportedError as e:
                logger.warning(f"{e}, keeping {current_format.value}")
            else:
                current_format = output_format

        return TranslatedDocument(result, source_format, current_format, len(content_map))

    async def translate_file(self, path: Path) -> List[Path]:
        """
        Translate one file into every configured target language.

        Failures are logged and counted; they never propagate, except
        alignment errors which indicate a bug.

        Returns:
            Paths of the written files
        """
        self.stats.processed += 1
        path = Path(path)
        logger.info(f"Processing: {path}")

        error = validate_subtitle_file(path)
        if error:
            logger.error(f"Failed to translate {path}: {error}")
            self.stats.failed += 1
            return []

        written: List[Path] = []
        try:
            document = read_subtitle_file(path)
            if self.config.dry_run:
                return self._dry_run(path, document)

            text = document.to_text()
            for target in self.config.target_languages:
                translated = await self.translate_content(text, target)
                name = generate_safe_filename(path.name, target, translated.output_format.value)
                out_path = self.config.output_dir / name
                save_subtitle(translated.text, out_path)
                logger.info(f"Translated successfully: {out_path}")
                written.append(out_path)
        except ExtractionEmptyError:
            logger.info(f"No translatable content found in {path}, skipping")
            self.stats.skipped += 1
            return written
        except AlignmentError:
            raise
        except FormatError as e:
            logger.error(f"Failed to translate {path}: {e}")
            self.stats.failed += 1
            return written
        except Exception as e:
            logger.exception(f"Failed to translate {path}: {e}")
            self.stats.failed += 1
            return written

        self.stats.successful += 1
        return written

    def _dry_run(self, path: Path, document: RawDocument) -> List[Path]:
        source_format = detect(document.lines)
        if source_format == SubtitleFormat.UNRECOGNIZED:
            logger.error(f"Failed to translate {path}: Unsupported subtitle format")
            self.stats.failed += 1
            return []

        content_map = extract(document.lines, source_format)
        if not content_map:
            logger.info(f"No translatable content found in {path}, skipping")
            self.stats.skipped += 1
            return []

        logger.info(
            f"[DRY RUN] Would translate {len(content_map)} {source_format.value} lines "
            f"to {', '.join(self.config.target_languages)}"
        )
        self.stats.successful += 1
        return []

    async def translate_path(self, path: Path) -> List[Path]:
        """Translate a file, or every subtitle file under a directory."""
        path = Path(path)
        files = find_subtitle_files(path)
        if not files:
            logger.warning(f"No subtitle files found in {path}")
            return []

        if path.is_dir():
            logger.info(f"Found {len(files)} subtitle files")

        written: List[Path] = []
        for file in files:
            written.extend(await self.translate_file(file))
        return written

    def summary(self) -> str:
        stats = self.stats
        return (
            f"Total processed: {stats.processed}, successful: {stats.successful}, "
            f"failed: {stats.failed}, skipped: {stats.skipped}"
        )
