from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from page_source import PageSourceConfig, RenderError, canonical_page_selection, open_page_source, parse_page_selection
from reflow import ConfigurationError, PageComposer, PassthroughComposer

from .contracts import OutputConfig, OutputKind, ReflowJobError, ReflowJobResult
from .converter import PageImageConverter
from .job import ReflowJob
from .writers import ImageSequenceWriter, PageWriter, PdfWriter

logger = logging.getLogger(__name__)


def build_writer(config: OutputConfig) -> PageWriter:
    converter = PageImageConverter.from_config(config)
    if config.kind == OutputKind.PDF:
        return PdfWriter(config.out_path, converter)
    if config.kind == OutputKind.IMAGE_SEQUENCE:
        return ImageSequenceWriter(config.out_path, converter)
    raise ValueError(f"Unsupported output kind: {config.kind}")


def _failed(*, output: OutputConfig, code: str, message: str, detail: dict[str, Any]) -> ReflowJobResult:
    logger.error("%s: %s", code, message)
    return ReflowJobResult(
        ok=False,
        cancelled=False,
        output_path=str(output.out_path),
        pages_written=0,
        total_pages=0,
        errors=[ReflowJobError(code=code, message=message, detail=detail)],
        meta={},
    )


def run_reflow(
    *,
    input_path: Path,
    source_config: PageSourceConfig,
    output_config: OutputConfig,
    target_height: int,
    max_fragment_height: int | None = None,
    page_selection: str | None = None,
    background_value: int = 255,
    passthrough: bool = False,
) -> ReflowJobResult:
    """
    Programmatic entrypoint: input document -> reflowed output, on the calling thread.

    Setup failures (unreadable input, bad page selection, bad configuration)
    are returned as a failed result; nothing is written in that case.
    """

    try:
        source = open_page_source(config=source_config, input_path=input_path)
    except RenderError as e:
        return _failed(
            output=output_config,
            code="REFLOW_INPUT_ERROR",
            message=str(e),
            detail={"input_path": str(input_path)},
        )

    with source:
        try:
            pages = parse_page_selection(page_selection, page_count=source.page_count)
        except ValueError as e:
            return _failed(
                output=output_config,
                code="REFLOW_BAD_PAGE_SELECTION",
                message="Invalid page selection",
                detail={"page_selection": page_selection, "error": str(e)},
            )

        try:
            if passthrough:
                composer: PageComposer | PassthroughComposer = PassthroughComposer(source, pages)
            else:
                composer = PageComposer(
                    source,
                    pages,
                    target_height,
                    max_fragment_height,
                    background_value=background_value,
                )
        except ConfigurationError as e:
            return _failed(output=output_config, code="REFLOW_BAD_CONFIG", message=str(e), detail={})

        job = ReflowJob(composer, build_writer(output_config))
        result = job.run()

    result.meta["input_path"] = str(input_path)
    result.meta["page_selection"] = canonical_page_selection(page_selection)
    result.meta["page_source"] = source.backend_id()
    result.meta["page_source_version"] = source.backend_version()
    if source.title:
        result.meta["title"] = source.title
    return result
