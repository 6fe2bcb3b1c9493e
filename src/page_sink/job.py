from __future__ import annotations

import logging
import threading
from typing import Any

from reflow import ErrorKind, PageComposer, PassthroughComposer

from .contracts import JobProgress, ReflowJobError, ReflowJobResult
from .writers import PageWriter

logger = logging.getLogger(__name__)


class ReflowJob:
    """
    Drives a composer into a writer on a dedicated worker thread.

    Cancellation is checked between finished output pages only. Observers poll
    `progress` and `result`; no pixel data leaves the worker.
    """

    def __init__(self, composer: PageComposer | PassthroughComposer, writer: PageWriter) -> None:
        self.composer = composer
        self.writer = writer
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._progress = JobProgress(pages_written=0, processed_pages=0, total_pages=composer.total_pages)
        self._thread: threading.Thread | None = None
        self._result: ReflowJobResult | None = None

    @property
    def progress(self) -> JobProgress:
        with self._lock:
            return self._progress

    @property
    def result(self) -> ReflowJobResult | None:
        with self._lock:
            return self._result

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Write already in progress.")
        self._thread = threading.Thread(target=self.run, name="reflow-job", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._cancel.set()

    def wait(self, timeout: float | None = None) -> ReflowJobResult | None:
        if self._thread is not None:
            self._thread.join(timeout)
        return self.result

    def _publish(self) -> None:
        with self._lock:
            self._progress = JobProgress(
                pages_written=self.writer.pages_written,
                processed_pages=self.composer.processed_page_index + 1,
                total_pages=self.composer.total_pages,
            )

    def _finish(self, *, ok: bool, cancelled: bool, errors: list[ReflowJobError]) -> ReflowJobResult:
        meta: dict[str, Any] = {"writer": type(self.writer).__name__}
        config = getattr(self.composer, "config", None)
        if config is not None:
            meta["reflow"] = config.to_dict()
        result = ReflowJobResult(
            ok=ok,
            cancelled=cancelled,
            output_path=str(self.writer.out_path),
            pages_written=self.writer.pages_written,
            total_pages=self.composer.total_pages,
            errors=errors,
            meta=meta,
        )
        with self._lock:
            self._result = result
        return result

    def _composer_failed(self, error: Exception) -> ReflowJobResult:
        self.writer.abort()
        failure = getattr(self.composer, "failure", None)
        if failure is not None:
            page_index, page_num = failure.page_index, failure.page_num
        else:
            page_index, page_num = self.composer.processed_page_index, self.composer.processed_page_num

        if failure is not None and failure.kind == ErrorKind.CONTRACT_VIOLATION:
            code = "REFLOW_CONTRACT_VIOLATION"
        else:
            code = "REFLOW_RENDER_FAILED"
        logger.error("reflow job failed on page %s: %s", page_num, error)
        return self._finish(
            ok=False,
            cancelled=False,
            errors=[
                ReflowJobError(
                    code=code,
                    message=str(error) or type(error).__name__,
                    detail={"page_index": page_index, "page_num": page_num, "error": repr(error)},
                )
            ],
        )

    def _writer_failed(self, error: Exception) -> ReflowJobResult:
        self.writer.abort()
        logger.error("writing %s failed: %s", self.writer.out_path, error)
        return self._finish(
            ok=False,
            cancelled=False,
            errors=[
                ReflowJobError(
                    code="REFLOW_WRITE_FAILED",
                    message=str(error) or type(error).__name__,
                    detail={"out_path": str(self.writer.out_path), "pages_written": self.writer.pages_written},
                )
            ],
        )

    def run(self) -> ReflowJobResult:
        """Run to completion on the calling thread."""
        logger.info("reflow job started: %d source pages -> %s", self.composer.total_pages, self.writer.out_path)

        try:
            self.writer.open()
        except FileExistsError as e:
            return self._finish(
                ok=False,
                cancelled=False,
                errors=[
                    ReflowJobError(
                        code="REFLOW_OUTPUT_EXISTS",
                        message=str(e),
                        detail={"out_path": str(self.writer.out_path)},
                    )
                ],
            )
        except Exception as e:
            return self._writer_failed(e)

        cancelled = False
        while True:
            if self._cancel.is_set():
                cancelled = True
                break

            try:
                produced = self.composer.advance()
            except Exception as e:
                return self._composer_failed(e)
            if not produced:
                break

            page = self.composer.current
            assert page is not None
            try:
                self.writer.write_page(page)
            except Exception as e:
                return self._writer_failed(e)
            del page
            self._publish()

        try:
            self.writer.close()
        except Exception as e:
            return self._writer_failed(e)
        self._publish()

        if cancelled:
            logger.info("reflow job cancelled after %d pages", self.writer.pages_written)
        else:
            logger.info("reflow job finished: %d pages written", self.writer.pages_written)
        return self._finish(ok=not cancelled, cancelled=cancelled, errors=[])
