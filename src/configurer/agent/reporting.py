"""Finalising, summarising and persisting run reports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import yaml

from configurer.common.file_locking import writelock

if TYPE_CHECKING:
    import os
    from collections.abc import Callable

    from configurer.domain.indirection import Indirection
    from configurer.domain.report import Report

log = logging.getLogger(__name__)

LASTRUNFILE_MODE = 0o660


def _print_summary(text: str) -> None:
    print(text, end="")  # noqa: T201


class ReportManager:
    """Owns the end of a report's life: finalize, summarise, save."""

    def __init__(
        self,
        locator: Indirection[Report],
        *,
        lastrunfile: str | os.PathLike[str],
        summarize: bool = False,
        report: bool = True,
        console: Callable[[str], None] = _print_summary,
    ) -> None:
        self.locator = locator
        self.lastrunfile = lastrunfile
        self.summarize = summarize
        self.report = report
        self.console = console

    def send_report(self, report: Report, transaction: object | None = None) -> None:
        """Finalize ``report`` and record it; summary and persistence failures are only logged."""

        report.finalize_report(transaction)
        if self.summarize:
            try:
                self.console(report.summary())
            except Exception as exc:  # noqa: BLE001
                log.error("Could not print run summary: %s", exc)  # noqa: TRY400
        self.save_last_run_summary(report)
        if not self.report:
            return
        try:
            self.locator.save(report)
        except Exception as exc:  # noqa: BLE001
            log.error("Could not send report: %s", exc)  # noqa: TRY400

    def save_last_run_summary(self, report: Report) -> None:
        try:
            document = yaml.safe_dump(report.raw_summary(), default_flow_style=False)
            with writelock(self.lastrunfile, LASTRUNFILE_MODE) as handle:
                handle.write(document)
        except Exception as exc:  # noqa: BLE001
            log.error("Could not save last run local report: %s", exc)  # noqa: TRY400
