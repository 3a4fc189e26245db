"""Progress and summary reporting.

The pipeline reports to a sink that implements :class:`ProgressReporter`.
Reporting is purely observational: nothing a reporter does feeds back
into fitting, selection, or testing.  The default sink,
:class:`LoggingReporter`, writes through the ``logging`` module; pass
:class:`NullReporter` to silence a run regardless of verbosity.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from ._results import AnalysisSummary

logger = logging.getLogger(__name__)


@runtime_checkable
class ProgressReporter(Protocol):
    """Sink for progress events and the final run summary."""

    def progress(self, index: int, total: int, message: str | None = None) -> None:
        """Called as features complete; *index* counts from 1."""
        ...

    def summary(self, summary: AnalysisSummary) -> None:
        """Called once after all records have been aggregated."""
        ...


class LoggingReporter:
    """Report progress at INFO level through :mod:`logging`."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log if log is not None else logger

    def progress(self, index: int, total: int, message: str | None = None) -> None:
        if message:
            self._log.info("Processed feature %d/%d: %s", index, total, message)
        else:
            self._log.info("Processed feature %d/%d", index, total)

    def summary(self, summary: AnalysisSummary) -> None:
        self._log.info("===== Summary Report =====")
        self._log.info("Features analyzed: %d", summary.n_analyzed)
        self._log.info("Features skipped (all zero or non-finite): %d", summary.n_skipped)
        self._log.info("Features with no converged family: %d", summary.n_no_fit)
        self._log.info("Features untestable: %d", summary.n_untestable)
        self._log.info("Features tested: %d", summary.n_tested)
        if summary.n_error:
            self._log.warning("Features failed with an error: %d", summary.n_error)
        if summary.top_family is not None:
            self._log.info(
                "Most frequent family: %s (%d features)",
                summary.top_family,
                summary.top_family_count,
            )
        else:
            self._log.info("No successful fits.")


class NullReporter:
    """Discard every event."""

    def progress(self, index: int, total: int, message: str | None = None) -> None:
        pass

    def summary(self, summary: AnalysisSummary) -> None:
        pass
