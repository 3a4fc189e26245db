"""Formatted ASCII tables for selection-and-testing results.

Two views, both 80 characters wide in the statsmodels summary style:

* :func:`print_summary_table` — run-level counts (how many features
  were tested, untestable, without a fit, skipped) and how often each
  family was selected.  The attrition counts are always shown so that
  features lost along the way are visible.
* :func:`print_results_table` — one line per feature with the selected
  family, the contrast estimate, its z-statistic and both the raw and
  adjusted p-values, sorted by adjusted p-value.
"""

from __future__ import annotations

import math
import textwrap

from ._results import AnalysisSummary, FeatureRecord, FeatureStatus, ResultsTable

_WIDTH = 80


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_num(val: float, spec: str = ".4f") -> str:
    """Format a number, rendering NaN as ``'N/A'``."""
    if val is None or (isinstance(val, float) and math.isnan(val)):
        return "N/A"
    return format(val, spec)


def _fmt_p(val: float) -> str:
    if val is None or math.isnan(val):
        return "N/A"
    if 0 < val < 1e-4:
        return f"{val:.2e}"
    return f"{val:.4f}"


def _significance(p_adj: float, alpha: float) -> str:
    if math.isnan(p_adj):
        return "   "
    return "(*)" if p_adj < alpha else "   "


def _title(title: str) -> None:
    print("=" * _WIDTH)
    for line in textwrap.wrap(title, width=_WIDTH - 2):
        print(f"{line:^{_WIDTH}}")
    print("=" * _WIDTH)


def print_summary_table(
    summary: AnalysisSummary | ResultsTable,
    *,
    title: str = "Distribution Selection Summary",
    top_n: int = 5,
) -> None:
    """Print run-level counts and per-family selection frequencies.

    Args:
        summary: An :class:`AnalysisSummary`, or a :class:`ResultsTable`
            whose summary is printed.
        title: Title for the output table.
        top_n: Maximum number of families listed.
    """
    header: list[tuple[str, str]] = []
    if isinstance(summary, ResultsTable):
        header = [
            ("Coefficient:", summary.coefficient),
            ("Criterion:", summary.criterion),
            ("Correction:", summary.correction),
        ]
        summary = summary.summary

    _title(title)
    for label, value in header:
        print(f"{label:<20}{value:>{_WIDTH - 20}}")
    if header:
        print("-" * _WIDTH)

    rows = [
        ("Features:", summary.n_features),
        ("Analyzed:", summary.n_analyzed),
        ("Tested:", summary.n_tested),
        ("Untestable:", summary.n_untestable),
        ("No converged family:", summary.n_no_fit),
        ("Skipped (all zero):", summary.n_skipped),
    ]
    if summary.n_error:
        rows.append(("Errors:", summary.n_error))
    for label, count in rows:
        print(f"{label:<28}{count:>{_WIDTH - 28}}")

    print("-" * _WIDTH)
    print(f"{'Selected family':<40}{'Features':>20}{'Share':>20}")
    print("-" * _WIDTH)
    fitted = sum(summary.family_counts.values())
    if not fitted:
        print("No successful fits.")
    for family, count in list(summary.family_counts.items())[:top_n]:
        share = f"{100.0 * count / fitted:.1f}%"
        print(f"{_truncate(family, 40):<40}{count:>20}{share:>20}")
    print("=" * _WIDTH)


def print_results_table(
    table: ResultsTable,
    *,
    title: str = "Per-Feature Contrast Results",
    max_rows: int | None = 20,
    alpha: float = 0.05,
) -> None:
    """Print the tested features, most significant first.

    Features without a test are counted in the footer but not listed.

    Args:
        table: Result of :func:`~distselect.differential_expression`.
        title: Title for the output table.
        max_rows: Maximum number of rows printed; ``None`` prints all.
        alpha: Adjusted p-value marked with ``(*)``.
    """
    tested: list[FeatureRecord] = [
        r for r in table.records if r.status is FeatureStatus.TESTED
    ]
    tested.sort(key=lambda r: (r.p_value_adjusted, r.p_value))

    _title(title)
    print(f"{'Coefficient:':<16}{_truncate(table.coefficient, 24):<24}"
          f"{'Correction:':>27} {table.correction:>12}")
    print(f"{'Criterion:':<16}{table.criterion:<24}"
          f"{'Tested:':>27} {len(tested):>12}")
    print("-" * _WIDTH)

    # Feature (18) | Family (16) | Estimate (10) | z (9) | p (12) | p adj (12) | mark (3)
    print(f"{'Feature':<18}{'Family':<16}{'Estimate':>10}{'z':>9}"
          f"{'P>|z|':>12}{'P adj':>12}   ")
    print("-" * _WIDTH)
    shown = tested if max_rows is None else tested[:max_rows]
    for r in shown:
        print(
            f"{_truncate(r.feature, 17):<18}"
            f"{_truncate(r.selected_family or 'N/A', 15):<16}"
            f"{_fmt_num(r.contrast_estimate):>10}"
            f"{_fmt_num(r.contrast_z, '.2f'):>9}"
            f"{_fmt_p(r.p_value):>12}"
            f"{_fmt_p(r.p_value_adjusted):>12}"
            f"{_significance(r.p_value_adjusted, alpha)}"
        )
    if len(shown) < len(tested):
        print(f"... {len(tested) - len(shown)} more tested features not shown")

    print("=" * _WIDTH)
    not_tested = len(table.records) + len(table.omitted) - len(tested)
    print(f"(*) adjusted p < {alpha}   Not tested: {not_tested}")
