from __future__ import annotations

from pathlib import Path

from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from .model import TimingReport, relative_to_fastest

COLUMNS: tuple[str, ...] = ("candidate", "trials", "failed", "min_ms", "median_ms", "mean_ms", "max_ms", "stdev_ms", "x_fastest")


def _ms(v: float) -> str:
    return f"{v * 1e3:.3f}"


def _ratio(v: float) -> str:
    return "inf" if v == float("inf") else f"{v:.2f}"


def comparison_rows(reports: dict[str, TimingReport]) -> list[list[str]]:
    """One row of formatted cells per candidate, in the mapping's order."""
    ratios = relative_to_fastest(reports)
    rows: list[list[str]] = []
    for name, r in reports.items():
        s = r.stats
        rows.append(
            [
                name,
                str(len(r.trials)),
                str(len(r.failures)),
                _ms(s.min),
                _ms(s.median),
                _ms(s.mean),
                _ms(s.max),
                _ms(s.stdev),
                _ratio(ratios[name]),
            ]
        )
    return rows


def render_comparison(reports: dict[str, TimingReport]) -> str:
    """Fixed-width text table for logs and terminals."""
    rows = [list(COLUMNS), *comparison_rows(reports)]
    widths = [max(len(row[i]) for row in rows) for i in range(len(COLUMNS))]
    lines: list[str] = []
    for n, row in enumerate(rows):
        cells = [row[0].ljust(widths[0])] + [c.rjust(widths[i]) for i, c in enumerate(row) if i > 0]
        lines.append("  ".join(cells).rstrip())
        if n == 0:
            lines.append("  ".join("-" * w for w in widths))
    return "\n".join(lines)


def write_markdown_report(out_path: Path, reports: dict[str, TimingReport], *, title: str = "Timing Comparison") -> Path:
    """Write a Markdown comparison report; returns the path of the written `.md` file."""
    out_path = out_path.with_suffix("")
    out_path.parent.mkdir(parents=True, exist_ok=True)

    md = MdUtils(file_name=str(out_path), title=title)
    md.new_paragraph(
        "Each candidate was run repeatedly and every repetition was timed on its own. "
        "Failed repetitions are counted but excluded from the statistics."
    )
    md.new_header(level=1, title="Summary")
    rows = comparison_rows(reports)
    cells: list[str] = list(COLUMNS)
    for row in rows:
        cells.extend(row)
    md.new_table(columns=len(COLUMNS), rows=len(rows) + 1, text=cells, text_align="left")

    md.new_header(level=1, title="Column Definitions")
    md.new_list(
        [
            "`trials`: timed repetitions (warmup runs are not included).",
            "`failed`: repetitions that raised; excluded from the statistics.",
            "`*_ms`: wall-clock time per repetition in milliseconds.",
            "`x_fastest`: median time relative to the candidate with the lowest median.",
        ]
    )
    md.create_md_file()
    return out_path.with_suffix(".md")
