from __future__ import annotations

from pathlib import Path

from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from .model import FrameStat, ProfileReport, SortKey

COLUMNS: tuple[str, ...] = ("self_s", "self_pct", "total_s", "total_pct", "frame")


def _row(s: FrameStat) -> list[str]:
    return [f"{s.self_time:.3f}", f"{s.self_pct:.2f}", f"{s.total_time:.3f}", f"{s.total_pct:.2f}", s.frame.label()]


def profile_rows(report: ProfileReport, *, by: SortKey = "self", limit: int | None = None) -> list[list[str]]:
    stats = report.sorted_frames(by)
    if limit is not None:
        stats = stats[:limit]
    return [_row(s) for s in stats]


def _summary_line(report: ProfileReport) -> str:
    return (
        f"sample.interval={report.interval:.3f}s  samples={report.sample_count}  "
        f"sampling.time={report.sampling_duration:.3f}s  elapsed={report.elapsed:.3f}s"
    )


def render_profile(report: ProfileReport, *, by: SortKey = "self", limit: int | None = None) -> str:
    """Text table of frames ordered "by self" (default) or "by total"."""
    lines = [f"by.{by}", _summary_line(report)]
    if report.insufficient_samples:
        lines.append("insufficient samples: candidate finished before the first sampling tick")
        return "\n".join(lines)

    rows = [list(COLUMNS), *profile_rows(report, by=by, limit=limit)]
    widths = [max(len(row[i]) for row in rows) for i in range(len(COLUMNS) - 1)]
    for n, row in enumerate(rows):
        cells = [c.rjust(widths[i]) for i, c in enumerate(row[:-1])]
        lines.append("  ".join([*cells, row[-1]]))
        if n == 0:
            lines.append("  ".join(["-" * w for w in widths] + ["-----"]))
    return "\n".join(lines)


def write_markdown_report(
    out_path: Path, report: ProfileReport, *, title: str = "Sampling Profile", limit: int | None = None
) -> Path:
    """Write both the "by self" and "by total" views as Markdown; returns the `.md` path."""
    out_path = out_path.with_suffix("")
    out_path.parent.mkdir(parents=True, exist_ok=True)

    md = MdUtils(file_name=str(out_path), title=title)
    md.new_list(
        [
            f"Sampling interval: `{report.interval:.3f}s`",
            f"Samples: `{report.sample_count}`",
            f"Sampling time: `{report.sampling_duration:.3f}s`",
            f"Candidate elapsed: `{report.elapsed:.3f}s`",
            f"Max depth: `{'unlimited' if report.max_depth is None else report.max_depth}`",
        ]
    )

    if report.insufficient_samples:
        md.new_paragraph(
            "No samples were recorded: the candidate finished before the first sampling tick. "
            "Repeat the computation in an outer loop and profile again."
        )
        md.create_md_file()
        return out_path.with_suffix(".md")

    for by, heading in (("self", "By Self Time"), ("total", "By Total Time")):
        md.new_header(level=1, title=heading)
        rows = profile_rows(report, by=by, limit=limit)  # type: ignore[arg-type]
        cells: list[str] = list(COLUMNS)
        for row in rows:
            cells.extend([*row[:-1], f"`{row[-1]}`"])
        md.new_table(columns=len(COLUMNS), rows=len(rows) + 1, text=cells, text_align="left")

    md.new_header(level=1, title="Column Definitions")
    md.new_list(
        [
            "`self_s`, `self_pct`: time while the frame was the innermost (executing) frame.",
            "`total_s`, `total_pct`: time while the frame was anywhere on the stack, callees included.",
            "Percentages are of the sampling time (`samples * interval`).",
        ]
    )
    md.create_md_file()
    return out_path.with_suffix(".md")
