"""Rendering of aggregated stats: ASCII chart, JSON, CSV and a rich summary."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict
from datetime import date

import asciichartpy
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import ColorScheme
from .models import AggregatedStats

_RESET = "\033[0m"


def _format_number(n: int) -> str:
    return f"{n:,}"


def _format_signed(n: int) -> str:
    return f"+{n:,}" if n >= 0 else f"{n:,}"


def _long_date(value: str) -> str:
    d = date.fromisoformat(value)
    return f"{d:%b} {d.day}, {d.year}"


def _short_date(value: str) -> str:
    d = date.fromisoformat(value)
    return f"{d:%b} {d.day}"


def _period_days(stats: AggregatedStats) -> int:
    start = date.fromisoformat(stats.period.start)
    end = date.fromisoformat(stats.period.end)
    return (end - start).days + 1


def _ansi_color(name: str, fallback: str) -> str:
    color = getattr(asciichartpy, name, None)
    if isinstance(color, str) and color.startswith("\033"):
        return color
    return getattr(asciichartpy, fallback, "")


def _legend(color: str, label: str) -> Text:
    return Text.from_ansi(f"   {color}──{_RESET} {label}")


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"[green]Saved to {output_file}[/green]")


def _console(output_file: str | None) -> tuple[Console, io.StringIO | None]:
    if output_file:
        string_io = io.StringIO()
        return Console(file=string_io, force_terminal=False, width=120), string_io
    return Console(), None


def _summary_table(stats: AggregatedStats) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label", style="dim")
    table.add_column("value", style="bold", justify="right")
    table.add_row("Total lines added", _format_number(stats.summary.total_additions))
    table.add_row("Total lines deleted", _format_number(stats.summary.total_deletions))
    table.add_row("Net change", _format_signed(stats.summary.net_change))
    table.add_row("Active days", str(stats.summary.active_days))
    table.add_row("Avg lines/day", _format_number(stats.summary.avg_lines_per_day))
    return table


def render_graph(
    stats: AggregatedStats,
    output_file: str | None = None,
    colors: ColorScheme | None = None,
) -> None:
    """Plot lines added/deleted and net change per day."""
    colors = colors or ColorScheme()
    console, string_io = _console(output_file)

    console.print("[bold]GitHub Commit Statistics[/bold]")
    console.print(f"User: {stats.user}", highlight=False)
    console.print(f"Period: {stats.period.start} to {stats.period.end}", highlight=False)
    console.print()

    if stats.daily_stats:
        added = _ansi_color(colors.additions, "blue")
        deleted = _ansi_color(colors.deletions, "red")
        neutral = _ansi_color(colors.neutral, "default")

        console.print("Lines Added/Deleted per Day:")
        chart = asciichartpy.plot(
            [[d.additions for d in stats.daily_stats], [d.deletions for d in stats.daily_stats]],
            {"height": 15, "colors": [added, deleted], "format": "{:8.0f} "},
        )
        console.print(Text.from_ansi(chart), highlight=False)
        console.print(_legend(added, "Lines Added"))
        console.print(_legend(deleted, "Lines Deleted"))
        console.print()

        console.print("Net Change per Day:")
        net_chart = asciichartpy.plot(
            [[d.net for d in stats.daily_stats]],
            {"height": 12, "colors": [neutral], "format": "{:8.0f} "},
        )
        console.print(Text.from_ansi(net_chart), highlight=False)
        console.print()

    console.print("[bold]Summary[/bold]")
    console.print(_summary_table(stats))

    if string_io is not None:
        _write_to_file(string_io.getvalue(), output_file)


def render_summary(stats: AggregatedStats, output_file: str | None = None) -> None:
    """Render a human-readable report with totals, activity and top lists."""
    console, string_io = _console(output_file)
    total_commits = stats.total_commits
    active_days = stats.summary.active_days

    console.print(Panel(
        Text(
            f"GitHub Commit Statistics: {stats.user}\n"
            f"Period: {_long_date(stats.period.start)} - {_long_date(stats.period.end)}",
            justify="center",
        ),
        style="bold cyan",
    ))
    console.print(f"Repositories: {len(stats.repositories)} analyzed")
    console.print()

    console.print("[bold]Totals[/bold]")
    totals = Table(show_header=False, box=None, padding=(0, 2))
    totals.add_column("label", style="dim")
    totals.add_column("value", style="bold", justify="right")
    totals.add_row("Lines added", _format_number(stats.summary.total_additions))
    totals.add_row("Lines deleted", _format_number(stats.summary.total_deletions))
    totals.add_row("Net change", _format_signed(stats.summary.net_change))
    console.print(totals)
    console.print()

    period_days = _period_days(stats)
    active_pct = round(active_days / period_days * 100) if period_days > 0 else 0
    avg_commits = round(total_commits / active_days) if active_days else 0

    console.print("[bold]Activity[/bold]")
    activity = Table(show_header=False, box=None, padding=(0, 2))
    activity.add_column("label", style="dim")
    activity.add_column("value", style="bold", justify="right")
    activity.add_row("Active days", f"{active_days} of {period_days} ({active_pct}%)")
    activity.add_row("Total commits", _format_number(total_commits))
    activity.add_row("Avg lines/day", _format_number(stats.summary.avg_lines_per_day))
    activity.add_row("Avg commits/day", str(avg_commits))
    console.print(activity)
    console.print()

    top_days = sorted(
        (d for d in stats.daily_stats if d.commits > 0), key=lambda d: d.net, reverse=True
    )[:5]
    if top_days:
        console.print("[bold]Top 5 Most Active Days[/bold]")
        days_table = Table(show_header=True, header_style="bold")
        days_table.add_column("#", justify="right")
        days_table.add_column("Date")
        days_table.add_column("Net Lines", justify="right")
        days_table.add_column("Commits", justify="right")
        for i, d in enumerate(top_days, 1):
            days_table.add_row(str(i), _short_date(d.date), _format_signed(d.net), str(d.commits))
        console.print(days_table)
        console.print()

    top_repos = stats.repositories[:5]
    if top_repos:
        console.print("[bold]Top 5 Repositories[/bold]")
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("#", justify="right")
        repo_table.add_column("Repository")
        repo_table.add_column("Net Lines", justify="right")
        repo_table.add_column("Commits", justify="right")
        for i, r in enumerate(top_repos, 1):
            repo_table.add_row(
                str(i), r.name, _format_signed(r.additions - r.deletions), str(r.commits)
            )
        console.print(repo_table)
        console.print()

    if string_io is not None:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(stats: AggregatedStats, output_file: str | None = None) -> None:
    """Render the aggregated stats as JSON."""
    content = json.dumps(asdict(stats), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(stats: AggregatedStats, output_file: str | None = None) -> None:
    """Render summary, daily and repository sections as CSV."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    output.write("# Summary\n")
    writer.writerow(["metric", "value"])
    writer.writerow(["user", stats.user])
    writer.writerow(["period_start", stats.period.start])
    writer.writerow(["period_end", stats.period.end])
    writer.writerow(["total_additions", stats.summary.total_additions])
    writer.writerow(["total_deletions", stats.summary.total_deletions])
    writer.writerow(["net_change", stats.summary.net_change])
    writer.writerow(["active_days", stats.summary.active_days])
    writer.writerow(["avg_lines_per_day", stats.summary.avg_lines_per_day])
    writer.writerow(["total_commits", stats.total_commits])
    writer.writerow(["repositories_analyzed", len(stats.repositories)])
    output.write("\n")

    output.write("# Daily Statistics\n")
    writer.writerow(["date", "additions", "deletions", "net_change", "commits"])
    for d in stats.daily_stats:
        writer.writerow([d.date, d.additions, d.deletions, d.net, d.commits])
    output.write("\n")

    output.write("# Repository Statistics\n")
    writer.writerow(["repository", "additions", "deletions", "net_change", "commits"])
    for r in stats.repositories:
        writer.writerow([r.name, r.additions, r.deletions, r.additions - r.deletions, r.commits])

    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")


def render_output(
    stats: AggregatedStats,
    output_format: str = "graph",
    output_file: str | None = None,
    colors: ColorScheme | None = None,
) -> None:
    if output_format == "json":
        render_json(stats, output_file=output_file)
    elif output_format == "csv":
        render_csv(stats, output_file=output_file)
    elif output_format == "summary":
        render_summary(stats, output_file=output_file)
    else:
        render_graph(stats, output_file=output_file, colors=colors)
