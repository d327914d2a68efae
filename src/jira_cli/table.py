"""
表格輸出

使用 Rich 顯示 worklog 彙整表與 issue 列表
"""

from rich.console import Console
from rich.table import Table

from .jira_api import Issue


def sort_day_keys(days) -> list[str]:
    """全部是數字時依數值排序，否則依字串排序"""
    unique = list(dict.fromkeys(days))
    if all(d.isdigit() for d in unique):
        return sorted(unique, key=int)
    return sorted(unique)


def build_worklog_table(table: dict[str, dict[str, list[str]]], title: str = "") -> Table:
    """建立 issue x 日期 的 Rich 表格，同一天多筆 worklog 分行顯示"""
    days = sort_day_keys(day for day_map in table.values() for day in day_map)

    rich_table = Table(title=title or None, show_lines=True)
    rich_table.add_column("Issue Key", style="cyan", no_wrap=True)
    for day in days:
        rich_table.add_column(day, style="magenta", justify="right")

    for issue_key, day_map in table.items():
        rich_table.add_row(issue_key, *["\n".join(day_map.get(day, [])) for day in days])

    return rich_table


def build_issue_table(issues: list[Issue]) -> Table:
    """建立 issue 列表"""
    rich_table = Table(title="📋 Issues")
    rich_table.add_column("Issue Key", style="cyan", no_wrap=True)
    rich_table.add_column("Summary")
    rich_table.add_column("Updated", style="green")

    for issue in issues:
        updated = issue.updated.strftime("%Y-%m-%d %H:%M:%S") if issue.updated else ""
        rich_table.add_row(issue.key, issue.summary, updated)

    return rich_table


def draw_worklog_table(console: Console, table: dict[str, dict[str, list[str]]], title: str = ""):
    """顯示 worklog 彙整表"""
    if not table:
        console.print("[yellow]No worklogs found[/yellow]")
        return
    console.print(build_worklog_table(table, title))


def draw_issue_table(console: Console, issues: list[Issue]):
    """顯示 issue 列表"""
    if not issues:
        console.print("[yellow]No issues found[/yellow]")
        return
    console.print(build_issue_table(issues))
