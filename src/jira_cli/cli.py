#!/usr/bin/env python3
"""
jira-cli - 命令列 Jira 工時工具

使用 Typer + Rich 提供記錄工時、列出 issue 與 worklog 的指令
"""

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import DEFAULT_LOG_TIME, DEFAULT_MESSAGE, DOTENV_FILE, TODAY_FLAG, Config, dump_dotenv
from .errors import JiraCliError, ValidationError
from .jira_api import JiraClient, WorklogEntry
from .periods import Period, resolve_month
from .table import draw_issue_table, draw_worklog_table
from .worklog import LogWorkRequest, WorklogAggregator, WorklogSubmitter

app = typer.Typer(
    name="jira-cli",
    help="jira-cli is a cli tool for performing basic jira operations like log work or viewing your issues",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


class Listable(str, Enum):
    """list 指令可顯示的物件"""
    ISSUES = "issues"
    WORKLOGS = "worklogs"


def setup_logging(verbose: bool = False):
    """設定 root logger，輸出到 stderr"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def get_client() -> JiraClient:
    """依環境變數建立 Jira 客戶端"""
    config = Config.load().require()
    return JiraClient(
        endpoint=config.jira_endpoint,
        email=config.jira_user_email,
        api_token=config.jira_api_key,
    )


def print_logged(entry: WorklogEntry):
    """顯示單筆上傳結果"""
    started = entry.started.strftime("%Y-%m-%d %H:%M:%S %z")
    console.print(f"[green]✓[/green] {entry.time_spent} of work logged for {entry.author} on {started}")


def fail(error: Exception):
    """顯示錯誤並以狀態碼 1 結束"""
    logger.debug("Command failed", exc_info=error)
    console.print(f"[red]✗ {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.command()
def logwork(
    issue_key: str = typer.Option("", "--issue-key", "-i", help="issue key to log work for"),
    date: str = typer.Option(TODAY_FLAG, "--date", "-d", help="the date to log the work on in the format dd/mm/yyyy"),
    message: str = typer.Option(DEFAULT_MESSAGE, "--message", "-m", help="the comment on the work log"),
    time: float = typer.Option(DEFAULT_LOG_TIME, "--time", "-t", help="the amount of hours to log, i.e 2.5"),
    period: Optional[Period] = typer.Option(
        None, "--period", "-p", case_sensitive=False,
        help="one of 'day', 'week', 'month', 'lastweek' or 'lastmonth'",
    ),
):
    """
    記錄工時

    範例:
      jira-cli logwork -t 6 -i GAIA-1232 -d 12/07/2024
      jira-cli logwork -t 6 -i GAIA-1232                 # 今天
      jira-cli logwork -t 6 -i GAIA-1232 --period week   # 本週到今天為止的工作日
      jira-cli logwork -t 6 -i GAIA-1232 --period month  # 本月到今天為止的每一天
    """
    request = LogWorkRequest(
        issue_key=issue_key,
        log_date=date,
        time_spent=time,
        message=message,
        period=period,
    )

    try:
        request.validate()
    except ValidationError as e:
        fail(e)

    try:
        submitter = WorklogSubmitter(get_client(), on_logged=print_logged)
        submitter.log_work_multi(request)
    except JiraCliError as e:
        fail(e)


@app.command("list")
def list_objects(
    obj: Optional[Listable] = typer.Option(
        None, "--object", "-o", case_sensitive=False, help="one of 'issues' or 'worklogs'",
    ),
    month: int = typer.Option(-1, "--month", "-m", help="the month to report on (default: current)"),
    year: int = typer.Option(-1, "--year", "-y", help="the year to report on (default: current)"),
):
    """
    列出你的 issue 或 worklog

    範例:
      jira-cli list --object issues     # 本月有更新、指派給你的 issue
      jira-cli list --object worklogs   # 本月的 worklog 彙整表
    """
    if obj is None:
        fail(ValidationError("Bad flag for object"))

    try:
        start = resolve_month(month, year)
        aggregator = WorklogAggregator(get_client())

        if obj == Listable.ISSUES:
            issues = aggregator.get_users_issues_from_period(start, datetime.now())
            draw_issue_table(console, issues)
        else:
            table = aggregator.get_user_worklogs(start, datetime.now())
            console.print(f"Listing issue worklogs for Month {start:%B}, {start.year}")
            draw_worklog_table(console, table)
    except JiraCliError as e:
        fail(e)


@app.command()
def dumpenv():
    """在目前目錄產生空白的 .env 範本"""
    try:
        path = dump_dotenv(Path(DOTENV_FILE))
    except JiraCliError as e:
        fail(e)
    console.print(f"[green]✓ 已產生 {path}[/green]")


@app.command()
def whoami():
    """測試 Jira 連接"""
    try:
        success, msg = get_client().test_connection()
    except JiraCliError as e:
        fail(e)

    if not success:
        fail(JiraCliError(msg))
    console.print(f"[green]✓ {msg}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="show debug logs"),
):
    """
    jira-cli - 記錄與檢視 Jira 工時

    使用方式:
      jira-cli logwork -i KEY -t 6           # 記錄今天的工時
      jira-cli list --object worklogs        # 本月 worklog 彙整
      jira-cli dumpenv                       # 產生 .env 範本
    """
    setup_logging(verbose)


if __name__ == "__main__":
    app()
