"""
Worklog 上傳與彙整

- WorklogSubmitter: 將單日或整段期間的工時逐日上傳
- WorklogAggregator: 讀取使用者的 worklog 並整理成 issue x 日期 的表格
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Callable, Optional

from .config import DEFAULT_LOG_TIME, DEFAULT_MESSAGE, TODAY_FLAG
from .errors import RemoteCallFailure, RemoteRejection, ValidationError, WorklogSubmissionError
from .jira_api import Issue, JiraClient, WorklogEntry
from .periods import Period, expand_period, format_simple_date, parse_simple_date

logger = logging.getLogger(__name__)

# 上傳的 worklog 一律記在當天 10:00 (本地時間)
LOG_HOUR = 10

AggregationTable = dict[str, dict[str, list[str]]]


@dataclass(frozen=True)
class LogWorkRequest:
    """一次 logwork 指令的參數"""
    issue_key: str = ""
    log_date: str = TODAY_FLAG      # dd/mm/yyyy 或 "today"
    time_spent: float = DEFAULT_LOG_TIME  # 小時，可為小數
    message: str = DEFAULT_MESSAGE
    period: Optional[Period] = None

    def validate(self) -> None:
        """檢查參數組合，不合法時丟出 ValidationError"""
        # logwork -d 10/10/2024 -t 6 -i SAV-2321
        if self.log_date and self.time_spent != 0 and self.issue_key:
            return
        # logwork -i SAV-2321 --period week
        if self.issue_key and self.period:
            return
        raise ValidationError("bad flag combination")

    @property
    def is_today(self) -> bool:
        return self.log_date in ("", TODAY_FLAG)

    def target_date(self, today: Optional[date] = None) -> date:
        """實際要記錄的日期"""
        if self.is_today:
            return today or date.today()
        return parse_simple_date(self.log_date)

    @property
    def time_spent_seconds(self) -> int:
        return int(round(self.time_spent * 3600))


def started_at(day: date) -> datetime:
    """該日 10:00 的本地時間"""
    return datetime.combine(day, time(hour=LOG_HOUR)).astimezone()


class WorklogSubmitter:
    """逐日上傳 worklog"""

    def __init__(self, client: JiraClient,
                 on_logged: Optional[Callable[[WorklogEntry], None]] = None):
        """
        Args:
            client: Jira 客戶端
            on_logged: 每筆上傳成功後立即呼叫，用於顯示確認訊息
        """
        self.client = client
        self.on_logged = on_logged

    def log_work(self, request: LogWorkRequest, today: Optional[date] = None) -> WorklogEntry:
        """上傳單日 worklog"""
        day = request.target_date(today)
        entry = self.client.add_worklog(
            request.issue_key,
            started_at(day),
            request.time_spent_seconds,
            request.message,
        )
        logger.debug("Logged %s on %s for %s", entry.time_spent, day, request.issue_key)
        if self.on_logged:
            self.on_logged(entry)
        return entry

    def target_dates(self, request: LogWorkRequest, today: Optional[date] = None) -> list[date]:
        """明確日期優先，其次展開期間，否則為今天"""
        today = today or date.today()
        if not request.is_today:
            return [request.target_date(today)]
        if request.period:
            return expand_period(request.period, today)
        return [today]

    def log_work_multi(self, request: LogWorkRequest, today: Optional[date] = None) -> list[WorklogEntry]:
        """
        依請求上傳一筆或多筆 worklog

        單日失敗不會中斷其他日期，所有錯誤在最後合併成一個例外。

        Returns:
            成功上傳的 worklog

        Raises:
            ValidationError: 參數組合錯誤
            ExpansionUnsupported: 期間尚未支援
            WorklogSubmissionError: 至少一天上傳失敗
        """
        request.validate()
        days = self.target_dates(request, today)

        logged: list[WorklogEntry] = []
        errors: list[str] = []
        for day in days:
            day_request = replace(request, log_date=format_simple_date(day))
            try:
                logged.append(self.log_work(day_request, today))
            except (RemoteCallFailure, RemoteRejection) as e:
                logger.debug("Failed to log work on %s: %s", day, e)
                errors.append(str(e))

        if errors:
            raise WorklogSubmissionError(errors)
        return logged


class WorklogAggregator:
    """讀取並彙整使用者的 worklog"""

    def __init__(self, client: JiraClient):
        self.client = client

    def get_users_issues_from_period(self, start: date, end: Optional[datetime] = None) -> list[Issue]:
        """指派給目前使用者、在期間內有更新的 issue"""
        end = end or datetime.now()
        jql = (
            f'assignee = currentUser() AND updated >= "{start:%Y-%m-%d}" '
            f'AND updated <= "{end:%Y-%m-%d %H:%M}" ORDER BY updated DESC'
        )
        return self.client.search_issues(jql)

    def get_issues_with_worklogs(self, start: date, end: Optional[datetime] = None) -> list[Issue]:
        """
        取得期間內目前使用者有記錄工時的 issue，並載入各自的 worklog

        單一 issue 讀取失敗時視為沒有 worklog。
        """
        end = end or datetime.now()
        jql = (
            f'worklogAuthor = currentUser() AND worklogDate >= "{start:%Y-%m-%d}" '
            f'AND worklogDate <= "{end:%Y-%m-%d}"'
        )
        issues = self.client.search_issues(jql)

        for issue in issues:
            try:
                issue.worklogs = self.client.get_worklogs(issue.key)
            except (RemoteCallFailure, RemoteRejection) as e:
                logger.debug("Could not fetch worklogs for %s: %s", issue.key, e)
                issue.worklogs = []
        return issues

    def get_user_worklogs(self, start: date, end: Optional[datetime] = None) -> AggregationTable:
        """
        將期間內的 worklog 整理成 {issue_key: {日: [時數, ...]}}

        Args:
            start: 期間起始日 (通常是月初)
            end: 期間結束，預設為現在

        Returns:
            同一天的多筆 worklog 依讀取順序保留
        """
        window_start = datetime.combine(start, time()).astimezone()
        issues = self.get_issues_with_worklogs(start, end)
        return pivot_worklogs(issues, window_start)


def pivot_worklogs(issues: list[Issue], window_start: datetime) -> AggregationTable:
    """依 issue 與日期分組 worklog"""
    table: AggregationTable = {}

    for issue in issues:
        # issue 比較 updated 時間，worklog 只比較年月
        if issue.updated is not None and issue.updated < window_start:
            continue

        for worklog in issue.worklogs:
            started = worklog.started
            if started.month != window_start.month or started.year != window_start.year:
                continue

            days = table.setdefault(issue.key, {})
            days.setdefault(str(started.day), []).append(worklog.time_spent)

    return table
