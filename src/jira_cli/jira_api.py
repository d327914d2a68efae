"""
Jira Cloud REST API 整合模組

支援:
- Basic Auth (Email + API Token)
- Issue 搜尋 (search/jql，nextPageToken 分頁)
- Worklog 讀取與新增
"""

import base64
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar

import requests

from .errors import RemoteCallFailure, RemoteRejection

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 網路請求預設 timeout（秒）
DEFAULT_TIMEOUT = 30
SEARCH_PAGE_SIZE = 100
WORKLOG_PAGE_SIZE = 1000

# Jira 時間格式: 2024-07-12T10:00:00.000+0300
JIRA_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def parse_jira_timestamp(value: str) -> datetime:
    """解析 Jira 時間字串並轉為本地時區"""
    return datetime.strptime(value, JIRA_TIME_FORMAT).astimezone()


def format_jira_timestamp(dt: datetime) -> str:
    """格式化為 Jira 接受的時間字串 (毫秒三位數)"""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    millis = dt.microsecond // 1000
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}{dt.strftime('%z')}"


def to_adf(text: str) -> dict:
    """將純文字包成 Atlassian Document Format"""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


def from_adf(node: Any) -> str:
    """取出 ADF 內所有文字節點"""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if node.get("type") == "text":
        return node.get("text", "")

    parts = [from_adf(child) for child in node.get("content", [])]
    separator = "\n" if node.get("type") == "doc" else ""
    return separator.join(parts)


@dataclass(frozen=True)
class WorklogEntry:
    """Jira 上的一筆 worklog"""
    author: str
    time_spent: str               # e.g. "6h", "1d 2h"
    time_spent_seconds: int
    started: datetime             # 本地時區
    comment: str = ""
    id: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "WorklogEntry":
        author = data.get("author") or {}
        return cls(
            author=author.get("displayName", "Unknown"),
            time_spent=data.get("timeSpent", ""),
            time_spent_seconds=int(data.get("timeSpentSeconds", 0)),
            started=parse_jira_timestamp(data["started"]),
            comment=from_adf(data.get("comment")),
            id=str(data.get("id", "")),
        )


@dataclass
class Issue:
    """Jira issue，worklogs 由 aggregator 延遲載入"""
    id: str
    key: str
    summary: str
    updated: Optional[datetime] = None
    worklogs: list[WorklogEntry] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict) -> "Issue":
        fields = data.get("fields", {})
        updated = fields.get("updated")
        return cls(
            id=str(data.get("id", "")),
            key=data.get("key", ""),
            summary=fields.get("summary", ""),
            updated=parse_jira_timestamp(updated) if updated else None,
        )


class JiraClient:
    """Jira REST API v3 客戶端"""

    def __init__(self, endpoint: str, email: str, api_token: str):
        """
        初始化 Jira 客戶端

        Args:
            endpoint: Jira 主機 (e.g., acme.atlassian.net) 或完整 URL
            email: 登入 Email
            api_token: Atlassian API Token
        """
        if "://" not in endpoint:
            endpoint = f"https://{endpoint}"
        self.base_url = endpoint.rstrip('/')
        self.session = requests.Session()

        auth_string = base64.b64encode(f"{email}:{api_token}".encode()).decode()
        self.session.headers.update({
            "Authorization": f"Basic {auth_string}",
            "Content-Type": "application/json",
            "Accept": "application/json"
        })

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """送出請求，傳輸錯誤轉為 RemoteCallFailure"""
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=DEFAULT_TIMEOUT, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.debug("Request to %s failed: %s", url, e)
            raise RemoteCallFailure(f"{method} {url} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise RemoteCallFailure(f"authentication failed ({resp.status_code}) for {url}")
        if resp.status_code >= 400:
            raise RemoteRejection(self._error_message(resp))
        return resp

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        """取出 Jira 回傳的錯誤訊息"""
        try:
            data = resp.json()
        except ValueError:
            return f"HTTP {resp.status_code}: {resp.text[:200]}"
        if not isinstance(data, dict):
            return f"HTTP {resp.status_code}: {resp.text[:200]}"

        messages = list(data.get("errorMessages") or [])
        messages.extend(str(v) for v in (data.get("errors") or {}).values())
        if not messages:
            return f"HTTP {resp.status_code}"
        return "\n".join(messages)

    @staticmethod
    def _json(resp: requests.Response) -> dict:
        """取出回應 JSON，內容無法解讀時丟出 RemoteRejection"""
        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteRejection(f"invalid response (HTTP {resp.status_code}): {e}") from e
        if not isinstance(data, dict):
            raise RemoteRejection(f"invalid response (HTTP {resp.status_code}): expected an object")
        return data

    @staticmethod
    def _parse(parse: Callable[[dict], T], data: Any) -> T:
        """轉換單筆資料，欄位缺漏或格式不符時丟出 RemoteRejection"""
        try:
            return parse(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise RemoteRejection(f"unexpected response data: {e}") from e

    def get_myself(self) -> dict:
        """獲取當前用戶資訊"""
        resp = self._request("GET", "rest/api/3/myself")
        return self._json(resp)

    def search_issues(self, jql: str, fields: Optional[list[str]] = None) -> list[Issue]:
        """
        以 JQL 搜尋 issue，自動處理分頁

        Args:
            jql: JQL 查詢
            fields: 要取回的欄位

        Returns:
            所有頁面的 issue
        """
        payload: dict[str, Any] = {
            "jql": jql,
            "fields": fields or ["key", "id", "summary", "updated"],
            "maxResults": SEARCH_PAGE_SIZE,
        }
        issues: list[Issue] = []

        while True:
            resp = self._request("POST", "rest/api/3/search/jql", json=payload)
            data = self._json(resp)
            issues.extend(self._parse(Issue.from_json, item) for item in data.get("issues", []))

            token = data.get("nextPageToken")
            if not token or data.get("isLast") is True:
                break
            payload["nextPageToken"] = token

        logger.debug("JQL '%s' returned %d issues", jql, len(issues))
        return issues

    def get_worklogs(self, issue_key: str) -> list[WorklogEntry]:
        """取得 issue 的所有 worklog"""
        entries: list[WorklogEntry] = []
        start_at = 0

        while True:
            params = {"startAt": start_at, "maxResults": WORKLOG_PAGE_SIZE}
            resp = self._request("GET", f"rest/api/3/issue/{issue_key}/worklog", params=params)
            data = self._json(resp)
            page = data.get("worklogs", [])
            entries.extend(self._parse(WorklogEntry.from_json, item) for item in page)

            start_at += len(page)
            if not page or start_at >= data.get("total", 0):
                break

        return entries

    def add_worklog(self, issue_key: str, started: datetime, time_spent_seconds: int,
                    comment: str) -> WorklogEntry:
        """添加 worklog 到 Jira issue"""
        payload = {
            "comment": to_adf(comment),
            "started": format_jira_timestamp(started),
            "timeSpentSeconds": time_spent_seconds,
        }
        resp = self._request("POST", f"rest/api/3/issue/{issue_key}/worklog", json=payload)
        return self._parse(WorklogEntry.from_json, self._json(resp))

    def test_connection(self) -> tuple[bool, str]:
        """測試連接"""
        try:
            user = self.get_myself()
            return True, f"Connected as: {user.get('displayName', 'Unknown')}"
        except (RemoteCallFailure, RemoteRejection) as e:
            return False, f"Connection failed: {e}"
