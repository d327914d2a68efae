"""jira-cli - Log and review Jira Cloud worklogs from the command line."""

__version__ = "1.0.0"

from .config import Config
from .jira_api import JiraClient, Issue, WorklogEntry
from .periods import Period, expand_period
from .worklog import LogWorkRequest, WorklogSubmitter, WorklogAggregator

__all__ = [
    "Config",
    "JiraClient",
    "Issue",
    "WorklogEntry",
    "Period",
    "expand_period",
    "LogWorkRequest",
    "WorklogSubmitter",
    "WorklogAggregator",
]
