"""
錯誤類型

所有例外皆繼承 JiraCliError，CLI 層統一攔截並轉為結束碼。
"""


class JiraCliError(Exception):
    """jira-cli 例外基底類別"""


class ConfigError(JiraCliError):
    """缺少必要的環境變數"""


class ValidationError(JiraCliError):
    """參數組合或日期格式錯誤，尚未呼叫遠端"""


class ExpansionUnsupported(JiraCliError):
    """不支援展開的期間 (例如 lastweek)"""


class RemoteCallFailure(JiraCliError):
    """網路、傳輸或認證失敗"""


class RemoteRejection(JiraCliError):
    """Jira 回應了業務錯誤，訊息來自 errorMessages"""


class WorklogSubmissionError(JiraCliError):
    """多日上傳中至少一天失敗"""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__("\n".join(messages))
