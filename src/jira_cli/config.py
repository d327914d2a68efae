"""
配置管理模組

設定值來自環境變數，啟動時會先讀取目前目錄下的 .env
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError


JIRA_API_KEY = "JIRA_API_KEY"
JIRA_ENDPOINT = "JIRA_ENDPOINT"
JIRA_USER_EMAIL = "JIRA_USER_EMAIL"

ENV_VAR_NAMES = (JIRA_API_KEY, JIRA_ENDPOINT, JIRA_USER_EMAIL)
DOTENV_FILE = Path(".env")

TODAY_FLAG = "today"
DEFAULT_LOG_TIME = 6.0
DEFAULT_MESSAGE = "I did some work here"


@dataclass
class Config:
    """應用程式配置"""
    jira_api_key: str = ""                # Atlassian API Token
    jira_endpoint: str = ""               # e.g. acme.atlassian.net
    jira_user_email: str = ""             # 登入 Email

    @classmethod
    def load(cls) -> "Config":
        """載入 .env 與環境變數"""
        load_dotenv(DOTENV_FILE)
        return cls(
            jira_api_key=os.environ.get(JIRA_API_KEY, ""),
            jira_endpoint=os.environ.get(JIRA_ENDPOINT, ""),
            jira_user_email=os.environ.get(JIRA_USER_EMAIL, ""),
        )

    def missing(self) -> list[str]:
        """回傳尚未設定的環境變數名稱"""
        values = {
            JIRA_API_KEY: self.jira_api_key,
            JIRA_ENDPOINT: self.jira_endpoint,
            JIRA_USER_EMAIL: self.jira_user_email,
        }
        return [name for name in ENV_VAR_NAMES if not values[name]]

    def is_configured(self) -> bool:
        """檢查是否已配置必要項目"""
        return not self.missing()

    def require(self) -> "Config":
        """缺少任何必要項目時丟出 ConfigError"""
        missing = self.missing()
        if missing:
            raise ConfigError(f"could not find {', '.join(missing)} in environment variables")
        return self


def dump_dotenv(path: Path = DOTENV_FILE) -> Path:
    """在指定位置產生空白的 .env 範本"""
    if path.exists():
        raise ConfigError("file already exists")

    with open(path, 'w') as f:
        for name in ENV_VAR_NAMES:
            f.write(f"# {name}=\n")
    return path
