"""
期間展開模組

把 "week"、"month" 這類符號期間轉換成實際要記錄工時的日期列表
"""

import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from enum import Enum
from typing import Optional

from .errors import ExpansionUnsupported, ValidationError


class Period(str, Enum):
    """可重複記錄的期間"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    LASTWEEK = "lastweek"
    LASTMONTH = "lastmonth"


def parse_simple_date(value: str) -> date:
    """解析 dd/mm/yyyy (不需補零)"""
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        raise ValidationError(f"invalid date '{value}', expected dd/mm/yyyy")


def format_simple_date(day: date) -> str:
    """格式化為 d/m/yyyy"""
    return f"{day.day}/{day.month}/{day.year}"


def resolve_month(month: int = -1, year: int = -1, today: Optional[date] = None) -> date:
    """
    將 CLI 的月份/年份參數轉成該月第一天

    Args:
        month: 1-12，-1 表示本月
        year: 西元年，-1 表示今年
        today: 參考日期，預設為今天

    Returns:
        該月第一天
    """
    today = today or date.today()
    month = today.month if month == -1 else month
    year = today.year if year == -1 else year
    if not 1 <= month <= 12:
        raise ValidationError(f"invalid month {month}")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationError(f"invalid year {year}")
    return date(year, month, 1)


def get_week_days(reference: date) -> list[date]:
    """本週一到參考日期的工作日 (跳過週六、週日)"""
    monday = reference - timedelta(days=reference.weekday())
    days = []
    current = monday
    while current <= reference:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


def get_month_days(reference: date) -> list[date]:
    """本月一號到參考日期的每一天 (含週末)"""
    return [reference.replace(day=d) for d in range(1, reference.day + 1)]


def get_last_month_days(reference: date) -> list[date]:
    """上個月的每一天"""
    year, month = reference.year, reference.month - 1
    if month == 0:
        year, month = year - 1, 12
    _, days_in_month = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, days_in_month + 1)]


def expand_period(period: Period, reference: Optional[date] = None) -> list[date]:
    """
    將期間展開為要記錄的日期

    Args:
        period: 期間
        reference: 參考日期，預設為今天

    Returns:
        依時間排序、不重複的日期列表

    Raises:
        ExpansionUnsupported: lastweek 尚未支援
    """
    reference = reference or date.today()
    period = Period(period)

    if period == Period.DAY:
        return [reference]
    if period == Period.WEEK:
        return get_week_days(reference)
    if period == Period.MONTH:
        return get_month_days(reference)
    if period == Period.LASTMONTH:
        return get_last_month_days(reference)
    raise ExpansionUnsupported("Not Implemented")
