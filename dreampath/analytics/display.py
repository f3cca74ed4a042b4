"""Presentation constants and helpers shared by the dashboard payloads."""

from typing import Dict, NamedTuple, Tuple

from dreampath.models.goal import GoalCategory

# Minimum bar widths, applied only when rendering; stored values stay exact
MIN_TIME_BAR_PERCENT = 2
MIN_PROGRESS_BAR_PERCENT = 1

CHART_NAME_LENGTH = 12
BAR_NAME_LENGTH = 10


class CategoryStyle(NamedTuple):
    icon: str
    gradient: Tuple[str, str]
    color: str


CATEGORY_STYLES: Dict[GoalCategory, CategoryStyle] = {
    GoalCategory.CAREER: CategoryStyle("briefcase", ("#667eea", "#764ba2"), "#667eea"),
    GoalCategory.FINANCIAL: CategoryStyle("wallet", ("#56ab91", "#14505c"), "#56ab91"),
    GoalCategory.HEALTH: CategoryStyle("fitness", ("#f093fb", "#f5576c"), "#f093fb"),
    GoalCategory.EDUCATION: CategoryStyle("book", ("#00f2fe", "#4facfe"), "#4facfe"),
    GoalCategory.PERSONAL: CategoryStyle("leaf", ("#38f9d7", "#43e97b"), "#38f9d7"),
    GoalCategory.RELATIONSHIP: CategoryStyle("heart", ("#fee140", "#fa709a"), "#fa709a"),
    GoalCategory.OTHER: CategoryStyle("flag", ("#e0c3fc", "#8866b3"), "#8866b3"),
}

URGENCY_LABELS: Dict[str, str] = {
    "critical": "CRITICAL",
    "high": "HIGH PRIORITY",
    "medium": "PRIORITY",
    "low": "ON TRACK",
}

URGENCY_COLORS: Dict[str, Tuple[str, str]] = {
    "critical": ("#ef4444", "#dc2626"),
    "high": ("#f59e0b", "#d97706"),
    "medium": ("#667eea", "#764ba2"),
    "low": ("#10b981", "#059669"),
}


def category_style(category: GoalCategory) -> CategoryStyle:
    return CATEGORY_STYLES.get(GoalCategory.parse(category), CATEGORY_STYLES[GoalCategory.OTHER])


def urgency_label(level: str) -> str:
    return URGENCY_LABELS[level]


def urgency_colors(level: str) -> Tuple[str, str]:
    return URGENCY_COLORS[level]


def time_bar_width(share_percent: int) -> int:
    return max(share_percent, MIN_TIME_BAR_PERCENT)


def progress_bar_width(progress_percent: int) -> int:
    return max(progress_percent, MIN_PROGRESS_BAR_PERCENT)


def truncate_name(name: str, length: int = CHART_NAME_LENGTH) -> str:
    return name[:length] + "..." if len(name) > length else name
