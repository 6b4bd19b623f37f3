"""Tests for extract_tasks_from_summary - task titles from the Hebrew summary markdown."""

from teaminsight.core.summary_tasks import extract_tasks_from_summary

SUMMARY = """## סיכום
הצוות התקדם יפה.

## משימות לשבוע הבא
### משימה 1: לסיים את מסך ההרשמה
- **מה לעשות:** לחבר את הטופס לשרת
- **מי אחראי:** נועה
- **עד מתי:** יום רביעי
### משימה 2: לכתוב בדיקות יחידה
- **מה לעשות:** לכסות את שכבת השירותים
### משימה 3: לעדכן את המרצה
### משימה 4: משימה רביעית שלא תיכנס

---
## נספח
- פריט שאינו משימה
"""


def test_extracts_up_to_three_titles_in_order():
    assert extract_tasks_from_summary(SUMMARY) == [
        "משימה 1: לסיים את מסך ההרשמה",
        "משימה 2: לכתוב בדיקות יחידה",
        "משימה 3: לעדכן את המרצה",
    ]


def test_detail_bullets_are_not_tasks():
    tasks = extract_tasks_from_summary(SUMMARY)
    assert not any("מי אחראי" in t or "עד מתי" in t for t in tasks)


def test_numbered_list_items():
    summary = "## משימות\n1. לתקן את הבאג בהתחברות\n2) להוסיף תיעוד למודול\n"
    assert extract_tasks_from_summary(summary) == [
        "לתקן את הבאג בהתחברות",
        "להוסיף תיעוד למודול",
    ]


def test_section_ends_at_next_level_two_heading():
    summary = "## משימות\n- לכתוב מסמך אפיון\n## אחר\n- לא משימה בכלל\n"
    assert extract_tasks_from_summary(summary) == ["לכתוב מסמך אפיון"]


def test_no_tasks_section_returns_empty():
    assert extract_tasks_from_summary("## סיכום\n- משהו\n") == []
    assert extract_tasks_from_summary("") == []
    assert extract_tasks_from_summary(None) == []


def test_too_short_items_skipped():
    assert extract_tasks_from_summary("## משימות\n- קצר\n") == []
