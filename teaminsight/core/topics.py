"""Reflection Topics - the fixed discussion areas a weekly reflection must cover.

Invariants:
    - Topic ids are stable: they key the `answers` list persisted on sessions
    - Order is the suggested interview order

Design Decisions:
    - Titles and hints in Hebrew (student-facing), guidance in English
      (oracle-facing instructions)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReflectionTopic:
    id: str
    title: str
    guidance: str
    question_hints: tuple[str, ...]

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "guidance": self.guidance,
            "questionHints": list(self.question_hints),
        }


REFLECTION_TOPICS: tuple[ReflectionTopic, ...] = (
    ReflectionTopic(
        id="achievements",
        title="הישגים ותוצרים",
        guidance=(
            "Concrete deliverables: feature/PR/demo/fix/deploy. "
            "Include what was built and evidence."
        ),
        question_hints=(
            "מה הספקתם לסיים השבוע?",
            "איזה פיצ'ר או תיקון יצא לפרודקשן?",
            "יש משהו שאפשר לראות או להדגים?",
        ),
    ),
    ReflectionTopic(
        id="wins",
        title="מה עבד טוב",
        guidance=(
            "What helped you succeed? Practices, communication, planning. "
            "Give one concrete example."
        ),
        question_hints=(
            "מה עזר לכם להתקדם השבוע?",
            "איזו שיטת עבודה הוכיחה את עצמה?",
            "היה משהו בתקשורת בצוות שעבד טוב?",
        ),
    ),
    ReflectionTopic(
        id="pain_points",
        title="מה לא עבד",
        guidance=(
            "What went poorly? Misalignment, rework, unclear tasks, bugs. "
            "Give one concrete example."
        ),
        question_hints=(
            "מה היה מתסכל השבוע?",
            "היו אי-הבנות בצוות?",
            "מה הייתם עושים אחרת בדיעבד?",
        ),
    ),
    ReflectionTopic(
        id="blockers",
        title="חסמים",
        guidance=(
            "What blocked progress? Technical, dependencies, communication, "
            "time. Include type and impact."
        ),
        question_hints=(
            "מה עיכב אתכם השבוע?",
            "היו תלויות שחיכיתם להן?",
            "כמה זמן איבדתם בגלל החסם הזה?",
        ),
    ),
    ReflectionTopic(
        id="decisions",
        title="החלטות חשובות",
        guidance="Key decision made and why. One decision is enough if concrete.",
        question_hints=(
            "איזו החלטה חשובה קיבלתם השבוע?",
            "שקלתם כמה אפשרויות - מה הכריע?",
            "מה היו החלופות שוויתרתם עליהן?",
        ),
    ),
    ReflectionTopic(
        id="risks",
        title="סיכונים לשבוע הבא",
        guidance="What might fail next week? Add one mitigation idea.",
        question_hints=(
            "מה עלול להשתבש בשבוע הבא?",
            "איפה יש אי-ודאות שצריך להתכונן אליה?",
            "איך אפשר להקטין את הסיכון הזה?",
        ),
    ),
    ReflectionTopic(
        id="next_actions",
        title="פעולות לשבוע הבא",
        guidance="Exactly 3 concrete actions: what + owner + target (date/week).",
        question_hints=(
            "מה שלוש המשימות הכי חשובות לשבוע הבא?",
            "מי אחראי על כל משימה?",
            "מתי כל משימה צריכה להסתיים?",
        ),
    ),
)


def topics_payload() -> list[dict]:
    """Topics in the camelCase shape embedded in oracle payloads."""
    return [t.to_payload() for t in REFLECTION_TOPICS]
