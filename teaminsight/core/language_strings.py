"""Language Strings - fixed Hebrew text the service shows without consulting the oracle.

Invariants:
    - All strings are pure data (no IO, no computation)
    - Every string here is student-facing Hebrew, except the retry nudge which
      is addressed to the oracle

Design Decisions:
    - Centralized so fallbacks, the wrap-up notice and the apology stay
      consistent across services and error handlers
"""

# Shown on any 5xx so students never see raw error payloads.
GENERIC_APOLOGY = "מצטערים, משהו השתבש. נסו שוב בעוד רגע."

# Interviewer fallback when the oracle returns empty or wrong-language text.
FALLBACK_CONTINUATION = "קיבלתי. אפשר לשתף עוד קצת?"

# Replaces the interviewer call on the turn that flips the session to ready.
READY_TO_SUBMIT_MESSAGE = (
    "סיימנו ✅ יש לי את כל מה שצריך לרפלקציה. "
    "עכשיו אפשר להגיש או לבטל ולהתחיל מחדש דרך הכפתורים למעלה."
)

# Evaluator defaults.
NOT_AVAILABLE = "לא זמין"
DEFAULT_BREAKDOWN = "לא הצלחתי לנתח — ברירת מחדל."
DEFAULT_REASON = "לא הצלחתי לנתח בוודאות — הוחזר סיווג ברירת מחדל."
NO_DETAILED_REASONS = "לא נמצאו סיבות מפורטות — ניתוח בסיסי בוצע."

# Analyst default directive.
DEFAULT_KEY_QUESTION = "ספרו לי על שיתוף הפעולה בצוות השבוע - מה עבד טוב?"
DEFAULT_ANCHOR = "בואו נתחיל לדבר על איך עבדתם יחד"

# Sent back to the interviewer oracle once when its reply is not Hebrew.
LANGUAGE_RETRY_NUDGE = (
    "התשובה הקודמת שלך לא הייתה בעברית. "
    "כתוב שוב את אותה הודעה, בעברית בלבד."
)

# Task-section sub-bullets that are not task titles.
TASK_DETAIL_PREFIXES: tuple[str, ...] = ("מה לעשות", "מי אחראי", "עד מתי")
TASKS_HEADING_WORD = "משימות"
