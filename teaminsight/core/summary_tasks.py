"""Summary Tasks - pulls student-facing task titles out of the final summary markdown.

Invariants:
    - Returns at most MAX_TASKS titles, in document order
    - Only the level-2 section whose heading contains "משימות" is read
    - "what / who / until when" detail bullets are never returned as tasks
"""

import re

from teaminsight.core.language_strings import TASK_DETAIL_PREFIXES, TASKS_HEADING_WORD

MAX_TASKS = 3
MIN_TASK_LENGTH = 6

_SECTION = re.compile(
    rf"^##[^#\n]*{TASKS_HEADING_WORD}[^\n]*\n(.*?)(?=\n---|\n##\s|\Z)",
    re.MULTILINE | re.DOTALL,
)
_ITEM_MARKER = re.compile(r"^(\d+[.)]|\*|-|###)\s+\**")


def extract_tasks_from_summary(summary: str) -> list[str]:
    """Task titles from the tasks section, or [] when there is none."""
    match = _SECTION.search(summary or "")
    if not match:
        return []
    tasks: list[str] = []
    for line in match.group(1).splitlines():
        line = line.strip()
        marker = _ITEM_MARKER.match(line)
        if not marker:
            continue
        title = line[marker.end():].strip()
        if len(title) < MIN_TASK_LENGTH or title.startswith(TASK_DETAIL_PREFIXES):
            continue
        tasks.append(title)
        if len(tasks) == MAX_TASKS:
            break
    return tasks
