"""Word-level review diff and the approval merge.

The diff is set-based: a staged token is "new" when it does not appear
anywhere in the live text. Moved or removed words are not highlighted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from services.sprints_service.models import Sprint
from services.sprints_service.services.sprint_store import CONTENT_FIELDS

DAY_REVIEW_FIELDS = ("lesson_text", "task_prompt", "coach_insight")


@dataclass
class DiffToken:
    text: str
    is_new: bool


@dataclass
class FieldDiff:
    field: str
    live_text: str
    staged_text: str
    changed: bool
    tokens: List[DiffToken] = field(default_factory=list)
    day: Optional[int] = None


def as_review_text(value: Any) -> str:
    """Flatten a content value to the trimmed text an admin reads."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return " ".join(filter(None, (as_review_text(v) for v in value)))
    if isinstance(value, dict):
        return " ".join(filter(None, (as_review_text(v) for v in value.values())))
    return str(value).strip()


def tokenize(text: str) -> List[str]:
    return text.split()


def word_diff(field_name: str, live: Any, staged: Any, day: Optional[int] = None) -> FieldDiff:
    live_text = as_review_text(live)
    staged_text = as_review_text(staged)
    if live_text == staged_text:
        return FieldDiff(
            field=field_name,
            live_text=live_text,
            staged_text=staged_text,
            changed=False,
            tokens=[DiffToken(text=t, is_new=False) for t in tokenize(staged_text)],
            day=day,
        )

    live_tokens = set(tokenize(live_text))
    return FieldDiff(
        field=field_name,
        live_text=live_text,
        staged_text=staged_text,
        changed=True,
        tokens=[DiffToken(text=t, is_new=t not in live_tokens) for t in tokenize(staged_text)],
        day=day,
    )


def _days_by_number(entries: Optional[list]) -> Dict[int, dict]:
    by_day = {}
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("day") is not None:
            by_day[int(entry["day"])] = entry
    return by_day


def diff_daily_content(live: Optional[list], staged: Optional[list]) -> List[FieldDiff]:
    live_days = _days_by_number(live)
    diffs = []
    for day, staged_entry in sorted(_days_by_number(staged).items()):
        live_entry = live_days.get(day, {})
        for key in DAY_REVIEW_FIELDS:
            if key not in staged_entry and key not in live_entry:
                continue
            diffs.append(
                word_diff(
                    f"daily_content.{key}",
                    live_entry.get(key),
                    staged_entry.get(key),
                    day=day,
                )
            )
    return diffs


def diff_pending_changes(sprint: Sprint) -> List[FieldDiff]:
    """Diff every staged field against the sprint's canonical value."""
    pending = sprint.pending_changes or {}
    diffs: List[FieldDiff] = []
    for field_name in CONTENT_FIELDS:
        if field_name not in pending:
            continue
        live_value = getattr(sprint, field_name)
        if field_name == "daily_content":
            diffs.extend(diff_daily_content(live_value, pending[field_name]))
        else:
            diffs.append(word_diff(field_name, live_value, pending[field_name]))
    return diffs


def merge_pending(
    canonical: dict, pending: Optional[dict], overrides: Optional[dict] = None
) -> dict:
    """Shallow merge: staged values replace canonical ones wholesale, overrides win last."""
    merged = dict(canonical)
    merged.update(pending or {})
    merged.update(overrides or {})
    return merged
