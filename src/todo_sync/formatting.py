"""Render lists and tasks as console lines or markdown blocks."""

from __future__ import annotations

from todo_sync.models import Importance, ListRef, OutputFormat, TaskRecord

MARKDOWN_BODY_INDENT = "  "


def format_list(task_list: ListRef, output_format: OutputFormat, *, show_ids: bool = False) -> str:
    label = f"{task_list.display_name} ({task_list.id})" if show_ids else task_list.display_name
    if output_format == OutputFormat.MARKDOWN:
        return f"- {label}"
    return label


def format_task(task: TaskRecord, output_format: OutputFormat) -> str:
    if output_format == OutputFormat.MARKDOWN:
        return format_task_markdown(task)
    return format_task_console(task)


def format_task_console(task: TaskRecord) -> str:
    """``[X] * subject (completion YYYY-MM-DD)``; blanks stand in for unset marks."""

    done = "X" if task.is_complete else " "
    important = "*" if task.importance == Importance.HIGH else " "
    line = f"[{done}] {important} {task.subject}"
    completion = _completion(task)
    if completion is not None:
        line += f" (completion {completion})"
    return line


def format_task_markdown(task: TaskRecord) -> str:
    """Checkbox list item with inline fields, followed by the indented body."""

    done = "x" if task.is_complete else " "
    parts = [f"- [{done}] {task.subject}"]
    if task.importance == Importance.HIGH:
        parts.append("[important:: true]")
    completion = _completion(task)
    if completion is not None:
        parts.append(f"[completion:: {completion}]")
    lines = [" ".join(parts)]
    lines.extend(f"{MARKDOWN_BODY_INDENT}{line}" for line in _body_lines(task.body))
    return "\n".join(lines)


def _completion(task: TaskRecord) -> str | None:
    if not task.is_complete or task.completion_date is None:
        return None
    return task.completion_date.strftime("%Y-%m-%d")


def _body_lines(body: str) -> list[str]:
    if not body or not body.strip():
        return []
    return [line.rstrip("\r") for line in body.rstrip().split("\n")]
