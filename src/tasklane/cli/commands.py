# src/tasklane/cli/commands.py

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date

from ..core.state import AppState
from ..tasks.task_editor import TaskEditor
from ..tasks.task_models import Task, TaskFilter, TaskPriority, TaskSortOrder, parse_choice

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def format_task(task: Task) -> str:
    mark = "x" if task.is_completed else " "
    extra = [task.priority.value.lower()]
    if task.due_date is not None:
        extra.append(f"due {task.due_date.isoformat()}")
    return f"[{mark}] {task.title} ({', '.join(extra)}) #{task.id}"


def _pick(state: AppState, raw: str) -> Task | None:
    """Resolve a 1-based number from the current view."""
    try:
        n = int(raw)
    except ValueError:
        return None
    view = state.service.tasks.value
    if 1 <= n <= len(view):
        return view[n - 1]
    return None


def _apply_markers(editor: TaskEditor, args: list[str]) -> str | None:
    """
    Split args into title words and markers (!priority, @YYYY-MM-DD, @none).
    Updates the editor in place; returns an error message or None.
    """
    words: list[str] = []
    for token in args:
        if token.startswith("!") and len(token) > 1:
            priority = parse_choice(TaskPriority, token[1:])
            if priority is None:
                return f"Unknown priority: {token[1:]}. Use !high, !medium or !low."
            editor.priority = priority
        elif token.startswith("@") and len(token) > 1:
            if token[1:].lower() == "none":
                editor.due_date = None
                continue
            try:
                editor.due_date = date.fromisoformat(token[1:])
            except ValueError:
                return f"Bad due date: {token[1:]}. Use @YYYY-MM-DD or @none."
        else:
            words.append(token)
    if words:
        editor.title = " ".join(words)
    return None


# ---- commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    service = state.service
    view = service.tasks.value
    mode = "manual order" if service.is_manual_order.value else f"sorted by {service.sort_order.value.lower()}"
    header = f"Tasks ({service.filter.value.lower()}, {mode})"
    if service.search_query.value:
        header += f", search {service.search_query.value!r}"
    if not view:
        return header + ":\n  (no tasks)"
    lines = [header + ":"]
    for i, task in enumerate(view, start=1):
        lines.append(f"  {i}. {format_task(task)}")
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Buy milk !high @2026-01-31
    """
    editor = TaskEditor(state.service)
    err = _apply_markers(editor, args)
    if err:
        return err
    if not editor.save() or editor.last_write is None:
        return "Title must not be empty. Usage: /add <title> [!priority] [@YYYY-MM-DD]"
    task_id = await editor.last_write
    return f"Added task #{task_id}."


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit 2 New title !low @none
    """
    if not args:
        return "Usage: /edit <n> [title] [!priority] [@YYYY-MM-DD|@none]"
    task = _pick(state, args[0])
    if task is None:
        return f"No task number {args[0]} in the current list."

    editor = TaskEditor(state.service)
    if not await editor.load(task.key):
        return f"Task #{task.id} no longer exists."
    err = _apply_markers(editor, args[1:])
    if err:
        return err
    if not editor.save() or editor.last_write is None:
        return "Title must not be empty."
    await editor.last_write
    return f"Updated task #{task.id}."


async def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <n>"
    task = _pick(state, args[0])
    if task is None:
        return f"No task number {args[0]} in the current list."
    lines = [
        f"#{task.id} {task.title}",
        f"  priority:  {task.priority.value.lower()}",
        f"  due:       {task.due_date.isoformat() if task.due_date else '-'}",
        f"  completed: {'yes' if task.is_completed else 'no'}",
        f"  created:   {task.created_date.isoformat()}",
    ]
    if task.description:
        lines.append(f"  {task.description}")
    return "\n".join(lines)


async def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <n>"
    task = _pick(state, args[0])
    if task is None:
        return f"No task number {args[0]} in the current list."
    write = state.service.toggle_task_completion(task)
    word = "pending" if task.is_completed else "completed"
    try:
        await write
    except Exception:
        return f"Could not update task #{task.id}; see log."
    return f"Marked #{task.id} {word}."


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <n>"
    task = _pick(state, args[0])
    if task is None:
        return f"No task number {args[0]} in the current list."
    try:
        await state.service.delete_task(task)
    except Exception:
        return f"Could not delete task #{task.id}; see log."
    state.last_deleted = task
    return f"Deleted #{task.id} {task.title!r}. Use /undo to restore it."


async def cmd_undo(state: AppState, args: list[str]) -> str:
    task = state.last_deleted
    if task is None:
        return "Nothing to undo."
    try:
        await state.service.restore_task(task)
    except Exception:
        return f"Could not restore task #{task.id}; see log."
    state.last_deleted = None
    return f"Restored #{task.id} {task.title!r}."


async def cmd_move(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /move <from> <to>"
    if not state.service.is_manual_order.value:
        return "Moving tasks needs manual order. Use /manual on first."
    moving, target = _pick(state, args[0]), _pick(state, args[1])
    if moving is None or target is None:
        return "Both numbers must refer to tasks in the current list."
    # List numbers count the filtered view; the order store counts every task.
    src = state.service.order_index(moving)
    dst = state.service.order_index(target)
    if src is None or dst is None:
        return "That task has no manual position yet."
    await state.service.move_task(src, dst)
    return await cmd_list(state, [])


async def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Filter is {state.service.filter.value.lower()}. Use /filter all|completed|pending."
    choice = parse_choice(TaskFilter, args[0])
    if choice is None:
        return "Usage: /filter all|completed|pending"
    state.service.set_filter(choice)
    return f"Filter set to {choice.value.lower()}."


async def cmd_sort(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Sort is {state.service.sort_order.value.lower()}. Use /sort priority|due|alpha."
    choice = parse_choice(TaskSortOrder, args[0])
    if choice is None:
        return "Usage: /sort priority|due|alpha"
    state.service.set_sort_order(choice)
    suffix = " (ignored while manual order is on)" if state.service.is_manual_order.value else ""
    return f"Sort set to {choice.value.lower()}{suffix}."


async def cmd_manual(state: AppState, args: list[str]) -> str:
    """
    /manual       -> toggle
    /manual on    -> manual order
    /manual off   -> automatic sort
    """
    service = state.service
    if not args:
        service.toggle_manual_ordering()
    else:
        arg = args[0].lower()
        if arg in ("on", "1", "true", "yes"):
            service.set_manual_order(True)
        elif arg in ("off", "0", "false", "no"):
            service.set_manual_order(False)
        else:
            return "Usage: /manual [on|off]"
    return f"Manual order is {'ON' if service.is_manual_order.value else 'OFF'}."


async def cmd_search(state: AppState, args: list[str]) -> str:
    query = " ".join(args)
    state.service.set_search_query(query)
    if not query:
        return "Search cleared."
    return f"Searching for {query!r}: {len(state.service.tasks.value)} match(es)."


async def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.service.task_stats.value
    lines = [
        "Statistics:",
        f"  Total:     {s.total_tasks}",
        f"  Completed: {s.completed_tasks}",
        f"  Pending:   {s.pending_tasks}",
        f"  Progress:  {s.completion_percentage:.0%}",
    ]
    if s.has_overdue:
        lines.append("  Some pending tasks are overdue.")
    elif s.has_due_dates:
        lines.append("  Nothing overdue.")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the current task list.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [!high|!medium|!low] [@YYYY-MM-DD].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n> [title] [!priority] [@date|@none].")
registry.register("show", cmd_show, help_text="Show task details: /show <n>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["x"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n>.", aliases=["del"])
registry.register("undo", cmd_undo, help_text="Restore the last deleted task.")
registry.register("move", cmd_move, help_text="Reorder (manual mode): /move <from> <to>.", aliases=["mv"])
registry.register("filter", cmd_filter, help_text="Filter: /filter all|completed|pending.")
registry.register("sort", cmd_sort, help_text="Sort: /sort priority|due|alpha.")
registry.register("manual", cmd_manual, help_text="Manual order: /manual [on|off].")
registry.register("search", cmd_search, help_text="Search title/description: /search <text> (empty clears).")
registry.register("stats", cmd_stats, help_text="Show completion statistics.")
