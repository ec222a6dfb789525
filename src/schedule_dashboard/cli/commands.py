# src/schedule_dashboard/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..auth.roles import navigation
from ..core.errors import AuthDenied, FetchFailed, InvalidDate
from ..core.state import AppState
from ..schedule.aggregate import ALL_DEPARTMENTS, departments
from ..schedule.models import PeriodKind
from .render import render_snapshot

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)

HOME = "/"
TASK_MASTER = "/master"

SIGN_IN_HINT = "Please sign in first: /login <google-id-token>"


@dataclass(slots=True)
class _Command:
    handler: CommandHandler
    help_text: str
    # None: usable without a session
    route: str | None


class CommandRegistry:
    """Slash-command registry used by connectors (/help, /view, ...), gated per route."""

    def __init__(self) -> None:
        self._commands: dict[str, _Command] = {}
        self._help: dict[str, _Command] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        *,
        route: str | None = HOME,
        aliases: list[str] | None = None,
    ) -> None:
        cmd = _Command(handler=handler, help_text=help_text, route=route)
        key = name.lower()
        self._commands[key] = cmd
        self._help[key] = cmd
        for alias in aliases or []:
            self._commands[alias.lower()] = cmd

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

        cmd = self._commands.get(name)
        if cmd is None:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if cmd.route is not None and not state.session.can_access(cmd.route):
            if not state.session.is_authenticated:
                return SIGN_IN_HINT
            logger.info("Denied /%s for role %s", name, state.session.role)
            return f"Access denied: /{name} is not available for your role."

        try:
            return await cmd.handler(state, args)
        except InvalidDate as e:
            return str(e)
        except AuthDenied:
            return "Your session has expired. " + SIGN_IN_HINT
        except FetchFailed as e:
            return f"Error: {e}"

    def build_help(self, state: AppState | None = None) -> str:
        lines = ["Available commands:"]
        for name, cmd in self._help.items():
            if state is not None and cmd.route is not None and not state.session.can_access(cmd.route):
                continue
            lines.append(f"  /{name} - {cmd.help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help(state)


async def cmd_login(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /login <google-id-token>"
    result = await state.session.login(args[0])
    if not result.success:
        return f"Login failed: {result.error}"
    who = state.session.session
    if who is None:
        return "Signed in."
    return f"Signed in as {who.identity.name or who.identity.email} ({who.role.value})."


async def cmd_logout(state: AppState, args: list[str]) -> str:
    state.session.logout()
    return "Signed out."


async def cmd_whoami(state: AppState, args: list[str]) -> str:
    who = state.session.session
    if who is None:
        return "Not signed in."
    return (
        "Signed in:\n"
        f"  Name: {who.identity.name}\n"
        f"  Email: {who.identity.email}\n"
        f"  Role: {who.role.value}\n"
        f"  Status: {who.status.value}"
    )


async def cmd_menu(state: AppState, args: list[str]) -> str:
    items = navigation(state.session.session)
    return "Menu:\n" + "\n".join(f"  {item.label} ({item.path})" for item in items)


async def cmd_view(state: AppState, args: list[str]) -> str:
    """
    /view                 -> today's tasks
    /view week            -> this week (Sunday first)
    /view month 2024-02-15
    """
    kind = args[0].lower() if args else PeriodKind.DAY.value
    if kind == PeriodKind.RANGE.value or kind not in {k.value for k in PeriodKind}:
        return "Usage: /view <day|week|month|quarter|half-year|year> [yyyy-mm-dd]"
    anchor = args[1] if len(args) > 1 else None

    await state.dashboard.select(kind, anchor)
    return render_snapshot(state.dashboard.snapshot())


async def cmd_prev(state: AppState, args: list[str]) -> str:
    await state.dashboard.shift(-1)
    return render_snapshot(state.dashboard.snapshot())


async def cmd_next(state: AppState, args: list[str]) -> str:
    await state.dashboard.shift(1)
    return render_snapshot(state.dashboard.snapshot())


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    await state.dashboard.reload()
    return render_snapshot(state.dashboard.snapshot())


async def cmd_dept(state: AppState, args: list[str]) -> str:
    """
    /dept          -> departments in the loaded data
    /dept MEP      -> show only MEP (exact, case-sensitive)
    /dept all      -> clear the filter
    """
    if not args:
        names = departments(state.dashboard.schedule)
        current = state.dashboard.department
        if not names:
            return f"Filter: {current}. No departments in the loaded data."
        return f"Filter: {current}. In view: " + ", ".join(names)

    # Department names may contain spaces.
    state.dashboard.set_department(" ".join(args) if args[0] != ALL_DEPARTMENTS else ALL_DEPARTMENTS)
    return render_snapshot(state.dashboard.snapshot())


async def cmd_departments(state: AppState, args: list[str]) -> str:
    names = await state.source.departments()
    if not names:
        return "No departments defined."
    return "Departments:\n" + "\n".join(f"  {n}" for n in names)


async def cmd_frequencies(state: AppState, args: list[str]) -> str:
    names = await state.source.frequencies()
    if not names:
        return "No frequencies defined."
    return "Frequencies:\n" + "\n".join(f"  {n}" for n in names)


async def cmd_renew(state: AppState, args: list[str]) -> str:
    if await state.session.refresh():
        return "Credential renewed."
    if not state.session.is_authenticated:
        return "Your session has expired. " + SIGN_IN_HINT
    return "Could not renew the credential; keeping the current one."


registry.register("help", cmd_help, help_text="Show available commands.", route=None, aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Sign in: /login <google-id-token>.", route=None)
registry.register("logout", cmd_logout, help_text="Sign out and forget the stored credential.", route=None)
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.", route=None)
registry.register("menu", cmd_menu, help_text="List the pages your role may open.")
registry.register(
    "view",
    cmd_view,
    help_text="Show tasks: /view <day|week|month|quarter|half-year|year> [yyyy-mm-dd].",
    aliases=["v"],
)
registry.register("prev", cmd_prev, help_text="Previous period of the same kind.")
registry.register("next", cmd_next, help_text="Next period of the same kind.")
registry.register("refresh", cmd_refresh, help_text="Reload the current period.")
registry.register("dept", cmd_dept, help_text="Filter by department: /dept <name|all>.")
registry.register("departments", cmd_departments, help_text="List all departments.")
registry.register(
    "frequencies", cmd_frequencies, help_text="List task frequencies (task master).", route=TASK_MASTER
)
registry.register("renew", cmd_renew, help_text="Renew the sign-in credential.")
