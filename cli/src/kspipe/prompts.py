"""Interactive prompts used to disambiguate targets and edit resources."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import click
from rich.console import Console

from kspipe.errors import InputAborted

ALL_KEYWORD = "all"


class Prompter(Protocol):
    def select_one(self, message: str, options: Sequence[str]) -> str:
        ...

    def select_many(self, message: str, options: Sequence[str]) -> list[str]:
        ...

    def edit_text(self, message: str, default: str, *, suffix: str = ".yaml") -> str:
        ...


class ConsolePrompter:
    """Numbered-list prompts on the terminal, plus the operator's editor."""

    def __init__(self, console: Console | None = None, *, editor: str | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._editor = editor

    def select_one(self, message: str, options: Sequence[str]) -> str:
        if not options:
            raise ValueError("select_one requires at least one option")
        self._render(message, options)
        while True:
            answer = self._ask("Enter number")
            try:
                choice = int(answer)
            except ValueError:
                choice = 0
            if 1 <= choice <= len(options):
                return options[choice - 1]
            self._console.print("[red]Invalid choice[/red]")

    def select_many(self, message: str, options: Sequence[str]) -> list[str]:
        if not options:
            return []
        self._render(message, options)
        while True:
            answer = self._ask(
                "Enter numbers (e.g. 1,3 or 2-4), 'all', or leave empty for none",
                default="",
            )
            try:
                indices = parse_selection(answer, len(options))
            except ValueError as exc:
                self._console.print(f"[red]{exc}[/red]")
                continue
            return [options[index] for index in indices]

    def edit_text(self, message: str, default: str, *, suffix: str = ".yaml") -> str:
        self._console.print(f"[bold]{message}[/bold]")
        try:
            edited = click.edit(default, editor=self._editor, extension=suffix)
        except click.Abort as exc:
            raise InputAborted(f"{message}: cancelled") from exc
        if edited is None:
            raise InputAborted(f"{message}: editor closed without saving")
        return edited

    def _render(self, message: str, options: Sequence[str]) -> None:
        self._console.print(message)
        for number, option in enumerate(options, 1):
            self._console.print(f"  {number}. {option}")

    def _ask(self, text: str, default: str | None = None) -> str:
        try:
            answer = click.prompt(text, default=default, show_default=False, err=True)
        except click.Abort as exc:
            raise InputAborted("prompt cancelled") from exc
        return str(answer).strip()


def parse_selection(answer: str, count: int) -> list[int]:
    """Turn `1,3 5-6` style input into zero-based indices, in option order."""
    normalized = answer.strip().lower()
    if not normalized:
        return []
    if normalized == ALL_KEYWORD:
        return list(range(count))

    selected: set[int] = set()
    for token in normalized.replace(",", " ").split():
        start_text, dash, end_text = token.partition("-")
        try:
            start = int(start_text)
            end = int(end_text) if dash else start
        except ValueError:
            raise ValueError(f"Invalid selection: {token}") from None
        if start > end or start < 1 or end > count:
            raise ValueError(f"Selection out of range: {token}")
        selected.update(range(start - 1, end))
    return sorted(selected)
