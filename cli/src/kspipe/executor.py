"""Runs view, edit, and delete over resolved pipelines, one at a time."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Literal

from structlog.contextvars import bind_contextvars, reset_contextvars

from kspipe.locator import ResourceLocator, Target
from kspipe.materializer import ResourceMaterializer
from kspipe.prompts import Prompter

LOGGER = logging.getLogger("kspipe.executor")

Operation = Literal["list", "view", "edit", "delete"]
Output = Callable[[str], None]

EDIT_FILE_SUFFIX = ".yaml"


@dataclass
class OperationReport:
    operation: Operation
    namespace: str
    processed: list[str] = field(default_factory=list)


class OperationExecutor:
    """
    Applies one operation to every pipeline of a resolved target.

    Names are processed strictly in order. The first failure propagates and
    leaves later names untouched; work already done is not rolled back.
    """

    def __init__(
        self,
        locator: ResourceLocator,
        materializer: ResourceMaterializer,
        prompter: Prompter,
        *,
        output: Output,
    ) -> None:
        self._locator = locator
        self._materializer = materializer
        self._prompter = prompter
        self._output = output

    def list_names(self, args: Sequence[str]) -> OperationReport:
        target = self._locator.resolve(args, confirm=False)
        with _operation_context("list", target) as report:
            for name in target.names:
                self._output(name)
                report.processed.append(name)
        return report

    def view(self, args: Sequence[str]) -> OperationReport:
        target = self._locator.resolve(args)
        with _operation_context("view", target) as report:
            for name in target.names:
                instance = self._materializer.fetch(target.namespace, name)
                self._output(self._materializer.to_text(instance))
                report.processed.append(name)
        return report

    def delete(self, args: Sequence[str]) -> OperationReport:
        target = self._locator.resolve(args)
        with _operation_context("delete", target) as report:
            for name in target.names:
                self._output(name)
                self._materializer.delete(target.namespace, name)
                report.processed.append(name)
        return report

    def edit(self, args: Sequence[str]) -> OperationReport:
        target = self._locator.resolve(args)
        with _operation_context("edit", target) as report:
            for name in target.names:
                self._edit_one(target.namespace, name)
                report.processed.append(name)
        return report

    def _edit_one(self, namespace: str, name: str) -> None:
        self._output(f"get pipeline {namespace}/{name}")
        instance = self._materializer.fetch(namespace, name)
        content = self._prompter.edit_text(
            f"Edit pipeline {namespace}/{name}",
            self._materializer.to_text(instance),
            suffix=EDIT_FILE_SUFFIX,
        )
        # Unchanged text is still committed so the live resource version is checked.
        edited = self._materializer.from_text(content)
        self._materializer.commit(namespace, edited)


@contextmanager
def _operation_context(operation: Operation, target: Target) -> Iterator[OperationReport]:
    tokens = bind_contextvars(pipeline_operation=operation, pipeline_namespace=target.namespace)
    report = OperationReport(operation=operation, namespace=target.namespace)
    LOGGER.debug("operation start count=%s", len(target.names))
    try:
        yield report
    except Exception:
        LOGGER.info(
            "operation stopped processed=%s remaining=%s",
            len(report.processed),
            len(target.names) - len(report.processed),
        )
        raise
    finally:
        reset_contextvars(**tokens)
    LOGGER.debug("operation done processed=%s", len(report.processed))
