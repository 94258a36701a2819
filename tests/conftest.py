from __future__ import annotations

import os
from pathlib import Path

import pytest

from kspipe.config import KspipeSettings
from kspipe.executor import OperationExecutor
from kspipe.locator import ResourceLocator
from kspipe.materializer import ResourceMaterializer
from kspipe.namespaces import NamespaceEnumerator
from kspipe.schema import namespace_schema, pipeline_schema
from tests.fakes import DEVOPS_LABEL, FakePrompter, FakeResourceClient


@pytest.fixture(autouse=True)
def _isolated_settings_env(  # pyright: ignore[reportUnusedFunction]
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    for key in list(os.environ):
        if key.startswith("KSPIPE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("KSPIPE_CONFIG_FILE", str(tmp_path / "missing-config.yaml"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def store() -> FakeResourceClient:
    return FakeResourceClient()


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def settings() -> KspipeSettings:
    return KspipeSettings()


@pytest.fixture
def output() -> list[str]:
    return []


@pytest.fixture
def locator(store: FakeResourceClient, prompter: FakePrompter) -> ResourceLocator:
    return ResourceLocator(
        store,
        prompter,
        NamespaceEnumerator(store, label_selector=DEVOPS_LABEL, schema=namespace_schema()),
        schema=pipeline_schema(),
    )


@pytest.fixture
def materializer(store: FakeResourceClient) -> ResourceMaterializer:
    return ResourceMaterializer(store, schema=pipeline_schema())


@pytest.fixture
def executor(
    locator: ResourceLocator,
    materializer: ResourceMaterializer,
    prompter: FakePrompter,
    output: list[str],
) -> OperationExecutor:
    return OperationExecutor(locator, materializer, prompter, output=output.append)
