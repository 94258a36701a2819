from __future__ import annotations

from typing import Any

import pytest

from kspipe.errors import (
    CommitError,
    ConflictError,
    DecodeError,
    DeleteError,
    FetchError,
    StoreError,
)
from kspipe.materializer import ResourceMaterializer, from_text, to_text
from tests.fakes import FakeResourceClient, make_pipeline


def test_to_text_renders_sorted_block_yaml() -> None:
    instance = {
        "kind": "Pipeline",
        "apiVersion": "devops.kubesphere.io/v1alpha3",
        "metadata": {"namespace": "team-a", "name": "build-1"},
    }

    assert to_text(instance) == (
        "apiVersion: devops.kubesphere.io/v1alpha3\n"
        "kind: Pipeline\n"
        "metadata:\n"
        "  name: build-1\n"
        "  namespace: team-a\n"
    )


def test_to_text_is_byte_identical_across_runs_and_key_orders() -> None:
    instance = make_pipeline("team-a", "build-1")
    reordered = dict(reversed(list(instance.items())))

    assert to_text(instance) == to_text(instance)
    assert to_text(instance) == to_text(reordered)


def test_multiline_strings_render_as_literal_blocks() -> None:
    text = to_text(make_pipeline("team-a", "build-1"))

    assert "jenkinsfile: |\n" in text
    assert "      agent any\n" in text


def test_text_round_trip_preserves_the_document() -> None:
    instance: dict[str, Any] = make_pipeline("team-a", "build-1")
    instance["status"] = {
        "ready": True,
        "count": 3,
        "ratio": 0.25,
        "note": None,
        "tags": ["a", "b"],
        "empty": {},
        "nothing": [],
        "flag": "yes",
        "version": "1.10",
        "greeting": "héllo wörld",
        "padded": "  leading spaces\nsecond line",
    }

    assert from_text(to_text(instance)) == instance


@pytest.mark.parametrize(
    "value",
    [
        "build\x85nightly",
        "multi\nline\x85here\n",
        "line\u2028separator",
        "paragraph\u2029separator",
        "windows\r\nline\r\n",
    ],
)
def test_unicode_line_breaks_survive_the_round_trip(value: str) -> None:
    instance: dict[str, Any] = make_pipeline("team-a", "build-1")
    instance["spec"]["pipeline"]["description"] = value

    text = to_text(instance)

    assert from_text(text) == instance
    assert to_text(from_text(text)) == text


def test_from_text_rejects_broken_yaml() -> None:
    with pytest.raises(DecodeError, match="cannot parse pipeline"):
        from_text("metadata:\n  name: [unterminated\n")


@pytest.mark.parametrize("text", ["", "- a\n- b\n", "just a string\n"])
def test_from_text_requires_a_mapping(text: str) -> None:
    with pytest.raises(DecodeError, match="expected a mapping"):
        from_text(text)


def test_from_text_normalizes_yaml_only_scalars_to_strings() -> None:
    decoded = from_text("metadata:\n  name: build-1\nspec:\n  day: 2024-01-01\n")

    assert decoded["spec"]["day"] == "2024-01-01"


def test_fetch_wraps_store_errors(
    materializer: ResourceMaterializer,
) -> None:
    with pytest.raises(FetchError) as excinfo:
        materializer.fetch("team-a", "missing")

    assert str(excinfo.value).startswith("cannot get pipeline, error:")
    assert isinstance(excinfo.value.__cause__, StoreError)


def test_commit_applies_the_instance(
    materializer: ResourceMaterializer,
    store: FakeResourceClient,
) -> None:
    instance = store.add_pipeline("team-a", "build-1")
    instance["spec"]["pipeline"]["description"] = "nightly"

    updated = materializer.commit("team-a", instance)

    assert updated["metadata"]["resourceVersion"] == "2"
    assert store.pipelines[("team-a", "build-1")]["spec"]["pipeline"]["description"] == "nightly"


def test_commit_with_stale_version_conflicts_and_leaves_server_unchanged(
    materializer: ResourceMaterializer,
    store: FakeResourceClient,
) -> None:
    stale = store.add_pipeline("team-a", "build-1")
    fresh = materializer.fetch("team-a", "build-1")
    materializer.commit("team-a", fresh)
    server_before = store.pipelines[("team-a", "build-1")]

    stale["spec"]["pipeline"]["description"] = "lost update"
    with pytest.raises(ConflictError):
        materializer.commit("team-a", stale)

    assert store.pipelines[("team-a", "build-1")] == server_before


def test_commit_failures_other_than_conflicts_are_commit_errors(
    materializer: ResourceMaterializer,
    store: FakeResourceClient,
) -> None:
    instance = store.add_pipeline("team-a", "build-1")
    store.fail("update", "build-1", StoreError("admission webhook denied", status=422))

    with pytest.raises(CommitError) as excinfo:
        materializer.commit("team-a", instance)

    assert not isinstance(excinfo.value, ConflictError)
    assert "admission webhook denied" in str(excinfo.value)


def test_delete_wraps_store_errors(
    materializer: ResourceMaterializer,
) -> None:
    with pytest.raises(DeleteError, match="team-a/missing"):
        materializer.delete("team-a", "missing")
