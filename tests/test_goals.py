"""Tests for goals, property sinks and property file writers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from buildmeta_core.errors import ExtractionError, RepositoryAccessError
from buildmeta_ops.goals import collect_properties, extract, resolve_branch, resolve_describe
from buildmeta_ops.properties import PrefixedPropertySink, StagingSink, render_properties, write_properties


@pytest.fixture
def tagged_repo(builder):
    a, b, c, d = builder.chain(4)
    builder.branch("master", d)
    builder.tag("v1.0", b, annotated=True)
    return builder, (a, b, c, d)


class TestPrefixedPropertySink:
    def test_publishes_under_every_prefix(self) -> None:
        target: dict = {}
        sink = PrefixedPropertySink(target, ["buildmeta", "git", "extra"])
        sink.set_property("branch", "main")
        assert target == {"buildmeta.branch": "main", "git.branch": "main", "extra.branch": "main"}

    def test_requires_a_prefix(self) -> None:
        with pytest.raises(ValueError):
            PrefixedPropertySink({}, [])


class TestGoals:
    def test_resolve_branch(self, tagged_repo) -> None:
        builder, _ = tagged_repo
        sink = StagingSink()
        assert resolve_branch(builder.adapter(), sink) == "master"
        assert sink.values == {"branch": "master"}

    def test_resolve_describe(self, tagged_repo) -> None:
        builder, (a, b, c, d) = tagged_repo
        repo = builder.adapter()
        sink = StagingSink()
        resolve_describe(repo, sink)
        assert sink.values == {"tag.name": "v1.0", "tag.describe": f"v1.0-2-g{d[:7]}"}

    def test_extract_all_goals(self, tagged_repo) -> None:
        builder, (a, b, c, d) = tagged_repo
        target: dict = {}
        meta = extract(builder.adapter(), PrefixedPropertySink(target, ["buildmeta", "git"]))

        assert target["buildmeta.branch"] == "master"
        assert target["git.tag.name"] == "v1.0"
        assert target["git.tag.describe"] == f"v1.0-2-g{d[:7]}"
        assert len(target) == 6
        assert (meta.provider, meta.revision, meta.ref) == ("git", d, "master")
        assert (meta.tag_name, meta.distance, meta.label) == ("v1.0", 2, f"v1.0-2-g{d[:7]}")

    def test_extract_untagged_history(self, builder) -> None:
        (a,) = builder.chain(1)
        builder.branch("master", a)
        target: dict = {}
        extract(builder.adapter(), PrefixedPropertySink(target, ["buildmeta"]))
        assert target == {
            "buildmeta.branch": "master",
            "buildmeta.tag.name": "",
            "buildmeta.tag.describe": a[:7],
        }

    def test_unknown_goal(self, tagged_repo) -> None:
        builder, _ = tagged_repo
        with pytest.raises(ValueError, match="Unknown goal"):
            extract(builder.adapter(), StagingSink(), goals=["version"])

    def test_failed_ref_resolution_publishes_nothing(self, tagged_repo) -> None:
        builder, _ = tagged_repo
        target: dict = {}
        with pytest.raises(ExtractionError) as excinfo:
            extract(builder.adapter(), PrefixedPropertySink(target, ["buildmeta"]), head="HEAD~10")
        assert excinfo.value.stage == "ref resolution"
        assert "ref resolution failed" in str(excinfo.value)
        # The branch goal succeeded but must not leak into the sink.
        assert target == {}

    def test_search_failure_is_reported_as_search(self, tagged_repo, monkeypatch) -> None:
        builder, (a, b, c, d) = tagged_repo
        repo = builder.adapter()
        real_parents = repo.parents

        def broken_parents(commit_id: str):
            if commit_id == c:
                raise RepositoryAccessError("corrupt object")
            return real_parents(commit_id)

        monkeypatch.setattr(repo, "parents", broken_parents)
        with pytest.raises(ExtractionError) as excinfo:
            extract(repo, StagingSink())
        assert excinfo.value.stage == "search"

    def test_abbreviation_failure(self, tagged_repo, monkeypatch) -> None:
        builder, _ = tagged_repo
        repo = builder.adapter()

        def broken(*args, **kwargs):
            raise RepositoryAccessError("pack unreadable")

        monkeypatch.setattr(repo, "abbreviate", broken)
        with pytest.raises(ExtractionError) as excinfo:
            extract(repo, StagingSink(), goals=["describe"])
        assert excinfo.value.stage == "abbreviation"

    def test_collect_properties_from_disk(self, tmp_path: Path, disk_builder) -> None:
        a, b = disk_builder.chain(2)
        disk_builder.branch("develop", b)
        disk_builder.tag("v0.9", b)

        properties, meta = collect_properties(tmp_path, prefixes=["buildmeta", "mvngit"])
        assert properties["mvngit.branch"] == "develop"
        assert properties["buildmeta.tag.describe"] == "v0.9"
        assert meta.distance == 0


class TestRenderProperties:
    def test_properties_format(self) -> None:
        text = render_properties({"b.key": "two", "a.key": "one=1"})
        assert text == "a.key=one=1\nb.key=two\n"

    def test_properties_escaping(self) -> None:
        text = render_properties({"odd key:x": " lead\\ing"})
        assert text == "odd\\ key\\:x=\\ lead\\\\ing\n"

    def test_json_format(self) -> None:
        data = json.loads(render_properties({"git.branch": "main"}, "json"))
        assert data == {"git.branch": "main"}

    def test_env_format(self) -> None:
        text = render_properties({"git.tag.describe": "v1.0-2-gabc", "git.tag.name": ""}, "env")
        assert text == "GIT_TAG_DESCRIBE=v1.0-2-gabc\nGIT_TAG_NAME=''\n"

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            render_properties({}, "yaml")

    def test_write_properties(self, tmp_path: Path) -> None:
        out = write_properties({"git.branch": "main"}, tmp_path / "build" / "git.properties")
        assert out.read_text(encoding="utf-8") == "git.branch=main\n"
