from __future__ import annotations

import logging

import pytest

from version_info_target.errors import ConfigurationError
from version_info_target.graph import Target
from version_info_target.models import ProjectContext, ToolchainContext
from version_info_target.validator import normalize_language, validate_request


def test_validate_request_given_minimal_arguments_when_validated_then_defaults_come_from_project(graph) -> None:
    # Given
    name = "FooVersion"

    # When
    request = validate_request(graph, name=name)

    # Then
    assert request.name == "FooVersion"
    assert request.language == "CXX"
    assert request.namespace == ()
    assert request.project_name == "AmbientProject"
    assert request.project_version == "4.5.6"
    assert request.git_work_tree is None


def test_validate_request_given_explicit_project_context_when_validated_then_context_is_used(graph) -> None:
    # Given
    context = ProjectContext(name="Injected", version="0.9")

    # When
    request = validate_request(graph, name="FooVersion", project=context)

    # Then
    assert request.project_name == "Injected"
    assert request.project_version == "0.9"


def test_validate_request_given_overrides_when_validated_then_overrides_win(graph) -> None:
    # Given
    overrides = {"project_name": "Other", "project_version": "2.0"}

    # When
    request = validate_request(graph, name="FooVersion", **overrides)

    # Then
    assert request.project_name == "Other"
    assert request.project_version == "2.0"


def test_validate_request_given_missing_name_when_validated_then_raises(graph) -> None:
    # Given
    name = ""

    # When
    with pytest.raises(ConfigurationError, match="NAME parameter is required"):
        validate_request(graph, name=name)

    # Then
    # ConfigurationError indicates the name is mandatory.


def test_validate_request_given_wired_library_name_when_validated_then_only_warns(graph, caplog) -> None:
    # Given
    caplog.set_level(logging.WARNING)
    graph.add_target(Target(name="FooVersion", kind="static_library", dependencies=["FooVersion_QueryVersionInfo"]))

    # When
    request = validate_request(graph, name="FooVersion")

    # Then
    assert request.name == "FooVersion"
    assert "A target with this NAME[FooVersion] already exists" in caplog.text


@pytest.mark.parametrize("name", ["core", "app"])
def test_validate_request_given_user_target_name_when_validated_then_raises(graph, name) -> None:
    # Given
    before = graph.get_target(name)

    # When
    with pytest.raises(ConfigurationError, match=rf"NAME \[{name}\] belongs to an existing target"):
        validate_request(graph, name=name)

    # Then
    assert graph.get_target(name) == before


@pytest.mark.parametrize("name", ["../x", "sub/dir", "with-dash", "Foo\n"])
def test_validate_request_given_non_identifier_name_when_validated_then_raises(graph, name) -> None:
    # Given
    # A name that is not a C identifier, including ones that would leave binary_dir.

    # When
    with pytest.raises(ConfigurationError, match="isn't a valid identifier"):
        validate_request(graph, name=name)

    # Then
    # ConfigurationError is raised before any target is looked up.


def test_validate_request_given_invalid_namespace_when_validated_then_raises(graph) -> None:
    # Given
    namespace = ["Good", "not-valid"]

    # When
    with pytest.raises(ConfigurationError, match=r"NAMESPACE \[not-valid\]"):
        validate_request(graph, name="FooVersion", namespace=namespace)

    # Then
    # ConfigurationError names the offending identifier.


def test_validate_request_given_namespace_with_trailing_newline_when_validated_then_raises(graph) -> None:
    # Given
    namespace = ["QrX\n"]

    # When
    with pytest.raises(ConfigurationError, match="NAMESPACE"):
        validate_request(graph, name="FooVersion", namespace=namespace)

    # Then
    # ConfigurationError keeps the newline out of the generated prefix.


def test_validate_request_given_unknown_link_target_when_validated_then_raises(graph) -> None:
    # Given
    link_to = ["app", "missing"]

    # When
    with pytest.raises(ConfigurationError, match=r"\[missing\] isn't a target"):
        validate_request(graph, name="FooVersion", link_to=link_to)

    # Then
    # ConfigurationError indicates link targets must pre-exist.


def test_validate_request_given_missing_work_tree_when_validated_then_raises(graph, tmp_path) -> None:
    # Given
    work_tree = tmp_path / "nowhere"

    # When
    with pytest.raises(ConfigurationError, match="does not exist"):
        validate_request(graph, name="FooVersion", git_work_tree=work_tree, git_finder=lambda: "git")

    # Then
    # ConfigurationError indicates the path was checked eagerly.


def test_validate_request_given_work_tree_without_git_when_validated_then_raises(graph, tmp_path) -> None:
    # Given
    work_tree = tmp_path

    # When
    with pytest.raises(ConfigurationError, match="Git not found"):
        validate_request(graph, name="FooVersion", git_work_tree=work_tree, git_finder=lambda: None)

    # Then
    # ConfigurationError indicates git is required for work tree queries.


def test_validate_request_given_non_repository_when_validated_then_raises(graph, tmp_path, make_git_runner) -> None:
    # Given
    runner = make_git_runner(fail_on="rev-parse")

    # When
    with pytest.raises(ConfigurationError, match="is not a git repository"):
        validate_request(
            graph,
            name="FooVersion",
            git_work_tree=tmp_path,
            git_finder=lambda: "git",
            git_runner=runner,
        )

    # Then
    # ConfigurationError indicates the repository check ran at configuration time.


def test_validate_request_given_valid_repository_when_validated_then_work_tree_and_git_recorded(
    graph,
    tmp_path,
    make_git_runner,
) -> None:
    # Given
    runner = make_git_runner()

    # When
    request = validate_request(
        graph,
        name="FooVersion",
        git_work_tree=str(tmp_path),
        git_finder=lambda: "/usr/bin/git",
        git_runner=runner,
    )

    # Then
    assert request.git_work_tree == tmp_path.resolve()
    assert request.git_executable == "/usr/bin/git"


def test_validate_request_given_unknown_language_when_validated_then_raises(graph) -> None:
    # Given
    language = "Rust"

    # When
    with pytest.raises(ConfigurationError, match="must be one of: C or CXX"):
        validate_request(graph, name="FooVersion", language=language)

    # Then
    # ConfigurationError lists the accepted languages.


def test_validate_request_given_language_without_compiler_when_validated_then_raises(graph) -> None:
    # Given
    graph.toolchain = ToolchainContext(cxx_compiler_id="Clang", cxx_compiler_version="17.0.0")

    # When
    with pytest.raises(ConfigurationError, match="no C compiler found"):
        validate_request(graph, name="FooVersion", language="C")

    # Then
    # ConfigurationError indicates the selected compiler must be known.


def test_validate_request_given_unparsed_arguments_when_validated_then_each_is_warned(graph, caplog) -> None:
    # Given
    caplog.set_level(logging.WARNING)

    # When
    validate_request(graph, name="FooVersion", unparsed=["--flavour", "EXTRA=1"])

    # Then
    assert "Unparsed argument: --flavour" in caplog.text
    assert "Unparsed argument: EXTRA=1" in caplog.text


def test_normalize_language_given_aliases_when_normalized_then_canonical_tags_returned() -> None:
    # Given
    tags = [None, "C", "c", "CXX", "C++", "cxx"]

    # When
    normalized = [normalize_language(tag) for tag in tags]

    # Then
    assert normalized == ["CXX", "C", "C", "CXX", "CXX", "CXX"]
