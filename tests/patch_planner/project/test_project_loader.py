"""Tests for loading project definitions from YAML."""

from __future__ import annotations

from pathlib import Path

import pytest

from patch_planner.project.loader import (
    ProjectDefinitionError,
    load_project,
    load_project_file,
)
from patch_planner.project.models import (
    ALL_VARIANTS,
    TaskUnitDependency,
    TaskUnitRequirement,
)

PROJECT_YAML = """\
identifier: widgets
tasks:
  - name: compile
    requires:
      - name: lint
        variant: "*"
    depends_on:
      - fetch
  - name: lint
    patchable: false
  - name: fetch
  - name: it_one
    depends_on:
      - name: compile
        patch_optional: true
  - name: it_two
task_groups:
  - name: integration
    tasks: [it_one, it_two]
buildvariants:
  - name: linux
    display_name: Linux
    tasks:
      - name: compile
      - lint
      - fetch
      - name: integration
  - name: windows
    tasks:
      - name: compile
        patchable: true
"""


def _write(tmp_path: Path, content: str, name: str = "project.yml") -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadProjectFile:
    def test_full_definition(self, tmp_path: Path) -> None:
        project = load_project_file(_write(tmp_path, PROJECT_YAML))

        assert project.identifier == "widgets"
        assert project.find_all_variants() == ["linux", "windows"]
        assert project.find_tasks_for_variant("linux") == [
            "compile", "lint", "fetch", "it_one", "it_two",
        ]
        assert project.build_variants[0].display_name == "Linux"
        assert project.build_variants[1].display_name == "windows"

    def test_shorthand_and_mapping_entries(self, tmp_path: Path) -> None:
        project = load_project_file(_write(tmp_path, PROJECT_YAML))

        compile_task = project.find_project_task("compile")
        assert compile_task is not None
        assert compile_task.requires == [TaskUnitRequirement(name="lint", variant=ALL_VARIANTS)]
        assert compile_task.depends_on == [TaskUnitDependency(name="fetch")]

        it_one = project.find_task_for_variant("it_one", "linux")
        assert it_one is not None
        assert it_one.depends_on == [
            TaskUnitDependency(name="compile", patch_optional=True)
        ]

    def test_patchable_tri_state(self, tmp_path: Path) -> None:
        project = load_project_file(_write(tmp_path, PROJECT_YAML))

        assert project.find_task_for_variant("lint", "linux").patchable is False
        assert project.find_task_for_variant("compile", "linux").patchable is None
        assert project.find_task_for_variant("compile", "windows").patchable is True

    def test_identifier_defaults_to_file_stem(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "tasks: [{name: a}]\n", name="gadgets.yml")

        assert load_project_file(path).identifier == "gadgets"

    def test_explicit_identifier_wins(self, tmp_path: Path) -> None:
        project = load_project_file(_write(tmp_path, PROJECT_YAML), identifier="override")

        assert project.identifier == "override"

    def test_empty_file_is_empty_project(self, tmp_path: Path) -> None:
        project = load_project_file(_write(tmp_path, ""))

        assert project.build_variants == []
        assert project.tasks == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectDefinitionError, match="Unable to read"):
            load_project_file(tmp_path / "absent.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "tasks: [\n")

        with pytest.raises(ProjectDefinitionError, match="Invalid YAML"):
            load_project_file(path)


class TestValidation:
    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ([], "root must be a mapping"),
            ({"tasks": {"name": "a"}}, "'tasks' must be a list"),
            ({"tasks": [{"name": ""}]}, "tasks\\[0\\].name"),
            ({"tasks": ["a"]}, "'tasks\\[0\\]' must be a mapping"),
            ({"tasks": [{"name": "a", "patchable": "no"}]}, "patchable"),
            ({"tasks": [{"name": "a"}, {"name": "a"}]}, "duplicate task 'a'"),
            (
                {"tasks": [{"name": "a"}], "task_groups": [{"name": "a", "tasks": []}]},
                "duplicate task or task group 'a'",
            ),
            (
                {"tasks": [{"name": "a", "depends_on": [{"name": "b", "patch_optional": "yes"}]}]},
                "patch_optional",
            ),
            ({"tasks": [{"name": "a", "requires": [42]}]}, "requires\\[0\\]"),
            (
                {"tasks": [{"name": "a", "depends_on": [{"name": "b", "variant": 3}]}]},
                "variant",
            ),
            (
                {"buildvariants": [{"name": "linux", "tasks": ["ghost"]}]},
                "unknown task 'ghost'",
            ),
            (
                {
                    "tasks": [{"name": "a"}],
                    "buildvariants": [{"name": "linux", "tasks": ["a"]}, {"name": "linux"}],
                },
                "duplicate build variant 'linux'",
            ),
        ],
    )
    def test_invalid_definitions(self, data: object, message: str) -> None:
        with pytest.raises(ProjectDefinitionError, match=message):
            load_project(data, identifier="demo")  # type: ignore[arg-type]

    def test_dependency_targets_are_not_validated(self) -> None:
        """Missing dependency targets are left for the closure to report."""
        project = load_project(
            {
                "tasks": [{"name": "a", "depends_on": ["nowhere"]}],
                "buildvariants": [{"name": "linux", "tasks": ["a"]}],
            },
            identifier="demo",
        )

        unit = project.find_task_for_variant("a", "linux")
        assert unit is not None
        assert unit.depends_on == [TaskUnitDependency(name="nowhere")]
