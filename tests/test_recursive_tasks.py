"""Tests for recursive tasks across the project tree."""

import threading

import pytest

from buildscope.exceptions import CircularDependencyError, TaskNotFoundError
from buildscope.tasks.task import MultiTask, TaskHandle


def define_tree(registry, record, fail_in=None):
    """Projects a, a:b (with a:b:d) and a:c, each with a recursive "build"."""

    def build_action(name):
        def action(task):
            if name == fail_in:
                raise RuntimeError(f"{name} failed")
            record.append(name)

        return action

    def d_body(project):
        project.recursive_task("build", action=build_action("a:b:d"))

    def b_body(project):
        project.recursive_task("build", action=build_action("a:b"))
        project.define("d", body=d_body)

    def c_body(project):
        project.recursive_task("build", action=build_action("a:c"))

    def a_body(project):
        project.recursive_task("build", action=lambda task: record.append("a"))
        project.define("b", body=b_body)
        project.define("c", body=c_body)

    registry.define("a", body=a_body)


class TestSequentialRecursiveTasks:
    """Test recursive tasks in sequential mode."""

    def test_ancestor_invokes_every_descendant_once(self, registry):
        record = []
        define_tree(registry, record)

        build = registry.tasks["a:build"]
        build.invoke()
        build.invoke()

        assert record == ["a:b:d", "a:b", "a:c", "a"]
        assert type(build) is TaskHandle

    def test_parent_depends_on_children(self, registry):
        define_tree(registry, [])
        prerequisites = registry.tasks["a:build"].prerequisites
        assert [task.name for task in prerequisites] == ["a:b:build", "a:c:build"]

    def test_invoking_a_sub_project_stays_in_its_subtree(self, registry):
        record = []
        define_tree(registry, record)

        registry.tasks["a:b:build"].invoke()

        assert record == ["a:b:d", "a:b"]

    def test_failure_stops_the_chain(self, registry):
        record = []
        define_tree(registry, record, fail_in="a:b")

        with pytest.raises(RuntimeError, match="a:b failed"):
            registry.tasks["a:build"].invoke()
        assert "a" not in record

    def test_parent_task_must_exist(self, registry):
        def body(project):
            project.define("b", body=lambda b: b.recursive_task("build"))

        with pytest.raises(TaskNotFoundError, match="a:build"):
            registry.define("a", body=body)

    def test_extra_prerequisites(self, registry):
        record = []

        def body(project):
            project.task("prepare", action=lambda t: record.append("prepare"))
            project.recursive_task("build", ["prepare"], action=lambda t: record.append("build"))

        registry.define("a", body=body)
        registry.tasks["a:build"].invoke()

        assert record == ["prepare", "build"]


class TestParallelRecursiveTasks:
    """Test recursive tasks fanned out through the parallel scheduler."""

    def test_children_run_concurrently(self, parallel_registry):
        record = []
        barrier = threading.Barrier(2, timeout=5)

        def c_body(project):
            def action(task):
                barrier.wait()
                record.append("a:c")

            project.recursive_task("build", action=action)

        def b_body(project):
            def action(task):
                barrier.wait()
                record.append("a:b")

            project.recursive_task("build", action=action)

        def a_body(project):
            project.recursive_task("build", action=lambda task: record.append("a"))
            project.define("b", body=b_body)
            project.define("c", body=c_body)

        parallel_registry.define("a", body=a_body)
        build = parallel_registry.tasks["a:build"]
        build.invoke()

        assert isinstance(build, MultiTask)
        assert sorted(record[:2]) == ["a:b", "a:c"]
        assert record[2:] == ["a"]

    def test_each_descendant_once(self, parallel_registry):
        record = []
        define_tree(parallel_registry, record)

        parallel_registry.tasks["a:build"].invoke()
        parallel_registry.tasks["a:b:build"].invoke()

        assert sorted(record) == ["a", "a:b", "a:b:d", "a:c"]
        assert record.index("a:b:d") < record.index("a:b")
        assert record[-1] == "a"

    def test_sibling_failure_surfaces(self, parallel_registry):
        record = []
        define_tree(parallel_registry, record, fail_in="a:c")

        with pytest.raises(RuntimeError, match="a:c failed"):
            parallel_registry.tasks["a:build"].invoke()

        assert "a:b" in record
        assert "a" not in record

    def test_cycle_through_ancestor_fails_instead_of_blocking(self, parallel_registry):
        record = []

        def b_body(project):
            project.recursive_task("build", action=lambda task: record.append("a:b"))
            project.task("build", [":a:build"])

        def a_body(project):
            project.recursive_task("build", action=lambda task: record.append("a"))
            project.define("b", body=b_body)
            project.define("c", body=lambda c: c.recursive_task(
                "build", action=lambda task: record.append("a:c")
            ))

        parallel_registry.define("a", body=a_body)

        with pytest.raises(CircularDependencyError) as exc_info:
            parallel_registry.tasks["a:build"].invoke()

        assert exc_info.value.chain == ["a:build", "a:b:build", "a:build"]
        assert "a" not in record
        assert "a:b" not in record
