"""Tests for workload generation."""

import pytest

from live_cloudsim.core.scaling import ScaleFactors
from live_cloudsim.core.workload import (
    WORKLOAD_TEMPLATES,
    CompletedTask,
    Task,
    WorkloadClass,
    WorkloadGenerator,
    round_half_up,
)


@pytest.fixture
def generator():
    return WorkloadGenerator()


def test_round_half_up():
    assert round_half_up(4.5) == 5
    assert round_half_up(10.8) == 11
    assert round_half_up(14.4) == 14
    assert round_half_up(2.5) == 3


class TestTaskCounts:

    def test_unit_factors(self, generator, unit_factors):
        workload = generator.build(unit_factors)

        assert workload.count(WorkloadClass.PAGE_RENDERING) == 6
        assert workload.count(WorkloadClass.API_PROCESSING) == 8
        assert workload.count(WorkloadClass.STATIC_ASSET) == 4
        assert workload.count(WorkloadClass.IMAGE_PROCESSING) == 3
        assert workload.count(WorkloadClass.BUILD_DEPLOY) == 2
        assert len(workload.tasks) == 23

    def test_high_traffic_scales_counts(self, generator, real_factors):
        workload = generator.build(real_factors)

        assert workload.count(WorkloadClass.PAGE_RENDERING) == 11
        assert workload.count(WorkloadClass.API_PROCESSING) == 14
        assert workload.count(WorkloadClass.STATIC_ASSET) == 4
        assert workload.count(WorkloadClass.IMAGE_PROCESSING) == 3
        assert workload.count(WorkloadClass.BUILD_DEPLOY) == 2

    def test_counts_round_half_up(self, generator):
        workload = generator.build(ScaleFactors(load=0.75))

        # 6 * 0.75 = 4.5
        assert workload.count(WorkloadClass.PAGE_RENDERING) == 5
        assert workload.count(WorkloadClass.API_PROCESSING) == 6

    def test_minimum_counts(self, generator):
        workload = generator.build(ScaleFactors(load=0.6))

        assert workload.count(WorkloadClass.PAGE_RENDERING) == 4
        assert workload.count(WorkloadClass.API_PROCESSING) == 5

    def test_fixed_classes_ignore_factors(self, generator):
        workload = generator.build(ScaleFactors(cpu=2.5, response=2.0, load=1.8, mips=2.2))
        static = [t for t in workload.tasks if t.workload_class == WorkloadClass.STATIC_ASSET]

        assert workload.count(WorkloadClass.IMAGE_PROCESSING) == 3
        assert [t.length for t in static] == [1800, 2200, 2600, 3000]


class TestTaskAttributes:

    def test_base_lengths_and_cores(self, generator, unit_factors):
        tasks = generator.build(unit_factors).tasks
        pages = [t for t in tasks if t.workload_class == WorkloadClass.PAGE_RENDERING]
        builds = [t for t in tasks if t.workload_class == WorkloadClass.BUILD_DEPLOY]

        assert [t.length for t in pages] == [9000, 10200, 11400, 12600, 13800, 15000]
        assert all(t.required_cores == 2 for t in pages)
        assert [t.length for t in builds] == [32000, 38000]
        assert all(t.required_cores == 4 for t in builds)

    def test_response_factor_scales_traffic_lengths(self, generator):
        tasks = generator.build(ScaleFactors(response=2.0)).tasks
        api = [t for t in tasks if t.workload_class == WorkloadClass.API_PROCESSING]

        assert api[0].length == 9000
        assert api[1].length == 10400

    def test_lengths_are_truncated(self, generator, real_factors):
        tasks = generator.build(real_factors).tasks
        page = tasks[0]

        assert isinstance(page.length, int)
        assert page.length == pytest.approx(9000 * 1.255, abs=1)

    def test_ids_are_sequential_and_classes_ordered(self, generator, real_factors):
        workload = generator.build(real_factors)
        order = [template.workload_class for template in WORKLOAD_TEMPLATES]

        assert [t.task_id for t in workload.tasks] == list(range(len(workload.tasks)))
        positions = [order.index(t.workload_class) for t in workload.tasks]
        assert positions == sorted(positions)

    def test_class_mapping_matches_tasks(self, generator, unit_factors):
        workload = generator.build(unit_factors)

        assert len(workload.class_of) == len(workload.tasks)
        for task in workload.tasks:
            assert workload.class_of[task.task_id] == task.workload_class


class TestCompletedTask:

    def make_task(self):
        return Task(0, WorkloadClass.API_PROCESSING, 4500, 1, 600, 500)

    def test_unfinished_task_reports_zero_time(self):
        record = CompletedTask(task=self.make_task(), start_time=1.0)

        assert record.execution_time == 0.0
        assert record.status == "RUNNING"

    def test_never_started_task(self):
        assert CompletedTask(task=self.make_task()).status == "NOT_STARTED"

    def test_finished_task(self):
        record = CompletedTask(task=self.make_task(), start_time=0.5, finish_time=2.5, finished=True)

        assert record.execution_time == 2.0
        assert record.status == "SUCCESS"
        assert record.workload_class == WorkloadClass.API_PROCESSING
