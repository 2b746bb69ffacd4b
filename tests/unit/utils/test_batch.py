"""
Unit tests for the fan-out batch helper.
"""

import asyncio

import pytest

from preview_env.utils.batch import run_batch


class TestRunBatch:
    """Tests for run_batch."""

    @pytest.mark.asyncio
    async def test_all_members_launched_before_any_completes(self):
        """Members run concurrently: each waits for the others to start."""
        started = []
        all_started = asyncio.Event()

        async def member(key):
            started.append(key)
            if len(started) == 3:
                all_started.set()
            await asyncio.wait_for(all_started.wait(), timeout=1)

        report = await run_batch("demo", ["a", "b", "c"], member)

        assert sorted(started) == ["a", "b", "c"]
        assert report.succeeded == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_failures_collected_without_short_circuit(self):
        """A failing member is reported; slower members still finish."""
        finished = []

        async def member(key):
            if key == 1:
                raise RuntimeError("boom")
            await asyncio.sleep(0.01)
            finished.append(key)

        report = await run_batch("demo", [0, 1, 2], member, label=lambda k: f"m{k}")

        assert finished == [0, 2]
        assert report.succeeded == ["m0", "m2"]
        assert report.failed_labels == ["m1"]
        assert isinstance(report.failed[0][1], RuntimeError)
        assert not report.ok
        assert report.total == 3

    @pytest.mark.asyncio
    async def test_duplicate_labels_counted_separately(self):
        """Members sharing a label are each reported."""

        async def member(key):
            raise RuntimeError(f"boom {key}")

        report = await run_batch("demo", [1, 2, 3], member, label=lambda k: "web")

        assert report.failed_labels == ["web", "web", "web"]
        assert report.total == 3

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        async def member(key):
            raise AssertionError("should not be called")

        report = await run_batch("demo", [], member)

        assert report.ok
        assert report.total == 0
