"""Tests for metric helper functions."""

import time

import pytest

from spanindex.core.metrics import DEFAULT_HISTOGRAM_BUCKETS, counter, histogram
from spanindex.core.models import MetricSample


class TestCounter:
    """Tests for counter() helper function."""

    @pytest.mark.core
    def test_counter_creates_metric_sample_with_name(self) -> None:
        sample = counter("spanindex_spans_total")
        assert isinstance(sample, MetricSample)
        assert sample.name == "spanindex_spans_total"

    @pytest.mark.core
    def test_counter_auto_captures_timestamp(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(time, "time", lambda: 1702300000.0)
        assert counter("spans").timestamp == 1702300000.0

    @pytest.mark.core
    def test_counter_defaults(self) -> None:
        """Counter defaults to incrementing by 1 with no labels."""
        sample = counter("spans")
        assert sample.value == 1.0
        assert sample.labels == {}

    @pytest.mark.core
    def test_counter_with_value_and_labels(self) -> None:
        sample = counter("written", value=3.0, labels={"channel": "index"})
        assert sample.value == 3.0
        assert sample.labels == {"channel": "index"}


class TestHistogram:
    """Tests for histogram() helper function."""

    @pytest.mark.core
    def test_returns_buckets_sum_and_count(self) -> None:
        samples = histogram("write_seconds", 0.3)
        names = [s.name for s in samples]
        assert names.count("write_seconds_bucket") == len(DEFAULT_HISTOGRAM_BUCKETS) + 1
        assert names[-2:] == ["write_seconds_sum", "write_seconds_count"]

    @pytest.mark.core
    def test_bucket_values_follow_boundaries(self) -> None:
        samples = histogram("d", 0.3, buckets=[0.1, 0.5, 1.0])
        buckets = {s.labels["le"]: s.value for s in samples if s.name == "d_bucket"}
        assert buckets == {"0.1": 0.0, "0.5": 1.0, "1.0": 1.0, "+Inf": 1.0}

    @pytest.mark.core
    def test_sum_and_count_values(self) -> None:
        samples = {s.name: s for s in histogram("d", 2.5, buckets=[1.0])}
        assert samples["d_sum"].value == 2.5
        assert samples["d_count"].value == 1.0

    @pytest.mark.core
    def test_labels_propagate_to_every_sample(self) -> None:
        samples = histogram("d", 0.1, labels={"channel": "model"}, buckets=[1.0])
        assert all(s.labels["channel"] == "model" for s in samples)

    @pytest.mark.core
    def test_samples_share_timestamp(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(time, "time", lambda: 42.0)
        assert {s.timestamp for s in histogram("d", 0.1)} == {42.0}
