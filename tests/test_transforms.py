"""Tests for filtering, sorting, column transforms and the task pipeline."""

import pytest

from tablab.data.dataset import Dataset
from tablab.data.transforms import (
    PreprocessingMethod,
    SortOrder,
    TransformPipeline,
    TransformTask,
    TransformType,
    filter_rows,
    first_mode,
    format_number,
    impute,
    log_transform,
    lower_median,
    min_max_normalize,
    natural_sort_key,
    parse_number,
    remove_missing,
    set_constant,
    sort_rows,
)


@pytest.fixture
def people() -> Dataset:
    return Dataset.from_rows(
        [
            ["name", "age", "city"],
            ["Anna", "31", "Berlin"],
            ["ben", "", "Bern"],
            ["Carl", "25", "berlin"],
            ["Dora", "40", "Bonn"],
        ],
    )


class TestFilterAndSort:
    """Row-level operations."""

    def test_filter_is_case_sensitive_substring(self, people: Dataset) -> None:
        result = filter_rows(people, "city", "Ber")
        assert result.header == people.header
        assert result.column("name") == ["Anna", "ben"]

    def test_filter_is_idempotent(self, people: Dataset) -> None:
        once = filter_rows(people, "city", "er")
        assert filter_rows(once, "city", "er") == once

    def test_filter_with_empty_value_keeps_everything(self, people: Dataset) -> None:
        assert filter_rows(people, "city", "") == people

    def test_filter_unknown_column_is_noop(self, people: Dataset) -> None:
        assert filter_rows(people, "country", "x") is people

    def test_sort_is_numeric_aware(self) -> None:
        ds = Dataset.from_rows([["id"], ["a10"], ["a2"], ["a1"], ["9"], ["100"]])
        assert sort_rows(ds, "id").column("id") == ["9", "100", "a1", "a2", "a10"]

    def test_sort_descending(self) -> None:
        ds = Dataset.from_rows([["n"], ["2"], ["10"], ["1"]])
        assert sort_rows(ds, "n", SortOrder.DESC).column("n") == ["10", "2", "1"]

    def test_sort_is_stable(self) -> None:
        ds = Dataset.from_rows([["k", "tag"], ["1", "first"], ["0", "x"], ["1", "second"]])
        assert sort_rows(ds, "k", "asc").column("tag") == ["x", "first", "second"]
        assert sort_rows(ds, "k", "desc").column("tag") == ["first", "second", "x"]

    def test_sort_ignores_case(self) -> None:
        assert natural_sort_key("Berlin")[0] == natural_sort_key("berlin")[0]
        ds = Dataset.from_rows([["city"], ["bonn"], ["Berlin"], ["aachen"]])
        assert sort_rows(ds, "city").column("city") == ["aachen", "Berlin", "bonn"]

    def test_sort_case_variants_lowercase_first(self) -> None:
        ds = Dataset.from_rows([["k"], ["A"], ["b"], ["a"], ["B"]])
        assert sort_rows(ds, "k").column("k") == ["a", "A", "b", "B"]
        assert sort_rows(ds, "k", "desc").column("k") == ["B", "b", "A", "a"]

    def test_sort_with_non_ascii_digits(self) -> None:
        ds = Dataset.from_rows([["area"], ["10²"], ["5²"], ["①"]])
        assert sort_rows(ds, "area").column("area") == ["5²", "10²", "①"]
        pipeline = TransformPipeline().add(TransformTask("area", "sort", value="desc"))
        assert pipeline.apply(ds).column("area") == ["①", "10²", "5²"]

    def test_remove_missing(self, people: Dataset) -> None:
        result = remove_missing(people, "age")
        assert result.column("name") == ["Anna", "Carl", "Dora"]
        assert people.n_rows == 4


class TestColumnTransforms:
    """Log, min-max, imputation and constant transforms."""

    def test_log_transform(self) -> None:
        ds = Dataset.from_rows([["v"], ["1"], ["10"], ["0"], ["-3"], ["abc"], [""]])
        assert log_transform(ds, "v").column("v") == ["0.0000", "2.3026", "0", "-3", "abc", ""]

    def test_log_transform_reads_leading_number(self) -> None:
        ds = Dataset.from_rows([["w"], ["5 kg"], ["7kg"], ["3.5e"]])
        assert log_transform(ds, "w").column("w") == ["1.6094", "1.9459", "1.2528"]

    def test_normalize_default_range(self) -> None:
        ds = Dataset.from_rows([["v"], ["2"], ["4"], ["n/a"], ["6"]])
        assert min_max_normalize(ds, "v").column("v") == ["0.0000", "0.5000", "n/a", "1.0000"]

    def test_normalize_custom_range(self) -> None:
        ds = Dataset.from_rows([["v"], ["0"], ["5"], ["10"]])
        assert min_max_normalize(ds, "v", target_range=(-1, 1)).column("v") == ["-1.0000", "0.0000", "1.0000"]

    def test_normalize_constant_column_maps_to_low(self) -> None:
        ds = Dataset.from_rows([["v"], ["3"], ["3"]])
        assert min_max_normalize(ds, "v", target_range=(5, 9)).column("v") == ["5.0000", "5.0000"]

    def test_normalize_round_trip(self) -> None:
        original = [1.5, 3.25, 7.0, 10.0]
        ds = Dataset.from_rows([["v"], *([str(v)] for v in original)])
        normalized = min_max_normalize(ds, "v")
        restored = min_max_normalize(normalized, "v", target_range=(min(original), max(original)))
        span = max(original) - min(original)
        for cell, expected in zip(restored.column("v"), original):
            assert float(cell) == pytest.approx(expected, abs=span * 1e-4)

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            (PreprocessingMethod.FILL_MEAN, "3"),
            (PreprocessingMethod.FILL_MEDIAN, "4"),
            (PreprocessingMethod.FILL_MODE, "1"),
        ],
    )
    def test_impute_statistics(self, method: PreprocessingMethod, expected: str) -> None:
        ds = Dataset.from_rows([["v"], ["1"], [""], ["1"], ["4"], ["6"], ["x"]])
        result = impute(ds, "v", method)
        assert result.column("v") == ["1", expected, "1", "4", "6", "x"]

    def test_impute_custom(self, people: Dataset) -> None:
        result = impute(people, "age", "fill_custom", custom_value="unknown")
        assert result.column("age") == ["31", "unknown", "25", "40"]

    def test_impute_without_numbers_is_noop(self) -> None:
        ds = Dataset.from_rows([["v"], ["a"], [""]])
        assert impute(ds, "v", "fill_mean") is ds

    def test_set_constant(self, people: Dataset) -> None:
        assert set_constant(people, "city", "X").column("city") == ["X", "X", "X", "X"]

    def test_transforms_do_not_mutate_input(self, people: Dataset) -> None:
        before = people.as_lists()
        log_transform(people, "age")
        min_max_normalize(people, "age")
        impute(people, "age", "fill_mean")
        assert people.as_lists() == before


class TestTransformPipeline:
    """Queued tasks folded over a dataset."""

    def test_tasks_run_in_insertion_order(self) -> None:
        ds = Dataset.from_rows([["v"], ["2"], [""], ["4"]])
        fill_then_scale = TransformPipeline().add(TransformTask("v", "fill_mean")).add(TransformTask("v", "normalize"))
        scale_then_fill = TransformPipeline().add(TransformTask("v", "normalize")).add(TransformTask("v", "fill_mean"))
        assert fill_then_scale.apply(ds).column("v") == ["0.0000", "0.5000", "1.0000"]
        assert scale_then_fill.apply(ds).column("v") == ["0.0000", "0.5", "1.0000"]

    def test_add_returns_new_pipeline(self) -> None:
        empty = TransformPipeline()
        one = empty.add(TransformTask("v", TransformType.LOG))
        assert len(empty) == 0
        assert len(one) == 1

    def test_empty_pipeline_is_identity(self, people: Dataset) -> None:
        assert TransformPipeline().apply(people) == people

    def test_filter_sort_and_custom_tasks(self, people: Dataset) -> None:
        pipeline = TransformPipeline(
            (
                TransformTask("city", "filter", value="B"),
                TransformTask("name", "sort", value="desc"),
                TransformTask("city", TransformType.CUSTOM, value="DE"),
            ),
        )
        result = pipeline.apply(people)
        assert result.column("name") == ["Dora", "ben", "Anna"]
        assert result.column("city") == ["DE", "DE", "DE"]

    def test_unknown_columns_are_skipped(self, people: Dataset) -> None:
        pipeline = TransformPipeline().add(TransformTask("ghost", "log")).add(TransformTask("age", "remove_missing"))
        assert pipeline.apply(people).n_rows == 3

    def test_unknown_method_raises(self, people: Dataset) -> None:
        with pytest.raises(ValueError, match="Unknown transform method"):
            TransformTask("age", "square").apply(people)


class TestHelpers:
    """Number parsing and the shared order statistics."""

    def test_parse_number(self) -> None:
        assert parse_number(" 4.5 ") == 4.5
        assert parse_number("abc") is None
        assert parse_number(None) is None
        assert parse_number("12 cm") == 12.0

    def test_format_number(self) -> None:
        assert format_number(3.0) == "3"
        assert format_number(2.5) == "2.5"

    def test_lower_median(self) -> None:
        assert lower_median([4, 1, 3, 2]) == 3
        assert lower_median([5, 1, 3]) == 3

    def test_first_mode(self) -> None:
        assert first_mode([3, 1, 3, 1]) == 3
        assert first_mode([5, 1, 1]) == 1
