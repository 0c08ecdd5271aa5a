import pytest

from guided_text_pipeline.components.data_validation import RowNormalizer, coerce_label
from guided_text_pipeline.entity.artifact_entity import (
    ColumnMapping,
    DatasetRole,
    NormalizedRow,
    ParsedTable,
)
from guided_text_pipeline.entity.config_entity import DataPreprocessingConfig

MAPPING = ColumnMapping(text_key="text", label_key="label")


@pytest.fixture
def normalizer():
    return RowNormalizer(DataPreprocessingConfig())


class TestCoerceLabel:
    @pytest.mark.parametrize("value, expected", [
        (0, 0), (1, 1), (1.0, 1), (0.0, 0),
        ("0", 0), ("1", 1), (" 1 ", 1), ("\t0\n", 0),
    ])
    def test_valid(self, value, expected):
        assert coerce_label(value) == expected

    @pytest.mark.parametrize("value", [
        None, "", "yes", "true", "01", "1.0", "2", 2, -1, 0.5, True, False, float("nan"),
    ])
    def test_invalid(self, value):
        assert coerce_label(value) is None


class TestInferColumns:
    def test_exact_headers(self, normalizer):
        mapping = normalizer.infer_columns(["id", "text", "label"])

        assert mapping == ColumnMapping(text_key="text", label_key="label", inferred=False)

    def test_case_and_quotes_are_ignored(self, normalizer):
        mapping = normalizer.infer_columns([' "Label" ', "'TEXT'"])

        assert mapping.text_key == "'TEXT'"
        assert mapping.label_key == ' "Label" '
        assert not mapping.inferred

    def test_fallback_to_first_two_non_empty_headers(self, normalizer):
        mapping = normalizer.infer_columns(["", "review", "sentiment", "extra"])

        assert mapping == ColumnMapping(text_key="review", label_key="sentiment", inferred=True)

    def test_partial_match_falls_back_for_missing_one(self, normalizer):
        mapping = normalizer.infer_columns(["label", "body"])

        assert mapping == ColumnMapping(text_key="body", label_key="label", inferred=True)

    def test_not_enough_headers(self, normalizer):
        mapping = normalizer.infer_columns(["only"])

        assert mapping.text_key == "only"
        assert mapping.label_key is None
        assert mapping.inferred


class TestNormalize:
    def test_string_and_numeric_labels_normalize_identically(self, normalizer):
        assert normalizer.normalize_row({"text": "hi", "label": "1"}, MAPPING) == NormalizedRow("hi", 1)
        assert normalizer.normalize_row({"text": "hi", "label": 1}, MAPPING) == NormalizedRow("hi", 1)

    def test_text_is_trimmed(self, normalizer):
        assert normalizer.normalize_row({"text": "  hi there \n", "label": 0}, MAPPING).text == "hi there"

    @pytest.mark.parametrize("row", [
        {"text": "fine", "label": "yes"},
        {"text": "   ", "label": 1},
        {"text": "", "label": 1},
        {"text": None, "label": 1},
        {"text": 42, "label": 1},
        {"text": "missing label"},
        {"label": 1},
    ])
    def test_invalid_rows_are_dropped(self, normalizer, row):
        assert normalizer.normalize_row(row, MAPPING) is None

    def test_missing_key_drops_everything(self, normalizer):
        mapping = ColumnMapping(text_key="text", label_key=None, inferred=True)

        assert normalizer.normalize_row({"text": "hi", "label": 1}, mapping) is None

    def test_drop_count_is_input_minus_output(self, normalizer):
        rows = [
            {"text": "good", "label": 1},
            {"text": "bad", "label": "yes"},
            {"text": " ", "label": 0},
            {"text": "ok", "label": " 0 "},
        ]
        tables = {
            DatasetRole.TRAINING: ParsedTable(DatasetRole.TRAINING, ["text", "label"], rows),
            DatasetRole.TESTING: ParsedTable(DatasetRole.TESTING, ["text", "label"], rows[:1]),
        }

        normalized, report = normalizer.normalize(tables, MAPPING)

        assert normalized[DatasetRole.TRAINING] == [NormalizedRow("good", 1), NormalizedRow("ok", 0)]
        assert report.dropped == {DatasetRole.TRAINING: 2, DatasetRole.TESTING: 0}
        assert report.kept == {DatasetRole.TRAINING: 2, DatasetRole.TESTING: 1}
        assert report.total_dropped == 2
        assert not report.is_clean
        assert report.message == "Data cleaned with 2 exclusions."

    def test_clean_report(self, normalizer):
        tables = {DatasetRole.TRAINING: ParsedTable(DatasetRole.TRAINING, ["text", "label"], [{"text": "a", "label": 1}])}

        _, report = normalizer.normalize(tables, MAPPING)

        assert report.is_clean
        assert report.message == "Data is clean: no rows were excluded."
