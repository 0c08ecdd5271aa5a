import pytest

from guided_text_pipeline.components.file_validation import DatasetFileValidator
from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole
from guided_text_pipeline.entity.config_entity import FileSelectionConfig
from guided_text_pipeline.exception import NameMismatchError


@pytest.fixture
def validator():
    return DatasetFileValidator(FileSelectionConfig())


def make_file(name):
    return DatasetFile(name=name, path=f"/data/{name}", size=10)


def test_expected_name_is_accepted(validator):
    loaded = {}
    validator.validate(DatasetRole.TRAINING, make_file("train.csv"), loaded)

    assert loaded[DatasetRole.TRAINING].name == "train.csv"


@pytest.mark.parametrize("name", ["Train.csv", "train.CSV", "train.csv ", "training_data.csv", "test.csv"])
def test_other_names_are_rejected(validator, name):
    loaded = {}
    with pytest.raises(NameMismatchError) as exc_info:
        validator.validate(DatasetRole.TRAINING, make_file(name), loaded)

    assert DatasetRole.TRAINING not in loaded
    assert exc_info.value.expected == "train.csv"
    assert f'Uploaded: "{name}"' in str(exc_info.value)


def test_rejection_clears_prior_acceptance(validator):
    loaded = {}
    validator.validate(DatasetRole.TESTING, make_file("test.csv"), loaded)

    with pytest.raises(NameMismatchError):
        validator.validate(DatasetRole.TESTING, make_file("tests.csv"), loaded)

    assert DatasetRole.TESTING not in loaded


def test_readiness_requires_all_three(validator):
    loaded = {}
    validator.validate(DatasetRole.TRAINING, make_file("train.csv"), loaded)
    validator.validate(DatasetRole.TESTING, make_file("test.csv"), loaded)

    assert not validator.is_ready(loaded)
    assert validator.missing_roles(loaded) == [DatasetRole.VALIDATION]

    validator.validate(DatasetRole.VALIDATION, make_file("validation.csv"), loaded)
    assert validator.is_ready(loaded)


def test_names_are_configurable():
    validator = DatasetFileValidator(FileSelectionConfig(
        required_files={"training": "a.csv", "testing": "b.csv", "validation": "c.csv"}
    ))
    loaded = {}
    validator.validate("testing", make_file("b.csv"), loaded)

    assert validator.expected_name(DatasetRole.VALIDATION) == "c.csv"
    assert loaded[DatasetRole.TESTING].name == "b.csv"
