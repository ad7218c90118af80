import numpy as np
import pytest

from heartfailure import DataLoader, config
from heartfailure.exceptions import DataLoadError, DataValidationError


def test_load_valid_file(records_csv, records):
    df = DataLoader(records_csv).load()

    assert df.shape == (299, 13)
    assert list(df.columns) == config.FEATURE_COLUMNS + [config.LABEL_COLUMN]
    assert df[config.LABEL_COLUMN].sum() == records[config.LABEL_COLUMN].sum()


def test_load_reorders_columns(tmp_path, records):
    path = tmp_path / "shuffled.csv"
    records[records.columns[::-1]].to_csv(path, index=False)

    df = DataLoader(str(path)).load()
    assert list(df.columns) == config.FEATURE_COLUMNS + [config.LABEL_COLUMN]


def test_missing_file_is_fatal_with_diagnostic(tmp_path):
    path = str(tmp_path / "absent.csv")
    with pytest.raises(DataLoadError) as excinfo:
        DataLoader(path).load()

    assert excinfo.value.stage == 'load'
    assert path in str(excinfo.value)


def test_empty_file_is_a_load_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(DataLoadError):
        DataLoader(str(path)).load()


def test_malformed_file_is_a_load_error(tmp_path):
    path = tmp_path / "ragged.csv"
    path.write_text("age,sex\n1,2\n3,4,5,6\n")

    with pytest.raises(DataLoadError, match="could not parse") as excinfo:
        DataLoader(str(path)).load()
    assert excinfo.value.stage == 'load'


def test_non_numeric_column_rejected(tmp_path, records):
    records['sex'] = np.where(records['sex'] == 1, 'M', 'F')
    path = tmp_path / "text_sex.csv"
    records.to_csv(path, index=False)

    with pytest.raises(DataValidationError, match="non-numeric.*sex"):
        DataLoader(str(path)).load()


def test_missing_column_rejected(tmp_path, records):
    path = tmp_path / "no_time.csv"
    records.drop(columns=['time']).to_csv(path, index=False)

    with pytest.raises(DataValidationError, match="time"):
        DataLoader(str(path)).load()


def test_unexpected_column_rejected(tmp_path, records):
    path = tmp_path / "extra.csv"
    records.assign(patient_id=range(len(records))).to_csv(path, index=False)

    with pytest.raises(DataValidationError, match="patient_id"):
        DataLoader(str(path)).load()


def test_missing_values_reported_not_imputed(tmp_path, records):
    records.loc[[3, 10], 'serum_sodium'] = np.nan
    path = tmp_path / "na.csv"
    records.to_csv(path, index=False)

    with pytest.raises(DataValidationError, match="serum_sodium=2"):
        DataLoader(str(path)).load()


def test_label_outside_binary_rejected(tmp_path, records):
    records.loc[0, config.LABEL_COLUMN] = 2
    path = tmp_path / "label.csv"
    records.to_csv(path, index=False)

    with pytest.raises(DataValidationError, match="DEATH_EVENT"):
        DataLoader(str(path)).load()


def test_summarize_counts_classes(records):
    summary = DataLoader().summarize(records)
    assert summary['shape'] == (299, 13)
    assert summary['class_counts'] == {0: 203, 1: 96}
