import os

import numpy as np
import pandas as pd
import pytest

from heartfailure import Preprocessor, config

REAL_DATA_PATH = config.DATA_PATH


def make_records(n_died=96, n_survived=203, seed=0):
    """Synthetic clinical records with the real schema and a strong follow-up time signal"""
    rng = np.random.RandomState(seed)
    label = np.array([1] * n_died + [0] * n_survived)
    died = label == 1
    n = len(label)

    df = pd.DataFrame({
        'age': np.round(np.where(died, rng.normal(66, 13, n), rng.normal(59, 11, n)).clip(40, 95)),
        'anaemia': rng.binomial(1, 0.45, n),
        'creatinine_phosphokinase': np.round(rng.lognormal(5.5, 1.0, n)).clip(23, 7861).astype(int),
        'diabetes': rng.binomial(1, 0.42, n),
        'ejection_fraction': np.round(np.where(died, rng.normal(32, 10, n), rng.normal(40, 10, n)).clip(14, 80)).astype(int),
        'high_blood_pressure': rng.binomial(1, 0.35, n),
        'platelets': np.round(rng.normal(263000, 97000, n).clip(25100, 850000)),
        'serum_creatinine': np.round(np.where(died, rng.normal(1.9, 0.9, n), rng.normal(1.15, 0.4, n)).clip(0.5, 9.4), 2),
        'serum_sodium': np.round(np.where(died, rng.normal(135, 5, n), rng.normal(137, 4, n)).clip(113, 148)).astype(int),
        'sex': rng.binomial(1, 0.65, n),
        'smoking': rng.binomial(1, 0.32, n),
        'time': np.round(np.where(died, rng.normal(60, 40, n), rng.normal(170, 55, n)).clip(4, 285)).astype(int),
        'DEATH_EVENT': label,
    })
    # Shuffle so that the classes are interleaved like the real file
    return df.sample(frac=1.0, random_state=seed).reset_index(drop=True)


@pytest.fixture
def records():
    return make_records()


@pytest.fixture
def records_csv(tmp_path, records):
    path = tmp_path / "heart_failure_clinical_records_dataset.csv"
    records.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def partition(records):
    return Preprocessor(random_state=7).fit_transform(records)


@pytest.fixture
def real_data_path():
    if not os.path.isfile(REAL_DATA_PATH):
        pytest.skip(f"real dataset not available at {REAL_DATA_PATH}")
    return REAL_DATA_PATH
