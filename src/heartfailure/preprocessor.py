"""
Standardization and stratified partitioning of the clinical records
"""

from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from . import config


@dataclass(frozen=True)
class Partition:
    """Train/test partitions sharing one column schema and one fitted scaler"""
    train: pd.DataFrame
    test: pd.DataFrame
    scaler: StandardScaler
    continuous_columns: List[str]
    binary_columns: List[str]
    label_column: str = config.LABEL_COLUMN
    scaling: str = config.SCALING

    @property
    def feature_columns(self):
        return [col for col in self.train.columns if col != self.label_column]

    @property
    def X_train(self):
        return self.train[self.feature_columns]

    @property
    def y_train(self):
        return self.train[self.label_column]

    @property
    def X_test(self):
        return self.test[self.feature_columns]

    @property
    def y_test(self):
        return self.test[self.label_column]


class Preprocessor:
    """Splits features by type, standardizes continuous columns and partitions rows"""

    def __init__(self, train_fraction=config.TRAIN_FRACTION, random_state=config.RANDOM_STATE,
                 scaling=config.SCALING, binary_columns=None, label_column=config.LABEL_COLUMN):
        if not 0 < train_fraction < 1:
            raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
        if scaling not in ('train', 'full'):
            raise ValueError(f"scaling must be 'train' or 'full', got {scaling!r}")

        self.train_fraction = train_fraction
        self.random_state = random_state
        self.scaling = scaling
        self.binary_columns = list(binary_columns or config.BINARY_COLUMNS)
        self.label_column = label_column
        self.scaler = None
        self.continuous_columns = None

    def split_columns(self, df):
        """Return (continuous, binary) feature column lists using the binary allow-list"""
        features = [col for col in df.columns if col != self.label_column]
        binary = [col for col in features if col in self.binary_columns]
        continuous = [col for col in features if col not in self.binary_columns]
        return continuous, binary

    def stratified_split(self, df):
        """
        Sample train_fraction of each outcome class without replacement.
        Returns (train, test) keeping the original row index and order.
        """
        rng = np.random.RandomState(self.random_state)
        train_index = []

        for value in sorted(df[self.label_column].unique()):
            class_index = df.index[df[self.label_column] == value].to_numpy()
            n_train = int(np.floor(self.train_fraction * len(class_index) + 0.5))
            chosen = rng.choice(class_index, size=n_train, replace=False)
            train_index.extend(chosen.tolist())

        in_train = df.index.isin(train_index)
        return df[in_train].copy(), df[~in_train].copy()

    def fit(self, df):
        """Fit the continuous-column scaler on df"""
        self.continuous_columns, _ = self.split_columns(df)
        # population std (ddof=0); the same statistics are applied to train and test
        self.scaler = StandardScaler()
        self.scaler.fit(df[self.continuous_columns])
        return self

    def transform(self, df):
        """Apply the fitted scaling statistics to df, leaving binary columns untouched"""
        if self.scaler is None:
            raise RuntimeError("Preprocessor.transform called before fit")

        scaled = df.copy()
        scaled[self.continuous_columns] = self.scaler.transform(df[self.continuous_columns])
        return scaled

    def fit_transform(self, df):
        """Partition df and standardize it, returning a Partition"""
        print("=== Preprocessing ===")
        continuous, binary = self.split_columns(df)
        print(f"Continuous features ({len(continuous)}): {continuous}")
        print(f"Binary features ({len(binary)}): {binary}")

        if self.scaling == 'full':
            # Reproduces the original report: statistics include the test rows
            print("WARNING: scaling statistics computed on the full dataset (test leakage)")
            self.fit(df)
            train, test = self.stratified_split(self.transform(df))
        else:
            train, test = self.stratified_split(df)
            self.fit(train)
            train, test = self.transform(train), self.transform(test)

        print(f"Train partition: {len(train)} rows, positive rate {train[self.label_column].mean():.3f}")
        print(f"Test partition: {len(test)} rows, positive rate {test[self.label_column].mean():.3f}")

        return Partition(
            train=train,
            test=test,
            scaler=self.scaler,
            continuous_columns=continuous,
            binary_columns=binary,
            label_column=self.label_column,
            scaling=self.scaling,
        )
