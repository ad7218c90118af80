"""
Data loading utilities for the heart failure clinical records dataset
"""

import os

import pandas as pd

from . import config
from .exceptions import DataLoadError, DataValidationError


class DataLoader:
    """Handles loading and validation of the clinical records CSV"""

    def __init__(self, data_path=config.DATA_PATH, feature_columns=None,
                 label_column=config.LABEL_COLUMN):
        self.data_path = data_path
        self.feature_columns = list(feature_columns or config.FEATURE_COLUMNS)
        self.label_column = label_column

    @property
    def expected_columns(self):
        return self.feature_columns + [self.label_column]

    def load(self):
        """Read the CSV and verify schema, completeness and label coding"""
        print(f"Loading dataset from {self.data_path}...")

        if not os.path.isfile(self.data_path):
            raise DataLoadError("data file not found", source=self.data_path)

        try:
            df = pd.read_csv(self.data_path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise DataLoadError(f"could not parse data file: {exc}", source=self.data_path) from exc

        self.validate(df)

        # Fixed column order regardless of the file layout
        df = df[self.expected_columns].copy()
        df[self.label_column] = df[self.label_column].astype(int)

        print(f"Loaded {len(df)} patients, {len(self.feature_columns)} features")
        return df

    def validate(self, df):
        """Raise DataValidationError unless df has exactly the expected complete columns"""
        expected = set(self.expected_columns)
        present = set(df.columns)

        missing_cols = sorted(expected - present)
        extra_cols = sorted(present - expected)
        if missing_cols or extra_cols:
            raise DataValidationError(
                f"unexpected column set (missing: {missing_cols}, unexpected: {extra_cols})",
                source=self.data_path)

        na_counts = df[self.expected_columns].isnull().sum()
        na_counts = na_counts[na_counts > 0]
        if len(na_counts) > 0:
            detail = ', '.join(f"{col}={count}" for col, count in na_counts.items())
            raise DataValidationError(f"missing values in required columns: {detail}",
                                      source=self.data_path)

        non_numeric = [col for col in self.expected_columns
                       if not pd.api.types.is_numeric_dtype(df[col])]
        if non_numeric:
            raise DataValidationError(f"non-numeric columns: {non_numeric}", source=self.data_path)

        bad_labels = sorted(set(df[self.label_column].unique()) - {0, 1})
        if bad_labels:
            raise DataValidationError(
                f"{self.label_column} must be 0 or 1, found {bad_labels}", source=self.data_path)

    def summarize(self, df):
        """Print a short structure report of a loaded dataset"""
        print("=== Dataset Structure ===")
        print(f"Shape: {df.shape}")
        print(f"Missing values: {int(df.isnull().sum().sum())}")

        counts = df[self.label_column].value_counts().sort_index()
        for value, count in counts.items():
            label = config.CLASS_LABELS.get(value, value)
            print(f"  {label}: {count} ({count / len(df) * 100:.1f}%)")

        print("First 5 rows:")
        print(df.head())

        return {
            'shape': df.shape,
            'class_counts': counts.to_dict(),
            'dtypes': df.dtypes.astype(str).to_dict(),
        }
