"""
Exploratory statistics for the heart failure clinical records
"""

import pandas as pd
from scipy import stats

from . import config


class StatisticalAnalyzer:
    """Outcome-stratified descriptive statistics and univariate tests"""

    def __init__(self, df, label_column=config.LABEL_COLUMN, binary_columns=None):
        self.df = df
        self.label_column = label_column
        self.binary_columns = list(binary_columns or config.BINARY_COLUMNS)
        self.continuous_columns = [col for col in df.columns
                                   if col != label_column and col not in self.binary_columns]

    def _groups(self, column):
        died = self.df[self.df[self.label_column] == config.POSITIVE_LABEL][column]
        survived = self.df[self.df[self.label_column] != config.POSITIVE_LABEL][column]
        return survived, died

    def class_balance(self):
        """Outcome counts and proportions"""
        print("\n--- Outcome Distribution ---")
        counts = self.df[self.label_column].value_counts().sort_index()
        balance = pd.DataFrame({
            'count': counts,
            'proportion': counts / counts.sum(),
        })
        balance.index = [config.CLASS_LABELS.get(value, value) for value in balance.index]
        print(balance)
        return balance

    def continuous_feature_tests(self):
        """Describe each continuous feature by outcome with Welch t-test and Mann-Whitney U"""
        print("\n--- Continuous Features by Outcome ---")
        rows = []
        descriptions = {}

        for col in self.continuous_columns:
            descriptions[col] = self.df.groupby(self.label_column)[col].describe()
            survived, died = self._groups(col)

            ttest = stats.ttest_ind(survived, died, equal_var=False)
            mannwhitney = stats.mannwhitneyu(survived, died, alternative='two-sided')
            print(f"{col}: mean {survived.mean():.2f} vs {died.mean():.2f}, "
                  f"t={ttest.statistic:.3f} (p={ttest.pvalue:.4g}), "
                  f"U={mannwhitney.statistic:.1f} (p={mannwhitney.pvalue:.4g})")

            rows.append({
                'feature': col,
                'mean_survived': survived.mean(),
                'mean_died': died.mean(),
                'median_survived': survived.median(),
                'median_died': died.median(),
                't_statistic': ttest.statistic,
                't_pvalue': ttest.pvalue,
                'u_statistic': mannwhitney.statistic,
                'u_pvalue': mannwhitney.pvalue,
            })

        return pd.DataFrame(rows), descriptions

    def binary_feature_tests(self):
        """Crosstab each binary feature against the outcome with a chi-square test"""
        print("\n--- Binary Features by Outcome ---")
        rows = []
        crosstabs = {}

        for col in self.binary_columns:
            table = pd.crosstab(self.df[col], self.df[self.label_column])
            crosstabs[col] = table
            if table.shape == (2, 2):
                chi2, pvalue, _, _ = stats.chi2_contingency(table)
            else:
                chi2, pvalue = float('nan'), float('nan')
            print(f"{col}: chi2={chi2:.3f}, p={pvalue:.4g}")

            rows.append({'feature': col, 'chi2': chi2, 'pvalue': pvalue})

        return pd.DataFrame(rows), crosstabs

    def correlation_matrix(self):
        """Pearson correlation of every column including the outcome"""
        return self.df.corr()

    def run(self):
        """Run every exploratory analysis and collect the results"""
        print("\n=== EXPLORATORY ANALYSIS ===")
        continuous_tests, descriptions = self.continuous_feature_tests()
        binary_tests, crosstabs = self.binary_feature_tests()

        return {
            'class_balance': self.class_balance(),
            'continuous_tests': continuous_tests,
            'descriptions': descriptions,
            'binary_tests': binary_tests,
            'crosstabs': crosstabs,
            'correlation': self.correlation_matrix(),
        }
