"""
Heart failure survival analysis - experiment_01.py

This script runs the complete analysis workflow on the clinical records dataset:
1. Data loading and validation
2. Exploratory statistics
3. Standardization and stratified 70/30 partitioning
4. Cross-validated training of seven classifier families with grid search
5. Held-out evaluation and model comparison
6. PCA and k-means analysis
7. Visualizations

Usage:
    pip install -e .
    python src/experiment_01.py
"""

import os
import sys
import warnings
from datetime import datetime

import pandas as pd

from heartfailure import Visualizer, config, run_pipeline
from heartfailure.exceptions import AnalysisError

warnings.filterwarnings('ignore')


class Tee:
    """Helper class to redirect output to both console and file"""
    def __init__(self, *files):
        self.files = files
    def write(self, obj):
        for f in self.files:
            f.write(obj)
            f.flush()
    def flush(self):
        for f in self.files:
            f.flush()


def save_results(run, results_dir):
    """Write the tabular outputs of a run as CSV files"""
    run.comparison().to_csv(f"{results_dir}/model_comparison.csv", index=False)

    cv_tables = []
    for name, trained in run.trained.items():
        table = trained.cv_results.drop(columns=['params']).assign(model=name)
        cv_tables.append(table)
    if cv_tables:
        pd.concat(cv_tables, ignore_index=True).to_csv(f"{results_dir}/cv_results.csv", index=False)

    run.resamples['folds'].to_csv(f"{results_dir}/resamples.csv")
    run.resamples['pairwise'].to_csv(f"{results_dir}/resamples_pairwise.csv", index=False)
    run.unsupervised.loadings.to_csv(f"{results_dir}/pca_loadings.csv")
    run.unsupervised.crosstab.to_csv(f"{results_dir}/cluster_outcome_crosstab.csv")


def main():
    """Main experiment workflow"""
    print("="*60)
    print("HEART FAILURE SURVIVAL ANALYSIS")
    print("="*60)
    print(f"Started at: {datetime.now()}")

    results_dir = config.RESULTS_DIR
    os.makedirs(results_dir, exist_ok=True)
    log_file = f"{results_dir}/analysis_log.txt"
    status = 0

    with open(log_file, "w", encoding='utf-8') as f:
        original_stdout = sys.stdout
        sys.stdout = Tee(sys.stdout, f)

        try:
            run = run_pipeline(config.DATA_PATH)

            print("\n" + "="*50)
            print("MODEL COMPARISON (test partition)")
            print("="*50)
            print(run.comparison().round(4).to_string(index=False))

            print("\n--- Top features ---")
            for name, importance in run.importances.items():
                top = ', '.join(importance['feature'].head(3))
                print(f"  {name}: {top}")

            save_results(run, results_dir)
            Visualizer(results_dir).create_report_plots(run)

            print(f"\n=== OUTPUT FILES ===")
            print(f"All results saved to: {results_dir}/")

        except AnalysisError as exc:
            print(f"\nANALYSIS FAILED {exc}")
            status = 1
        finally:
            sys.stdout = original_stdout

    print(f"Log file: {log_file}")
    print(f"Completed at: {datetime.now()}")
    return status


if __name__ == "__main__":
    sys.exit(main())
