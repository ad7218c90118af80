"""
End-to-end analysis workflow.

Each stage takes an EvaluationRun and returns a new one with its own output
filled in; no stage mutates the run it receives.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import pandas as pd

from . import config
from .analyzer import StatisticalAnalyzer
from .data_loader import DataLoader
from .evaluator import Evaluator, comparison_table
from .models import default_families
from .preprocessor import Partition, Preprocessor
from .trainer import ModelTrainer, compare_resamples, feature_importance
from .unsupervised import UnsupervisedAnalyzer, UnsupervisedResult


@dataclass(frozen=True)
class EvaluationRun:
    """Outputs of every stage of one analysis run"""
    dataset: Optional[pd.DataFrame] = None
    eda: Dict[str, Any] = field(default_factory=dict)
    partition: Optional[Partition] = None
    trained: Dict[str, Any] = field(default_factory=dict)
    reports: Dict[str, Any] = field(default_factory=dict)
    resamples: Dict[str, pd.DataFrame] = field(default_factory=dict)
    importances: Dict[str, pd.DataFrame] = field(default_factory=dict)
    unsupervised: Optional[UnsupervisedResult] = None

    def comparison(self):
        return comparison_table(self.reports)


def load_stage(run, loader):
    dataset = loader.load()
    loader.summarize(dataset)
    return replace(run, dataset=dataset)


def explore_stage(run):
    return replace(run, eda=StatisticalAnalyzer(run.dataset).run())


def preprocess_stage(run, preprocessor):
    return replace(run, partition=preprocessor.fit_transform(run.dataset))


def train_stage(run, trainer, families):
    trained = trainer.train_all(run.partition, families)
    fold_table, summary, pairwise = compare_resamples(trained)

    print("\n--- Cross-validated ROC-AUC by model ---")
    print(summary.round(4))

    importances = {name: feature_importance(model, run.partition)
                   for name, model in trained.items()}
    return replace(run, trained=trained, importances=importances,
                   resamples={'folds': fold_table, 'summary': summary, 'pairwise': pairwise})


def evaluate_stage(run, evaluator):
    return replace(run, reports=evaluator.evaluate_all(run.trained, run.partition))


def unsupervised_stage(run, analyzer):
    return replace(run, unsupervised=analyzer.run(run.dataset))


def run_pipeline(data_path=config.DATA_PATH, families=None, random_state=config.RANDOM_STATE,
                 scaling=config.SCALING, n_splits=config.CV_FOLDS, n_repeats=config.CV_REPEATS,
                 n_jobs=config.N_JOBS, train_fraction=config.TRAIN_FRACTION,
                 kmeans_restarts=config.KMEANS_RESTARTS):
    """Run every stage in order and return the completed EvaluationRun"""
    if families is None:
        families = default_families(random_state=random_state)

    run = EvaluationRun()
    run = load_stage(run, DataLoader(data_path))
    run = explore_stage(run)
    run = preprocess_stage(run, Preprocessor(train_fraction=train_fraction,
                                             random_state=random_state, scaling=scaling))
    run = train_stage(run, ModelTrainer(n_splits=n_splits, n_repeats=n_repeats,
                                        random_state=random_state, n_jobs=n_jobs), families)
    run = evaluate_stage(run, Evaluator())
    run = unsupervised_stage(run, UnsupervisedAnalyzer(n_init=kmeans_restarts,
                                                       random_state=random_state))
    return run
