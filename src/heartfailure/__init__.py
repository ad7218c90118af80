"""
Heart failure survival analysis: loading, preprocessing, model comparison and unsupervised analysis
"""

from . import config
from .data_loader import DataLoader
from .preprocessor import Partition, Preprocessor
from .analyzer import StatisticalAnalyzer
from .models import ModelFamily, default_families
from .trainer import ModelTrainer, TrainedModel, compare_resamples, feature_importance
from .evaluator import Evaluator, MetricReport, comparison_table, metrics_from_confusion
from .unsupervised import UnsupervisedAnalyzer, UnsupervisedResult
from .pipeline import EvaluationRun, run_pipeline
from .visualizer import Visualizer

__all__ = [
    'config',
    'DataLoader',
    'Partition',
    'Preprocessor',
    'StatisticalAnalyzer',
    'ModelFamily',
    'default_families',
    'ModelTrainer',
    'TrainedModel',
    'compare_resamples',
    'feature_importance',
    'Evaluator',
    'MetricReport',
    'comparison_table',
    'metrics_from_confusion',
    'UnsupervisedAnalyzer',
    'UnsupervisedResult',
    'EvaluationRun',
    'run_pipeline',
    'Visualizer',
]
