"""
Held-out evaluation of trained models
"""

from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import auc, cohen_kappa_score, confusion_matrix, precision_recall_curve, roc_curve

from . import config


def safe_divide(numerator, denominator):
    """numerator / denominator, or NaN when the denominator is zero"""
    if denominator == 0:
        return float('nan')
    return numerator / denominator


def metrics_from_confusion(tp, fp, fn, tn):
    """Accuracy, precision, recall and F1 from confusion counts; undefined ratios are NaN"""
    total = tp + fp + fn + tn
    precision = safe_divide(tp, tp + fp)
    recall = safe_divide(tp, tp + fn)

    if np.isnan(precision) or np.isnan(recall) or precision + recall == 0:
        f1 = float('nan')
    else:
        f1 = 2 * precision * recall / (precision + recall)

    return {
        'accuracy': safe_divide(tp + tn, total),
        'precision': precision,
        'recall': recall,
        'f1': f1,
        'specificity': safe_divide(tn, tn + fp),
    }


def _readonly(values):
    array = np.array(values, dtype=float, copy=True)
    array.setflags(write=False)
    return array


def roc_analysis(y_true, proba, positive_label=config.POSITIVE_LABEL):
    """
    Sweep every distinct probability threshold and integrate the ROC curve.
    Returns (fpr, tpr, thresholds, auc); auc is NaN when y_true has a single class.
    """
    y_true = np.asarray(y_true)
    if len(np.unique(y_true)) < 2:
        return _readonly([]), _readonly([]), _readonly([]), float('nan')

    fpr, tpr, thresholds = roc_curve(y_true, proba, pos_label=positive_label,
                                     drop_intermediate=False)
    return _readonly(fpr), _readonly(tpr), _readonly(thresholds), float(auc(fpr, tpr))


def pr_analysis(y_true, proba, positive_label=config.POSITIVE_LABEL):
    """
    Precision-recall curve over the same threshold sweep, integrated by the trapezoidal rule.
    Returns (precision, recall, thresholds, auc); auc is NaN when y_true has a single class.
    The curve ends at the (recall=0, precision=1) point, so a constant score
    integrates to (prevalence + 1) / 2 rather than to the prevalence.
    """
    y_true = np.asarray(y_true)
    if len(np.unique(y_true)) < 2:
        return _readonly([]), _readonly([]), _readonly([]), float('nan')

    precision, recall, thresholds = precision_recall_curve(y_true, proba, pos_label=positive_label)
    return _readonly(precision), _readonly(recall), _readonly(thresholds), float(auc(recall, precision))


@dataclass(frozen=True)
class MetricReport:
    """Held-out metrics of one model"""
    model_name: str
    accuracy: float
    precision: float
    recall: float
    f1: float
    roc_auc: float
    pr_auc: float
    confusion: pd.DataFrame
    specificity: float
    balanced_accuracy: float
    kappa: float
    accuracy_ci: tuple
    no_information_rate: float
    p_value_acc_gt_nir: float
    y_true: np.ndarray = field(repr=False)
    y_pred: np.ndarray = field(repr=False)
    y_proba: np.ndarray = field(repr=False)
    roc_fpr: np.ndarray = field(repr=False)
    roc_tpr: np.ndarray = field(repr=False)
    roc_thresholds: np.ndarray = field(repr=False)
    pr_precision: np.ndarray = field(repr=False)
    pr_recall: np.ndarray = field(repr=False)
    pr_thresholds: np.ndarray = field(repr=False)
    params: Dict[str, Any] = field(default_factory=dict)

    def summary(self):
        """Scalar metrics as a flat dict, one comparison-table row"""
        return {
            'model': self.model_name,
            'accuracy': self.accuracy,
            'precision': self.precision,
            'recall': self.recall,
            'f1': self.f1,
            'roc_auc': self.roc_auc,
            'pr_auc': self.pr_auc,
            'specificity': self.specificity,
            'balanced_accuracy': self.balanced_accuracy,
            'kappa': self.kappa,
            'accuracy_ci_low': self.accuracy_ci[0],
            'accuracy_ci_high': self.accuracy_ci[1],
            'no_information_rate': self.no_information_rate,
            'p_value_acc_gt_nir': self.p_value_acc_gt_nir,
        }


class Evaluator:
    """Computes MetricReports on a test partition for a fixed positive label"""

    def __init__(self, positive_label=config.POSITIVE_LABEL, class_labels=None):
        self.positive_label = positive_label
        self.class_labels = dict(class_labels or config.CLASS_LABELS)
        negatives = [value for value in self.class_labels if value != positive_label]
        self.negative_label = negatives[0]

    def confusion_table(self, y_true, y_pred):
        """2x2 confusion matrix with predicted labels as rows and actual labels as columns"""
        order = [self.negative_label, self.positive_label]
        cm = confusion_matrix(y_true, y_pred, labels=order)
        names = [self.class_labels[value] for value in order]
        return pd.DataFrame(cm.T,
                            index=pd.Index(names, name='Predicted'),
                            columns=pd.Index(names, name='Actual'))

    def evaluate_predictions(self, model_name, y_true, y_pred, y_proba, params=None):
        """Build a MetricReport from label and probability vectors"""
        y_true = np.asarray(y_true).astype(int)
        y_pred = np.asarray(y_pred).astype(int)
        y_proba = np.asarray(y_proba, dtype=float)

        confusion = self.confusion_table(y_true, y_pred)
        pos_name = self.class_labels[self.positive_label]
        neg_name = self.class_labels[self.negative_label]
        tp = int(confusion.loc[pos_name, pos_name])
        fp = int(confusion.loc[pos_name, neg_name])
        fn = int(confusion.loc[neg_name, pos_name])
        tn = int(confusion.loc[neg_name, neg_name])
        counts = metrics_from_confusion(tp, fp, fn, tn)

        fpr, tpr, roc_thresholds, roc_auc = roc_analysis(y_true, y_proba, self.positive_label)
        precision_curve, recall_curve, pr_thresholds, pr_auc = pr_analysis(
            y_true, y_proba, self.positive_label)

        # Accuracy against the no-information rate, as in a caret confusion matrix
        n = len(y_true)
        correct = tp + tn
        if n > 0:
            test = stats.binomtest(correct, n)
            ci = test.proportion_ci(confidence_level=0.95, method='exact')
            accuracy_ci = (float(ci.low), float(ci.high))
            nir = float(np.bincount(y_true, minlength=2).max() / n)
            p_value = float(stats.binomtest(correct, n, p=nir, alternative='greater').pvalue)
        else:
            accuracy_ci = (float('nan'), float('nan'))
            nir = float('nan')
            p_value = float('nan')

        if len(np.unique(np.concatenate([y_true, y_pred]))) < 2:
            kappa = float('nan')
        else:
            kappa = float(cohen_kappa_score(y_true, y_pred))

        return MetricReport(
            model_name=model_name,
            accuracy=counts['accuracy'],
            precision=counts['precision'],
            recall=counts['recall'],
            f1=counts['f1'],
            roc_auc=roc_auc,
            pr_auc=pr_auc,
            confusion=confusion,
            specificity=counts['specificity'],
            balanced_accuracy=(counts['recall'] + counts['specificity']) / 2,
            kappa=kappa,
            accuracy_ci=accuracy_ci,
            no_information_rate=nir,
            p_value_acc_gt_nir=p_value,
            y_true=_readonly(y_true),
            y_pred=_readonly(y_pred),
            y_proba=_readonly(y_proba),
            roc_fpr=fpr,
            roc_tpr=tpr,
            roc_thresholds=roc_thresholds,
            pr_precision=precision_curve,
            pr_recall=recall_curve,
            pr_thresholds=pr_thresholds,
            params=dict(params or {}),
        )

    def evaluate(self, trained, partition):
        """Predict the test partition with a TrainedModel and score it"""
        X_test = partition.X_test
        y_pred = trained.family.predict_label(trained.model, X_test)
        y_proba = trained.family.predict_proba(trained.model, X_test)
        return self.evaluate_predictions(trained.name, partition.y_test, y_pred, y_proba,
                                         params=trained.best_params)

    def evaluate_all(self, trained_models, partition):
        """Evaluate every trained model on the same partition, keeping model order"""
        print("\n=== HELD-OUT EVALUATION ===")
        reports = {}
        for name, trained in trained_models.items():
            report = self.evaluate(trained, partition)
            reports[name] = report
            print(f"\n--- {name} {report.params} ---")
            print(report.confusion)
            print(f"Accuracy: {report.accuracy:.4f} (95% CI {report.accuracy_ci[0]:.4f}-{report.accuracy_ci[1]:.4f})")
            print(f"Precision: {report.precision:.4f}  Recall: {report.recall:.4f}  F1: {report.f1:.4f}")
            print(f"ROC-AUC: {report.roc_auc:.4f}  PR-AUC: {report.pr_auc:.4f}")
        return reports


def comparison_table(reports):
    """One row of scalar metrics per model, sorted by ROC-AUC"""
    rows = [report.summary() for report in reports.values()]
    table = pd.DataFrame(rows)
    if table.empty:
        return table
    return table.sort_values('roc_auc', ascending=False, kind='mergesort').reset_index(drop=True)
