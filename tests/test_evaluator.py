import numpy as np
import pytest

from heartfailure import Evaluator, comparison_table, metrics_from_confusion
from heartfailure.evaluator import pr_analysis, roc_analysis, safe_divide
from heartfailure.models import LogisticFamily
from heartfailure.trainer import ModelTrainer


def test_f1_from_confusion_counts():
    metrics = metrics_from_confusion(tp=40, fp=5, fn=10, tn=45)

    assert round(metrics['precision'], 4) == 0.8889
    assert round(metrics['recall'], 4) == 0.8
    assert round(metrics['f1'], 4) == 0.8421
    assert metrics['accuracy'] == 0.85


def test_f1_undefined_when_precision_and_recall_are_zero():
    metrics = metrics_from_confusion(tp=0, fp=5, fn=10, tn=45)

    assert metrics['precision'] == 0
    assert metrics['recall'] == 0
    assert np.isnan(metrics['f1'])


def test_precision_undefined_without_positive_predictions():
    metrics = metrics_from_confusion(tp=0, fp=0, fn=10, tn=45)

    assert np.isnan(metrics['precision'])
    assert np.isnan(metrics['f1'])
    assert metrics['recall'] == 0


def test_safe_divide():
    assert safe_divide(1, 4) == 0.25
    assert np.isnan(safe_divide(1, 0))


def test_perfect_classifier_has_unit_areas():
    y = np.array([0, 0, 0, 1, 1, 0, 1])
    proba = np.where(y == 1, 0.9, 0.1) + np.linspace(0, 0.05, len(y))

    _, _, _, roc_auc = roc_analysis(y, proba)
    _, _, _, pr_auc = pr_analysis(y, proba)

    assert roc_auc == pytest.approx(1.0)
    assert pr_auc == pytest.approx(1.0)


def test_constant_probability_has_chance_roc_auc():
    y = np.array([0, 1, 0, 1, 1, 0, 0, 0])
    _, _, _, roc_auc = roc_analysis(y, np.full(len(y), 0.3))

    assert roc_auc == pytest.approx(0.5)


def test_roc_curve_sweeps_every_distinct_threshold():
    y = np.array([0, 1, 0, 1, 1, 0])
    proba = np.array([0.1, 0.8, 0.4, 0.35, 0.9, 0.2])
    fpr, tpr, thresholds, _ = roc_analysis(y, proba)

    # one point per distinct score plus the origin
    assert len(fpr) == len(np.unique(proba)) + 1
    assert fpr[0] == 0 and tpr[0] == 0
    assert fpr[-1] == 1 and tpr[-1] == 1


def test_single_class_areas_are_undefined():
    y = np.zeros(5, dtype=int)
    _, _, _, roc_auc = roc_analysis(y, np.linspace(0, 1, 5))
    _, _, _, pr_auc = pr_analysis(y, np.linspace(0, 1, 5))

    assert np.isnan(roc_auc)
    assert np.isnan(pr_auc)


def test_constant_score_pr_area_includes_the_zero_recall_end_point():
    precision, recall, _, pr_auc = pr_analysis([0, 0, 1, 1], [0.5] * 4)

    assert recall[-1] == 0 and precision[-1] == 1
    assert pr_auc == pytest.approx(0.75)


def test_confusion_matrix_is_predicted_by_actual():
    evaluator = Evaluator()
    table = evaluator.confusion_table([1, 1, 1, 0, 0], [1, 0, 0, 0, 1])

    assert table.index.name == 'Predicted'
    assert table.columns.name == 'Actual'
    assert table.loc['Died', 'Died'] == 1
    assert table.loc['Survived', 'Died'] == 2
    assert table.loc['Died', 'Survived'] == 1
    assert table.loc['Survived', 'Survived'] == 1


def test_report_metrics_match_confusion_counts():
    y_true = np.array([1] * 50 + [0] * 50)
    y_pred = np.array([1] * 40 + [0] * 10 + [1] * 5 + [0] * 45)
    proba = np.where(y_pred == 1, 0.8, 0.2)

    report = Evaluator().evaluate_predictions('fixed', y_true, y_pred, proba)

    assert round(report.f1, 4) == 0.8421
    assert report.accuracy == pytest.approx(0.85)
    assert report.specificity == pytest.approx(0.9)
    assert report.no_information_rate == pytest.approx(0.5)
    assert report.accuracy_ci[0] < 0.85 < report.accuracy_ci[1]
    assert report.p_value_acc_gt_nir < 0.001


def test_report_arrays_are_read_only():
    report = Evaluator().evaluate_predictions('fixed', [0, 1, 0, 1], [0, 1, 1, 1], [0.2, 0.7, 0.6, 0.9])

    with pytest.raises(ValueError):
        report.roc_tpr[0] = 0.5
    with pytest.raises(ValueError):
        report.y_proba[0] = 0.5


@pytest.fixture
def trained_logistic(partition):
    return ModelTrainer(n_splits=5).train(LogisticFamily(), partition.X_train, partition.y_train)


def test_evaluation_is_idempotent(trained_logistic, partition):
    evaluator = Evaluator()
    first = evaluator.evaluate(trained_logistic, partition)
    second = evaluator.evaluate(trained_logistic, partition)

    assert first.summary() == second.summary()
    assert first.confusion.equals(second.confusion)
    np.testing.assert_array_equal(first.y_proba, second.y_proba)


def test_evaluate_uses_whole_test_partition(trained_logistic, partition):
    report = Evaluator().evaluate(trained_logistic, partition)

    assert len(report.y_true) == len(partition.test)
    assert int(report.confusion.to_numpy().sum()) == len(partition.test)
    assert 0.5 < report.roc_auc <= 1.0


def test_comparison_table_sorted_by_roc_auc():
    evaluator = Evaluator()
    y = [0, 1, 0, 1]
    reports = {
        'weak': evaluator.evaluate_predictions('weak', y, [0, 0, 0, 1], [0.5, 0.4, 0.6, 0.7]),
        'strong': evaluator.evaluate_predictions('strong', y, [0, 1, 0, 1], [0.1, 0.9, 0.2, 0.8]),
    }
    table = comparison_table(reports)

    assert list(table['model']) == ['strong', 'weak']
    assert table.loc[0, 'roc_auc'] == pytest.approx(1.0)
