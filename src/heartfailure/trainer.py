"""
Cross-validated training and hyperparameter selection for the classifier families
"""

from dataclasses import dataclass, field
from itertools import combinations
from typing import Any, Dict, List

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy import stats
from sklearn.inspection import permutation_importance
from sklearn.model_selection import RepeatedStratifiedKFold

from . import config
from .evaluator import roc_analysis
from .exceptions import DegenerateFoldError, ModelFitError
from .models import ModelFamily


@dataclass(frozen=True)
class FoldResult:
    """Out-of-fold predictions and ROC-AUC of one grid point on one fold"""
    grid_index: int
    fold: str
    rows: np.ndarray
    y_true: np.ndarray
    y_pred: np.ndarray
    y_proba: np.ndarray
    roc_auc: float


@dataclass(frozen=True)
class TrainedModel:
    """Final model of one family refit with the selected hyperparameters"""
    name: str
    family: ModelFamily
    model: Any
    best_params: Dict[str, Any]
    cv_results: pd.DataFrame
    fold_scores: pd.Series
    fold_predictions: pd.DataFrame
    failures: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def cv_roc_auc(self):
        return float(self.fold_scores.mean())


def fold_name(fold, repeat):
    return f"Fold{fold + 1:02d}.Rep{repeat + 1}"


def score_fold(family, params, X, y, grid_index, fold, fit_rows, valid_rows,
               classes=(0, 1)):
    """
    Fit one grid point on the fitting rows of a fold and score the held-out rows.
    Raises DegenerateFoldError when a class is absent or the fit breaks down.
    """
    y_fit = y.iloc[fit_rows]
    y_valid = y.iloc[valid_rows]

    for part, labels in (('fitting', y_fit), ('validation', y_valid)):
        absent = sorted(set(classes) - set(labels.unique()))
        if absent:
            raise DegenerateFoldError(f"class {absent} absent from {part} rows of {fold}",
                                      family=family.name, params=params, fold=fold)

    try:
        model = family.fit(X.iloc[fit_rows], y_fit, params)
        proba = family.predict_proba(model, X.iloc[valid_rows])
        pred = family.predict_label(model, X.iloc[valid_rows])
    except (ValueError, np.linalg.LinAlgError) as exc:
        raise DegenerateFoldError(f"fit failed on {fold}: {exc}",
                                  family=family.name, params=params, fold=fold) from exc

    if not np.all(np.isfinite(proba)):
        raise DegenerateFoldError(f"non-finite probabilities on {fold}",
                                  family=family.name, params=params, fold=fold)

    _, _, _, roc_auc = roc_analysis(y_valid, proba, family.positive_label)
    return FoldResult(
        grid_index=grid_index,
        fold=fold,
        rows=np.asarray(X.index[valid_rows]),
        y_true=y_valid.to_numpy(),
        y_pred=pred,
        y_proba=proba,
        roc_auc=roc_auc,
    )


def _run_unit(family, params, X, y, grid_index, fold, fit_rows, valid_rows):
    try:
        return score_fold(family, params, X, y, grid_index, fold, fit_rows, valid_rows), None
    except DegenerateFoldError as exc:
        return None, exc


def select_best(cv_results):
    """Index of the highest mean ROC-AUC; the first enumerated grid point wins ties"""
    best_index = None
    best_score = -np.inf
    for index, score in enumerate(cv_results['mean_roc_auc']):
        if np.isnan(score):
            continue
        if score > best_score:
            best_index, best_score = index, score
    return best_index


class ModelTrainer:
    """Fits every classifier family under the same repeated stratified k-fold resampling"""

    def __init__(self, n_splits=config.CV_FOLDS, n_repeats=config.CV_REPEATS,
                 random_state=config.RANDOM_STATE, n_jobs=config.N_JOBS):
        self.n_splits = n_splits
        self.n_repeats = n_repeats
        self.random_state = random_state
        self.n_jobs = n_jobs

    def folds(self, X, y):
        """List of (fold name, fitting positions, validation positions)"""
        splitter = RepeatedStratifiedKFold(n_splits=self.n_splits, n_repeats=self.n_repeats,
                                           random_state=self.random_state)
        result = []
        for i, (fit_rows, valid_rows) in enumerate(splitter.split(X, y)):
            repeat, fold = divmod(i, self.n_splits)
            result.append((fold_name(fold, repeat), fit_rows, valid_rows))
        return result

    def grid_search(self, family, X, y, folds):
        """Score every grid point on every fold; returns (cv_results, fold results, failures)"""
        grid = family.param_grid
        units = [(grid_index, params, fold, fit_rows, valid_rows)
                 for grid_index, params in enumerate(grid)
                 for fold, fit_rows, valid_rows in folds]

        # Parallel returns results in submission order
        outcomes = Parallel(n_jobs=self.n_jobs)(
            delayed(_run_unit)(family, params, X, y, grid_index, fold, fit_rows, valid_rows)
            for grid_index, params, fold, fit_rows, valid_rows in units
        )

        by_grid = {index: [] for index in range(len(grid))}
        failures = []
        for (grid_index, params, fold, _, _), (result, error) in zip(units, outcomes):
            if error is not None:
                print(f"  DEGENERATE FOLD: {family.name} {params} {fold}: {error.message}")
                failures.append({'family': family.name, 'params': dict(params),
                                 'fold': fold, 'reason': error.message})
                by_grid[grid_index].append(None)
            else:
                by_grid[grid_index].append(result)

        rows = []
        for grid_index, params in enumerate(grid):
            results = by_grid[grid_index]
            n_failed = sum(result is None for result in results)
            scores = np.array([result.roc_auc for result in results if result is not None])
            if n_failed or len(scores) == 0:
                # A combination with any broken fold is excluded from selection
                mean, std = float('nan'), float('nan')
            else:
                mean = float(np.mean(scores))
                std = float(np.std(scores, ddof=1)) if len(scores) > 1 else 0.0
            row = dict(params)
            row.update({'params': dict(params), 'mean_roc_auc': mean,
                        'std_roc_auc': std, 'failed_folds': n_failed})
            rows.append(row)

        cv_results = pd.DataFrame(rows)
        return cv_results, by_grid, failures

    def train(self, family, X, y, folds=None):
        """Grid-search one family, then refit the selected grid point on all of X"""
        if folds is None:
            folds = self.folds(X, y)

        print(f"\n--- Training {family.name} ({len(family.param_grid)} grid points x {len(folds)} folds) ---")
        cv_results, by_grid, failures = self.grid_search(family, X, y, folds)

        best_index = select_best(cv_results)
        if best_index is None:
            raise ModelFitError(f"every hyperparameter combination failed cross-validation "
                                f"({len(failures)} degenerate folds)", family=family.name)

        best_params = cv_results.loc[best_index, 'params']
        best_results = by_grid[best_index]
        print(f"Selected {best_params or 'default'}: "
              f"mean ROC-AUC {cv_results.loc[best_index, 'mean_roc_auc']:.4f}")

        fold_scores = pd.Series([result.roc_auc for result in best_results],
                                index=[result.fold for result in best_results],
                                name=family.name)
        fold_predictions = pd.concat([
            pd.DataFrame({'fold': result.fold, 'row': result.rows, 'y_true': result.y_true,
                          'y_pred': result.y_pred, 'y_proba': result.y_proba})
            for result in best_results
        ], ignore_index=True)

        model = family.fit(X, y, best_params)

        return TrainedModel(
            name=family.name,
            family=family,
            model=model,
            best_params=best_params,
            cv_results=cv_results,
            fold_scores=fold_scores,
            fold_predictions=fold_predictions,
            failures=failures,
        )

    def train_all(self, partition, families):
        """Train each family on the train partition with one shared set of folds"""
        print("\n=== MODEL TRAINING ===")
        X, y = partition.X_train, partition.y_train
        folds = self.folds(X, y)
        print(f"Resampling: {self.n_splits}-fold stratified CV, repeated {self.n_repeats}x "
              f"on {len(X)} rows")

        trained = {}
        for family in families:
            trained[family.name] = self.train(family, X, y, folds)
        return trained


def compare_resamples(trained_models):
    """
    Compare models on their shared cross-validation folds.
    Returns (fold ROC-AUC table, per-model summary, pairwise paired t-tests).
    """
    fold_table = pd.DataFrame({name: trained.fold_scores
                               for name, trained in trained_models.items()})

    summary = pd.DataFrame({
        'mean': fold_table.mean(),
        'std': fold_table.std(),
        'min': fold_table.min(),
        'max': fold_table.max(),
    }).sort_values('mean', ascending=False)

    rows = []
    pairs = list(combinations(fold_table.columns, 2))
    for first, second in pairs:
        paired = fold_table[[first, second]].dropna()
        diff = paired[first] - paired[second]
        if len(paired) < 2 or np.allclose(diff, diff.iloc[0]):
            t_stat, p_value = float('nan'), float('nan')
        else:
            t_stat, p_value = stats.ttest_rel(paired[first], paired[second])
        rows.append({
            'model_a': first,
            'model_b': second,
            'mean_difference': float(diff.mean()) if len(diff) else float('nan'),
            't_statistic': float(t_stat),
            'p_value': float(p_value),
            'p_adjusted': min(1.0, float(p_value) * len(pairs)) if not np.isnan(p_value) else float('nan'),
        })

    return fold_table, summary, pd.DataFrame(rows)


def feature_importance(trained, partition, n_repeats=10, random_state=config.RANDOM_STATE):
    """Rank features by model-specific importance, falling back to permutation importance"""
    model = trained.model
    features = partition.feature_columns

    if hasattr(model, 'feature_importances_'):
        values, method = model.feature_importances_, 'impurity'
    elif hasattr(model, 'coef_'):
        values, method = np.abs(np.ravel(model.coef_)), 'abs_coefficient'
    else:
        result = permutation_importance(model, partition.X_train, partition.y_train,
                                        scoring='roc_auc', n_repeats=n_repeats,
                                        random_state=random_state)
        values, method = result.importances_mean, 'permutation_roc_auc'

    importance = pd.DataFrame({
        'feature': features,
        'importance': values,
        'method': method,
    }).sort_values('importance', ascending=False, kind='mergesort').reset_index(drop=True)
    return importance
