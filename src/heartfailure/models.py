"""
Classifier families compared in the analysis.

Every family exposes the same capability interface so the trainer and the
evaluator never branch on the model type:

    fit(X, y, params)          -> fitted estimator
    predict_label(model, X)    -> hard 0/1 labels
    predict_proba(model, X)    -> probability of the positive class

``param_grid`` enumerates hyperparameter combinations in ascending order,
which is also the tie-break order of the grid search.
"""

import numpy as np
from sklearn.calibration import CalibratedClassifierCV
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis, QuadraticDiscriminantAnalysis
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import ParameterGrid
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier

from . import config

SVM_COST_GRID = [0.25, 0.5, 1, 2, 4]
SVM_SIGMA_GRID = [0.25, 0.5, 1, 2, 4]
KNN_K_GRID = list(range(3, 22, 2))
RF_MTRY_GRID = [2, 3, 4, 5, 6]
TREE_CP_GRID = [round(0.001 + 0.005 * i, 3) for i in range(20)]


class ModelFamily:
    """Base class for a classifier family and its hyperparameter grid"""

    name = None
    grid = {}

    def __init__(self, grid=None, random_state=config.RANDOM_STATE,
                 positive_label=config.POSITIVE_LABEL):
        if grid is not None:
            self.grid = grid
        self.random_state = random_state
        self.positive_label = positive_label

    @property
    def param_grid(self):
        if not self.grid:
            return [{}]
        return list(ParameterGrid(self.grid))

    def build(self, params, y=None):
        """Return an unfitted estimator for one grid point"""
        raise NotImplementedError

    def fit(self, X, y, params):
        model = self.build(params, y)
        model.fit(X, y)
        return model

    def predict_label(self, model, X):
        return np.asarray(model.predict(X)).astype(int)

    def predict_proba(self, model, X):
        classes = list(model.classes_)
        column = classes.index(self.positive_label)
        return model.predict_proba(X)[:, column]

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, grid_size={len(self.param_grid)})"


class LDAFamily(ModelFamily):
    name = 'lda'

    def build(self, params, y=None):
        return LinearDiscriminantAnalysis()


class QDAFamily(ModelFamily):
    name = 'qda'

    def build(self, params, y=None):
        return QuadraticDiscriminantAnalysis()


class LogisticFamily(ModelFamily):
    name = 'logistic'

    def build(self, params, y=None):
        return LogisticRegression(max_iter=1000)


class KNNFamily(ModelFamily):
    name = 'knn'
    grid = {'k': KNN_K_GRID}

    def build(self, params, y=None):
        return KNeighborsClassifier(n_neighbors=params['k'])


class SVMRadialFamily(ModelFamily):
    """RBF support vector machine; features re-centered and scaled inside the pipeline.
    Probabilities come from Platt scaling of the SVM decision function.
    """

    name = 'svm_rbf'
    grid = {'C': SVM_COST_GRID, 'sigma': SVM_SIGMA_GRID}

    def build(self, params, y=None):
        # kernel is exp(-sigma * ||x - x'||^2), i.e. sigma plays the role of gamma
        return Pipeline([
            ('scaler', StandardScaler()),
            ('svc', CalibratedClassifierCV(
                estimator=SVC(kernel='rbf', C=params['C'], gamma=params['sigma'],
                              random_state=self.random_state),
                method='sigmoid', ensemble=False)),
        ])


class RandomForestFamily(ModelFamily):
    name = 'random_forest'
    grid = {'mtry': RF_MTRY_GRID}

    def __init__(self, grid=None, random_state=config.RANDOM_STATE,
                 positive_label=config.POSITIVE_LABEL, n_estimators=500):
        super().__init__(grid, random_state, positive_label)
        self.n_estimators = n_estimators

    def build(self, params, y=None):
        return RandomForestClassifier(n_estimators=self.n_estimators,
                                      max_features=params['mtry'],
                                      random_state=self.random_state)


class DecisionTreeFamily(ModelFamily):
    """CART tree pruned by a complexity parameter relative to the root node impurity"""

    name = 'decision_tree'
    grid = {'cp': TREE_CP_GRID}

    def build(self, params, y=None):
        root_impurity = gini_impurity(y) if y is not None else 1.0
        return DecisionTreeClassifier(ccp_alpha=params['cp'] * root_impurity,
                                      random_state=self.random_state)


def gini_impurity(y):
    """Gini impurity of a label vector"""
    _, counts = np.unique(np.asarray(y), return_counts=True)
    if counts.sum() == 0:
        return 0.0
    p = counts / counts.sum()
    return float(1.0 - np.sum(p ** 2))


def default_families(random_state=config.RANDOM_STATE, n_estimators=500):
    """The seven families of the comparison, in report order"""
    return [
        LDAFamily(random_state=random_state),
        QDAFamily(random_state=random_state),
        LogisticFamily(random_state=random_state),
        KNNFamily(random_state=random_state),
        SVMRadialFamily(random_state=random_state),
        RandomForestFamily(random_state=random_state, n_estimators=n_estimators),
        DecisionTreeFamily(random_state=random_state),
    ]
