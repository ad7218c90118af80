"""
Principal component and k-means analysis of the continuous clinical features
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from . import config


@dataclass(frozen=True)
class UnsupervisedResult:
    """PCA and clustering outputs for every patient"""
    scaled: pd.DataFrame
    explained_variance: pd.Series
    explained_variance_ratio: pd.Series
    scores: pd.DataFrame
    loadings: pd.DataFrame
    cluster_labels: pd.Series
    cluster_centers: pd.DataFrame
    inertia: float
    crosstab: pd.DataFrame


class UnsupervisedAnalyzer:
    """PCA and k-means on the standardized continuous features, independent of the train/test split"""

    def __init__(self, n_clusters=config.KMEANS_CLUSTERS, n_init=config.KMEANS_RESTARTS,
                 random_state=config.RANDOM_STATE, binary_columns=None,
                 label_column=config.LABEL_COLUMN):
        self.n_clusters = n_clusters
        self.n_init = n_init
        self.random_state = random_state
        self.binary_columns = list(binary_columns or config.BINARY_COLUMNS)
        self.label_column = label_column

    def continuous_matrix(self, df):
        """Standardized continuous feature matrix of the whole dataset"""
        columns = [col for col in df.columns
                   if col != self.label_column and col not in self.binary_columns]
        scaled = StandardScaler().fit_transform(df[columns])
        return pd.DataFrame(scaled, index=df.index, columns=columns)

    def pca(self, scaled):
        """Components ordered by explained variance; loadings are the rotation matrix"""
        pca = PCA(random_state=self.random_state)
        scores = pca.fit_transform(scaled)
        names = [f"PC{i + 1}" for i in range(pca.n_components_)]

        return {
            'explained_variance': pd.Series(pca.explained_variance_, index=names),
            'explained_variance_ratio': pd.Series(pca.explained_variance_ratio_, index=names),
            'scores': pd.DataFrame(scores, index=scaled.index, columns=names),
            'loadings': pd.DataFrame(pca.components_.T, index=scaled.columns, columns=names),
        }

    def kmeans(self, scaled):
        model = KMeans(n_clusters=self.n_clusters, n_init=self.n_init,
                       random_state=self.random_state)
        labels = model.fit_predict(scaled)
        return {
            'labels': pd.Series(labels, index=scaled.index, name='cluster'),
            'centers': pd.DataFrame(model.cluster_centers_, columns=scaled.columns),
            'inertia': float(model.inertia_),
        }

    def run(self, df):
        print("\n=== PCA AND CLUSTERING ===")
        scaled = self.continuous_matrix(df)
        pca_result = self.pca(scaled)
        cluster_result = self.kmeans(scaled)

        cumulative = np.cumsum(pca_result['explained_variance_ratio'])
        print("Explained variance ratio:")
        for name, ratio, total in zip(pca_result['explained_variance_ratio'].index,
                                      pca_result['explained_variance_ratio'], cumulative):
            print(f"  {name}: {ratio:.3f} (cumulative {total:.3f})")

        crosstab = pd.crosstab(cluster_result['labels'], df[self.label_column])
        print(f"\nK-means (k={self.n_clusters}, {self.n_init} restarts) "
              f"within-cluster SS: {cluster_result['inertia']:.2f}")
        print("Cluster vs outcome:")
        print(crosstab)

        return UnsupervisedResult(
            scaled=scaled,
            explained_variance=pca_result['explained_variance'],
            explained_variance_ratio=pca_result['explained_variance_ratio'],
            scores=pca_result['scores'],
            loadings=pca_result['loadings'],
            cluster_labels=cluster_result['labels'],
            cluster_centers=cluster_result['centers'],
            inertia=cluster_result['inertia'],
            crosstab=crosstab,
        )
