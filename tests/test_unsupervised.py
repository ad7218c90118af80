import numpy as np
import pytest

from heartfailure import UnsupervisedAnalyzer


@pytest.fixture
def result(records):
    return UnsupervisedAnalyzer(random_state=3).run(records)


def test_uses_standardized_continuous_features_only(result):
    assert list(result.scaled.columns) == ['age', 'creatinine_phosphokinase', 'ejection_fraction',
                                           'platelets', 'serum_creatinine', 'serum_sodium', 'time']
    np.testing.assert_allclose(result.scaled.mean().to_numpy(), 0, atol=1e-10)
    np.testing.assert_allclose(result.scaled.std(ddof=0).to_numpy(), 1, atol=1e-10)


def test_components_ordered_by_explained_variance(result):
    ratio = result.explained_variance_ratio.to_numpy()

    assert list(result.explained_variance_ratio.index) == [f"PC{i}" for i in range(1, 8)]
    assert np.all(np.diff(ratio) <= 0)
    assert ratio.sum() == pytest.approx(1.0)


def test_scores_and_loadings_shapes(records, result):
    assert result.scores.shape == (len(records), 7)
    assert result.loadings.shape == (7, 7)
    assert list(result.loadings.index) == list(result.scaled.columns)
    # loadings are orthonormal
    np.testing.assert_allclose(result.loadings.T.to_numpy() @ result.loadings.to_numpy(),
                               np.eye(7), atol=1e-8)


def test_scores_reconstruct_scaled_matrix(result):
    reconstructed = result.scores.to_numpy() @ result.loadings.T.to_numpy()
    np.testing.assert_allclose(reconstructed, result.scaled.to_numpy(), atol=1e-8)


def test_kmeans_assigns_two_clusters(records, result):
    assert set(result.cluster_labels.unique()) == {0, 1}
    assert len(result.cluster_labels) == len(records)
    assert result.cluster_centers.shape == (2, 7)
    assert result.inertia > 0


def test_crosstab_covers_every_patient(records, result):
    assert int(result.crosstab.to_numpy().sum()) == len(records)
    assert list(result.crosstab.columns) == [0, 1]


def test_kmeans_is_reproducible(records, result):
    again = UnsupervisedAnalyzer(random_state=3).run(records)
    assert result.cluster_labels.equals(again.cluster_labels)
    assert result.inertia == pytest.approx(again.inertia)
