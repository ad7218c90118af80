"""
Visualization utilities for the heart failure survival analysis
"""

import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from . import config


class Visualizer:
    """Writes the report figures as PNG files into a results directory"""

    def __init__(self, results_dir=config.RESULTS_DIR, label_column=config.LABEL_COLUMN, dpi=300):
        self.results_dir = results_dir
        self.label_column = label_column
        self.dpi = dpi
        os.makedirs(results_dir, exist_ok=True)
        plt.style.use('default')
        sns.set_palette("husl")

    def _save(self, filename):
        path = os.path.join(self.results_dir, filename)
        plt.savefig(path, dpi=self.dpi, bbox_inches='tight')
        plt.close()
        print(f"Saved {filename}")
        return path

    def _outcome_names(self, df):
        return df[self.label_column].map(config.CLASS_LABELS)

    def plot_correlation_heatmap(self, df, filename='correlation_heatmap.png'):
        plt.figure(figsize=(12, 10))
        sns.heatmap(df.corr(), annot=True, cmap='coolwarm', center=0, square=True, fmt='.2f')
        plt.title('Correlation Matrix')
        return self._save(filename)

    def plot_feature_distributions(self, df, columns, filename='feature_distributions.png'):
        """Box plot and violin plot of each continuous feature by outcome"""
        data = df.assign(outcome=self._outcome_names(df))
        fig, axes = plt.subplots(2, len(columns), figsize=(4 * len(columns), 8), squeeze=False)

        for i, col in enumerate(columns):
            sns.boxplot(data=data, x='outcome', y=col, ax=axes[0, i])
            axes[0, i].set_title(col.replace('_', ' ').title())
            sns.violinplot(data=data, x='outcome', y=col, ax=axes[1, i], inner='quartile')
            axes[1, i].set_xlabel('')

        plt.tight_layout()
        return self._save(filename)

    def plot_density(self, df, column='time', filename='time_density.png'):
        data = df.assign(outcome=self._outcome_names(df))
        plt.figure(figsize=(8, 5))
        sns.kdeplot(data=data, x=column, hue='outcome', fill=True, common_norm=False, alpha=0.4)
        plt.title(f'{column.replace("_", " ").title()} Density by Outcome')
        return self._save(filename)

    def plot_roc_curves(self, reports, filename='roc_curves.png'):
        plt.figure(figsize=(8, 7))
        for name, report in reports.items():
            plt.plot(report.roc_fpr, report.roc_tpr, label=f'{name} (AUC = {report.roc_auc:.3f})')
        plt.plot([0, 1], [0, 1], 'k--', alpha=0.5)
        plt.xlabel('False Positive Rate')
        plt.ylabel('True Positive Rate')
        plt.title('ROC Curves (test partition)')
        plt.legend(loc='lower right')
        return self._save(filename)

    def plot_pr_curves(self, reports, filename='pr_curves.png'):
        plt.figure(figsize=(8, 7))
        for name, report in reports.items():
            plt.plot(report.pr_recall, report.pr_precision, label=f'{name} (AUC = {report.pr_auc:.3f})')
        plt.xlabel('Recall')
        plt.ylabel('Precision')
        plt.title('Precision-Recall Curves (test partition)')
        plt.legend(loc='lower left')
        return self._save(filename)

    def plot_confusion_matrices(self, reports, filename='confusion_matrices.png'):
        n = len(reports)
        cols = min(4, n)
        rows = int(np.ceil(n / cols))
        fig, axes = plt.subplots(rows, cols, figsize=(4 * cols, 3.5 * rows), squeeze=False)

        for ax, (name, report) in zip(axes.flat, reports.items()):
            sns.heatmap(report.confusion, annot=True, fmt='d', cmap='Blues', cbar=False, ax=ax)
            ax.set_title(name)
        for ax in list(axes.flat)[n:]:
            ax.axis('off')

        plt.tight_layout()
        return self._save(filename)

    def plot_feature_importance(self, importance, model_name, filename=None):
        importance = importance.sort_values('importance', ascending=True)
        plt.figure(figsize=(10, 6))
        plt.barh(importance['feature'], importance['importance'])
        plt.xlabel(f"Importance ({importance['method'].iloc[0]})")
        plt.title(f'{model_name} Variable Importance')
        plt.tight_layout()
        return self._save(filename or f'feature_importance_{model_name}.png')

    def plot_scree(self, unsupervised, filename='pca_scree.png'):
        ratio = unsupervised.explained_variance_ratio
        plt.figure(figsize=(8, 5))
        plt.bar(ratio.index, ratio.values, alpha=0.7, label='Component')
        plt.plot(ratio.index, np.cumsum(ratio.values), 'o-', color='darkred', label='Cumulative')
        plt.ylabel('Explained Variance Ratio')
        plt.title('Scree Plot')
        plt.legend()
        return self._save(filename)

    def plot_pca_biplot(self, unsupervised, outcome, filename='pca_biplot.png'):
        scores = unsupervised.scores
        loadings = unsupervised.loadings
        plt.figure(figsize=(9, 8))

        for value, color in zip(sorted(outcome.unique()), ['skyblue', 'lightcoral']):
            mask = outcome == value
            plt.scatter(scores.loc[mask, 'PC1'], scores.loc[mask, 'PC2'], alpha=0.6,
                        color=color, label=config.CLASS_LABELS.get(value, value))

        # Arrows scaled to the score range
        scale = np.abs(scores[['PC1', 'PC2']].values).max()
        for variable, (x, y) in loadings[['PC1', 'PC2']].iterrows():
            plt.arrow(0, 0, x * scale, y * scale, color='black', alpha=0.7, head_width=0.05 * scale / 3)
            plt.text(x * scale * 1.1, y * scale * 1.1, variable, fontsize=9)

        plt.xlabel(f'PC1 ({unsupervised.explained_variance_ratio["PC1"] * 100:.1f}%)')
        plt.ylabel(f'PC2 ({unsupervised.explained_variance_ratio["PC2"] * 100:.1f}%)')
        plt.title('PCA Biplot')
        plt.legend()
        return self._save(filename)

    def plot_clusters(self, unsupervised, filename='kmeans_clusters.png'):
        scores = unsupervised.scores
        plt.figure(figsize=(8, 7))
        sns.scatterplot(x=scores['PC1'], y=scores['PC2'], hue=unsupervised.cluster_labels,
                        palette='Set1', alpha=0.7)
        plt.title('K-means Clusters on the First Two Principal Components')
        return self._save(filename)

    def create_report_plots(self, run):
        """Every figure of the report for a completed EvaluationRun"""
        print("\n=== CREATING VISUALIZATIONS ===")
        paths = [
            self.plot_correlation_heatmap(run.dataset),
            self.plot_feature_distributions(run.dataset, run.partition.continuous_columns),
            self.plot_density(run.dataset),
            self.plot_roc_curves(run.reports),
            self.plot_pr_curves(run.reports),
            self.plot_confusion_matrices(run.reports),
        ]
        for name, importance in run.importances.items():
            paths.append(self.plot_feature_importance(importance, name))
        if run.unsupervised is not None:
            paths.append(self.plot_scree(run.unsupervised))
            paths.append(self.plot_pca_biplot(run.unsupervised, run.dataset[self.label_column]))
            paths.append(self.plot_clusters(run.unsupervised))
        return paths
