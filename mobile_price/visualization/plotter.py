"""
Visualization Utilities
=======================

Core plotting functionality for price-range classifiers.

"""

import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np
from typing import List, Optional, Sequence, Union
from pathlib import Path

from ..data.schema import PRICE_LABELS


class Plotter:
    """Handles core plotting functionality."""

    def __init__(self):
        """Initialize plotter with default settings."""
        for style in ('seaborn-v0_8-darkgrid', 'seaborn-darkgrid'):
            if style in plt.style.available:
                plt.style.use(style)
                break

        # Set default figure parameters
        plt.rcParams['figure.figsize'] = (10, 6)
        plt.rcParams['font.size'] = 10
        plt.rcParams['axes.labelsize'] = 12
        plt.rcParams['axes.titlesize'] = 14

        # Color palettes
        self.colors = {
            'primary': '#1f77b4',
            'secondary': '#ff7f0e',
            'success': '#2ca02c',
            'danger': '#d62728',
            'info': '#17a2b8',
        }

    def save_and_close(self, save_path: Optional[Union[str, Path]] = None) -> None:
        """Save figure and close it."""
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close()

    def plot_confusion_matrix(self,
                              cm: np.ndarray,
                              labels: Sequence[str] = PRICE_LABELS,
                              title: str = 'Confusion Matrix',
                              save_path: Optional[Union[str, Path]] = None) -> None:
        """Plot confusion matrix heatmap (rows = actual, columns = predicted)."""
        plt.figure(figsize=(8, 6))

        # Row percentages; classes absent from the test set stay at 0%
        row_sums = cm.sum(axis=1)[:, np.newaxis]
        cm_normalized = np.divide(cm, row_sums, out=np.zeros(cm.shape, dtype=float), where=row_sums > 0)

        annotations = np.empty(cm.shape, dtype=object)
        for i in range(cm.shape[0]):
            for j in range(cm.shape[1]):
                annotations[i, j] = f'{cm[i, j]}\n({cm_normalized[i, j]:.1%})'

        sns.heatmap(cm, annot=annotations, fmt='', cmap='Blues',
                    xticklabels=labels, yticklabels=labels,
                    cbar_kws={'label': 'Count'}, square=True)

        plt.title(title, fontsize=16, fontweight='bold', pad=20)
        plt.ylabel('Actual Price Range', fontsize=12)
        plt.xlabel('Predicted Price Range', fontsize=12)
        plt.tight_layout()

        self.save_and_close(save_path)

    def plot_class_metrics(self,
                           precision: Sequence[float],
                           recall: Sequence[float],
                           f1_score: Sequence[float],
                           labels: Sequence[str] = PRICE_LABELS,
                           title: str = 'Per-Class Metrics',
                           save_path: Optional[Union[str, Path]] = None) -> None:
        """Grouped bars of precision, recall and F1 for each price range."""
        x_pos = np.arange(len(labels))
        width = 0.25

        plt.figure(figsize=(10, 6))
        plt.bar(x_pos - width, precision, width, label='Precision', color=self.colors['primary'])
        plt.bar(x_pos, recall, width, label='Recall', color=self.colors['secondary'])
        plt.bar(x_pos + width, f1_score, width, label='F1', color=self.colors['success'])

        plt.xticks(x_pos, labels)
        plt.ylabel('Score', fontsize=12, fontweight='bold')
        plt.ylim(0, 1.1)
        plt.title(title, fontsize=16, fontweight='bold', pad=20)
        plt.legend(loc='best', frameon=True)
        plt.grid(True, alpha=0.3, axis='y')
        plt.tight_layout()

        self.save_and_close(save_path)

    def plot_cv_scores(self,
                       scores: Sequence[float],
                       title: str = 'Cross-Validation Accuracy',
                       save_path: Optional[Union[str, Path]] = None) -> None:
        """Accuracy of each fold with the mean as a reference line."""
        if not scores:
            return

        folds = np.arange(1, len(scores) + 1)
        mean = float(np.mean(scores))

        plt.figure(figsize=(8, 5))
        plt.bar(folds, scores, color=self.colors['info'], edgecolor='black', linewidth=0.8)
        plt.axhline(mean, color=self.colors['danger'], linestyle='--', linewidth=2,
                    label=f'Mean {mean:.3f} ± {np.std(scores):.3f}')

        plt.xticks(folds, [f'Fold {i}' for i in folds])
        plt.ylabel('Accuracy', fontsize=12, fontweight='bold')
        plt.ylim(0, 1.05)
        plt.title(title, fontsize=16, fontweight='bold', pad=20)
        plt.legend(loc='lower right')
        plt.grid(True, alpha=0.3, axis='y')
        plt.tight_layout()

        self.save_and_close(save_path)

    def plot_feature_importance(self,
                                importances: np.ndarray,
                                feature_names: List[str],
                                top_n: int = 20,
                                title: str = 'Feature Importance',
                                save_path: Optional[Union[str, Path]] = None) -> None:
        """Plot feature importance scores."""
        importances = np.asarray(importances, dtype=float)
        indices = np.argsort(importances)[::-1][:top_n]

        fig_height = max(6, len(indices) * 0.35)
        plt.figure(figsize=(10, fig_height))

        y_pos = np.arange(len(indices))
        plt.barh(y_pos, importances[indices],
                 color=self.colors['primary'],
                 edgecolor='black', linewidth=0.5)

        plt.yticks(y_pos, [feature_names[i] for i in indices])
        plt.gca().invert_yaxis()
        plt.xlabel('Importance Score', fontsize=12, fontweight='bold')
        plt.title(f'{title} - Top {len(indices)} Features', fontsize=16, fontweight='bold', pad=20)
        plt.grid(True, alpha=0.3, axis='x')
        plt.gca().set_axisbelow(True)

        offset = max(np.abs(importances).max(), 1e-12) * 0.01
        for i, importance in enumerate(importances[indices]):
            plt.text(importance + offset, i, f'{importance:.3f}', va='center', fontsize=9)

        plt.tight_layout()
        self.save_and_close(save_path)
