"""
Report Generator
================

Writes plots, metrics files and comparison tables for trained bundles.

"""

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from loguru import logger

from ..data.schema import FEATURE_NAMES
from ..metrics.evaluator import classification_report
from ..training.bundle import TrainedModelBundle
from ..utils.model_analysis import ModelAnalyzer
from .plotter import Plotter


def _to_serializable(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


class ReportGenerator:
    """Generate experiment reports and visualizations for trained bundles."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize report generator with the 'output' configuration section."""
        self.config = config or {}
        self.save_plots = self.config.get('save_plots', True)
        self.plot_format = self.config.get('plot_format', 'png')
        self.plotter = Plotter()

    def generate_bundle_report(self, bundle: TrainedModelBundle, output_dir: Path) -> Path:
        """
        Write the report for a single bundle.

        Creates ``<output_dir>/<algorithm>/`` holding ``metrics.json``,
        ``classification_report.txt`` and, when enabled, the plots.

        Returns:
            Directory the report was written to
        """
        report_dir = Path(output_dir) / bundle.algorithm
        report_dir.mkdir(parents=True, exist_ok=True)

        summary = bundle.summary()
        summary['model_info'] = ModelAnalyzer.get_model_info(bundle.model)
        with open(report_dir / 'metrics.json', 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2, default=_to_serializable)

        with open(report_dir / 'classification_report.txt', 'w', encoding='utf-8') as f:
            f.write(classification_report(bundle.actual_values, bundle.predictions) + '\n')

        if self.save_plots:
            self._plot_bundle(bundle, report_dir)

        logger.info(f"  ✓ Report for {bundle.algorithm}: {report_dir}")
        return report_dir

    def _plot_bundle(self, bundle: TrainedModelBundle, report_dir: Path) -> None:
        fmt = self.plot_format
        metrics = bundle.metrics

        self.plotter.plot_confusion_matrix(
            metrics.confusion_matrix,
            title=f'{bundle.algorithm} - Confusion Matrix',
            save_path=report_dir / f'confusion_matrix.{fmt}',
        )
        self.plotter.plot_class_metrics(
            metrics.precision, metrics.recall, metrics.f1_score,
            title=f'{bundle.algorithm} - Per-Class Metrics',
            save_path=report_dir / f'class_metrics.{fmt}',
        )

        # Keep schema order so the bars line up with the names
        scores = dict(bundle.feature_importance)
        self.plotter.plot_feature_importance(
            np.array([scores[name] for name in FEATURE_NAMES]),
            list(FEATURE_NAMES),
            title=f'{bundle.algorithm} - Feature Importance',
            save_path=report_dir / f'feature_importance.{fmt}',
        )

        if bundle.cross_validation_scores:
            self.plotter.plot_cv_scores(
                bundle.cross_validation_scores,
                title=f'{bundle.algorithm} - Cross-Validation Accuracy',
                save_path=report_dir / f'cv_scores.{fmt}',
            )

    def results_frame(self, bundles: Mapping[str, TrainedModelBundle]) -> pd.DataFrame:
        """One row per algorithm with the headline numbers."""
        rows = []
        for name, bundle in bundles.items():
            metrics = bundle.metrics
            rows.append({
                'model': name,
                'accuracy': metrics.accuracy,
                'macro_precision': metrics.macro_precision,
                'macro_recall': metrics.macro_recall,
                'macro_f1': metrics.macro_f1,
                'weighted_f1': metrics.weighted_f1,
                'cv_mean': bundle.cv_mean,
                'cv_std': bundle.cv_std,
                'training_time': bundle.training_time,
                'total_parameters': ModelAnalyzer.count_parameters(bundle.model),
            })
        return pd.DataFrame(rows).set_index('model')

    def plot_model_comparison(self, bundles: Mapping[str, TrainedModelBundle], plots_dir: Path) -> None:
        """Side-by-side test metrics and training time for all bundles."""
        results_df = self.results_frame(bundles)

        fig, axes = plt.subplots(1, 2, figsize=(15, 6))
        fig.suptitle('Model Performance Comparison', fontsize=16, fontweight='bold')

        metric_cols = ['accuracy', 'macro_precision', 'macro_recall', 'macro_f1', 'cv_mean']
        results_df[metric_cols].sort_values('accuracy', ascending=False).plot(kind='bar', ax=axes[0])
        axes[0].set_title('Test Set Performance Metrics')
        axes[0].set_ylabel('Score')
        axes[0].set_ylim(0, 1.05)
        axes[0].legend(['Accuracy', 'Precision', 'Recall', 'F1', 'CV Mean'])
        axes[0].tick_params(axis='x', rotation=0)

        axes[1].scatter(results_df['training_time'], results_df['accuracy'])
        for model in results_df.index:
            axes[1].annotate(model,
                             (results_df.loc[model, 'training_time'], results_df.loc[model, 'accuracy']),
                             fontsize=9, rotation=15)
        axes[1].set_xlabel('Training Time (seconds)')
        axes[1].set_ylabel('Test Accuracy')
        axes[1].set_title('Training Time vs Performance')
        axes[1].grid(True, alpha=0.3)

        plt.tight_layout()
        plt.savefig(Path(plots_dir) / f'model_comparison.{self.plot_format}', dpi=150, bbox_inches='tight')
        plt.close()

        logger.info("  ✓ Generated model comparison plot")

    def generate_all_reports(self, bundles: Mapping[str, TrainedModelBundle], output_dir: Path) -> None:
        """Write per-bundle reports, the results table and the comparison chart."""
        if not bundles:
            logger.warning("No trained bundles to report on")
            return

        logger.info("=" * 60)
        logger.info("GENERATING REPORTS")
        logger.info("=" * 60)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for bundle in bundles.values():
            self.generate_bundle_report(bundle, output_dir)

        self.results_frame(bundles).to_csv(output_dir / 'results_summary.csv')

        if self.save_plots and len(bundles) > 1:
            self.plot_model_comparison(bundles, output_dir)
