#!/usr/bin/env python3
"""
Price-Range Training Pipeline
=============================

Reads a YAML configuration, trains the configured algorithms on the
configured dataset and writes bundles, metrics and plots to the output
directory.

Usage:
    python scripts/train.py configs/default.yaml
    python scripts/train.py configs/default.yaml --algorithm svm --debug
"""
import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib
matplotlib.use('Agg')

from loguru import logger

sys.path.append(str(Path(__file__).parent.parent))

from mobile_price.data import PRICE_LABELS, DataLoader, PhoneRecord, class_distribution
from mobile_price.exceptions import MobilePriceError
from mobile_price.metrics import classification_report
from mobile_price.models import ModelFactory
from mobile_price.training import TrainedModelBundle, TrainingOrchestrator
from mobile_price.utils import Config, ModelAnalyzer
from mobile_price.visualization import ReportGenerator


class MLTrainer:
    """Runs the training pipeline described by one configuration file."""

    def __init__(self, config_path: str, algorithms: Optional[List[str]] = None):
        """Initialize trainer with configuration file."""
        self.config_path = Path(config_path)
        self.project_root = Path(__file__).parent.parent
        self.config = Config(self.config_path)

        self.algorithms = algorithms or self.config.get_training_config().get('algorithms', [])
        for algorithm in self.algorithms:
            ModelFactory.validate(algorithm)

        self.experiment_name = f"{self.config_path.stem}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        output_dir = self.config.get_output_config().get('output_dir', 'results')
        self.output_dir = self.project_root / output_dir / self.experiment_name

        self.orchestrator = TrainingOrchestrator(self.config)
        self.bundles: Dict[str, TrainedModelBundle] = {}

        logger.info(f"Initialized trainer - Experiment: {self.experiment_name}")

    def run(self) -> Dict[str, TrainedModelBundle]:
        """Execute the complete training pipeline."""
        logger.info("=" * 80)
        logger.info("PRICE-RANGE TRAINING PIPELINE")
        logger.info("=" * 80)
        logger.info(f"Configuration: {self.config_path.name}")
        logger.info(f"Algorithms: {', '.join(self.algorithms)}")
        logger.info(f"Random seed: {self.orchestrator.random_state}")
        logger.info("=" * 80)

        records = self._load_data()
        for algorithm in self.algorithms:
            self.bundles[algorithm] = self._train_single_model(algorithm, records)

        self._save_results()
        self._print_summary()
        return self.bundles

    def _load_data(self) -> List[PhoneRecord]:
        records = DataLoader().load_from_config(self.config.get_data_config(), self.project_root)
        distribution = class_distribution(records)
        logger.info(f"Dataset: {len(records)} records")
        for label, count in distribution.items():
            logger.info(f"  {PRICE_LABELS[label]}: {count}")
        return records

    def _train_single_model(self, algorithm: str, records: List[PhoneRecord]) -> TrainedModelBundle:
        logger.info("\n" + "=" * 60)
        logger.info(f"TRAINING {algorithm}")
        logger.info("=" * 60)

        bundle = self.orchestrator.train(
            algorithm, records,
            progress=lambda stage, fraction: logger.debug(f"  [{fraction:4.0%}] {stage}"),
        )

        info = ModelAnalyzer.get_model_info(bundle.model)
        logger.info(f"  Parameters: {info['parameters']:,}")
        logger.info(f"  Test accuracy: {bundle.accuracy:.4f}")
        if bundle.cross_validation_scores:
            logger.info(f"  CV accuracy: {bundle.cv_mean:.4f} ± {bundle.cv_std:.4f}")
        logger.info(f"  Training time: {bundle.training_time:.2f}s")
        for line in classification_report(bundle.actual_values, bundle.predictions).splitlines():
            logger.debug(f"  {line}")
        return bundle

    def _save_results(self) -> None:
        """Save bundles and reports in the experiment directory."""
        logger.info("\n" + "=" * 60)
        logger.info("SAVING RESULTS")
        logger.info("=" * 60)

        output_config = self.config.get_output_config()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        if output_config.get('save_models', True):
            for algorithm, bundle in self.bundles.items():
                bundle.save(self.output_dir / 'models' / algorithm)

        ReportGenerator(output_config).generate_all_reports(self.bundles, self.output_dir / 'reports')

    def _print_summary(self) -> None:
        logger.info("\n" + "=" * 80)
        logger.info("TRAINING SUMMARY")
        logger.info("=" * 80)

        ranked = sorted(self.bundles.values(), key=lambda b: b.accuracy, reverse=True)
        for i, bundle in enumerate(ranked, 1):
            cv = f"{bundle.cv_mean:.4f}" if bundle.cross_validation_scores else "N/A"
            logger.info(
                f"  {i}. {bundle.algorithm:<15} Accuracy: {bundle.accuracy:.4f}, "
                f"Macro F1: {bundle.metrics.macro_f1:.4f}, CV: {cv}, "
                f"Time: {bundle.training_time:.2f}s"
            )
        logger.info(f"\nResults: {self.output_dir}")
        logger.info("=" * 80)


def configure_logging(log_dir: Path, config_name: str, debug: bool) -> Path:
    """Console sink plus a per-run log file."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{config_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logger.remove()
    logger.add(sys.stderr, level='DEBUG' if debug else 'INFO',
               format='<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}')
    logger.add(log_file, level='DEBUG', encoding='utf-8')
    return log_file


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Train mobile phone price-range classifiers"
    )
    parser.add_argument(
        'config',
        type=str,
        help='Path to configuration file (YAML)'
    )
    parser.add_argument(
        '--algorithm',
        action='append',
        choices=ModelFactory.list_models(),
        help='Algorithm to train (repeatable); defaults to training.algorithms from the config'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    args = parser.parse_args()

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error(f"Configuration file not found: {args.config}")
        return 1

    try:
        output_dir = Config(config_path).get_output_config().get('output_dir', 'results')
        log_file = configure_logging(Path(__file__).parent.parent / output_dir / 'logs',
                                     config_path.stem, args.debug)
        logger.info(f"Log file: {log_file}")

        MLTrainer(args.config, args.algorithm).run()
        return 0
    except MobilePriceError as e:
        logger.error(f"Training failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
