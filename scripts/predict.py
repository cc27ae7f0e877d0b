#!/usr/bin/env python3
"""
Predict the price range of a phone with a saved bundle.

Usage:
    python scripts/predict.py results/<run>/models/svm.joblib --preset flagship
    python scripts/predict.py results/<run>/models/svm.joblib --record phone.json
"""
import argparse
import json
import sys
from pathlib import Path

from loguru import logger

sys.path.append(str(Path(__file__).parent.parent))

from mobile_price.data import PRESETS, PRICE_LABELS
from mobile_price.exceptions import InvalidInputError, MobilePriceError
from mobile_price.training import TrainedModelBundle, TrainingOrchestrator


def load_record(source: str) -> dict:
    """Record from a JSON file path or an inline JSON object."""
    path = Path(source)
    try:
        if path.suffix == '.json' and path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                record = json.load(f)
        else:
            record = json.loads(source)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Could not parse record JSON: {e}") from e
    if not isinstance(record, dict):
        raise InvalidInputError("Record JSON must be an object")
    return record


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Predict a phone's price range")
    parser.add_argument('bundle', type=str, help='Path to a saved bundle (.joblib)')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--preset', choices=list(PRESETS), help='Built-in phone preset')
    source.add_argument('--record', type=str, help='JSON object or path to a .json file')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level='DEBUG' if args.debug else 'WARNING')

    try:
        bundle = TrainedModelBundle.load(args.bundle)
        orchestrator = TrainingOrchestrator()
        if args.preset:
            prediction = orchestrator.predict_preset(bundle, args.preset)
        else:
            prediction = orchestrator.predict(bundle, load_record(args.record))
    except (MobilePriceError, FileNotFoundError) as e:
        logger.error(f"Prediction failed: {e}")
        return 1

    print(f"Algorithm:   {bundle.algorithm}")
    print(f"Prediction:  {prediction.price_range} ({prediction.label})")
    print("Confidence:")
    for label, confidence in zip(PRICE_LABELS, prediction.confidence):
        print(f"  {label:<15} {confidence:6.1%}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
