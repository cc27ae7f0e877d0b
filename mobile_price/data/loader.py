"""Dataset loading: CSV files or the synthetic generator."""

from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import pandas as pd
from loguru import logger

from ..exceptions import InvalidInputError
from .generator import generate_sample_data
from .schema import FEATURE_NAMES, LABEL_COLUMN, PhoneRecord, RecordLike, coerce_record


class DataLoader:
    """Handles reading and writing phone records."""

    def load_from_config(self, config: Dict[str, Any], project_root: Path = Path('.')) -> List[PhoneRecord]:
        """
        Load records from configuration.

        Config formats:

        1. CSV file with the 20 feature columns and ``price_range``:
           {file: 'data/phones.csv'}

        2. Synthetic data:
           {generate: {count: 1000, random_state: 42}}

        Args:
            config: The ``data`` section of the configuration
            project_root: Root directory for relative paths

        Returns:
            List of validated PhoneRecord
        """
        file_path = config.get('file')
        if file_path:
            return self.load_csv(project_root / file_path)

        generate = config.get('generate')
        if generate:
            return generate_sample_data(int(generate.get('count', 1000)), generate.get('random_state'))

        raise InvalidInputError("Data config must provide either 'file' or 'generate'")

    def load_csv(self, file_path: Union[str, Path]) -> List[PhoneRecord]:
        """Read records from a CSV file, validating every row."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        df = pd.read_csv(file_path)
        missing = [c for c in (*FEATURE_NAMES, LABEL_COLUMN) if c not in df.columns]
        if missing:
            raise InvalidInputError(f"{file_path} is missing columns: {', '.join(missing)}")

        records = [PhoneRecord.from_mapping(row) for row in df.to_dict(orient='records')]
        logger.info(f"Loaded: {len(records)} records from {file_path}")
        return records

    def save_csv(self, records: Sequence[RecordLike], file_path: Union[str, Path]) -> Path:
        """Write records to CSV in schema column order."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        df = records_to_frame(records)
        df.to_csv(file_path, index=False)
        logger.info(f"Saved {len(df)} records to {file_path}")
        return file_path


def records_to_frame(records: Sequence[RecordLike]) -> pd.DataFrame:
    """DataFrame with one row per record, columns in schema order."""
    rows = [coerce_record(r).to_dict() for r in records]
    return pd.DataFrame(rows, columns=[*FEATURE_NAMES, LABEL_COLUMN])
