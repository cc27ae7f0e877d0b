"""Record schema shared by training and prediction.

The feature order defined here is the single source of truth: vectors built
for normalization, training and prediction all follow ``FEATURE_NAMES``.
"""

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Mapping, Union

import numpy as np

from ..exceptions import InvalidInputError

FEATURE_NAMES = (
    'battery_power', 'blue', 'clock_speed', 'dual_sim', 'fc',
    'four_g', 'int_memory', 'm_deep', 'mobile_wt', 'n_cores',
    'pc', 'px_height', 'px_width', 'ram', 'sc_h', 'sc_w',
    'talk_time', 'three_g', 'touch_screen', 'wifi',
)

BINARY_FEATURES = ('blue', 'dual_sim', 'four_g', 'three_g', 'touch_screen', 'wifi')

LABEL_COLUMN = 'price_range'
N_FEATURES = len(FEATURE_NAMES)
N_CLASSES = 4
PRICE_LABELS = ('Low Cost', 'Medium Cost', 'High Cost', 'Very High Cost')


@dataclass(frozen=True)
class PhoneRecord:
    """One phone: 20 numeric specs plus its price range label."""
    battery_power: float
    blue: int
    clock_speed: float
    dual_sim: int
    fc: float
    four_g: int
    int_memory: float
    m_deep: float
    mobile_wt: float
    n_cores: float
    pc: float
    px_height: float
    px_width: float
    ram: float
    sc_h: float
    sc_w: float
    talk_time: float
    three_g: int
    touch_screen: int
    wifi: int
    price_range: int = 0

    def features(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in FEATURE_NAMES], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], require_label: bool = True) -> 'PhoneRecord':
        """
        Build a record from a dict-like object, validating every field.

        With ``require_label=False`` any ``price_range`` in ``data`` is
        ignored and the record gets the default label.
        """
        values = {name: _numeric(data, name) for name in FEATURE_NAMES}
        if require_label:
            if LABEL_COLUMN not in data:
                raise InvalidInputError(f"Record is missing required field '{LABEL_COLUMN}'")
            values[LABEL_COLUMN] = _label(data[LABEL_COLUMN])
        return cls(**values)


# Quick-prediction presets, from entry level to top tier
PRESETS: Dict[str, Dict[str, float]] = {
    'budget': {
        'battery_power': 2500, 'blue': 1, 'clock_speed': 1.8, 'dual_sim': 1, 'fc': 5,
        'four_g': 0, 'int_memory': 16, 'm_deep': 0.9, 'mobile_wt': 180, 'n_cores': 2,
        'pc': 8, 'px_height': 1280, 'px_width': 720, 'ram': 2048, 'sc_h': 12, 'sc_w': 6,
        'talk_time': 12, 'three_g': 1, 'touch_screen': 1, 'wifi': 1,
    },
    'mid': {
        'battery_power': 3500, 'blue': 1, 'clock_speed': 2.2, 'dual_sim': 1, 'fc': 8,
        'four_g': 1, 'int_memory': 32, 'm_deep': 0.8, 'mobile_wt': 160, 'n_cores': 4,
        'pc': 13, 'px_height': 1920, 'px_width': 1080, 'ram': 3072, 'sc_h': 14, 'sc_w': 7,
        'talk_time': 16, 'three_g': 1, 'touch_screen': 1, 'wifi': 1,
    },
    'premium': {
        'battery_power': 4000, 'blue': 1, 'clock_speed': 2.8, 'dual_sim': 1, 'fc': 12,
        'four_g': 1, 'int_memory': 128, 'm_deep': 0.7, 'mobile_wt': 140, 'n_cores': 6,
        'pc': 20, 'px_height': 2340, 'px_width': 1080, 'ram': 6144, 'sc_h': 16, 'sc_w': 7.5,
        'talk_time': 20, 'three_g': 1, 'touch_screen': 1, 'wifi': 1,
    },
    'flagship': {
        'battery_power': 5000, 'blue': 1, 'clock_speed': 3.2, 'dual_sim': 1, 'fc': 32,
        'four_g': 1, 'int_memory': 256, 'm_deep': 0.6, 'mobile_wt': 135, 'n_cores': 8,
        'pc': 48, 'px_height': 3200, 'px_width': 1440, 'ram': 12288, 'sc_h': 17, 'sc_w': 8,
        'talk_time': 25, 'three_g': 1, 'touch_screen': 1, 'wifi': 1,
    },
}

RecordLike = Union[PhoneRecord, Mapping[str, Any]]


def _numeric(data: Mapping[str, Any], name: str) -> float:
    if name not in data:
        raise InvalidInputError(f"Record is missing required field '{name}'")
    value = data[name]
    if isinstance(value, bool):
        return float(value)
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Field '{name}' must be numeric, got {data[name]!r}") from None
    if not math.isfinite(value):
        raise InvalidInputError(f"Field '{name}' must be finite, got {value}")
    return value


def _label(value: Any) -> int:
    try:
        label = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"'{LABEL_COLUMN}' must be an integer, got {value!r}") from None
    if label != value or not 0 <= label < N_CLASSES:
        raise InvalidInputError(f"'{LABEL_COLUMN}' must be one of 0..{N_CLASSES - 1}, got {value!r}")
    return label


def coerce_record(record: RecordLike, require_label: bool = True) -> PhoneRecord:
    """Return ``record`` as a validated PhoneRecord."""
    if isinstance(record, PhoneRecord):
        record = record.to_dict()
    if isinstance(record, Mapping):
        return PhoneRecord.from_mapping(record, require_label=require_label)
    raise InvalidInputError(f"Unsupported record type: {type(record).__name__}")


def records_to_arrays(records: Iterable[RecordLike]) -> tuple:
    """
    Convert records into a feature matrix and label vector.

    Args:
        records: PhoneRecord instances or mappings with all schema fields

    Returns:
        X of shape (n_samples, 20) in FEATURE_NAMES order, y of shape (n_samples,)

    Raises:
        InvalidInputError: If the sequence is empty or a record is malformed
    """
    validated: List[PhoneRecord] = [coerce_record(r) for r in records]
    if not validated:
        raise InvalidInputError("Dataset is empty")
    X = np.vstack([r.features() for r in validated])
    y = np.array([r.price_range for r in validated], dtype=int)
    return X, y


def record_vector(record: RecordLike) -> np.ndarray:
    """Feature vector of a single (possibly unlabeled) record."""
    return coerce_record(record, require_label=False).features()
