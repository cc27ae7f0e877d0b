"""Synthetic phone dataset with features correlated to the price range."""

from typing import Dict, List, Tuple

import numpy as np
from loguru import logger

from ..exceptions import InvalidInputError
from .preprocessor import SeedLike, as_generator
from .schema import N_CLASSES, PhoneRecord

# Value ranges per price range, [low, high) before rounding
CLASS_RANGES: Dict[int, Dict[str, Tuple[float, float]]] = {
    0: {  # Low cost
        'battery_power': (1500, 3000), 'ram': (1024, 3072), 'int_memory': (8, 32),
        'pc': (5, 12), 'fc': (2, 8), 'clock_speed': (1.0, 2.2), 'mobile_wt': (140, 200),
        'px_height': (800, 1600), 'px_width': (480, 900), 'sc_h': (10, 14), 'sc_w': (5, 7),
        'talk_time': (8, 15), 'n_cores': (1, 4),
    },
    1: {  # Medium cost
        'battery_power': (2500, 4000), 'ram': (2048, 4096), 'int_memory': (16, 64),
        'pc': (8, 16), 'fc': (5, 12), 'clock_speed': (1.8, 2.8), 'mobile_wt': (130, 180),
        'px_height': (1200, 2000), 'px_width': (720, 1200), 'sc_h': (12, 16), 'sc_w': (6, 8),
        'talk_time': (12, 20), 'n_cores': (2, 6),
    },
    2: {  # High cost
        'battery_power': (3000, 5000), 'ram': (3072, 8192), 'int_memory': (32, 128),
        'pc': (12, 24), 'fc': (8, 16), 'clock_speed': (2.2, 3.2), 'mobile_wt': (120, 160),
        'px_height': (1600, 2400), 'px_width': (900, 1440), 'sc_h': (14, 18), 'sc_w': (7, 9),
        'talk_time': (15, 25), 'n_cores': (4, 8),
    },
    3: {  # Very high cost
        'battery_power': (4000, 6000), 'ram': (6144, 16384), 'int_memory': (64, 512),
        'pc': (20, 108), 'fc': (12, 40), 'clock_speed': (2.8, 4.0), 'mobile_wt': (100, 150),
        'px_height': (2000, 3200), 'px_width': (1200, 1600), 'sc_h': (16, 20), 'sc_w': (8, 10),
        'talk_time': (20, 30), 'n_cores': (6, 8),
    },
}

# Features rounded to one decimal; every other ranged feature is floored to an integer
ONE_DECIMAL = ('clock_speed', 'sc_h', 'sc_w')

# P(feature == 1) = base + step * price_range
BINARY_PROBABILITIES: Dict[str, Tuple[float, float]] = {
    'blue': (0.5, 0.1),
    'dual_sim': (0.4, 0.1),
    'four_g': (0.3, 0.2),
    'three_g': (0.7, 0.1),
    'touch_screen': (0.8, 0.05),
    'wifi': (0.6, 0.1),
}


def _sample_phone(rng: np.random.Generator, price_range: int) -> PhoneRecord:
    values = {}
    for name, (low, high) in CLASS_RANGES[price_range].items():
        raw = rng.random() * (high - low) + low
        values[name] = round(raw, 1) if name in ONE_DECIMAL else int(np.floor(raw))

    for name, (base, step) in BINARY_PROBABILITIES.items():
        values[name] = int(rng.random() < base + step * price_range)

    values['m_deep'] = round(rng.random() * 0.5 + 0.5, 1)
    return PhoneRecord(price_range=price_range, **values)


def generate_sample_data(count: int, random_state: SeedLike = None) -> List[PhoneRecord]:
    """
    Generate synthetic phones with a uniformly drawn price range each.

    Args:
        count: Number of records to generate
        random_state: Seed or numpy Generator; a fixed seed reproduces the dataset

    Returns:
        List of PhoneRecord
    """
    if count < 0:
        raise InvalidInputError(f"count must be >= 0, got {count}")
    rng = as_generator(random_state)
    records = [_sample_phone(rng, int(rng.integers(0, N_CLASSES))) for _ in range(count)]
    logger.info(f"Generated {count} synthetic phone records")
    return records
