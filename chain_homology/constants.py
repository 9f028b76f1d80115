# chain_homology/constants.py
"""
Chain Homology Constants

This module defines constants used throughout the homology engine:

LAYER 1: Machine Integers (Matrix Storage)
- INT64_MIN / INT64_MAX: range of a stored matrix entry
- ENTRY_DTYPE: numpy dtype of stored matrices

LAYER 2: Grade Bounds (Sparse Graded Maps)
- FIRST_GRADE_UNSET: first grade reported by an empty structure
- LAST_GRADE_UNSET: last grade reported by an empty structure

LAYER 3: Parallel Reduction (Bigraded Fan-out)
- DEFAULT_MAX_WORKERS: worker count when none is configured
"""
import math
import os

import numpy as np


# =============================================================================
# LAYER 1: Machine Integers (Matrix Storage)
# =============================================================================

ENTRY_DTYPE = np.int64
INT64_MIN = int(np.iinfo(ENTRY_DTYPE).min)
INT64_MAX = int(np.iinfo(ENTRY_DTYPE).max)


# =============================================================================
# LAYER 2: Grade Bounds (Sparse Graded Maps)
# =============================================================================

# An empty structure has first > last, so range(first, last + 1) is empty
FIRST_GRADE_UNSET = math.inf
LAST_GRADE_UNSET = -math.inf


# =============================================================================
# LAYER 3: Parallel Reduction (Bigraded Fan-out)
# =============================================================================

DEFAULT_MAX_WORKERS = os.cpu_count() or 1
