# chain_homology/config.py
"""
Computation configuration.

The only tunable stage is the bigraded fan-out: slices of a bicomplex are
independent, so they can be reduced sequentially, on a thread pool, or on a
process pool.
"""

from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_MAX_WORKERS


@dataclass(frozen=True)
class ParallelConfig:
    """
    Configuration for the bicomplex fan-out.
    
    - parallel: reduce slices concurrently (False = caller's thread, in order)
    - max_workers: pool size (None = one per CPU)
    - use_processes: ProcessPoolExecutor instead of ThreadPoolExecutor
    """
    parallel: bool = True
    max_workers: Optional[int] = None
    use_processes: bool = False
    
    def __post_init__(self):
        """Validate configuration."""
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
    
    @property
    def workers(self) -> int:
        """Effective pool size."""
        return self.max_workers or DEFAULT_MAX_WORKERS


DEFAULT_PARALLEL_CONFIG = ParallelConfig()
SEQUENTIAL_CONFIG = ParallelConfig(parallel=False)
