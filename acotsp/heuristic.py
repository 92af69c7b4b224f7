from __future__ import annotations
import numpy as np

from .errors import InvalidArgument

# eta assigned to coincident cities (distance 0). Every off-diagonal entry is
# capped at this value so eta**beta stays finite for moderate beta.
COINCIDENT_ETA = 1e9


def build_heuristic(distances) -> np.ndarray:
    """Static desirability matrix eta(i, j) = 1 / d(i, j).

    The diagonal is 0 and never read by tour construction.
    """
    D = np.asarray(distances, dtype=float)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise InvalidArgument(f"distance matrix must be square, got shape {D.shape}")
    if np.any(D < 0) or not np.all(np.isfinite(D)):
        raise InvalidArgument("distances must be finite and non-negative")
    with np.errstate(divide="ignore"):
        eta = np.where(D > 0, 1.0 / D, COINCIDENT_ETA)
    eta = np.minimum(eta, COINCIDENT_ETA)
    np.fill_diagonal(eta, 0.0)
    return eta
