from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats

from ..diagnostics import Diagnostics
from ..errors import InsufficientDataError
from .common import numeric_input

DEFAULT_NUM_POINTS = 200


@dataclass(frozen=True)
class DensityResult:
    edges: np.ndarray
    pdf: np.ndarray
    corrs: np.ndarray


@dataclass(frozen=True)
class CdfResult:
    x: np.ndarray
    cdf: np.ndarray


def pairwise_correlations(matrix: np.ndarray) -> np.ndarray:
    """Upper-triangle Pearson correlations using pairwise-complete rows; NaNs dropped."""

    corr = pd.DataFrame(matrix).corr(method="pearson", min_periods=2).to_numpy(dtype=float)
    upper = corr[np.triu_indices_from(corr, k=1)]
    return upper[~np.isnan(upper)]


def kernel_density(
    samples: np.ndarray, points: np.ndarray, bandwidth: float | None = None
) -> np.ndarray:
    """Gaussian kernel density of `samples` evaluated at `points`.

    Bandwidth defaults to Silverman's rule; degenerate samples fall back to a
    small fixed bandwidth instead of failing.
    """

    samples = np.asarray(samples, dtype=float)
    if bandwidth is None:
        spread = float(np.std(samples, ddof=1)) if samples.size > 1 else 0.0
        iqr = float(np.subtract(*np.percentile(samples, [75, 25]))) if samples.size > 1 else 0.0
        scale = min(spread, iqr / 1.349) if iqr > 0 else spread
        bandwidth = 0.9 * scale * samples.size ** (-0.2)
    if not np.isfinite(bandwidth) or bandwidth <= 0:
        bandwidth = 0.05
    z = (points[:, None] - samples[None, :]) / bandwidth
    return scipy_stats.norm.pdf(z).sum(axis=1) / (samples.size * bandwidth)


def _correlations(data: Any, where: str) -> np.ndarray:
    matrix, _ = numeric_input(data, where)
    if matrix.shape[1] < 2:
        raise InsufficientDataError(f"{where}: input must have at least two numeric columns")
    return pairwise_correlations(matrix)


def safe_corrpdf(
    data: Any,
    num_points: int = DEFAULT_NUM_POINTS,
    kernel_bandwidth: float | None = None,
    *,
    diagnostics: Diagnostics | None = None,
) -> DensityResult:
    corrs = _correlations(data, "safe_corrpdf")
    if corrs.size == 0:
        empty = np.empty(0)
        return DensityResult(edges=empty, pdf=empty, corrs=empty)
    edges = np.linspace(-1.0, 1.0, int(num_points))
    pdf = kernel_density(corrs, edges, kernel_bandwidth)
    return DensityResult(edges=edges, pdf=pdf, corrs=corrs)


def safe_corrcdf(data: Any, *, diagnostics: Diagnostics | None = None) -> CdfResult:
    corrs = _correlations(data, "safe_corrcdf")
    if corrs.size == 0:
        empty = np.empty(0)
        return CdfResult(x=empty, cdf=empty)
    x = np.sort(corrs)
    return CdfResult(x=x, cdf=np.arange(1, x.size + 1) / x.size)
