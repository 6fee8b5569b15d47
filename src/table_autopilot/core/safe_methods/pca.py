from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from sklearn.decomposition import PCA

from ..diagnostics import Diagnostics
from ..errors import InsufficientDataError, PreconditionError
from .common import complete_rows, numeric_input


@dataclass(frozen=True)
class PcaResult:
    scores: np.ndarray
    coeff: np.ndarray
    latent: np.ndarray
    explained: np.ndarray
    mu: np.ndarray
    sigma: np.ndarray


@dataclass(frozen=True)
class ProjectionResult:
    scores: np.ndarray
    coeff: np.ndarray
    mu: np.ndarray


def _empty_pca() -> PcaResult:
    empty = np.empty(0)
    return PcaResult(empty, empty, empty, empty, empty, empty)


def _svd_pca(X: np.ndarray, n_components: int) -> tuple[np.ndarray, ...]:
    _, s, vt = np.linalg.svd(X / np.sqrt(max(1, X.shape[0] - 1)), full_matrices=False)
    coeff = vt.T[:, :n_components]
    latent = s**2
    total = latent.sum()
    explained = latent / total * 100.0 if total > 0 else np.zeros_like(latent)
    scores = X @ coeff
    return coeff, scores, latent[:n_components], explained[:n_components]


def safe_pcafs(
    data: Any,
    num_components: int | None = None,
    center: bool = True,
    scale: bool = False,
    *,
    diagnostics: Diagnostics | None = None,
) -> PcaResult:
    X, _ = numeric_input(data, "safe_pcafs")
    if X.shape[1] < 1:
        raise InsufficientDataError("safe_pcafs: input must contain numeric data")
    X = complete_rows(X)
    if X.shape[0] == 0:
        return _empty_pca()

    n_components = X.shape[1] if num_components is None else int(num_components)
    n_components = max(1, min(n_components, X.shape[1], X.shape[0]))
    mu = X.mean(axis=0)
    Xc = X - mu if center else X.copy()
    if scale:
        sigma = Xc.std(axis=0, ddof=1) if X.shape[0] > 1 else np.ones(X.shape[1])
        sigma[~np.isfinite(sigma) | (sigma == 0)] = 1.0
        Xc = Xc / sigma
    else:
        sigma = np.ones(X.shape[1])

    if center and X.shape[0] > 1:
        try:
            pca = PCA(n_components=n_components, svd_solver="full")
            scores = pca.fit_transform(Xc)
            return PcaResult(
                scores=scores,
                coeff=pca.components_.T,
                latent=pca.explained_variance_,
                explained=pca.explained_variance_ratio_ * 100.0,
                mu=mu,
                sigma=sigma,
            )
        except (ValueError, np.linalg.LinAlgError) as exc:
            if diagnostics is not None:
                diagnostics.emit("fallback", "safe_pcafs", "PCA failed; using SVD", cause=exc)
    coeff, scores, latent, explained = _svd_pca(Xc, n_components)
    return PcaResult(scores=scores, coeff=coeff, latent=latent, explained=explained, mu=mu, sigma=sigma)


def _coefficients(source: Any) -> tuple[np.ndarray | None, np.ndarray | None]:
    if source is None:
        return None, None
    if isinstance(source, (PcaResult, ProjectionResult)):
        return source.coeff, source.mu
    if isinstance(source, dict):
        coeff = source.get("coeff", source.get("loadings"))
        mu = source.get("mu", source.get("mean"))
        return coeff, mu
    return source, None


def safe_pcaprojection(
    data: Any,
    coeff: Any = None,
    center: Any = None,
    *,
    diagnostics: Diagnostics | None = None,
) -> ProjectionResult:
    """Project rows onto PCA coefficients, computing them from `data` when absent."""

    X, _ = numeric_input(data, "safe_pcaprojection")
    if X.size == 0:
        raise InsufficientDataError("safe_pcaprojection: input must contain numeric data")
    X = complete_rows(X)
    if X.shape[0] == 0:
        empty = np.empty(0)
        return ProjectionResult(scores=empty, coeff=empty, mu=empty)

    loadings, mu = _coefficients(coeff)
    if loadings is None:
        fitted = safe_pcafs(X, diagnostics=diagnostics)
        loadings, mu = fitted.coeff, fitted.mu
    if center is not None:
        mu = center
    if mu is None:
        mu = X.mean(axis=0)

    loadings = np.asarray(loadings)
    if loadings.size == 0 or not np.issubdtype(loadings.dtype, np.number):
        raise PreconditionError("safe_pcaprojection: PCA coefficients are missing or invalid")
    mu = np.asarray(mu, dtype=float).ravel()
    if mu.size != X.shape[1]:
        raise PreconditionError(
            "safe_pcaprojection: center vector length must match number of columns in data"
        )
    if loadings.ndim == 1:
        loadings = loadings.reshape(-1, 1)
    if loadings.shape[0] != X.shape[1]:
        raise PreconditionError(
            f"safe_pcaprojection: coefficients have {loadings.shape[0]} rows for {X.shape[1]} columns"
        )
    return ProjectionResult(scores=(X - mu) @ loadings, coeff=loadings, mu=mu)
