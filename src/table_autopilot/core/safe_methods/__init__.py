from .correlation import CdfResult, DensityResult, safe_corrcdf, safe_corrpdf
from .dumbbell import safe_dumbbellplot
from .grpstats import safe_grpstatsfs
from .histogram import HistogramResult, safe_histfs
from .pca import PcaResult, ProjectionResult, safe_pcafs, safe_pcaprojection

SAFE_HANDLERS = {
    "safe_corrcdf": safe_corrcdf,
    "safe_corrpdf": safe_corrpdf,
    "safe_dumbbellplot": safe_dumbbellplot,
    "safe_grpstatsfs": safe_grpstatsfs,
    "safe_histfs": safe_histfs,
    "safe_pcafs": safe_pcafs,
    "safe_pcaprojection": safe_pcaprojection,
}

__all__ = [
    "SAFE_HANDLERS",
    "CdfResult",
    "DensityResult",
    "HistogramResult",
    "PcaResult",
    "ProjectionResult",
    "safe_corrcdf",
    "safe_corrpdf",
    "safe_dumbbellplot",
    "safe_grpstatsfs",
    "safe_histfs",
    "safe_pcafs",
    "safe_pcaprojection",
]
