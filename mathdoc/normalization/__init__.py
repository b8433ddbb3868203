from mathdoc.normalization.models import NormalizedResult
from mathdoc.normalization.normalizer import ResponseNormalizer

__all__ = ["NormalizedResult", "ResponseNormalizer"]
