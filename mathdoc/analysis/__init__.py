from mathdoc.analysis.analyzer import ContentAnalyzer, classify_line
from mathdoc.analysis.models import ContentAnalysis, LinesDocument

__all__ = ["ContentAnalysis", "ContentAnalyzer", "LinesDocument", "classify_line"]
