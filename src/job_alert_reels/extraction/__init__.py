"""Job message extraction."""

from .extractor import GeminiJobExtractor, parse_extraction, strip_code_fences
from .models import JobFields

__all__ = ["GeminiJobExtractor", "JobFields", "parse_extraction", "strip_code_fences"]
