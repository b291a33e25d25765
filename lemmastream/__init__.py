"""
lemmastream - per-field lemmatizing text analysis for search indexing.

Turns raw field text into a lazy stream of normalized tokens: a grammar-based
tokenizer, a lemmatizing or generic word-shape filter chosen per field,
lowercasing and stopword removal, with pipelines cached per caller.
"""

from .analysis import (
    AnalysisContext,
    DictionaryLemmatizer,
    LemmatizerConfig,
    StemmerAnalyzer,
    SuffixLemmatizer,
    Token,
    TokenType,
)
from .config import AnalyzerConfig, load_config
from .errors import ConfigurationError, LemmastreamError, ResourceLoadError
from .stopwords import ENGLISH_STOP_WORDS, load_stopwords

__version__ = "0.1.0"

__all__ = [
    "AnalysisContext",
    "AnalyzerConfig",
    "ConfigurationError",
    "DictionaryLemmatizer",
    "ENGLISH_STOP_WORDS",
    "LemmastreamError",
    "LemmatizerConfig",
    "ResourceLoadError",
    "StemmerAnalyzer",
    "SuffixLemmatizer",
    "Token",
    "TokenType",
    "load_config",
    "load_stopwords",
    "__version__",
]
