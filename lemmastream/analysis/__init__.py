from .base import Token, TokenType, TokenStream, TokenFilter
from .tokenizer import StandardTokenizer
from .lemmatizer import (
    BaseLemmatizer,
    LemmatizerConfig,
    SuffixLemmatizer,
    DictionaryLemmatizer,
    get_lemmatizer,
)
from .filters import LemmaFilter, StandardFilter, LowerCaseFilter, StopFilter
from .context import AnalysisContext, PipelineState
from .analyzer import StemmerAnalyzer

__all__ = [
    "Token",
    "TokenType",
    "TokenStream",
    "TokenFilter",
    "StandardTokenizer",
    "BaseLemmatizer",
    "LemmatizerConfig",
    "SuffixLemmatizer",
    "DictionaryLemmatizer",
    "get_lemmatizer",
    "LemmaFilter",
    "StandardFilter",
    "LowerCaseFilter",
    "StopFilter",
    "AnalysisContext",
    "PipelineState",
    "StemmerAnalyzer",
]
