import logging
from pathlib import Path
from typing import Iterator, Mapping, Optional, Union

from ..config import AnalyzerConfig, load_config
from ..stopwords import ENGLISH_STOP_WORDS, StopWordSource, load_stopwords
from .base import Token, TokenStream
from .context import AnalysisContext, PipelineState
from .filters import LemmaFilter, LowerCaseFilter, StandardFilter, StopFilter
from .lemmatizer import LemmatizerConfig
from .tokenizer import DEFAULT_MAX_TOKEN_LENGTH, CharSource, StandardTokenizer

logger = logging.getLogger(__name__)


class StemmerAnalyzer:
    """
    Per-field analysis chain for indexing.

    Each pipeline is a StandardTokenizer followed by either a LemmaFilter
    (when a lemmatizer is registered for the field) or a StandardFilter, then
    a LowerCaseFilter and, if a stop set is configured, a StopFilter.

    ``analyze()`` with an AnalysisContext keeps the assembled pipeline for
    the field in that context and only rebinds the tokenizer on later calls.
    The tokenizer's ``max_token_length`` and ``replace_invalid_acronym`` are
    refreshed from the current config every time; the lemmatizer and stop
    set are fixed when the pipeline is built.

    Fields without a registered lemmatizer silently use the generic branch.

    Usage:
        analyzer = StemmerAnalyzer({"body": LemmatizerConfig(SuffixLemmatizer())})
        with AnalysisContext() as ctx:
            for token in analyzer.analyze("body", text, ctx):
                ...
    """

    def __init__(
        self,
        field_lemmatizers: Optional[Mapping[str, LemmatizerConfig]] = None,
        stop_words: Optional[StopWordSource] = ENGLISH_STOP_WORDS,
        *,
        max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH,
        replace_invalid_acronym: bool = True,
        enable_stop_position_increments: bool = True,
        config: Optional[AnalyzerConfig] = None,
    ):
        """A ready-made ``config`` replaces all of the other settings."""
        if config is None:
            config = AnalyzerConfig(
                stop_words=load_stopwords(stop_words),
                max_token_length=max_token_length,
                replace_invalid_acronym=replace_invalid_acronym,
                enable_stop_position_increments=enable_stop_position_increments,
                field_lemmatizers=field_lemmatizers or {},
            )
        self._config = config

    @classmethod
    def from_config(cls, config: AnalyzerConfig) -> "StemmerAnalyzer":
        return cls(config=config)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "StemmerAnalyzer":
        return cls.from_config(load_config(path))

    @property
    def config(self) -> AnalyzerConfig:
        return self._config

    @property
    def max_token_length(self) -> int:
        return self._config.max_token_length

    @max_token_length.setter
    def max_token_length(self, length: int) -> None:
        """Takes effect on the next call, reused pipelines included."""
        self._config = self._config.with_max_token_length(length)

    def _build(self, field_name: str) -> PipelineState:
        config = self._config
        tokenizer = StandardTokenizer(
            max_token_length=config.max_token_length,
            replace_invalid_acronym=config.replace_invalid_acronym,
        )

        lemmatizer = config.lemmatizer_for(field_name)
        stream: TokenStream
        if lemmatizer is not None:
            stream = LemmaFilter(tokenizer, lemmatizer)
        else:
            logger.debug(f"No lemmatizer registered for field {field_name!r}, using StandardFilter")
            stream = StandardFilter(tokenizer)

        stream = LowerCaseFilter(stream)
        if config.stop_words:
            stream = StopFilter(
                stream, config.stop_words, config.enable_stop_position_increments
            )
        return PipelineState(field_name=field_name, tokenizer=tokenizer, stream=stream)

    def token_stream(self, field_name: str, source: CharSource) -> TokenStream:
        """Build a new pipeline for ``field_name`` bound to ``source``."""
        state = self._build(field_name)
        state.tokenizer.reset(source)
        return state.stream

    def reusable_token_stream(
        self, field_name: str, source: CharSource, context: AnalysisContext
    ) -> TokenStream:
        """Return the context's pipeline for ``field_name``, rebound to ``source``."""
        state = context.get(field_name)
        if state is None:
            state = self._build(field_name)
            context.put(state)

        config = self._config
        state.tokenizer.reset(source)
        state.tokenizer.max_token_length = config.max_token_length
        state.tokenizer.replace_invalid_acronym = config.replace_invalid_acronym
        return state.stream

    def analyze(
        self,
        field_name: str,
        source: CharSource,
        context: Optional[AnalysisContext] = None,
        fresh: bool = False,
    ) -> Iterator[Token]:
        """
        Lazily analyze ``source`` as the contents of ``field_name``.

        Without a context every call builds its own pipeline. With one, the
        context's pipeline for the field is reused; ``fresh=True`` rebuilds
        it and replaces the cached one.
        """
        if context is None:
            return iter(self.token_stream(field_name, source))
        if fresh:
            context.put(self._build(field_name))
        return iter(self.reusable_token_stream(field_name, source, context))

    def __repr__(self) -> str:
        config = self._config
        return (
            f"StemmerAnalyzer(fields={sorted(config.field_lemmatizers)}, "
            f"stop_words={len(config.stop_words or ())}, "
            f"max_token_length={config.max_token_length})"
        )
