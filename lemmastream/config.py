import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

import yaml

from .analysis.lemmatizer import LemmatizerConfig, get_lemmatizer
from .analysis.tokenizer import DEFAULT_MAX_TOKEN_LENGTH
from .errors import ConfigurationError, ResourceLoadError
from .stopwords import ENGLISH_STOP_WORDS, load_stopwords

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    Settings shared by every pipeline an analyzer builds.

    Immutable, so one instance can be read from any number of threads.
    ``field_lemmatizers`` maps a field name to the lemmatizer used for it;
    fields without an entry get the generic StandardFilter branch.
    """

    stop_words: Optional[FrozenSet[str]] = ENGLISH_STOP_WORDS
    max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH
    replace_invalid_acronym: bool = True
    enable_stop_position_increments: bool = True
    field_lemmatizers: Mapping[str, LemmatizerConfig] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.max_token_length, int) or self.max_token_length <= 0:
            raise ConfigurationError(
                f"max_token_length must be a positive integer, got {self.max_token_length!r}"
            )
        if self.stop_words is not None:
            object.__setattr__(self, "stop_words", frozenset(self.stop_words))
        object.__setattr__(
            self, "field_lemmatizers", MappingProxyType(dict(self.field_lemmatizers))
        )

    def with_max_token_length(self, length: int) -> "AnalyzerConfig":
        return replace(self, max_token_length=length)

    def lemmatizer_for(self, field_name: str) -> Optional[LemmatizerConfig]:
        return self.field_lemmatizers.get(field_name)


def _stop_words_option(value: Any, base_dir: Path) -> Optional[FrozenSet[str]]:
    if value is None:
        return None
    if value == "english":
        return ENGLISH_STOP_WORDS
    if isinstance(value, str):
        path = Path(value)
        return load_stopwords(path if path.is_absolute() else base_dir / path)
    if isinstance(value, list):
        return load_stopwords(str(word) for word in value)
    raise ConfigurationError(f"stop_words must be 'english', a list, a path or null, got {value!r}")


def _field_option(name: str, settings: Any, base_dir: Path) -> LemmatizerConfig:
    if not isinstance(settings, dict) or "lemmatizer" not in settings:
        raise ConfigurationError(f"Field {name!r} needs a 'lemmatizer' entry")

    options = dict(settings.get("options") or {})
    for key in ("lexicon", "rules_path"):
        if key in options and not Path(options[key]).is_absolute():
            options[key] = str(base_dir / options[key])

    return LemmatizerConfig(
        lemmatizer=get_lemmatizer(settings["lemmatizer"], options),
        return_original=bool(settings.get("return_original", False)),
        return_oov_original=bool(settings.get("return_oov_original", False)),
        return_pos=bool(settings.get("return_pos", False)),
    )


def config_from_dict(data: Dict[str, Any], base_dir: Union[str, Path] = ".") -> AnalyzerConfig:
    """Build an AnalyzerConfig from a parsed config document.

    Relative file paths (stopword lists, lexicons) resolve against ``base_dir``.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config document must be a mapping, got {type(data).__name__}")
    base_dir = Path(base_dir)

    known = {
        "stop_words",
        "max_token_length",
        "replace_invalid_acronym",
        "enable_stop_position_increments",
        "fields",
    }
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {sorted(unknown)}")

    fields = data.get("fields") or {}
    if not isinstance(fields, dict):
        raise ConfigurationError("'fields' must map field names to lemmatizer settings")

    return AnalyzerConfig(
        stop_words=_stop_words_option(data.get("stop_words", "english"), base_dir),
        max_token_length=data.get("max_token_length", DEFAULT_MAX_TOKEN_LENGTH),
        replace_invalid_acronym=bool(data.get("replace_invalid_acronym", True)),
        enable_stop_position_increments=bool(
            data.get("enable_stop_position_increments", True)
        ),
        field_lemmatizers={
            name: _field_option(name, settings, base_dir) for name, settings in fields.items()
        },
    )


def load_config(path: Union[str, Path]) -> AnalyzerConfig:
    """Load an AnalyzerConfig from a YAML file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ResourceLoadError(f"Could not load config {path}: {e}", path) from e

    config = config_from_dict(data, base_dir=path.parent)
    logger.info(
        f"Loaded config {path}: {len(config.field_lemmatizers)} lemmatized field(s), "
        f"{len(config.stop_words or ())} stopwords"
    )
    return config
