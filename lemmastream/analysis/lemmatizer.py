import json
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError, ResourceLoadError

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX_PATH = Path(__file__).parent.parent / "fdata" / "suffixes.json"

# (lemma, part_of_speech); part_of_speech may be None
Analysis = Tuple[str, Optional[str]]

# Consonants that stay doubled after stripping -ing/-ed ("falling" -> "fall")
_KEEP_DOUBLE = frozenset("lsz")
_VOWELS = frozenset("aeiouy")


class BaseLemmatizer(ABC):
    """
    Base class for lemmatizers.

    The analyzer only relies on ``lemmatize``; any object with a compatible
    method can be registered for a field, subclassing is a convenience.
    ``lemmatize`` must be pure for a given surface form.
    """

    name: str = "base"

    @abstractmethod
    def lemmatize(self, surface: str) -> Sequence[Analysis]:
        """Return the candidate (lemma, pos) pairs for a surface form.

        Any iterable is accepted, generators included; an empty one means
        the word is out of vocabulary.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


@dataclass(frozen=True)
class LemmatizerConfig:
    """A lemmatizer plus the flags that control what LemmaFilter emits."""

    lemmatizer: Any
    return_original: bool = False
    return_oov_original: bool = False
    return_pos: bool = False

    def __post_init__(self):
        if not callable(getattr(self.lemmatizer, "lemmatize", None)):
            raise ConfigurationError(
                f"{self.lemmatizer!r} does not provide a lemmatize() method"
            )


def _load_suffix_table(
    path: Path,
) -> Tuple[List[Tuple[str, str, str]], Dict[str, Analysis]]:
    """
    Load suffix rules from a JSON file.

    Structure: {"VERB": [[suffix, replacement], ...], ..., "irregular":
    {form: [lemma, pos]}}. Rules come back sorted longest suffix first, in
    file order within one length.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ResourceLoadError(f"Could not load suffix rules from {path}: {e}", path) from e

    irregular = {
        form.lower(): (lemma, pos)
        for form, (lemma, pos) in data.pop("irregular", {}).items()
    }
    rules = [
        (suffix, replacement, pos)
        for pos, pairs in data.items()
        for suffix, replacement in pairs
    ]
    rules.sort(key=lambda rule: len(rule[0]), reverse=True)
    logger.debug(f"Loaded {len(rules)} suffix rules and {len(irregular)} irregular forms from {path}")
    return rules, irregular


class SuffixLemmatizer(BaseLemmatizer):
    """
    Rule-based English lemmatizer.

    Looks the word up in the irregular-form table first, then applies every
    matching suffix rule from fdata/suffixes.json (longest suffix first). A
    rule only fires when at least ``min_stem_length`` characters remain, and
    a doubled final consonant left behind by -ing/-ed is undoubled
    ("running" -> "run"). Words no rule matches are out of vocabulary.
    """

    name = "suffix"

    def __init__(
        self,
        rules_path: Optional[Union[str, Path]] = None,
        min_stem_length: int = 3,
    ):
        if not isinstance(min_stem_length, int) or min_stem_length < 1:
            raise ConfigurationError(
                f"min_stem_length must be a positive integer, got {min_stem_length!r}"
            )
        self.rules_path = Path(rules_path) if rules_path else DEFAULT_SUFFIX_PATH
        self.min_stem_length = min_stem_length
        self._rules, self._irregular = _load_suffix_table(self.rules_path)

    def _undouble(self, stem: str, suffix: str) -> str:
        if (
            suffix in ("ing", "ed")
            and len(stem) > self.min_stem_length
            and stem[-1] == stem[-2]
            and stem[-1] not in _VOWELS
            and stem[-1] not in _KEEP_DOUBLE
        ):
            return stem[:-1]
        return stem

    def lemmatize(self, surface: str) -> List[Analysis]:
        word = surface.lower()
        if word in self._irregular:
            return [self._irregular[word]]

        results: List[Analysis] = []
        seen = set()
        for suffix, replacement, pos in self._rules:
            if not word.endswith(suffix):
                continue
            stem = word[: -len(suffix)]
            if len(stem) < self.min_stem_length:
                continue
            if not replacement:
                stem = self._undouble(stem, suffix)
            elif replacement == "e" and (stem[-1] in _VOWELS or stem[-2:-1] == stem[-1]):
                continue
            lemma = stem + replacement
            if (lemma, pos) not in seen:
                seen.add((lemma, pos))
                results.append((lemma, pos))
        return results

    def __repr__(self) -> str:
        return f"SuffixLemmatizer(rules_path={str(self.rules_path)!r})"


class DictionaryLemmatizer(BaseLemmatizer):
    """
    Lexicon lookup lemmatizer.

    Entries map a lowercased surface form to one or more (lemma, pos) pairs.
    A lexicon file holds one tab-separated ``surface lemma [pos]`` entry per
    line; blank lines and lines starting with ``#`` are ignored.
    """

    name = "dictionary"

    def __init__(
        self,
        entries: Optional[Mapping[str, Sequence[Analysis]]] = None,
        lexicon: Optional[Union[str, Path]] = None,
    ):
        self._entries: Dict[str, List[Analysis]] = defaultdict(list)
        if entries:
            for surface, analyses in entries.items():
                for lemma, pos in analyses:
                    self._add(surface, lemma, pos)
        if lexicon is not None:
            self._load(Path(lexicon))

    def _add(self, surface: str, lemma: str, pos: Optional[str]) -> None:
        analyses = self._entries[surface.lower()]
        if (lemma, pos) not in analyses:
            analyses.append((lemma, pos))

    def _load(self, path: Path) -> None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_no, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    fields = line.split("\t")
                    if len(fields) < 2:
                        logger.warning(f"{path}:{line_no}: expected 'surface<TAB>lemma', skipping")
                        continue
                    pos = fields[2] if len(fields) > 2 and fields[2] else None
                    self._add(fields[0], fields[1], pos)
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceLoadError(f"Could not load lexicon {path}: {e}", path) from e
        logger.info(f"Loaded lexicon {path} ({len(self._entries)} surface forms)")

    def lemmatize(self, surface: str) -> List[Analysis]:
        return list(self._entries.get(surface.lower(), ()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DictionaryLemmatizer(entries={len(self._entries)})"


_LEMMATIZERS = {
    "suffix": SuffixLemmatizer,
    "dictionary": DictionaryLemmatizer,
}


def get_lemmatizer(name: str, options: Optional[dict] = None) -> BaseLemmatizer:
    """Factory function to get a bundled lemmatizer by name."""
    lemmatizer_class = _LEMMATIZERS.get(name.lower())
    if not lemmatizer_class:
        raise ConfigurationError(
            f"Unknown lemmatizer: {name}. Available: {list(_LEMMATIZERS.keys())}"
        )
    try:
        return lemmatizer_class(**(options or {}))
    except TypeError as e:
        raise ConfigurationError(f"Bad options for lemmatizer {name}: {e}") from e
