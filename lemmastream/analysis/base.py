from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional, Tuple


class TokenType(str, Enum):
    ALPHANUM = "ALPHANUM"
    APOSTROPHE = "APOSTROPHE"
    ACRONYM = "ACRONYM"
    COMPANY = "COMPANY"
    EMAIL = "EMAIL"
    HOST = "HOST"
    NUM = "NUM"
    CJ = "CJ"
    WORD = "WORD"


@dataclass(frozen=True)
class Token:
    text: str
    start_offset: int
    end_offset: int
    position_increment: int = 1
    type: TokenType = TokenType.ALPHANUM
    part_of_speech: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.start_offset <= self.end_offset:
            raise ValueError(
                f"Invalid offsets for {self.text!r}: "
                f"({self.start_offset}, {self.end_offset})"
            )
        if self.position_increment < 0:
            raise ValueError(
                f"Negative position increment for {self.text!r}: "
                f"{self.position_increment}"
            )

    def copy_with(self, **updates) -> "Token":
        return replace(self, **updates)

    def as_tuple(self) -> Tuple[str, int, int, int, str]:
        """Serializable shape: (text, start, end, position_increment, type)."""
        return (
            self.text,
            self.start_offset,
            self.end_offset,
            self.position_increment,
            self.type.value,
        )


class TokenStream:
    """
    A lazily evaluated source of tokens.

    Tokenizers sit at the head of a stream and read characters; filters wrap
    another stream. Every call to ``iter()`` starts a new pass over whatever
    the head tokenizer is currently bound to, so an assembled chain can be
    kept and re-run after the tokenizer has been reset.
    """

    def __iter__(self) -> Iterator[Token]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class TokenFilter(TokenStream):
    """A stream stage that consumes the tokens of ``input``."""

    def __init__(self, input: TokenStream):
        self.input = input

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.input!r})"
