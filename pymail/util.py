from abc import ABC, abstractmethod
from typing import Optional, List, Any
import re


_FOLD_RE = re.compile(r"[\r\n \t]+")


def unfold(value: str) -> str:
    # RFC 2822 2.2.3, any run of folding whitespace becomes a single space
    return _FOLD_RE.sub(' ', value)


def fold(value: str, offset: int = 0, line_length: int = 78) -> str:
    """
    Fold a single logical line on whitespace so that no physical line
    exceeds line_length (when it has a whitespace to break on).

    Args:
        value (str): unfolded text
        offset (int): columns already used on the first line (name and ': ')
        line_length (int): maximum physical line length
    Returns:
        (str) text with CRLF + SP inserted before the folded words
    """
    words = value.split(' ')
    lines = []
    current = None
    used = offset
    for word in words:
        if current is None:
            current = word
        elif used + len(current) + 1 + len(word) > line_length:
            lines.append(current)
            current = word
            used = 1
        else:
            current += ' ' + word
    lines.append(current)

    return '\r\n '.join(lines)


class HeaderField(ABC):
    __NAME__: Optional[str] = None
    __MUTATORS__ = ()

    def __init__(self):
        self.errors: List[Any] = []

    @property
    def name(self) -> str:
        return self.__NAME__

    @property
    @abstractmethod
    def value(self) -> Any:
        pass

    @abstractmethod
    def parse_from(self, value: str):
        pass

    @abstractmethod
    def compose(self) -> str:
        pass

    def encode(self) -> str:
        return self.compose()

    def __str__(self):
        return self.compose()

    def __repr__(self):
        return f"{self.name}: {self.compose()}"
