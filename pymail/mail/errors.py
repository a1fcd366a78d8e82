from collections import namedtuple
from typing import Any


class FieldError(Exception):
    pass


class ParseError(FieldError):
    """
    Raised when a structured field body does not match its grammar.
    """

    def __init__(self, element: str, value: Any, reason: str):
        self.element = element
        self.value = value
        self.reason = reason
        super().__init__(f"{element} can not parse |{value}|\nReason was: {reason}")


class FieldSyntaxError(FieldError):
    """
    Raised when a structured field is given a pre-built value with an invalid shape.
    """
    pass


ErrorRecord = namedtuple('ErrorRecord', 'element,value,error')
