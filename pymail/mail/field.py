import logging
import re
from typing import Any, Optional, List

from ..util import HeaderField, unfold
from . import registry
from .errors import ParseError, ErrorRecord
from .fields import UnstructuredField, OptionalField
from .mail_types import FieldState, DEFAULT_CHARSET


logger = logging.getLogger('pymail.mail.field')

_FIELD_VALUE_RE = re.compile(r"^[\x21-\x39\x3b-\x7e]+:(.*)$", re.S)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, tuple, dict)) and len(value) == 0)


class Field(object):
    """
    A single header field. Works out which structured field class handles
    the name and wraps an instance of it, parsing the body only when it is
    first needed.

    Accepts a raw line:

        Field('Subject: Hello')

    a name and value pair:

        Field('Subject', 'Hello')
        Field('Content-Type', ['text', 'plain', {'charset': 'utf-8'}])

    or a name alone:

        Field('Subject')

    With a raw line the second argument is the charset, not a value.

    Anything not defined here is looked up on the wrapped field. Calling one
    of the wrapped field's mutators, or assigning one of its attributes,
    drops the cached encoding.
    """

    def __init__(self, name: str, value: Any = None, charset: str = DEFAULT_CHARSET):
        self._raw_source: Optional[str] = None
        self._value: Any = None
        self._field: Optional[HeaderField] = None
        self._ready_to_send = False
        self._field_order_id: Optional[int] = None

        if ':' in name:
            self._name = name.split(':', 1)[0].strip()
            self._raw_source = name
            self._charset = value if value else charset
        else:
            self._name = name.strip()
            self._value = None if _is_blank(value) else value
            self._charset = charset

        self._name = registry.canonical_name(self._name)

    @classmethod
    def from_line(cls, line: str, charset: str = DEFAULT_CHARSET) -> 'Field':
        if ':' not in line:
            raise ValueError(f"not a header line: {line!r}")
        return cls(line, charset)

    @classmethod
    def create(cls, name: str, value: Any = None, charset: str = DEFAULT_CHARSET) -> 'Field':
        if ':' in name:
            raise ValueError(f"field name cannot contain ':': {name!r}")
        return cls(name, value, charset)

    @property
    def name(self) -> str:
        return self._name

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def state(self) -> FieldState:
        if self._field is not None:
            return FieldState.RESOLVED
        if self._raw_source is not None:
            return FieldState.RAW_ONLY
        return FieldState.EMPTY

    @property
    def field(self) -> HeaderField:
        if self._field is None:
            self._field = self._create_field(self._name, self._raw_value())
        return self._field

    @field.setter
    def field(self, field: HeaderField):
        self._field = field
        self._raw_source = None

    @property
    def value(self) -> Any:
        return self.field.value

    @value.setter
    def value(self, value: Any):
        self.field = self._create_field(self._name, value)

    @property
    def errors(self) -> List[ErrorRecord]:
        return self.field.errors

    def update(self, name: str, value: Any):
        """
        Replace the name and value. The hash follows the name, so do not update
        a field while it is held in a set or used as a dict key.
        """
        self._name = registry.canonical_name(name.strip())
        self._field_order_id = None
        self.field = self._create_field(self._name, value)

    def ready_to_send(self):
        if not (self._ready_to_send and self._raw_source):
            self._ready_to_send = True
            self._raw_source = self._compose_line()

    def encoded(self) -> str:
        self.ready_to_send()
        return self.encoded_as_is()

    def encoded_as_is(self) -> str:
        if self._raw_source is None:
            self._raw_source = self._compose_line()
        if self._raw_source:
            self._raw_source = self._raw_source.rstrip('\r\n') + '\r\n'
        return self._raw_source

    def same(self, other: 'Field') -> bool:
        return isinstance(other, Field) and self.responsible_for(other.name)

    def responsible_for(self, name: str) -> bool:
        return registry.normalize(self._name) == registry.normalize(name)

    @property
    def field_order_id(self) -> int:
        if self._field_order_id is None:
            self._field_order_id = registry.field_order_id(self._name)
        return self._field_order_id

    def __eq__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return self.same(other)

    def __hash__(self):
        return hash(registry.normalize(self._name))

    def __lt__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return self.field_order_id < other.field_order_id

    def __le__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return self.field_order_id <= other.field_order_id

    def __gt__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return self.field_order_id > other.field_order_id

    def __ge__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return self.field_order_id >= other.field_order_id

    def __getattr__(self, name: str) -> Any:
        # only reached for names Field does not define itself
        if name.startswith('_'):
            raise AttributeError(name)

        field = self.field
        attr = getattr(field, name)
        if name not in field.__MUTATORS__:
            return attr

        def mutator(*args, **kwargs):
            result = attr(*args, **kwargs)
            self._raw_source = None
            return result

        return mutator

    def __setattr__(self, name: str, value: Any):
        if name.startswith('_') or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return

        setattr(self.field, name, value)
        self._raw_source = None

    def __str__(self):
        return str(self.field)

    def __repr__(self):
        return f"Field({self._name!r}, state={self.state.value})"

    def _raw_value(self) -> Any:
        if self._value is None and self._raw_source is not None:
            self._value = self._parse_raw_value()
        return self._value

    def _parse_raw_value(self) -> Optional[str]:
        match = _FIELD_VALUE_RE.match(unfold(self._raw_source))
        if match is None:
            logger.warning('Could not parse (and so ignoring) %r', self._raw_source)
            return None
        return match.group(1).strip()

    def _compose_line(self) -> str:
        body = self.field.encode()
        logger.debug('Encoding %s field', self._name)
        if not body:
            return ''
        return f"{self._name}: {body}"

    def _create_field(self, name: str, value: Any) -> HeaderField:
        if isinstance(value, str):
            value = unfold(value)

        try:
            return self._new_field(name, value)
        except ParseError as e:
            logger.info('Could not parse %s field, keeping it unstructured: %s', name, e.reason)
            field = UnstructuredField(name, value, self._charset)
            field.errors.append(ErrorRecord(name, value, e))
            return field

    def _new_field(self, name: str, value: Any) -> HeaderField:
        field_cls = registry.lookup(name)
        if field_cls is not None:
            return field_cls(value, self._charset)
        return OptionalField(name, value, self._charset)
