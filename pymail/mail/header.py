from typing import Any, List, Optional, Union, Iterator

from .field import Field
from .mail_types import DEFAULT_CHARSET


class Header(object):
    """
    Ordered collection of header fields. Fields keep their insertion order
    and are only sorted, stably, when read through `fields` or encoded.
    """

    def __init__(self, fields: Optional[List[Field]] = None, charset: str = DEFAULT_CHARSET):
        self._fields: List[Field] = list(fields) if fields else list()
        self._charset = charset

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def fields(self) -> List[Field]:
        return sorted(self._fields)

    def add(self, name: str, value: Any = None) -> Field:
        field = Field(name, value, self._charset)
        self._fields.append(field)
        return field

    def add_field(self, field: Field):
        self._fields.append(field)

    def get(self, name: str) -> List[Field]:
        return [field for field in self._fields if field.responsible_for(name)]

    def __getitem__(self, name: str) -> Union[Field, List[Field], None]:
        fields = self.get(name)
        if not fields:
            return None
        if len(fields) == 1:
            return fields[0]
        return fields

    def __setitem__(self, name: str, value: Any):
        self.add(name, value)

    def __delitem__(self, name: str):
        self._fields = [field for field in self._fields if not field.responsible_for(name)]

    def __contains__(self, name: str) -> bool:
        return any(field.responsible_for(name) for field in self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self._fields)

    def encoded(self) -> str:
        return ''.join(field.encoded() for field in self.fields)

    def __str__(self):
        return self.encoded()

    def __repr__(self):
        return f"Header({[field.name for field in self._fields]!r})"
