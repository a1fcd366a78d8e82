from abc import ABC
from datetime import datetime
from email import utils as email_utils
from email.errors import HeaderParseError
from email.header import Header as EncodedHeader, decode_header, make_header
from typing import Optional, List, Dict, Any, Union
import re
import socket
from urllib.parse import unquote

from Crypto.Random import get_random_bytes

from ..util import HeaderField, fold
from .errors import ParseError, FieldSyntaxError
from .mail_types import (
    Address, Received, ContentType, ContentDisposition, TransferEncoding,
    DEFAULT_CHARSET, LINE_LENGTH, TRANSFER_ENCODING_BY_STR
)


_TOKEN = r"[^\s()<>@,;:\\\"/\[\]?=]+"
_TOKEN_RE = re.compile(f"^{_TOKEN}$")
_PARAM_RE = re.compile(r"\s*;\s*(" + _TOKEN + r")\s*=\s*(\"(?:[^\"\\]|\\.)*\"|" + _TOKEN + r")")
_CONTENT_TYPE_RE = re.compile(r"^\s*(" + _TOKEN + r")\s*/\s*(" + _TOKEN + r")(.*)$", re.S)
_DISPOSITION_RE = re.compile(r"^\s*(" + _TOKEN + r")(.*)$", re.S)
_ADDR_SPEC_RE = re.compile(r"^[^@\s<>()\[\],;:\"]+@[^@\s<>()\[\],;:\"]+$")
_GROUP_RE = re.compile(r"^[^:<>\"@]*:\s*;?$")
_MSG_ID_RE = re.compile(r"^<?\s*([^<>\s@]+@[^<>\s]+?)\s*>?$")
_MSG_IDS_RE = re.compile(r"<([^<>\s]+)>")
_RETURN_PATH_RE = re.compile(r"^<\s*([^<>\s]*)\s*>$")
_MIME_VERSION_RE = re.compile(r"^(\d+)\s*\.\s*(\d+)$")
_COMMENT_RE = re.compile(r"\([^()]*\)")


def generate_message_id() -> str:
    return f"{get_random_bytes(16).hex()}@{socket.gethostname() or 'localhost'}"


def _decode_words(value: str) -> str:
    if '=?' not in value:
        return value

    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError):
        return value


def _parse_date(element: str, value: str) -> datetime:
    try:
        return email_utils.parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise ParseError(element, value, f"invalid date ({e})") from e


def _decode_extended(value: str) -> str:
    charset, language, text = email_utils.decode_rfc2231(value)
    return email_utils.collapse_rfc2231_value((charset, language, unquote(text, encoding='latin-1')))


def _parse_params(element: str, original: str, text: str) -> Dict[str, str]:
    params = dict()
    text = text.rstrip().rstrip(';')

    pos = 0
    while pos < len(text):
        match = _PARAM_RE.match(text, pos)
        if match is None:
            raise ParseError(element, original, f"invalid parameter list '{text[pos:].strip()}'")

        name = match.group(1).lower()
        value = match.group(2)
        if value.startswith('"'):
            value = re.sub(r"\\(.)", r"\1", value[1:-1])
        if name.endswith('*'):
            # RFC 2231 extended value, continuations are not supported
            name = name[:-1]
            value = _decode_extended(value)

        params[name] = value
        pos = match.end()

    return params


def _compose_params(params: Dict[str, str], charset: str) -> str:
    res = ''
    for name, value in params.items():
        try:
            value.encode('ascii')
        except UnicodeEncodeError:
            res += f"; {name}*={email_utils.encode_rfc2231(value, charset)}"
            continue

        if not _TOKEN_RE.match(value):
            value = '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'
        res += f"; {name}={value}"

    return res


def _load_params(element: str, params: Any) -> Dict[str, str]:
    if params is None:
        return dict()
    if not isinstance(params, dict) or not all(isinstance(k, str) for k in params.keys()):
        raise FieldSyntaxError(f"{element} parameters must be a dict keyed by name, got {params!r}")

    return {k.lower(): str(v) for k, v in params.items()}


class UnstructuredField(HeaderField):
    """
    Opaque text field. Used for free text fields (Subject, Comments...), for
    extension fields and as the fallback when a structured body fails to parse.
    """

    def __init__(self, name: str, value: Any = None, charset: str = DEFAULT_CHARSET):
        super().__init__()
        self._name = name
        self.charset = charset
        self._text = ''
        if value is not None:
            self.parse_from(value if isinstance(value, str) else str(value))

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> str:
        return self._text

    def parse_from(self, value: str):
        self._text = _decode_words(value)

    def compose(self) -> str:
        if not self._text:
            return ''

        try:
            self._text.encode('ascii')
        except UnicodeEncodeError:
            return EncodedHeader(self._text, self.charset, header_name=self.name).encode(linesep='\r\n')

        return fold(self._text, len(self.name) + 2, LINE_LENGTH)


class OptionalField(UnstructuredField):
    pass


class NamedUnstructuredField(UnstructuredField, ABC):

    def __init__(self, value: Any = None, charset: str = DEFAULT_CHARSET):
        super().__init__(self.__NAME__, value, charset)

    @property
    def name(self) -> str:
        return self.__NAME__


class StructuredField(HeaderField, ABC):

    def __init__(self, value: Any = None, charset: str = DEFAULT_CHARSET):
        super().__init__()
        self.charset = charset
        self._value = None
        if isinstance(value, str):
            self.parse_from(value)
        else:
            self.load_value(value)

    @property
    def value(self) -> Any:
        return self._value

    def load_value(self, value: Any):
        if value is not None:
            raise FieldSyntaxError(f"{self.name} does not accept {type(value).__name__} values")
        self._value = None


class AddressListField(StructuredField, ABC):
    __MUTATORS__ = ('add_address',)

    def parse_from(self, value: str):
        value = value.strip()
        if not value or _GROUP_RE.match(value):
            self._value = []
            return

        addresses = []
        for display_name, addr_spec in email_utils.getaddresses([value]):
            if not _ADDR_SPEC_RE.match(addr_spec):
                raise ParseError(self.name, value, f"invalid address '{addr_spec}'")
            addresses.append(Address(_decode_words(display_name) or None, addr_spec))

        self._value = addresses

    def load_value(self, value: Any):
        if value is None:
            self._value = []
        elif isinstance(value, Address):
            self._value = [value]
        elif isinstance(value, (list, tuple)):
            self._value = []
            for address in value:
                self.add_address(address)
        else:
            super().load_value(value)

    @property
    def addresses(self) -> List[str]:
        return [address.addr_spec for address in self._value]

    @property
    def display_names(self) -> List[Optional[str]]:
        return [address.display_name for address in self._value]

    def add_address(self, address: Union[str, Address, tuple]):
        if isinstance(address, str):
            try:
                parsed = type(self)(address, self.charset)
            except ParseError as e:
                raise FieldSyntaxError(f"{self.name} given invalid address {address!r}") from e
            self._value.extend(parsed._value)
        elif isinstance(address, tuple) and len(address) == 2:
            if not _ADDR_SPEC_RE.match(str(address[1])):
                raise FieldSyntaxError(f"{self.name} given invalid address {address!r}")
            self._value.append(Address(*address))
        else:
            raise FieldSyntaxError(f"{self.name} given invalid address {address!r}")

    def compose(self) -> str:
        addresses = [email_utils.formataddr(address, self.charset) for address in self._value]
        return fold(', '.join(addresses), len(self.name) + 2, LINE_LENGTH)


class SingleAddressField(AddressListField, ABC):
    __MUTATORS__ = ()

    @property
    def value(self) -> Optional[Address]:
        return self._value[0] if self._value else None

    def parse_from(self, value: str):
        super().parse_from(value)
        if len(self._value) > 1:
            raise ParseError(self.name, value, 'only a single address is allowed')

    def load_value(self, value: Any):
        super().load_value(value)
        if len(self._value) > 1:
            raise FieldSyntaxError(f"{self.name} accepts a single address, got {len(self._value)}")


class ReturnPathField(StructuredField):
    __NAME__ = 'Return-Path'

    def parse_from(self, value: str):
        value = value.strip()
        match = _RETURN_PATH_RE.match(value)
        if match is not None:
            self._value = match.group(1)
        elif _ADDR_SPEC_RE.match(value):
            self._value = value
        else:
            raise ParseError(self.name, value, 'expected <addr-spec>')

    def compose(self) -> str:
        if self._value is None:
            return ''
        return f"<{self._value}>"


class DateTimeField(StructuredField, ABC):

    def parse_from(self, value: str):
        self._value = _parse_date(self.name, value)

    def load_value(self, value: Any):
        if value is None:
            self._value = datetime.now().astimezone().replace(microsecond=0)
        elif isinstance(value, datetime):
            self._value = value
        else:
            super().load_value(value)

    def compose(self) -> str:
        return email_utils.format_datetime(self._value)


class MsgIdField(StructuredField, ABC):

    def parse_from(self, value: str):
        match = _MSG_ID_RE.match(_COMMENT_RE.sub('', value).strip())
        if match is None:
            raise ParseError(self.name, value, 'expected <id-left@id-right>')
        self._value = match.group(1)

    def load_value(self, value: Any):
        if value is None:
            self._value = generate_message_id()
        else:
            super().load_value(value)

    def compose(self) -> str:
        return f"<{self._value}>" if self._value else ''


class MessageIdsField(StructuredField, ABC):
    __MUTATORS__ = ('add_message_id',)

    def parse_from(self, value: str):
        leftover = _MSG_IDS_RE.sub(' ', _COMMENT_RE.sub('', value)).replace(',', ' ').strip()
        if leftover:
            raise ParseError(self.name, value, f"unexpected text '{leftover}'")
        self._value = _MSG_IDS_RE.findall(value)

    def load_value(self, value: Any):
        if value is None:
            self._value = []
        elif isinstance(value, (list, tuple)):
            self._value = []
            for message_id in value:
                self.add_message_id(message_id)
        else:
            super().load_value(value)

    @property
    def message_ids(self) -> List[str]:
        return list(self._value)

    def add_message_id(self, message_id: str):
        if not isinstance(message_id, str) or not message_id.strip('<> '):
            raise FieldSyntaxError(f"{self.name} given invalid message id {message_id!r}")
        self._value.append(message_id.strip('<> '))

    def compose(self) -> str:
        return fold(' '.join(f"<{i}>" for i in self._value), len(self.name) + 2, LINE_LENGTH)


class KeywordsField(StructuredField):
    __NAME__ = 'Keywords'

    def parse_from(self, value: str):
        self._value = [_decode_words(k.strip()) for k in value.split(',') if k.strip()]

    def load_value(self, value: Any):
        if value is None:
            self._value = []
        elif isinstance(value, (list, tuple)) and all(isinstance(k, str) for k in value):
            self._value = list(value)
        else:
            super().load_value(value)

    @property
    def keywords(self) -> List[str]:
        return list(self._value)

    def compose(self) -> str:
        return fold(', '.join(self._value), len(self.name) + 2, LINE_LENGTH)


class ReceivedField(StructuredField):
    __NAME__ = 'Received'

    def parse_from(self, value: str):
        info, sep, date = value.rpartition(';')
        if not sep:
            raise ParseError(self.name, value, "missing ';' before the date")
        self._value = Received(info.strip(), _parse_date(self.name, date.strip()))

    def load_value(self, value: Any):
        if isinstance(value, tuple) and len(value) == 2 and isinstance(value[1], datetime):
            self._value = Received(*value)
        else:
            super().load_value(value)

    @property
    def info(self) -> Optional[str]:
        return self._value.info if self._value else None

    @property
    def date_time(self) -> Optional[datetime]:
        return self._value.date if self._value else None

    def compose(self) -> str:
        if self._value is None:
            return ''
        return fold(f"{self._value.info}; {email_utils.format_datetime(self._value.date)}",
                    len(self.name) + 2, LINE_LENGTH)


class MimeVersionField(StructuredField):
    __NAME__ = 'Mime-Version'

    def __init__(self, value: Any = None, charset: str = DEFAULT_CHARSET):
        self.major: int = 1
        self.minor: int = 0
        super().__init__(value, charset)

    @property
    def value(self) -> str:
        return f"{self.major}.{self.minor}"

    def parse_from(self, value: str):
        match = _MIME_VERSION_RE.match(_COMMENT_RE.sub('', value).strip())
        if match is None:
            raise ParseError(self.name, value, 'expected <major>.<minor>')
        self.major = int(match.group(1))
        self.minor = int(match.group(2))

    def load_value(self, value: Any):
        if isinstance(value, tuple) and len(value) == 2 and all(isinstance(v, int) for v in value):
            self.major, self.minor = value
        else:
            super().load_value(value)

    def compose(self) -> str:
        return self.value


class ContentTransferEncodingField(StructuredField):
    __NAME__ = 'Content-Transfer-Encoding'

    def parse_from(self, value: str):
        token = _COMMENT_RE.sub('', value).strip().lower()
        if token not in TRANSFER_ENCODING_BY_STR and not (token.startswith('x-') and _TOKEN_RE.match(token)):
            raise ParseError(self.name, value, f"unknown encoding '{token}'")
        self._value = token

    def load_value(self, value: Any):
        if value is None:
            self._value = TransferEncoding.SEVEN_BIT.value
        elif isinstance(value, TransferEncoding):
            self._value = value.value
        else:
            super().load_value(value)

    @property
    def encoding(self) -> Optional[TransferEncoding]:
        return TRANSFER_ENCODING_BY_STR.get(self._value)

    def compose(self) -> str:
        return self._value


class ContentTypeField(StructuredField):
    __NAME__ = 'Content-Type'
    __MUTATORS__ = ('set_parameter',)

    def parse_from(self, value: str):
        match = _CONTENT_TYPE_RE.match(value)
        if match is None:
            raise ParseError(self.name, value, 'expected <type>/<subtype>')
        params = _parse_params(self.name, value, match.group(3))
        self._value = ContentType(match.group(1).lower(), match.group(2).lower(), params)

    def load_value(self, value: Any):
        if value is None:
            self._value = ContentType('text', 'plain', dict())
        elif isinstance(value, (list, tuple)) and len(value) in (2, 3):
            main_type, sub_type = value[0], value[1]
            if not isinstance(main_type, str) or not _TOKEN_RE.match(main_type) \
                    or not isinstance(sub_type, str) or not _TOKEN_RE.match(sub_type):
                raise FieldSyntaxError(f"{self.name} given invalid type {value!r}")
            params = _load_params(self.name, value[2] if len(value) == 3 else None)
            self._value = ContentType(main_type.lower(), sub_type.lower(), params)
        else:
            super().load_value(value)

    @property
    def main_type(self) -> str:
        return self._value.main_type

    @main_type.setter
    def main_type(self, value: str):
        self._value = self._value._replace(main_type=value.lower())

    @property
    def sub_type(self) -> str:
        return self._value.sub_type

    @sub_type.setter
    def sub_type(self, value: str):
        self._value = self._value._replace(sub_type=value.lower())

    @property
    def mime_type(self) -> str:
        return f"{self._value.main_type}/{self._value.sub_type}"

    @property
    def parameters(self) -> Dict[str, str]:
        return self._value.params

    def set_parameter(self, name: str, value: str):
        self._value.params[name.lower()] = value

    def compose(self) -> str:
        return fold(self.mime_type + _compose_params(self._value.params, self.charset),
                    len(self.name) + 2, LINE_LENGTH)


class ContentDispositionField(StructuredField):
    __NAME__ = 'Content-Disposition'

    def parse_from(self, value: str):
        match = _DISPOSITION_RE.match(value)
        if match is None:
            raise ParseError(self.name, value, 'expected <disposition>')
        params = _parse_params(self.name, value, match.group(2))
        self._value = ContentDisposition(match.group(1).lower(), params)

    def load_value(self, value: Any):
        if isinstance(value, (list, tuple)) and len(value) in (1, 2):
            if not isinstance(value[0], str) or not _TOKEN_RE.match(value[0]):
                raise FieldSyntaxError(f"{self.name} given invalid disposition {value!r}")
            params = _load_params(self.name, value[1] if len(value) == 2 else None)
            self._value = ContentDisposition(value[0].lower(), params)
        else:
            super().load_value(value)

    @property
    def disposition_type(self) -> Optional[str]:
        return self._value.disposition if self._value else None

    @property
    def filename(self) -> Optional[str]:
        return self._value.params.get('filename') if self._value else None

    def compose(self) -> str:
        if self._value is None:
            return ''
        return fold(self._value.disposition + _compose_params(self._value.params, self.charset),
                    len(self.name) + 2, LINE_LENGTH)


class ContentLocationField(StructuredField):
    __NAME__ = 'Content-Location'

    def parse_from(self, value: str):
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        if not value or any(c.isspace() for c in value):
            raise ParseError(self.name, value, 'expected a location without whitespace')
        self._value = value

    def compose(self) -> str:
        return self._value or ''


class ToField(AddressListField):
    __NAME__ = 'To'


class CcField(AddressListField):
    __NAME__ = 'Cc'


class BccField(AddressListField):
    __NAME__ = 'Bcc'


class FromField(AddressListField):
    __NAME__ = 'From'


class ReplyToField(AddressListField):
    __NAME__ = 'Reply-To'


class ResentFromField(AddressListField):
    __NAME__ = 'Resent-From'


class ResentToField(AddressListField):
    __NAME__ = 'Resent-To'


class ResentCcField(AddressListField):
    __NAME__ = 'Resent-Cc'


class ResentBccField(AddressListField):
    __NAME__ = 'Resent-Bcc'


class SenderField(SingleAddressField):
    __NAME__ = 'Sender'


class ResentSenderField(SingleAddressField):
    __NAME__ = 'Resent-Sender'


class DateField(DateTimeField):
    __NAME__ = 'Date'


class ResentDateField(DateTimeField):
    __NAME__ = 'Resent-Date'


class MessageIdField(MsgIdField):
    __NAME__ = 'Message-ID'


class ResentMessageIdField(MsgIdField):
    __NAME__ = 'Resent-Message-ID'


class ContentIdField(MsgIdField):
    __NAME__ = 'Content-ID'


class InReplyToField(MessageIdsField):
    __NAME__ = 'In-Reply-To'


class ReferencesField(MessageIdsField):
    __NAME__ = 'References'


class SubjectField(NamedUnstructuredField):
    __NAME__ = 'Subject'


class CommentsField(NamedUnstructuredField):
    __NAME__ = 'Comments'


class ContentDescriptionField(NamedUnstructuredField):
    __NAME__ = 'Content-Description'
