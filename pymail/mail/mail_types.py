import enum
from collections import namedtuple


DEFAULT_CHARSET = 'utf-8'
LINE_LENGTH = 78


class FieldKind(enum.Enum):
    TO = 'to'
    CC = 'cc'
    BCC = 'bcc'
    MESSAGE_ID = 'message-id'
    IN_REPLY_TO = 'in-reply-to'
    REFERENCES = 'references'
    SUBJECT = 'subject'
    COMMENTS = 'comments'
    KEYWORDS = 'keywords'
    DATE = 'date'
    FROM = 'from'
    SENDER = 'sender'
    REPLY_TO = 'reply-to'
    RESENT_DATE = 'resent-date'
    RESENT_FROM = 'resent-from'
    RESENT_SENDER = 'resent-sender'
    RESENT_TO = 'resent-to'
    RESENT_CC = 'resent-cc'
    RESENT_BCC = 'resent-bcc'
    RESENT_MESSAGE_ID = 'resent-message-id'
    RETURN_PATH = 'return-path'
    RECEIVED = 'received'
    MIME_VERSION = 'mime-version'
    CONTENT_TRANSFER_ENCODING = 'content-transfer-encoding'
    CONTENT_DESCRIPTION = 'content-description'
    CONTENT_DISPOSITION = 'content-disposition'
    CONTENT_TYPE = 'content-type'
    CONTENT_ID = 'content-id'
    CONTENT_LOCATION = 'content-location'


class TransferEncoding(enum.Enum):
    SEVEN_BIT = '7bit'
    EIGHT_BIT = '8bit'
    BINARY = 'binary'
    QUOTED_PRINTABLE = 'quoted-printable'
    BASE64 = 'base64'


class FieldState(enum.Enum):
    EMPTY = 'empty'
    RAW_ONLY = 'raw-only'
    RESOLVED = 'resolved'


Address = namedtuple('Address', 'display_name,addr_spec')
Received = namedtuple('Received', 'info,date')
ContentType = namedtuple('ContentType', 'main_type,sub_type,params')
ContentDisposition = namedtuple('ContentDisposition', 'disposition,params')

FIELD_KIND_BY_STR = {kind.value: kind for kind in list(FieldKind)}
TRANSFER_ENCODING_BY_STR = {encoding.value: encoding for encoding in list(TransferEncoding)}
