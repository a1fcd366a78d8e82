from collections import namedtuple
from types import MappingProxyType
from typing import Optional, Type

from ..util import HeaderField
from .mail_types import FieldKind, FIELD_KIND_BY_STR
from .fields import (
    ToField, CcField, BccField, FromField, ReplyToField, SenderField,
    ResentFromField, ResentToField, ResentCcField, ResentBccField, ResentSenderField,
    DateField, ResentDateField, MessageIdField, ResentMessageIdField, ContentIdField,
    InReplyToField, ReferencesField, SubjectField, CommentsField, KeywordsField,
    ReturnPathField, ReceivedField, MimeVersionField, ContentTransferEncodingField,
    ContentDescriptionField, ContentDispositionField, ContentTypeField, ContentLocationField
)


UNKNOWN_FIELD_ORDER = 100

RegistryEntry = namedtuple('RegistryEntry', 'kind,field_cls,capitalized')

FIELD_CLASSES = MappingProxyType({
    FieldKind.TO: ToField,
    FieldKind.CC: CcField,
    FieldKind.BCC: BccField,
    FieldKind.MESSAGE_ID: MessageIdField,
    FieldKind.IN_REPLY_TO: InReplyToField,
    FieldKind.REFERENCES: ReferencesField,
    FieldKind.SUBJECT: SubjectField,
    FieldKind.COMMENTS: CommentsField,
    FieldKind.KEYWORDS: KeywordsField,
    FieldKind.DATE: DateField,
    FieldKind.FROM: FromField,
    FieldKind.SENDER: SenderField,
    FieldKind.REPLY_TO: ReplyToField,
    FieldKind.RESENT_DATE: ResentDateField,
    FieldKind.RESENT_FROM: ResentFromField,
    FieldKind.RESENT_SENDER: ResentSenderField,
    FieldKind.RESENT_TO: ResentToField,
    FieldKind.RESENT_CC: ResentCcField,
    FieldKind.RESENT_BCC: ResentBccField,
    FieldKind.RESENT_MESSAGE_ID: ResentMessageIdField,
    FieldKind.RETURN_PATH: ReturnPathField,
    FieldKind.RECEIVED: ReceivedField,
    FieldKind.MIME_VERSION: MimeVersionField,
    FieldKind.CONTENT_TRANSFER_ENCODING: ContentTransferEncodingField,
    FieldKind.CONTENT_DESCRIPTION: ContentDescriptionField,
    FieldKind.CONTENT_DISPOSITION: ContentDispositionField,
    FieldKind.CONTENT_TYPE: ContentTypeField,
    FieldKind.CONTENT_ID: ContentIdField,
    FieldKind.CONTENT_LOCATION: ContentLocationField,
})

REGISTRY = MappingProxyType({
    kind.value: RegistryEntry(kind, field_cls, field_cls.__NAME__)
    for kind, field_cls in FIELD_CLASSES.items()
})

FIELD_ORDER = (
    FieldKind.RETURN_PATH, FieldKind.RECEIVED,
    FieldKind.RESENT_DATE, FieldKind.RESENT_FROM, FieldKind.RESENT_SENDER, FieldKind.RESENT_TO,
    FieldKind.RESENT_CC, FieldKind.RESENT_BCC, FieldKind.RESENT_MESSAGE_ID,
    FieldKind.DATE, FieldKind.FROM, FieldKind.SENDER, FieldKind.REPLY_TO, FieldKind.TO, FieldKind.CC, FieldKind.BCC,
    FieldKind.MESSAGE_ID, FieldKind.IN_REPLY_TO, FieldKind.REFERENCES,
    FieldKind.SUBJECT, FieldKind.COMMENTS, FieldKind.KEYWORDS,
    FieldKind.MIME_VERSION, FieldKind.CONTENT_TYPE, FieldKind.CONTENT_TRANSFER_ENCODING,
    FieldKind.CONTENT_LOCATION, FieldKind.CONTENT_DISPOSITION, FieldKind.CONTENT_DESCRIPTION,
)

FIELD_ORDER_LOOKUP = MappingProxyType({kind.value: i for i, kind in enumerate(FIELD_ORDER)})


def normalize(name: str) -> str:
    return str(name).strip().lower()


def lookup(name: str) -> Optional[Type[HeaderField]]:
    kind = FIELD_KIND_BY_STR.get(normalize(name))
    if kind is None:
        return None
    return FIELD_CLASSES[kind]


def canonical_name(name: str) -> str:
    """
    Display form of a field name: the registered capitalization for known
    fields ("message-id" -> "Message-ID"), the name as given otherwise.
    """
    entry = REGISTRY.get(normalize(name))
    if entry is None:
        return name
    return entry.capitalized


def field_order_id(name: str) -> int:
    return FIELD_ORDER_LOOKUP.get(normalize(name), UNKNOWN_FIELD_ORDER)
