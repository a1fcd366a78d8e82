import logging
from typing import List

from .field import Field
from .header import Header
from .mail_types import DEFAULT_CHARSET


logger = logging.getLogger('pymail.mail.parser')


def _read_lines(data: str) -> List[str]:
    lines = []
    for line in data.replace('\r\n', '\n').split('\n'):
        if len(line.strip()) < 1:
            # end of the header block
            break

        if line[0] in (' ', '\t'):
            if not lines:
                logger.warning('Skipping continuation line before first field: %r', line)
                continue
            lines[-1] += '\r\n' + line
        else:
            lines.append(line)

    return lines


def parse_header(data: str, charset: str = DEFAULT_CHARSET) -> Header:
    fields = list()
    for line in _read_lines(data):
        if ':' not in line:
            logger.warning('Skipping line without a field name: %r', line)
            continue
        fields.append(Field(line, charset))

    return Header(fields, charset)
