import logging

from pymail.main_reorder import main
from pymail.mail.field import Field
from pymail.mail.header import Header
from pymail.mail.parser import parse_header


RAW_HEADER = (
    "Subject: Hello\r\n"
    " World\r\n"
    "X-Custom: one\r\n"
    "From: a@example.com\r\n"
    "To: b@example.com\r\n"
    "\r\n"
    "Body: not a header\r\n"
)


class TestParseHeader:

    def test_fields_until_blank_line(self):
        header = parse_header(RAW_HEADER)
        assert len(header) == 4
        assert 'Body' not in header

    def test_continuation_lines_are_joined(self):
        header = parse_header(RAW_HEADER)
        assert header['subject'].value == 'Hello World'

    def test_bare_newlines(self):
        header = parse_header(RAW_HEADER.replace('\r\n', '\n'))
        assert header['Subject'].value == 'Hello World'
        assert header['to'].value[0].addr_spec == 'b@example.com'

    def test_leading_continuation_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger='pymail.mail.parser'):
            header = parse_header(" orphan\r\nSubject: x\r\n")
        assert len(header) == 1
        assert 'orphan' in caplog.text

    def test_line_without_colon_is_skipped(self):
        header = parse_header("Subject: x\r\nnonsense\r\n")
        assert len(header) == 1

    def test_charset_is_passed_to_fields(self):
        header = parse_header("Subject: x\r\n", 'iso-8859-1')
        assert header['subject'].charset == 'iso-8859-1'

    def test_encoded_in_canonical_order(self):
        header = parse_header(RAW_HEADER)
        assert header.encoded() == (
            "From: a@example.com\r\n"
            "To: b@example.com\r\n"
            "Subject: Hello World\r\n"
            "X-Custom: one\r\n"
        )


class TestHeader:

    def test_repeated_fields(self):
        header = Header()
        header['Received'] = 'from a by b; Tue, 1 Jul 2003 10:52:37 +0200'
        header['Received'] = 'from b by c; Tue, 1 Jul 2003 10:53:37 +0200'
        header['Subject'] = 'x'
        assert len(header['received']) == 2
        assert isinstance(header['subject'], Field)
        assert header['cc'] is None

    def test_delete(self):
        header = Header([Field('To', 'a@example.com'), Field('Cc', 'b@example.com')])
        del header['to']
        assert 'To' not in header
        assert 'Cc' in header

    def test_unknown_fields_keep_insertion_order(self):
        header = Header()
        header.add('X-Second', '2')
        header.add('X-First', '1')
        header.add('Date', 'Tue, 1 Jul 2003 10:52:37 +0200')
        assert [field.name for field in header] == ['Date', 'X-Second', 'X-First']

    def test_empty_fields_are_omitted(self):
        header = Header()
        header.add('Subject', '')
        header.add('X-Note', 'kept')
        assert header.encoded() == 'X-Note: kept\r\n'

    def test_add_field(self):
        header = Header()
        header.add_field(Field('Mime-Version: 1.0'))
        assert header.encoded() == 'Mime-Version: 1.0\r\n'


class TestMainReorder:

    def test_reorders_file(self, tmp_path):
        path = tmp_path / 'header.txt'
        path.write_text("X-Custom: one\nDate: garbage\nTo: b@example.com\n", encoding='utf-8')
        assert main(str(path)) == (
            "Date: garbage\r\n"
            "To: b@example.com\r\n"
            "X-Custom: one\r\n"
        )
