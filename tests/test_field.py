import logging

import pytest

from pymail.mail.errors import ParseError, FieldSyntaxError
from pymail.mail.field import Field
from pymail.mail.fields import OptionalField, UnstructuredField, SubjectField, DateField
from pymail.mail.mail_types import FieldState, DEFAULT_CHARSET


class TestConstruction:

    def test_raw_line(self):
        field = Field('subject: Hello')
        assert field.name == 'Subject'
        assert field.value == 'Hello'
        assert field.charset == DEFAULT_CHARSET

    def test_raw_line_second_argument_is_charset(self):
        field = Field('Subject: Hello', 'iso-8859-1')
        assert field.charset == 'iso-8859-1'
        assert field.value == 'Hello'

    def test_name_and_value(self):
        field = Field('subject', 'Hello', 'us-ascii')
        assert field.name == 'Subject'
        assert field.value == 'Hello'
        assert field.charset == 'us-ascii'

    def test_name_only(self):
        field = Field('Subject')
        assert field.state == FieldState.EMPTY
        assert field.value == ''

    def test_unknown_name_keeps_its_case(self):
        field = Field('X-Custom-THING: value')
        assert field.name == 'X-Custom-THING'
        assert isinstance(field.field, OptionalField)
        assert field.value == 'value'

    def test_folded_raw_line(self):
        assert Field('Subject: Hello\r\n World').value == 'Hello World'

    def test_folded_value(self):
        assert Field('Subject', 'Hello\r\n\t  World').value == 'Hello World'

    def test_folded_date(self):
        assert Field('Date: Tue, 1 Jul 2003\r\n 10:52:37 +0200').value.hour == 10

    def test_value_containing_colon(self):
        assert Field('X-Time: 12:30').value == '12:30'

    def test_prebuilt_payload(self):
        field = Field('Content-Type', ['text', 'plain', {'charset': 'UTF-8'}])
        assert field.encoded() == 'Content-Type: text/plain; charset=UTF-8\r\n'

    def test_from_line(self):
        field = Field.from_line('To: a@example.com', 'us-ascii')
        assert field.name == 'To'
        assert field.charset == 'us-ascii'
        with pytest.raises(ValueError):
            Field.from_line('To')

    def test_create(self):
        field = Field.create('to', 'a@example.com')
        assert field.name == 'To'
        assert field.value[0].addr_spec == 'a@example.com'
        with pytest.raises(ValueError):
            Field.create('To: a@example.com')


    def test_blank_value_is_no_value(self):
        assert Field('Date', '').value.tzinfo is not None
        assert Field('Date', '').errors == []
        assert Field('Content-Type', []).value.main_type == 'text'
        assert Field('Content-Type', ()).encoded() == 'Content-Type: text/plain\r\n'
        assert Field('Subject', '').state == FieldState.EMPTY


class TestMalformedRawSource:

    def test_bad_name_gives_absent_value(self, caplog):
        with caplog.at_level(logging.WARNING, logger='pymail.mail.field'):
            field = Field('Bad Name: value')
            assert field.value == ''
        assert 'Could not parse' in caplog.text


class TestFallback:

    def test_bad_date_is_kept_as_text(self):
        field = Field('Date', 'not-a-date')
        assert isinstance(field.field, UnstructuredField)
        assert field.value == 'not-a-date'
        assert len(field.errors) == 1
        assert field.errors[0].element == 'Date'
        assert field.errors[0].value == 'not-a-date'
        assert isinstance(field.errors[0].error, ParseError)

    def test_bad_date_encodes_as_text(self):
        assert Field('Date: not-a-date').encoded() == 'Date: not-a-date\r\n'

    def test_bad_address(self):
        field = Field('To: not an address')
        assert field.value == 'not an address'
        assert field.errors[0].element == 'To'

    def test_valid_field_has_no_errors(self):
        assert Field('To', 'a@example.com').errors == []

    def test_parse_error_message(self):
        error = ParseError('Date', 'xyz', 'invalid date')
        assert str(error) == 'Date can not parse |xyz|\nReason was: invalid date'


class TestInvalidPayload:

    def test_value_access_raises(self):
        field = Field('Content-Type', ['text'])
        with pytest.raises(FieldSyntaxError):
            field.value

    def test_assignment_raises(self):
        field = Field('Content-Type', 'text/plain')
        with pytest.raises(FieldSyntaxError):
            field.value = ['text']


    def test_bad_address_in_list_raises(self):
        field = Field('To', ['not an address'])
        with pytest.raises(FieldSyntaxError):
            field.value


class TestState:

    def test_raw_then_resolved(self):
        field = Field('Subject: Hi')
        assert field.state == FieldState.RAW_ONLY
        field.value
        assert field.state == FieldState.RESOLVED

    def test_assignment_resolves(self):
        field = Field('Subject')
        field.value = 'Hi'
        assert field.state == FieldState.RESOLVED
        assert field.value == 'Hi'

    def test_encoded_as_is_uses_raw_source(self):
        field = Field('X-Custom: raw  value')
        assert field.encoded_as_is() == 'X-Custom: raw  value\r\n'
        assert field.state == FieldState.RAW_ONLY


class TestEncoding:

    def test_name_and_value(self):
        assert Field('Subject', 'Hello').encoded() == 'Subject: Hello\r\n'

    def test_raw_line_is_reencoded(self):
        assert Field('subject:    Hello  ').encoded() == 'Subject: Hello\r\n'

    def test_empty_body(self):
        assert Field('Subject: ').encoded() == ''

    def test_encoder_runs_once(self, monkeypatch):
        field = Field('Subject', 'Hello')
        delegate = field.field
        original = delegate.encode
        calls = []

        def encode():
            calls.append(1)
            return original()

        monkeypatch.setattr(delegate, 'encode', encode)

        first = field.encoded()
        second = field.encoded()
        assert first == second == 'Subject: Hello\r\n'
        assert len(calls) == 1

    def test_single_terminator_when_delegate_adds_one(self, monkeypatch):
        field = Field('Subject', 'Hello')
        monkeypatch.setattr(field.field, 'encode', lambda: 'Hello\r\n')
        assert field.encoded() == 'Subject: Hello\r\n'

    def test_single_terminator_on_raw_source(self):
        field = Field('X-Custom: value\r\n')
        assert field.encoded_as_is() == 'X-Custom: value\r\n'
        assert field.encoded_as_is() == 'X-Custom: value\r\n'

    def test_value_assignment_reencodes(self):
        field = Field('Subject: Old')
        assert field.encoded() == 'Subject: Old\r\n'
        field.value = 'New'
        assert field.encoded() == 'Subject: New\r\n'

    def test_update(self):
        field = Field('To', 'a@example.com')
        field.encoded()
        field.update('cc', 'x@example.com')
        assert field.name == 'Cc'
        assert field.encoded() == 'Cc: x@example.com\r\n'
        assert field.field_order_id == Field('Cc').field_order_id

    def test_update_rehashes_on_the_new_name(self):
        field = Field('To', 'a@example.com')
        field.update('Cc', 'x@example.com')
        assert field == Field('CC')
        assert hash(field) == hash(Field('cc'))
        assert field not in {Field('To')}


class TestForwarding:

    def test_reads_are_forwarded(self):
        field = Field('Content-Type: text/html; charset=utf-8')
        assert field.mime_type == 'text/html'
        assert field.parameters == {'charset': 'utf-8'}

    def test_mutator_invalidates_cache(self):
        field = Field('To', 'a@example.com')
        assert field.encoded() == 'To: a@example.com\r\n'
        field.add_address('b@example.com')
        assert field.encoded() == 'To: a@example.com, b@example.com\r\n'

    def test_attribute_assignment_invalidates_cache(self):
        field = Field('Mime-Version', '1.0')
        assert field.encoded() == 'Mime-Version: 1.0\r\n'
        field.minor = 1
        assert field.encoded() == 'Mime-Version: 1.1\r\n'

    def test_property_assignment_invalidates_cache(self):
        field = Field('Content-Type', 'text/plain')
        field.encoded()
        field.sub_type = 'HTML'
        assert field.encoded() == 'Content-Type: text/html\r\n'

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            Field('Subject', 'x').no_such_thing

    def test_str(self):
        assert str(Field('Subject', 'Hello')) == 'Hello'


class TestComparison:

    def test_equality_ignores_value_and_case(self):
        assert Field('To', 'a@b.com') == Field('TO', 'x@y.com')

    def test_different_names(self):
        assert Field('To', 'a@b.com') != Field('Cc', 'a@b.com')

    def test_hash_follows_equality(self):
        assert len({Field('To', 'a@b.com'), Field('to', 'c@d.com')}) == 1

    def test_responsible_for(self):
        assert Field('Message-ID', '<a@b>').responsible_for('message-id')
        assert not Field('Message-ID', '<a@b>').responsible_for('content-id')

    def test_ordering(self):
        assert Field('Return-Path', '<a@b.com>') < Field('Date')
        assert Field('Subject', 'x') > Field('To', 'a@b.com')
        assert Field('X-A', '1') <= Field('X-B', '2')
        assert Field('X-A', '1') >= Field('X-B', '2')

    def test_sort_is_stable_for_unknown_fields(self):
        fields = [
            Field('X-B', '1'),
            Field('Subject', 's'),
            Field('X-A', '2'),
            Field('Date', 'Tue, 1 Jul 2003 10:52:37 +0200'),
            Field('To', 'a@b.com'),
            Field('X-C', '3'),
            Field('Received: from a by b; Tue, 1 Jul 2003 10:52:37 +0200'),
        ]
        names = [field.name for field in sorted(fields)]
        assert names == ['Received', 'Date', 'To', 'Subject', 'X-B', 'X-A', 'X-C']

    def test_unknown_fields_share_priority(self):
        assert Field('X-A').field_order_id == Field('X-Zzz').field_order_id == 100
