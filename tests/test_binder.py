"""
Unit tests for the field binder.
"""
import ipaddress
import random
import string
import unittest
from datetime import datetime, timezone

from corpus_gen.binder import MAX_DUP_ATTEMPTS, bind_field, render_value
from corpus_gen.errors import DuplicateValueError, FieldBindingError
from corpus_gen.fields import Config, Field
from corpus_gen.state import GenState


def bind(field, config=None, with_return=True):
    cfg = Config.from_dict({'fields': config or []})
    field_map = {}
    bind_field(cfg, field, field_map, with_return)
    return field_map[field.name]


class TestRenderValue(unittest.TestCase):
    """Test cases for render_value."""

    def test_booleans_are_lowercase(self):
        self.assertEqual(render_value(True), 'true')
        self.assertEqual(render_value(False), 'false')

    def test_dates_are_iso_with_millis(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        self.assertEqual(render_value(value), '2024-01-02T03:04:05.678Z')

    def test_other_values(self):
        self.assertEqual(render_value(42), '42')
        self.assertEqual(render_value(1.5), '1.5')
        self.assertEqual(render_value('foo'), 'foo')
        self.assertEqual(render_value(None), '')


class TestBindField(unittest.TestCase):
    """Test cases for bind_field."""

    def setUp(self):
        random.seed(1234)

    def test_value_returning_flavor(self):
        """Test that with_return binds a function returning the value."""
        value = bind(Field('a', 'keyword'), [{'name': 'a', 'value': 'foo'}])

        self.assertEqual(value(GenState.for_fields(['a'])), 'foo')

    def test_buffer_writing_flavor(self):
        """Test that the buffer flavor appends rendered bytes."""
        emit = bind(Field('a', 'boolean'), [{'name': 'a', 'value': True}], with_return=False)
        buf = bytearray(b'>')

        self.assertIsNone(emit(GenState.for_fields(['a']), buf))
        self.assertEqual(bytes(buf), b'>true')

    def test_keyword_default_length(self):
        """Test that random keywords use the default alphabet and length."""
        value = bind(Field('a', 'keyword'))
        state = GenState.for_fields(['a'])

        for _ in range(50):
            keyword = value(state)
            self.assertTrue(5 <= len(keyword) <= 15)
            self.assertTrue(set(keyword) <= set(string.ascii_lowercase + string.digits))

    def test_keyword_length_config(self):
        value = bind(Field('a', 'keyword'), [{'name': 'a', 'length': {'min': 3, 'max': 3}}])

        self.assertEqual(len(value(GenState.for_fields(['a']))), 3)

    def test_constant_keyword_is_stable(self):
        """Test that a constant_keyword without a value repeats one random keyword."""
        value = bind(Field('a', 'constant_keyword'))
        state = GenState.for_fields(['a'])

        self.assertEqual(len({value(state) for _ in range(20)}), 1)

    def test_long_range(self):
        value = bind(Field('n', 'long'), [{'name': 'n', 'range': {'min': 10, 'max': 20}}])
        state = GenState.for_fields(['n'])

        for _ in range(100):
            n = value(state)
            self.assertIsInstance(n, int)
            self.assertTrue(10 <= n <= 20)

    def test_double_range(self):
        value = bind(Field('d', 'double'), [{'name': 'd', 'range': {'min': 0.5, 'max': 1.5}}])
        state = GenState.for_fields(['d'])

        for _ in range(100):
            self.assertTrue(0.5 <= value(state) <= 1.5)

    def test_enum(self):
        value = bind(Field('a', 'keyword'), [{'name': 'a', 'enum': ['x', 'y']}])
        state = GenState.for_fields(['a'])

        self.assertEqual({value(state) for _ in range(100)}, {'x', 'y'})

    def test_ip(self):
        value = bind(Field('ip', 'ip'))
        ipaddress.IPv4Address(value(GenState.for_fields(['ip'])))

    def test_geo_point(self):
        value = bind(Field('loc', 'geo_point'))
        lat, lon = value(GenState.for_fields(['loc'])).split(',')

        self.assertTrue(-90 <= float(lat) <= 90)
        self.assertTrue(-180 <= float(lon) <= 180)

    def test_date_period(self):
        """Test that dates fall within the configured period before now."""
        value = bind(Field('ts', 'date'), [{'name': 'ts', 'period': 3600}])
        before = datetime.now(timezone.utc)
        ts = value(GenState.for_fields(['ts']))

        self.assertLessEqual(ts, datetime.now(timezone.utc))
        self.assertGreaterEqual((before - ts).total_seconds(), -1)
        self.assertLessEqual((before - ts).total_seconds(), 3601)

    def test_cardinality_cycles(self):
        """Test that only `cardinality` distinct values are produced."""
        value = bind(Field('n', 'long'), [{'name': 'n', 'cardinality': 3, 'range': {'min': 0, 'max': 10 ** 9}}])
        state = GenState.for_fields(['n'])

        values = []
        for _ in range(12):
            values.append(value(state))
            state.counter += 1

        cache = state.prev_cache_cardinality['n']
        self.assertEqual(len(cache), 3)
        self.assertEqual(set(values), set(cache))
        self.assertEqual(values[3:6], cache)

    def test_unique_values(self):
        """Test that unique fields never repeat a value and fail once exhausted."""
        value = bind(Field('a', 'keyword'), [{'name': 'a', 'enum': ['x', 'y'], 'unique': True}])
        state = GenState.for_fields(['a'])

        self.assertEqual({value(state), value(state)}, {'x', 'y'})
        self.assertEqual(state.prev_cache_for_dup['a'], {'x', 'y'})

        with self.assertRaises(DuplicateValueError) as ctx:
            value(state)
        self.assertEqual(ctx.exception.attempts, MAX_DUP_ATTEMPTS)

    def test_unsupported_type(self):
        with self.assertRaises(FieldBindingError):
            bind(Field('a', 'histogram'))

    def test_unsupported_type_with_value_or_enum(self):
        for config in [{'name': 'h', 'value': 1}, {'name': 'h', 'enum': [1, 2]}]:
            with self.subTest(config=config):
                with self.assertRaises(FieldBindingError):
                    bind(Field('h', 'histogram'), [config])

    def test_invalid_range(self):
        with self.assertRaises(FieldBindingError):
            bind(Field('n', 'long'), [{'name': 'n', 'range': {'min': 5, 'max': 1}}])

    def test_invalid_options(self):
        """Test option combinations rejected at bind time."""
        invalid = [
            {'name': 'a', 'cardinality': -1},
            {'name': 'a', 'enum': []},
            {'name': 'a', 'unique': True, 'cardinality': 2},
            {'name': 'a', 'unique': True, 'value': 'x'},
        ]
        for config in invalid:
            with self.subTest(config=config):
                with self.assertRaises(FieldBindingError):
                    bind(Field('a', 'keyword'), [config])


if __name__ == '__main__':
    unittest.main()
