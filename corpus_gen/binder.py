"""
Binds field declarations to the functions that produce their values.

Each declared field is turned into one of two function flavors:

* a value-returning function ``f(state) -> value``, used by the Jinja2
  generator's ``generate`` global;
* a buffer-writing function ``f(state, buf) -> None``, used by the custom
  template generator, which appends the rendered value to a ``bytearray``.

Both flavors draw from the module-level ``random`` generator and format values
with ``render_value``, so seeding ``random`` gives identical output from
either generator.
"""
import ipaddress
import random
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict

from corpus_gen.errors import DuplicateValueError, FieldBindingError
from corpus_gen.fields import Config, Field, FieldConfig
from corpus_gen.state import GenState

EmitF = Callable[[GenState], Any]
EmitFNotReturn = Callable[[GenState, bytearray], None]

MAX_DUP_ATTEMPTS = 1000

KEYWORD_LENGTH_MIN = 5
KEYWORD_LENGTH_MAX = 15

INTEGER_TYPES = ('long', 'integer', 'short', 'byte', 'unsigned_long')
FLOAT_TYPES = ('double', 'float', 'half_float', 'scaled_float')
KEYWORD_TYPES = ('keyword', 'wildcard', 'text')
SUPPORTED_TYPES = KEYWORD_TYPES + INTEGER_TYPES + FLOAT_TYPES + (
    'constant_keyword', 'boolean', 'date', 'ip', 'geo_point',
)

_KEYWORD_ALPHABET = string.ascii_lowercase + string.digits

_INTEGER_DEFAULTS = {
    'long': (0, 10000),
    'integer': (0, 10000),
    'unsigned_long': (0, 10000),
    'short': (0, 32767),
    'byte': (0, 127),
}


def render_value(value: Any) -> str:
    """Return the canonical text written to the corpus for a field value."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, datetime):
        return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
    return str(value)


def _range(fc: FieldConfig, default_min, default_max):
    lo = default_min if fc.range_min is None else fc.range_min
    hi = default_max if fc.range_max is None else fc.range_max
    if lo > hi:
        raise FieldBindingError(fc.name, f"range min {lo} is greater than max {hi}")
    return lo, hi


def _random_keyword(lo: int, hi: int) -> str:
    return ''.join(random.choices(_KEYWORD_ALPHABET, k=random.randint(lo, hi)))


def _keyword_maker(fc: FieldConfig) -> Callable[[], Any]:
    lo = KEYWORD_LENGTH_MIN if fc.length_min is None else int(fc.length_min)
    hi = max(lo, KEYWORD_LENGTH_MAX) if fc.length_max is None else int(fc.length_max)
    if lo < 0 or lo > hi:
        raise FieldBindingError(fc.name, f"invalid length bounds {lo}..{hi}")
    return lambda: _random_keyword(lo, hi)


def _integer_maker(field_type: str, fc: FieldConfig) -> Callable[[], Any]:
    lo, hi = _range(fc, *_INTEGER_DEFAULTS[field_type])
    lo, hi = int(lo), int(hi)
    return lambda: random.randint(lo, hi)


def _float_maker(fc: FieldConfig) -> Callable[[], Any]:
    lo, hi = _range(fc, 0.0, 10000.0)
    return lambda: round(random.uniform(lo, hi), 2)


def _date_maker(fc: FieldConfig) -> Callable[[], Any]:
    if fc.period < 0:
        raise FieldBindingError(fc.name, "period must not be negative")
    period = fc.period

    def make():
        now = datetime.now(timezone.utc)
        if period:
            return now - timedelta(seconds=random.uniform(0, period))
        return now

    return make


def _ip_maker(fc: FieldConfig) -> Callable[[], Any]:
    return lambda: str(ipaddress.IPv4Address(random.randint(0x01000000, 0xDFFFFFFF)))


def _geo_point_maker(fc: FieldConfig) -> Callable[[], Any]:
    return lambda: f"{round(random.uniform(-90, 90), 4)},{round(random.uniform(-180, 180), 4)}"


def _value_maker(field: Field, fc: FieldConfig) -> Callable[[], Any]:
    if field.type not in SUPPORTED_TYPES:
        raise FieldBindingError(field.name, f"unsupported field type '{field.type}'")

    if fc.value is not None:
        constant = fc.value
        return lambda: constant

    if fc.enum is not None:
        if not fc.enum:
            raise FieldBindingError(field.name, "enum must not be empty")
        choices = list(fc.enum)
        return lambda: random.choice(choices)

    field_type = field.type
    if field_type in KEYWORD_TYPES:
        return _keyword_maker(fc)
    if field_type == 'constant_keyword':
        # One value for the whole run.
        constant = _keyword_maker(fc)()
        return lambda: constant
    if field_type in INTEGER_TYPES:
        return _integer_maker(field_type, fc)
    if field_type in FLOAT_TYPES:
        return _float_maker(fc)
    if field_type == 'boolean':
        return lambda: random.random() < 0.5
    if field_type == 'date':
        return _date_maker(fc)
    if field_type == 'ip':
        return _ip_maker(fc)
    return _geo_point_maker(fc)


def _bind_value(field: Field, fc: FieldConfig) -> EmitF:
    if fc.cardinality < 0:
        raise FieldBindingError(field.name, "cardinality must not be negative")
    if fc.unique and fc.cardinality:
        raise FieldBindingError(field.name, "unique and cardinality are mutually exclusive")
    if fc.unique and fc.value is not None:
        raise FieldBindingError(field.name, "a constant value cannot be unique")

    make = _value_maker(field, fc)
    name = field.name

    def fresh(state: GenState) -> Any:
        if not fc.unique:
            return make()

        seen = state.prev_cache_for_dup[name]
        for _ in range(MAX_DUP_ATTEMPTS):
            value = make()
            if value not in seen:
                seen.add(value)
                return value
        raise DuplicateValueError(name, MAX_DUP_ATTEMPTS)

    if not fc.cardinality:
        return fresh

    cardinality = fc.cardinality

    def cycled(state: GenState) -> Any:
        cache = state.prev_cache_cardinality[name]
        if len(cache) >= cardinality:
            return cache[state.counter % cardinality]
        value = fresh(state)
        if value not in cache:
            cache.append(value)
        return value

    return cycled


def bind_field(cfg: Config, field: Field, field_map: Dict[str, Any], with_return: bool) -> None:
    """
    Bind a field declaration and store the resulting function in field_map.

    Args:
        cfg: Per-field generation config
        field: Field declaration
        field_map: Mapping of field name to bound function, updated in place
        with_return: True for a value-returning function, False for a
            buffer-writing one

    Raises:
        FieldBindingError: If the field type or its config is invalid
    """
    value = _bind_value(field, cfg.get_field(field.name))

    if with_return:
        field_map[field.name] = value
        return

    def emit(state: GenState, buf: bytearray) -> None:
        buf.extend(render_value(value(state)).encode('utf-8'))

    field_map[field.name] = emit
