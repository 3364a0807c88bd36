"""
Field definitions and per-field generation config, loaded from YAML.

A fields file lists the fields a template may reference:

    - name: host.name
      type: keyword
    - name: event.duration
      type: long

A config file tunes how values are produced:

    fields:
      - name: host.name
        cardinality: 10
      - name: event.duration
        range:
          min: 1
          max: 5000
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from corpus_gen.errors import ConfigError


@dataclass(frozen=True)
class Field:
    """A single field declaration."""

    name: str
    type: str


@dataclass(frozen=True)
class FieldConfig:
    """Generation options for one field; every option is optional."""

    name: str
    value: Any = None
    enum: Optional[List[Any]] = None
    range_min: Optional[float] = None
    range_max: Optional[float] = None
    length_min: Optional[int] = None
    length_max: Optional[int] = None
    cardinality: int = 0
    unique: bool = False
    period: float = 0.0


@dataclass
class Config:
    """Field configs indexed by field name."""

    fields: Dict[str, FieldConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Config':
        """Build a config from a parsed YAML document."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("config document must be a mapping")

        entries = data.get('fields') or []
        if not isinstance(entries, list):
            raise ConfigError("config 'fields' must be a list")

        configs = {}
        for entry in entries:
            field_config = _field_config_from_dict(entry)
            configs[field_config.name] = field_config

        return cls(fields=configs)

    @classmethod
    def load(cls, path: str) -> 'Config':
        """Load a config file; an empty file yields an empty config."""
        return cls.from_dict(_load_yaml(path))

    def get_field(self, name: str) -> FieldConfig:
        return self.fields.get(name) or FieldConfig(name=name)


def _bounds(entry: Dict[str, Any], key: str):
    bounds = entry.get(key)
    if bounds is None:
        return None, None
    if not isinstance(bounds, dict):
        raise ConfigError(f"field '{entry.get('name')}': '{key}' must be a mapping with min/max")
    return bounds.get('min'), bounds.get('max')


def _number(value):
    if value is None or isinstance(value, int):
        return value
    return float(value)


def _length(value):
    return None if value is None else int(value)


def _field_config_from_dict(entry: Any) -> FieldConfig:
    if not isinstance(entry, dict) or not entry.get('name'):
        raise ConfigError(f"config field entry must be a mapping with a name: {entry!r}")

    range_min, range_max = _bounds(entry, 'range')
    length_min, length_max = _bounds(entry, 'length')

    enum = entry.get('enum')
    if enum is not None and not isinstance(enum, list):
        raise ConfigError(f"field '{entry['name']}': 'enum' must be a list")

    try:
        return FieldConfig(
            name=str(entry['name']),
            value=entry.get('value'),
            enum=enum,
            range_min=_number(range_min),
            range_max=_number(range_max),
            length_min=_length(length_min),
            length_max=_length(length_max),
            cardinality=int(entry.get('cardinality', 0)),
            unique=bool(entry.get('unique', False)),
            period=float(entry.get('period', 0)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"field '{entry['name']}': {e}") from e


def fields_from_list(data: Any) -> List[Field]:
    """Build field declarations from a parsed fields document."""
    if isinstance(data, dict):
        data = data.get('fields')
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigError("fields document must be a list of {name, type} mappings")

    fields = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get('name') or not entry.get('type'):
            raise ConfigError(f"field entry needs both name and type: {entry!r}")
        fields.append(Field(name=str(entry['name']), type=str(entry['type'])))
    return fields


def load_fields(path: str) -> List[Field]:
    """Load field declarations from a YAML file."""
    return fields_from_list(_load_yaml(path))


def _load_yaml(path: str) -> Any:
    try:
        return yaml.safe_load(Path(path).read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
