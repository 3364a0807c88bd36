"""
Tokenizer for custom templates.

A custom template is literal text with ``{{.fieldName}}`` placeholders. The
tokenizer splits it into (literal prefix, field name) pairs plus the literal
text trailing the last placeholder. Anything that is not exactly a
placeholder, including stray braces and other ``{{ }}`` directives, is
literal text.

The scan is a small state machine over the template bytes:

* literal: copying literal bytes, looking for ``{{``
* placeholder-open: ``{{`` seen, expecting ``.``
* placeholder-body: ``{{.`` seen, reading the field name up to ``}}``

``cursor`` marks the first byte not yet moved into the prefix accumulator. A
tag that turns out not to be a placeholder is flushed into the accumulator up
to the point where it failed, so a literal run is never split and a fragment
repeated later in the template is always taken from the unconsumed part.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

_LITERAL = 'literal'
_PLACEHOLDER_OPEN = 'placeholder-open'
_PLACEHOLDER_BODY = 'placeholder-body'

_OPEN_BRACE = ord('{')
_CLOSE_BRACE = ord('}')
_DOT = ord('.')


@dataclass(frozen=True)
class Token:
    """One placeholder occurrence and the literal bytes written before it."""

    prefix: bytes
    field_name: str


def tokenize(template: bytes) -> Tuple[List[Token], bytes]:
    """
    Split a template into placeholder tokens and a trailing literal.

    Args:
        template: Raw template bytes

    Returns:
        Tuple of (tokens in template order, trailing literal)
    """
    tokens = []
    prefix = bytearray()
    cursor = 0
    tag_start = 0
    body_start = 0
    state = _LITERAL

    i = 0
    n = len(template)
    while i < n:
        byte = template[i]

        if state == _LITERAL:
            if byte == _OPEN_BRACE and template[i + 1:i + 2] == b'{':
                state = _PLACEHOLDER_OPEN
                tag_start = i
                i += 2
            else:
                i += 1

        elif state == _PLACEHOLDER_OPEN:
            if byte == _DOT:
                state = _PLACEHOLDER_BODY
                body_start = i + 1
            elif byte == _OPEN_BRACE:
                # Stray brace before "{{": it is literal, the tag shifts right.
                prefix += template[cursor:tag_start + 1]
                cursor = tag_start = tag_start + 1
            else:
                prefix += template[cursor:i]
                cursor = i
                state = _LITERAL
            i += 1

        else:
            if byte != _CLOSE_BRACE:
                i += 1
            elif i > body_start and template[i + 1:i + 2] == b'}':
                prefix += template[cursor:tag_start]
                field_name = template[body_start:i].decode('utf-8', errors='replace')
                tokens.append(Token(prefix=bytes(prefix), field_name=field_name))
                prefix = bytearray()
                i += 2
                cursor = i
                state = _LITERAL
            else:
                # Empty name or a single "}": the whole tag is literal.
                i += 1
                prefix += template[cursor:i]
                cursor = i
                state = _LITERAL

    prefix += template[cursor:]
    return tokens, bytes(prefix)


def parse_custom_template(template: bytes) -> Tuple[List[str], Dict[str, bytes], bytes]:
    """
    Parse a custom template.

    Returns:
        Tuple of (field names in template order, literal prefix of the last
        occurrence of each field, trailing literal)
    """
    if not template:
        return [], {}, b''

    tokens, trailing = tokenize(template)
    ordered_fields = [token.field_name for token in tokens]
    prefix_by_field = {token.field_name: token.prefix for token in tokens}

    return ordered_fields, prefix_by_field, trailing
