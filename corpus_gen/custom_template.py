"""
Generator that resolves a custom template into a flat list of emitters.

The template is tokenized once at construction. Each placeholder becomes an
emitter holding its literal prefix and the buffer-writing function bound to
its field, so emitting an event is a single pass that appends bytes to the
output buffer.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

from corpus_gen.binder import EmitFNotReturn, bind_field
from corpus_gen.errors import EndOfStream, FieldNotInFieldsError
from corpus_gen.estimator import estimate_tot_events
from corpus_gen.fields import Config, Field
from corpus_gen.state import GenState
from corpus_gen.tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Emitter:
    field_name: str
    field_type: str
    emit_func: EmitFNotReturn
    prefix: bytes


def _render_sample(emitters: Sequence[Emitter], trailing_template: bytes) -> bytes:
    buf = bytearray()
    for e in emitters:
        buf += e.prefix
        e.emit_func(GenState.for_fields([e.field_name]), buf)
    buf += trailing_template
    return bytes(buf)


class GeneratorWithCustomTemplate:
    """Emits events from a custom ``{{.field}}`` template."""

    def __init__(
        self,
        template: Union[bytes, str],
        cfg: Config,
        fields: Iterable[Field],
        tot_size: int = 0,
    ):
        if isinstance(template, str):
            template = template.encode('utf-8')

        tokens, trailing_template = tokenize(template) if template else ([], b'')

        self.state = GenState()
        field_map = {}
        field_types = {}
        for field in fields:
            bind_field(cfg, field, field_map, False)
            field_types[field.name] = field.type
            self.state.register(field.name)

        emitters = []
        for token in tokens:
            if token.field_name not in field_map:
                raise FieldNotInFieldsError(token.field_name)
            emitters.append(Emitter(
                field_name=token.field_name,
                field_type=field_types[token.field_name],
                emit_func=field_map[token.field_name],
                prefix=token.prefix,
            ))

        self.emitters: Tuple[Emitter, ...] = tuple(emitters)
        self.trailing_template = trailing_template
        self.tot_events = estimate_tot_events(
            tot_size, lambda: _render_sample(self.emitters, self.trailing_template)
        )
        logger.debug(
            "custom template resolved to %d emitters, tot_events=%d",
            len(self.emitters), self.tot_events,
        )

    def emit(self, buf: bytearray, state: Optional[GenState] = None) -> None:
        """
        Append one event to buf.

        state defaults to the generator's own GenState, so a writer loop only
        needs the buffer; pass another state to run it independently.

        Raises:
            EndOfStream: If the bounded number of events was already emitted
        """
        if state is None:
            state = self.state

        if self.tot_events and state.counter >= self.tot_events:
            raise EndOfStream()

        for e in self.emitters:
            buf += e.prefix
            e.emit_func(state, buf)

        buf += self.trailing_template
        state.counter += 1

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
