"""
Writer loop helpers that drain a generator into corpus bytes.
"""
import logging
import random
from pathlib import Path
from typing import Generator, Iterable, Union

from corpus_gen.custom_template import GeneratorWithCustomTemplate
from corpus_gen.errors import ConfigError, EndOfStream
from corpus_gen.fields import Config, Field, load_fields
from corpus_gen.text_template import GeneratorWithTextTemplate

logger = logging.getLogger(__name__)

TEMPLATE_TYPES = {
    'custom': GeneratorWithCustomTemplate,
    'text': GeneratorWithTextTemplate,
}

CorpusGenerator = Union[GeneratorWithCustomTemplate, GeneratorWithTextTemplate]


def new_generator(
    template: Union[bytes, str],
    cfg: Config,
    fields: Iterable[Field],
    tot_size: int = 0,
    template_type: str = 'custom',
) -> CorpusGenerator:
    """
    Build a generator for the given template type.

    Args:
        template: Template source
        cfg: Per-field generation config
        fields: Declared fields
        tot_size: Target corpus size in bytes, 0 for unbounded
        template_type: 'custom' for {{.field}} templates, 'text' for Jinja2

    Returns:
        A generator ready to emit events
    """
    try:
        generator_cls = TEMPLATE_TYPES[template_type]
    except KeyError:
        raise ConfigError(
            f"unknown template type '{template_type}', expected one of {sorted(TEMPLATE_TYPES)}"
        ) from None

    return generator_cls(template, cfg, list(fields), tot_size)


def _check_bounded(gen: CorpusGenerator, max_events: int) -> None:
    if not gen.tot_events and not max_events:
        raise ValueError("generator is unbounded: set a target size or max_events")


def render_corpus(gen: CorpusGenerator, max_events: int = 0) -> bytes:
    """
    Emit events into a single buffer until the generator is exhausted.

    Args:
        gen: Generator to drain
        max_events: Stop after this many events, 0 for no limit

    Returns:
        The corpus as bytes
    """
    _check_bounded(gen, max_events)

    buf = bytearray()
    events = 0
    while not max_events or events < max_events:
        try:
            gen.emit(buf)
        except EndOfStream:
            break
        events += 1

    logger.info("rendered %d events, %d bytes", events, len(buf))
    return bytes(buf)


def stream_corpus(
    gen: CorpusGenerator,
    chunk_bytes: int,
    max_events: int = 0,
) -> Generator[bytes, None, None]:
    """
    Emit events and yield the corpus as a stream of chunks.

    Chunks hold whole events and are at least chunk_bytes long, except the
    last one.

    Args:
        gen: Generator to drain
        chunk_bytes: Minimum chunk size in bytes
        max_events: Stop after this many events, 0 for no limit

    Yields:
        Chunks of bytes
    """
    _check_bounded(gen, max_events)
    if chunk_bytes <= 0:
        raise ValueError("chunk_bytes must be positive")

    buf = bytearray()
    events = 0
    while not max_events or events < max_events:
        event_start = len(buf)
        try:
            gen.emit(buf)
        except EndOfStream:
            break
        except Exception:
            # Drop the partial event before surfacing the error.
            del buf[event_start:]
            raise
        events += 1

        if len(buf) >= chunk_bytes:
            yield bytes(buf)
            buf.clear()

    if buf:
        yield bytes(buf)

    logger.info("streamed %d events", events)


def build_generator(settings) -> CorpusGenerator:
    """
    Load the template, fields and config named by settings and build a generator.

    Args:
        settings: A validated Settings instance

    Returns:
        A generator ready to emit events
    """
    if settings.seed is not None:
        random.seed(settings.seed)

    template = Path(settings.template_path).read_bytes()
    fields = load_fields(settings.fields_path)
    cfg = Config.load(settings.config_path) if settings.config_path else Config()

    logger.info(
        "building %s generator from %s with %d fields",
        settings.template_type, settings.template_path, len(fields),
    )
    return new_generator(template, cfg, fields, settings.tot_size, settings.template_type)
