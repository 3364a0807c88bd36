"""
Command line entry point: generate a corpus to a local file or stdout.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import jinja2

from corpus_gen.errors import CorpusGenError
from corpus_gen.generators import build_generator, stream_corpus
from corpus_gen.settings import Settings
from corpus_gen.util import parse_size

logger = logging.getLogger(__name__)

CHUNK_BYTES = 1024 * 1024


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Generate a synthetic event corpus from a template')
    parser.add_argument('--template', required=True, help='Path to the template file')
    parser.add_argument('--fields', required=True, help='Path to the fields YAML file')
    parser.add_argument('--config', default='', help='Path to the field config YAML file')
    parser.add_argument('--template-type', choices=['custom', 'text'], default='custom',
                        help="'custom' for {{.field}} templates, 'text' for Jinja2 templates")
    parser.add_argument('--tot-size', type=parse_size, default=0,
                        help='Target corpus size, e.g. 20MB (default: unbounded)')
    parser.add_argument('--tot-events', type=int, default=0, help='Maximum number of events')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible output')
    parser.add_argument('--output', default='-', help="Output file, '-' for stdout")
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def _write_file(path: str, chunks) -> None:
    """Write chunks to path, removing the file if generation fails midway."""
    with open(path, 'wb') as f:
        try:
            for chunk in chunks:
                f.write(chunk)
        except Exception:
            f.close()
            os.remove(path)
            raise


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[corpus-gen] %(message)s',
        stream=sys.stderr,
    )

    settings = Settings(
        template_path=args.template,
        fields_path=args.fields,
        config_path=args.config,
        template_type=args.template_type,
        tot_size=args.tot_size,
        tot_events=args.tot_events,
        seed=args.seed,
    )

    try:
        settings.validate()
        with build_generator(settings) as gen:
            chunks = stream_corpus(gen, CHUNK_BYTES, settings.tot_events)
            if args.output == '-':
                for chunk in chunks:
                    sys.stdout.buffer.write(chunk)
                sys.stdout.buffer.flush()
            else:
                _write_file(args.output, chunks)
            logger.info("wrote %d events to %s", gen.state.counter, args.output)
    except (CorpusGenError, jinja2.TemplateError, OSError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
