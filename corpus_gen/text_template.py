"""
Generator that renders a Jinja2 template once per event.

Templates call ``generate("field.name")`` to draw a value for a declared
field, and may use any Jinja2 filter plus the helpers registered here:

    {"@timestamp": "{{ generate("timestamp") }}",
     "cloud.availability_zone": "{{ awsAZFromRegion(generate("cloud.region")) }}"}

Undefined variables are fatal. A ``generate`` call on an undeclared field
raises ``FieldNotInFieldsError`` and poisons the generator: every later
``emit`` fails with the same error.
"""
import logging
import random
import string
import uuid
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Optional, Union

import jinja2

from corpus_gen.binder import bind_field, render_value
from corpus_gen.errors import EndOfStream, FieldNotInFieldsError
from corpus_gen.estimator import estimate_tot_events
from corpus_gen.fields import Config, Field
from corpus_gen.state import GenState

logger = logging.getLogger(__name__)

NO_AZ = 'NoAZ'

# Not comprehensive. Missing regions: af-south-1, ap-south-2, ap-southeast-3,
# ap-southeast-4, eu-central-2, eu-south-1, eu-south-2, me-central-1
AWS_AZS = MappingProxyType({
    'ap-east-1': ('ap-east-1a', 'ap-east-1b', 'ap-east-1c'),
    'ap-northeast-1': ('ap-northeast-1a', 'ap-northeast-1c', 'ap-northeast-1d'),
    'ap-northeast-2': ('ap-northeast-2a', 'ap-northeast-2b', 'ap-northeast-2c', 'ap-northeast-2d'),
    'ap-northeast-3': ('ap-northeast-3a', 'ap-northeast-3b', 'ap-northeast-3c'),
    'ap-south-1': ('ap-south-1a', 'ap-south-1b', 'ap-south-1c'),
    'ap-southeast-1': ('ap-southeast-1a', 'ap-southeast-1b', 'ap-southeast-1c'),
    'ap-southeast-2': ('ap-southeast-2a', 'ap-southeast-2b', 'ap-southeast-2c'),
    'ca-central-1': ('ca-central-1a', 'ca-central-1b', 'ca-central-1d'),
    'eu-central-1': ('eu-central-1a', 'eu-central-1b', 'eu-central-1c'),
    'eu-north-1': ('eu-north-1a', 'eu-north-1b', 'eu-north-1c'),
    'eu-west-1': ('eu-west-1a', 'eu-west-1b', 'eu-west-1c'),
    'eu-west-2': ('eu-west-2a', 'eu-west-2b', 'eu-west-2c'),
    'eu-west-3': ('eu-west-3a', 'eu-west-3b', 'eu-west-3c'),
    'me-south-1': ('me-south-1a', 'me-south-1b', 'me-south-1c'),
    'sa-east-1': ('sa-east-1a', 'sa-east-1b', 'sa-east-1c'),
    'us-east-1': ('us-east-1a', 'us-east-1b', 'us-east-1c', 'us-east-1d', 'us-east-1e', 'us-east-1f'),
    'us-east-2': ('us-east-2a', 'us-east-2b', 'us-east-2c'),
    'us-west-1': ('us-west-1a', 'us-west-1b'),
    'us-west-2': ('us-west-2a', 'us-west-2b', 'us-west-2c', 'us-west-2d'),
})

# Render-context key carrying the GenState of the event being rendered.
_STATE_VAR = '_corpus_gen_state'


def aws_az_from_region(region: str) -> str:
    """Return a random availability zone of region, or NoAZ if the region is unknown."""
    azs = AWS_AZS.get(region)
    if not azs:
        return NO_AZ
    return random.choice(azs)


def rand_alpha_num(length: int) -> str:
    return ''.join(random.choices(string.ascii_letters + string.digits, k=length))


def template_functions() -> Dict[str, Callable[..., Any]]:
    """Helper functions available to every template, besides generate."""
    return {
        'awsAZFromRegion': aws_az_from_region,
        'now': lambda: datetime.now(timezone.utc),
        'uuidv4': lambda: str(uuid.uuid4()),
        'randInt': random.randrange,
        'randAlphaNum': rand_alpha_num,
    }


def _new_environment(generate: Callable[..., Any]) -> jinja2.Environment:
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
        finalize=render_value,
    )
    env.globals.update(template_functions())
    env.globals['generate'] = generate
    return env


class GeneratorWithTextTemplate:
    """Emits events by rendering a Jinja2 template."""

    def __init__(
        self,
        template: Union[bytes, str],
        cfg: Config,
        fields: Iterable[Field],
        tot_size: int = 0,
    ):
        if isinstance(template, bytes):
            template = template.decode('utf-8')

        self.state = GenState()
        field_map = {}
        for field in fields:
            bind_field(cfg, field, field_map, True)
            self.state.register(field.name)

        self._field_map = field_map
        self._missing_field: Optional[str] = None

        # Raises jinja2.TemplateSyntaxError on malformed templates.
        self._template = _new_environment(self._generate).from_string(template)
        self.tot_events = estimate_tot_events(tot_size, lambda: self._render_sample(template))
        logger.debug("text template compiled, tot_events=%d", self.tot_events)

    @jinja2.pass_context
    def _generate(self, context, field_name: str) -> Any:
        bind_f = self._field_map.get(field_name)
        if bind_f is None:
            self._missing_field = field_name
            raise FieldNotInFieldsError(field_name)
        return bind_f(context[_STATE_VAR])

    def _render_sample(self, template: str) -> bytes:
        field_map = self._field_map

        def generate(field_name: str) -> Any:
            bind_f = field_map.get(field_name)
            if bind_f is None:
                raise FieldNotInFieldsError(field_name)
            return bind_f(GenState.for_fields([field_name]))

        sample = _new_environment(generate).from_string(template)
        return sample.render().encode('utf-8')

    def emit(self, buf: bytearray, state: Optional[GenState] = None) -> None:
        """
        Append one rendered event to buf.

        state defaults to the generator's own GenState, so a writer loop only
        needs the buffer; pass another state to run it independently.

        Raises:
            EndOfStream: If the bounded number of events was already emitted
            FieldNotInFieldsError: If the template references an undeclared field
        """
        if state is None:
            state = self.state

        if self.tot_events and state.counter >= self.tot_events:
            raise EndOfStream()

        if self._missing_field is not None:
            raise FieldNotInFieldsError(self._missing_field)

        buf += self._template.render({_STATE_VAR: state}).encode('utf-8')
        state.counter += 1

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
