"""
Configuration settings for the corpus generator.

Settings are read from environment variables so the same code runs as a
Lambda function and from the command line.
"""
import os
from dataclasses import dataclass
from typing import Optional

from corpus_gen.errors import ConfigError
from corpus_gen.util import parse_size, safe_int

TEMPLATE_TYPES = ('custom', 'text')

# S3 rejects multipart parts smaller than 5MB, except the last one.
MIN_MULTIPART_MB = 5


@dataclass
class Settings:
    """Configuration settings for a corpus generation run."""

    # Inputs
    template_path: str
    fields_path: str
    config_path: str = ""

    # Generation
    template_type: str = 'custom'  # 'custom' or 'text'
    tot_size: int = 0  # Target corpus bytes, 0 for unbounded
    tot_events: int = 0  # Event cap, 0 for none
    seed: Optional[int] = None

    # Output
    output_bucket: str = ""
    key_prefix: str = "corpus"
    multipart_mb: int = 8

    @classmethod
    def from_env(cls) -> 'Settings':
        """Create settings from environment variables."""
        try:
            tot_size = parse_size(os.getenv('TOT_SIZE', '0'))
        except ValueError as e:
            raise ConfigError(f"TOT_SIZE: {e}") from e

        seed = os.getenv('SEED')

        return cls(
            template_path=os.getenv('TEMPLATE_PATH', ''),
            fields_path=os.getenv('FIELDS_PATH', ''),
            config_path=os.getenv('CONFIG_PATH', ''),
            template_type=os.getenv('TEMPLATE_TYPE', 'custom'),
            tot_size=tot_size,
            tot_events=safe_int(os.getenv('TOT_EVENTS'), 0),
            seed=safe_int(seed) if seed else None,
            output_bucket=os.getenv('OUTPUT_BUCKET', ''),
            key_prefix=os.getenv('KEY_PREFIX', 'corpus'),
            multipart_mb=safe_int(os.getenv('MULTIPART_MB'), 8),
        )

    def validate(self) -> None:
        """Validate that required settings are present and consistent."""
        if not self.template_path:
            raise ConfigError("TEMPLATE_PATH environment variable is required")

        if not self.fields_path:
            raise ConfigError("FIELDS_PATH environment variable is required")

        if self.template_type not in TEMPLATE_TYPES:
            raise ConfigError("TEMPLATE_TYPE must be 'custom' or 'text'")

        if self.tot_size < 0 or self.tot_events < 0:
            raise ConfigError("TOT_SIZE and TOT_EVENTS must not be negative")

        if not self.tot_size and not self.tot_events:
            raise ConfigError("one of TOT_SIZE or TOT_EVENTS is required")

        if self.multipart_mb < MIN_MULTIPART_MB:
            raise ConfigError(f"MULTIPART_MB must be at least {MIN_MULTIPART_MB}")

    def validate_output(self) -> None:
        """Validate settings needed to upload the corpus."""
        if not self.output_bucket:
            raise ConfigError("OUTPUT_BUCKET environment variable is required")
