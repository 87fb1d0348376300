"""
Parser configuration settings.

Runtime switches for the VSS report parser. Field positions live in
models.field_position; these values control decoding behaviour around them.
"""
import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class ParserConfig:
    """Configuration class for report decoding."""

    file_encoding: str = 'utf-8'  # First encoding tried when decoding uploaded bytes
    clamp_header_timestamps: bool = True  # Clamp out-of-range EPIN header timestamp parts
    two_digit_year_pivot: int = 49  # YY <= pivot -> 20YY, otherwise 19YY
    positional_currency_fallback: bool = False  # Read currency column when a section declares none

    @classmethod
    def from_environment(cls) -> 'ParserConfig':
        """
        Create configuration from environment variables with fallback to defaults.

        Environment variables:
        - VSS_FILE_ENCODING
        - VSS_CLAMP_HEADER_TIMESTAMPS
        - VSS_TWO_DIGIT_YEAR_PIVOT
        - VSS_POSITIONAL_CURRENCY_FALLBACK
        """
        return cls(
            file_encoding=os.getenv('VSS_FILE_ENCODING', 'utf-8'),
            clamp_header_timestamps=_env_flag('VSS_CLAMP_HEADER_TIMESTAMPS', True),
            two_digit_year_pivot=int(os.getenv('VSS_TWO_DIGIT_YEAR_PIVOT', 49)),
            positional_currency_fallback=_env_flag('VSS_POSITIONAL_CURRENCY_FALLBACK', False)
        )

    def century_for(self, two_digit_year: int) -> int:
        """
        Resolve a two-digit year to a four-digit year using the pivot.

        Args:
            two_digit_year: Year within the century, 0-99

        Returns:
            Four-digit year
        """
        if two_digit_year <= self.two_digit_year_pivot:
            return 2000 + two_digit_year
        return 1900 + two_digit_year


DEFAULT_PARSER_CONFIG = ParserConfig()
