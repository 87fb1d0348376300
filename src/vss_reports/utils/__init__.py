"""
Utils package.

Pure helpers used by the report services:
- field_extractor: fixed-width windows decoded as text, counts and signed amounts.
- line_classifier: banner, financial-data and context-declaration predicates.
- date_decoder: header dates, ordinal day-of-year dates and EPIN header timestamps.
- parser_config: environment-driven runtime switches.
"""
