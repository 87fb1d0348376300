"""
Models package for VSS settlement report parsing.
"""

from .field_position import (
    DEFAULT_FIELD_POSITIONS,
    FieldPosition,
    FieldPositionConfig,
    ReadDirection,
    Report110Fields,
    Report120Fields,
    Report130Fields,
    Report140Fields,
    Report900Fields,
)
from .report_records import (
    ParseResult,
    Report110Record,
    Report120Record,
    Report130Record,
    Report140Record,
    Report900Record,
    ReportRecord,
    ReportType,
    SourceLine,
)
from .report_summary import ReportFileSummary
from .settlement_record import EpinFileHeader, SettlementRecord

__all__ = [
    'DEFAULT_FIELD_POSITIONS',
    'FieldPosition',
    'FieldPositionConfig',
    'ReadDirection',
    'Report110Fields',
    'Report120Fields',
    'Report130Fields',
    'Report140Fields',
    'Report900Fields',
    'ParseResult',
    'Report110Record',
    'Report120Record',
    'Report130Record',
    'Report140Record',
    'Report900Record',
    'ReportRecord',
    'ReportType',
    'SourceLine',
    'ReportFileSummary',
    'EpinFileHeader',
    'SettlementRecord',
]
