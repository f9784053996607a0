"""File-backed record sources, reference tables and exports."""

from repositories.export import write_replays_1v1_csv, write_replays_2v2_csv
from repositories.reference_repository import ReferenceTables, load_reference_tables
from repositories.replay_repository import load_records, parse_record

__all__ = [
    "ReferenceTables",
    "load_records",
    "load_reference_tables",
    "parse_record",
    "write_replays_1v1_csv",
    "write_replays_2v2_csv",
]
