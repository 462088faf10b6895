# Application SRS Package
from .scheduler import IntervalScheduler, interval_days
from .serialization import decode_table, encode_table
from .service import MasteryStore

__all__ = [
    "IntervalScheduler",
    "interval_days",
    "decode_table",
    "encode_table",
    "MasteryStore",
]
