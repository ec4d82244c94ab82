from .message_decoder import (
    decode_live_message,
    parse_historical_batch,
    parse_realtime_range,
    parse_saved_prediction,
)
from .point_normalizer import PointNormalizer, coerce_point, normalize, to_unix_seconds

__all__ = [
    "PointNormalizer",
    "coerce_point",
    "decode_live_message",
    "normalize",
    "parse_historical_batch",
    "parse_realtime_range",
    "parse_saved_prediction",
    "to_unix_seconds",
]
