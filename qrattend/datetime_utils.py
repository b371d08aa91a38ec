import math
from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_epoch_seconds(value, round_up=False):
    seconds = value.replace(tzinfo=timezone.utc).timestamp()
    return math.ceil(seconds) if round_up else math.floor(seconds)
