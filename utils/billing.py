import datetime
import math
import uuid


SECONDS_PER_HOUR = 3600


def generate_booking_id():
    return uuid.uuid4().hex


def calculate_billed_hours(
    start_time: datetime.datetime, end_time: datetime.datetime
) -> int:
    """
    Any started hour is billed as a full one (minimum one hour).
    """
    seconds = (end_time - start_time).total_seconds()
    return max(1, math.ceil(seconds / SECONDS_PER_HOUR))


def is_penalty_applied(start_time: datetime.datetime, end_time: datetime.datetime):
    seconds = (end_time - start_time).total_seconds()
    return seconds > 0 and seconds % SECONDS_PER_HOUR != 0


def calculate_cost(billed_hours: int, hourly_rate: float) -> float:
    return round(billed_hours * hourly_rate, 2)
