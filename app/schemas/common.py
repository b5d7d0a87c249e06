from datetime import datetime
from typing import Annotated

from pydantic import PlainSerializer

from app.core.timezone_utils import to_local

# datetimes are stored as naive UTC and returned in restaurant local time,
# with the offset, e.g. 2026-05-01T18:00:00+03:00
LocalDatetime = Annotated[datetime, PlainSerializer(to_local, return_type=datetime)]
