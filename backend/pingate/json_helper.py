"""JSON wire format for remote records: exact money amounts and ISO dates."""

import json
from datetime import date
from decimal import Decimal
from typing import Any


class RecordEncoder(json.JSONEncoder):
    """Encodes Decimal amounts as JSON numbers and dates as YYYY-MM-DD."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            if obj == obj.to_integral_value():
                return int(obj)
            return float(obj)
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def dumps(data: Any) -> str:
    """Serialize a request body or response payload."""
    return json.dumps(data, cls=RecordEncoder)


def loads(raw: str) -> Any:
    """
    Parse a response body.

    Fractional numbers come back as Decimal so amounts add up exactly;
    whole numbers stay int.

    Raises:
        ValueError: If raw is not valid JSON
    """
    return json.loads(raw, parse_float=Decimal)
