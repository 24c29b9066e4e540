"""
Newline-delimited JSON reader/writer for order fixture and bulk-load files.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union

from pydantic import ValidationError

from .models import TransportationOrder
from .schemas import TransportationOrderSchema


logger = logging.getLogger(__name__)


class OrderFileError(ValueError):
    """Raised when an order file line cannot be parsed."""

    def __init__(self, path: Union[str, Path], line_number: int, reason: str):
        self.path = str(path)
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"{self.path}:{line_number}: {reason}")


def parse_order_line(line: str) -> TransportationOrder:
    """Parse one JSON object into an order. Raises ValidationError."""
    return TransportationOrderSchema.model_validate_json(line).to_model()


def iter_order_lines(
    path: Union[str, Path]
) -> Iterator[Tuple[int, Union[TransportationOrder, OrderFileError]]]:
    """
    Yield (line_number, order) for every non-blank line of an NDJSON file.

    Lines that fail validation yield an OrderFileError in place of the order,
    so callers can decide whether to skip or abort.
    """
    file_path = Path(path)
    # Decoded per line so an encoding error is reported against its line
    with open(file_path, "rb") as f:
        for line_number, raw in enumerate(f, 1):
            try:
                line = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                yield line_number, OrderFileError(file_path, line_number, f"invalid UTF-8: {e.reason}")
                continue
            if not line:
                continue
            try:
                yield line_number, parse_order_line(line)
            except ValidationError as e:
                reason = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'line'}: {err['msg']}"
                    for err in e.errors()
                )
                yield line_number, OrderFileError(file_path, line_number, reason)


def read_orders(path: Union[str, Path]) -> List[TransportationOrder]:
    """Load every order from an NDJSON file, failing on the first bad line."""
    orders = []
    for line_number, result in iter_order_lines(path):
        if isinstance(result, OrderFileError):
            raise result
        orders.append(result)
    logger.debug(f"Read {len(orders)} orders from {path}")
    return orders


def write_orders(path: Union[str, Path], orders: Iterable[TransportationOrder]) -> int:
    """Write orders as NDJSON using the wire field names."""
    written = 0
    with open(path, "w", encoding="utf-8") as f:
        for order in orders:
            schema = TransportationOrderSchema.model_validate(order)
            f.write(schema.model_dump_json(by_alias=True))
            f.write("\n")
            written += 1
    logger.debug(f"Wrote {written} orders to {path}")
    return written
