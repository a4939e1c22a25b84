"""
Per-entity serializers and deserializers between records and table rows.

The hosted backend stores booleans and coordinate lists natively. The
embedded SQLite file keeps flags as 0/1 integers and coordinate lists as
JSON text, so records are converted on the way in and out.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from drrm.db import BackendKind

logger = logging.getLogger(__name__)


def encode_flag(value: Any, kind: BackendKind) -> Any:
    if kind is BackendKind.EMBEDDED:
        return 1 if value else 0
    return bool(value)


def encode_sequence(value: Any, kind: BackendKind) -> Any:
    items = [str(item) for item in value]
    if kind is BackendKind.EMBEDDED:
        return json.dumps(items)
    return items


def decode_sequence(value: Any, kind: BackendKind) -> list[str]:
    """
    Read a stored sequence back as a list of strings.

    On the embedded backend a blob that is not a JSON list reads back as an
    empty list instead of raising.
    """
    if value is None:
        return []
    if kind is BackendKind.HOSTED or isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if not isinstance(value, (str, bytes)):
        logger.debug("Unexpected stored sequence type %s", type(value).__name__)
        return []
    try:
        parsed = json.loads(value)
    except ValueError:
        logger.debug("Discarding malformed stored sequence %r", value)
        return []
    if not isinstance(parsed, list):
        logger.debug("Discarding non-list stored sequence %r", value)
        return []
    return [str(item) for item in parsed]


@dataclass(frozen=True)
class EntityCodec:
    table: str
    flag_fields: tuple[str, ...] = ()
    sequence_fields: tuple[str, ...] = ()

    def serialize(self, record: Mapping[str, Any], kind: BackendKind) -> dict:
        row = dict(record)
        for name in self.flag_fields:
            if row.get(name) is not None:
                row[name] = encode_flag(row[name], kind)
        for name in self.sequence_fields:
            if row.get(name) is not None:
                row[name] = encode_sequence(row[name], kind)
        return row

    def deserialize(self, row: Mapping[str, Any], kind: BackendKind) -> dict:
        record = dict(row)
        for name in self.flag_fields:
            if record.get(name) is not None:
                record[name] = bool(record[name])
        for name in self.sequence_fields:
            if name in record:
                record[name] = decode_sequence(record[name], kind)
        return record


CODECS: dict[str, EntityCodec] = {
    codec.table: codec
    for codec in (
        EntityCodec("users"),
        EntityCodec("incidents", flag_fields=("is_anonymous",)),
        EntityCodec("go_bag_items", flag_fields=("checked",)),
        EntityCodec("evacuation_centers"),
        EntityCodec("households"),
        EntityCodec("members"),
        EntityCodec("check_ins", flag_fields=("is_safe",)),
        EntityCodec("hazard_zones", sequence_fields=("coordinates",)),
        EntityCodec("pois", flag_fields=("available",)),
    )
}


def codec_for(table: str) -> EntityCodec:
    try:
        return CODECS[table]
    except KeyError:
        raise ValueError(f"No codec registered for table {table!r}") from None
