"""Serialize optimization results to plain records and JSON.

Record keys: contingency, kappac, offsets, and (only when optimization
ran) adj_contingency, adj_kappac.

Depends on: json, domain models.
"""

import dataclasses
import json
from typing import Optional

from ..domain.models import OptimizationResult, RunMetadata
from ..domain.sparse import to_pairs


def to_record(result: OptimizationResult) -> dict:
    """Plain-dict view of an OptimizationResult."""
    record = {
        "contingency": [list(t) for t in to_pairs(result.contingency)],
        "kappac": result.kappac,
        "offsets": [
            {
                "source_column": o.source_column,
                "dest_column": o.dest_column,
                "offset": o.offset,
                "kappa_complement": o.kappa_complement,
            }
            for o in result.offsets
        ],
    }
    if result.adj_contingency is not None:
        record["adj_contingency"] = [
            list(t) for t in to_pairs(result.adj_contingency)
        ]
        record["adj_kappac"] = result.adj_kappac
    return record


def to_json(
    result: OptimizationResult,
    metadata: Optional[RunMetadata] = None,
    indent: int = 2,
) -> str:
    """JSON document with the result record and optional provenance."""
    payload = {"result": to_record(result)}
    if metadata is not None:
        payload["metadata"] = dataclasses.asdict(metadata)
    return json.dumps(payload, indent=indent)
