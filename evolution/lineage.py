"""
virtual_creatures module: evolution/lineage.py

Lineage and fitness history of a run, rendered as delimited text.
"""

from __future__ import annotations
import csv
from dataclasses import astuple, dataclass, fields
import io
from typing import Iterable, Optional, Tuple

from evolution.selection import PopulationMember


@dataclass(frozen=True)
class LineageRecord:
    generation: int
    member_id: int
    parent_ids: Tuple[int, ...]
    coherence: Optional[float]
    fitness: Optional[float]
    avg_fitness: Optional[float]

    @staticmethod
    def of(member: PopulationMember) -> "LineageRecord":
        return LineageRecord(
            generation=member.generation,
            member_id=member.id,
            parent_ids=member.parent_ids,
            coherence=member.coherence_to_original,
            fitness=member.fitness,
            avg_fitness=member.avg_fitness,
        )


def to_delimited(records: Iterable[LineageRecord], delimiter: str = ";") -> str:
    out = io.StringIO()
    writer = csv.writer(out, delimiter=delimiter, lineterminator="\n")
    writer.writerow([f.name for f in fields(LineageRecord)])
    for record in records:
        row = list(astuple(record))
        row[2] = " ".join(str(i) for i in record.parent_ids)
        writer.writerow(["" if v is None else v for v in row])
    return out.getvalue()
