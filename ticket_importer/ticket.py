from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .errors import RowError
from .fields import Cell, CustomFieldValue, RemoteFieldDefinition, coerce
from .mapping import MappingConfig

class _Spelled(str, Enum):
    """Enum whose members serialize to their wire name but parse from several spellings."""

    @classmethod
    def parse(cls, text: str):
        key = text.lower()
        for member, spellings in cls._spellings().items():
            if key in spellings:
                return member
        accepted = ", ".join("/".join(s) for s in cls._spellings().values())
        raise RowError(f"Unknown {cls._label()} {text!r}, expected {accepted}")

    @classmethod
    def _spellings(cls) -> Dict["_Spelled", tuple]:
        raise NotImplementedError

    @classmethod
    def _label(cls) -> str:
        return cls.__name__.lower()

class Priority(_Spelled):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def _spellings(cls):
        return {
            cls.LOW: ("low", "baixa"),
            cls.NORMAL: ("normal",),
            cls.HIGH: ("high", "alta"),
            cls.URGENT: ("urgent", "urgente"),
        }

class Status(_Spelled):
    NEW = "new"  # valid on the wire, but no sheet spelling maps to it
    OPEN = "open"
    PENDING = "pending"
    HOLD = "hold"
    SOLVED = "solved"
    CLOSED = "closed"

    @classmethod
    def _spellings(cls):
        return {
            cls.OPEN: ("open", "aberto"),
            cls.PENDING: ("pending", "pendente"),
            cls.HOLD: ("hold", "em espera"),
            cls.SOLVED: ("solved", "resolvido"),
            cls.CLOSED: ("closed", "fechado"),
        }

class TicketType(_Spelled):
    QUESTION = "question"
    INCIDENT = "incident"
    PROBLEM = "problem"
    TASK = "task"

    @classmethod
    def _spellings(cls):
        return {
            cls.QUESTION: ("question", "pergunta"),
            cls.INCIDENT: ("incident", "incidente"),
            cls.PROBLEM: ("problem", "problema"),
            cls.TASK: ("task", "tarefa"),
        }

    @classmethod
    def _label(cls) -> str:
        return "ticket type"

@dataclass
class Ticket:
    comment: str
    subject: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    type: Optional[TicketType] = None
    assignee: Optional[str] = None
    custom_fields: List[Optional[CustomFieldValue]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"comment": {"body": self.comment}}
        for name in ("subject", "priority", "status", "type", "assignee"):
            v = getattr(self, name)
            if v is not None:
                payload[name] = v.value if isinstance(v, Enum) else v
        payload["custom_fields"] = [cf.to_payload() for cf in self.custom_fields if cf is not None]
        return payload

@dataclass
class RowResult:
    """Outcome of building one sheet row: a ticket or the reason it was skipped."""
    sheet_row: int
    ticket: Optional[Ticket] = None
    error: Optional[RowError] = None

    @property
    def ok(self) -> bool:
        return self.ticket is not None

def _cell(row: Sequence[Cell], index: Optional[int]) -> Cell:
    if index is None or index >= len(row):
        return None
    return row[index]

def _string(row: Sequence[Cell], index: Optional[int]) -> Optional[str]:
    value = _cell(row, index)
    return value if isinstance(value, str) else None

def build_ticket(
    row: Sequence[Cell],
    mapping: MappingConfig,
    fields: Sequence[RemoteFieldDefinition],
    timezone: str,
) -> Ticket:
    """
    Build one ticket from a sheet row.

    Only the comment is required. Optional system fields that are unmapped or
    empty are left out, but a present value that cannot be parsed fails the
    whole row, as does any custom field that cannot be coerced.
    Custom field titles that match no remote field are skipped.
    """
    comment = _string(row, mapping.comment)
    if comment is None:
        raise RowError(f"Comment cell should be a string, got {_cell(row, mapping.comment)!r}")

    ticket = Ticket(
        comment=comment,
        subject=_string(row, mapping.subject),
        assignee=_string(row, mapping.assignee),
    )

    raw = _string(row, mapping.priority)
    if raw is not None:
        ticket.priority = Priority.parse(raw)
    raw = _string(row, mapping.status)
    if raw is not None:
        ticket.status = Status.parse(raw)
    raw = _string(row, mapping.type)
    if raw is not None:
        ticket.type = TicketType.parse(raw)

    by_title = {}
    for fdef in fields:
        by_title.setdefault(fdef.title, fdef)
    for title, index in mapping.custom_fields:
        fdef = by_title.get(title)
        if fdef is None:
            ticket.custom_fields.append(None)
            continue
        ticket.custom_fields.append(coerce(_cell(row, index), fdef, timezone))

    return ticket

def build_row(
    sheet_row: int,
    row: Sequence[Cell],
    mapping: MappingConfig,
    fields: Sequence[RemoteFieldDefinition],
    timezone: str,
) -> RowResult:
    try:
        return RowResult(sheet_row, ticket=build_ticket(row, mapping, fields, timezone))
    except RowError as e:
        return RowResult(sheet_row, error=e)
