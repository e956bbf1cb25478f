"""
Status transitions shared by the loan and document lifecycles.

Only the store and the status machine differ between the two; the order of
checks is the same: input validation first (no store call), then the
existence check, then graph legality, then the compare-and-set write.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from services.errors import IllegalTransition, ValidationError
from services.status_machine import StatusMachine
from services.stores import StatusChange, StatusStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusLifecycle:
    def __init__(self, store: StatusStore, machine: StatusMachine, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.machine = machine
        self.clock = clock

    async def get(self, record_id: str) -> Any:
        return await self.store.get(record_id)

    async def transition(
        self,
        record_id: str,
        new_status: Any,
        actor: str,
        rejection_reason: Optional[str] = None,
    ) -> Any:
        target = self.machine.parse(new_status)
        actor = (actor or "").strip()
        if not actor:
            raise ValidationError("updatedBy is required", field="updatedBy")
        reason = (rejection_reason or "").strip()
        if self.machine.requires_reason(target) and not reason:
            raise ValidationError(f"A rejection reason is required to mark a {self.machine.name} {target.value}",
                                  field="rejectionReason")

        record = await self.store.get(record_id)
        current = self.machine.parse(record.status)
        if self.machine.is_noop(current, target):
            return record
        self.machine.check(current, target)

        change = StatusChange(
            new_status=target.value,
            updated_by=actor,
            at=self.clock(),
            expected_status=current.value,
            rejection_reason=reason if self.machine.requires_reason(target) else None,
        )
        updated = await self.store.set_status(record_id, change)
        if updated is None:
            # Someone else moved it between our read and our write
            fresh = await self.store.get(record_id)
            raise IllegalTransition(
                fresh.status,
                target.value,
                [s.value for s in self.machine.allowed_targets(self.machine.parse(fresh.status))],
                message=f"{self.store.kind} {record_id} was changed to {fresh.status} by "
                        f"{fresh.status_updated_by or 'another user'} before this update",
            )
        logger.info("%s %s: %s -> %s by %s", self.store.kind, record_id, current.value, target.value, actor)
        return updated

    async def status_counts(self) -> dict[str, int]:
        counts = await self.store.count_by_status()
        return {s.value: counts.get(s.value, 0) for s in self.machine.statuses}
