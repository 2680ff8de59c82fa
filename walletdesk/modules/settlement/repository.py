"""Repository protocol for settlement runs and their transition log."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from walletdesk.db.models import SettlementRun


class SettlementRepository(Protocol):
    async def create_run(
        self,
        *,
        transaction_id: str,
        target_status: str,
        actor_id: Optional[str],
    ) -> SettlementRun:
        ...

    async def transition(
        self,
        run_id: str,
        *,
        from_state: str,
        to_state: str,
        detail: Optional[str] = None,
        **fields: Any,
    ) -> bool:
        ...

    async def get_run(self, run_id: str) -> SettlementRun | None:
        ...

    async def list_runs(self, *, state: Optional[str], limit: int, offset: int) -> Sequence[SettlementRun]:
        ...

    async def count_by_state(self, state: str) -> int:
        ...
