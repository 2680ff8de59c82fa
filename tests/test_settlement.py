import pytest

from walletdesk.db.models import TransferIntent as TransferModel
from walletdesk.infrastructure.database.repositories.transfer_repository import SqlTransferRepository
from walletdesk.modules.audit import AuditLogService
from walletdesk.modules.common.exceptions import NotFoundError, StoreWriteError, ValidationError
from walletdesk.modules.settlement import (
    MatchStrategy,
    SettlementReconciler,
    SettlementRequest,
    SettlementRunNotFoundError,
    SettlementState,
    can_transition,
)
from walletdesk.modules.transactions import (
    InvalidTransitionError,
    TransactionNotFoundError,
    TransactionService,
    TransactionStatusConflictError,
)
from walletdesk.modules.transfers import TransferService
from walletdesk.modules.wallets import WalletNotFoundError

from .support import (
    FailingNotifier,
    RecordingNotifier,
    balance_of,
    committed_notifications,
    refusing_webhook_notifier,
)


@pytest.fixture
def reconciler(session, notifier) -> SettlementReconciler:
    return SettlementReconciler.with_session(session, notifier)


@pytest.fixture
async def parties(make_account):
    sender = await make_account("alice", email="alice@example.com", balance_cents=200_00)
    recipient = await make_account("bob", email="bob@example.com")
    return sender, recipient


async def _send(session, sender, recipient_username: str, amount_cents: int, note=None):
    result = await TransferService.with_session(session).send_money(sender, recipient_username, amount_cents, note)
    await session.commit()
    return result


async def _transfer(session, transfer_id: str) -> TransferModel:
    return await SqlTransferRepository(session).get(transfer_id)


async def test_approve_credits_recipient_and_completes_transfer(session, reconciler, parties, admin, notifier):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)

    outcome = await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    assert outcome.status == "completed"
    assert outcome.transfer_id == sent.transfer.id
    assert outcome.match_strategy is MatchStrategy.LINKED
    assert outcome.credited_account_id == bob.id
    assert outcome.notified is True
    assert await balance_of(session, bob.id) == 50_00
    assert await balance_of(session, alice.id) == 150_00
    assert (await _transfer(session, sent.transfer.id)).status == "completed"
    record = await TransactionService.with_session(session).require(sent.transaction_id)
    assert record.status == "completed"
    assert notifier.sent == [
        (
            "alice@example.com",
            "transaction_approved",
            {
                "transaction_id": sent.transaction_id,
                "transfer_id": sent.transfer.id,
                "status": "completed",
                "amount_cents": 50_00,
                "currency": "USD",
            },
        )
    ]


async def test_reject_refunds_sender(session, reconciler, parties, admin, notifier):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)
    assert await balance_of(session, alice.id) == 150_00

    outcome = await reconciler.settle(SettlementRequest(sent.transaction_id, "rejected"), actor=admin)

    assert outcome.status == "rejected"
    assert outcome.credited_account_id == alice.id
    assert await balance_of(session, alice.id) == 200_00
    assert await balance_of(session, bob.id) == 0
    assert (await _transfer(session, sent.transfer.id)).status == "rejected"
    assert notifier.sent[0][1] == "transaction_rejected"


async def test_unmatched_record_is_settled_without_ledger_effect(
    session, reconciler, parties, admin, make_record, notifier
):
    alice, bob = parties
    await _send(session, alice, "bob", 50_00)
    record_id = await make_record(alice.id, 12_34)

    outcome = await reconciler.settle(SettlementRequest(record_id, "completed"), actor=admin)

    assert outcome.status == "completed"
    assert outcome.transfer_id is None
    assert outcome.match_strategy is MatchStrategy.NONE
    assert await balance_of(session, alice.id) == 150_00
    assert await balance_of(session, bob.id) == 0
    assert notifier.sent == []
    run = await reconciler.get_run(outcome.run_id)
    assert run.state == SettlementState.DONE.value
    assert run.match_strategy == "none"


async def test_missing_transaction_raises_not_found_without_side_effects(session, reconciler, admin):
    with pytest.raises(TransactionNotFoundError) as excinfo:
        await reconciler.settle(SettlementRequest("does-not-exist", "completed"), actor=admin)

    assert isinstance(excinfo.value, NotFoundError)
    assert await reconciler.list_runs() == []


async def test_unknown_target_status_is_rejected(session, reconciler, parties, admin):
    alice, _ = parties
    sent = await _send(session, alice, "bob", 10_00)

    with pytest.raises(ValidationError):
        await reconciler.settle(SettlementRequest(sent.transaction_id, "cancelled"), actor=admin)

    record = await TransactionService.with_session(session).require(sent.transaction_id)
    assert record.status == "pending"
    assert await reconciler.list_runs() == []


async def test_replaying_same_settlement_does_not_double_credit(session, reconciler, parties, admin, notifier):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)

    first = await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)
    second = await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    assert first.replayed is False
    assert second.replayed is True
    assert second.run_id is None
    assert await balance_of(session, bob.id) == 50_00
    assert len(notifier.sent) == 1
    assert len(await reconciler.list_runs()) == 1


async def test_settled_record_cannot_flip_to_other_status(session, reconciler, parties, admin):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)
    await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    with pytest.raises(InvalidTransitionError):
        await reconciler.settle(SettlementRequest(sent.transaction_id, "rejected"), actor=admin)

    assert await balance_of(session, alice.id) == 150_00
    assert await balance_of(session, bob.id) == 50_00


async def test_amount_heuristic_picks_most_recent_pending_transfer(
    session, reconciler, make_account, make_record, admin
):
    alice = await make_account("alice", balance_cents=100_00)
    carol = await make_account("carol", balance_cents=100_00)
    bob = await make_account("bob")
    dave = await make_account("dave")
    older = await _send(session, alice, "bob", 50_00)
    newer = await _send(session, carol, "dave", 50_00)
    unlinked = await make_record(alice.id, 50_00)

    outcome = await reconciler.settle(SettlementRequest(unlinked, "completed"), actor=admin)

    assert outcome.match_strategy is MatchStrategy.AMOUNT
    assert outcome.transfer_id == newer.transfer.id
    assert await balance_of(session, dave.id) == 50_00
    assert await balance_of(session, bob.id) == 0
    assert (await _transfer(session, older.transfer.id)).status == "pending"


async def test_explicit_link_wins_over_amount_heuristic(session, reconciler, make_account, admin):
    alice = await make_account("alice", balance_cents=100_00)
    carol = await make_account("carol", balance_cents=100_00)
    bob = await make_account("bob")
    dave = await make_account("dave")
    older = await _send(session, alice, "bob", 50_00)
    newer = await _send(session, carol, "dave", 50_00)

    outcome = await reconciler.settle(SettlementRequest(older.transaction_id, "completed"), actor=admin)

    assert outcome.transfer_id == older.transfer.id
    assert await balance_of(session, bob.id) == 50_00
    assert await balance_of(session, dave.id) == 0
    assert (await _transfer(session, newer.transfer.id)).status == "pending"


async def test_amount_matching_can_be_disabled(session, reconciler, parties, admin, make_record):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)
    unlinked = await make_record(alice.id, 50_00)
    reconciler.amount_matching = False

    outcome = await reconciler.settle(SettlementRequest(unlinked, "completed"), actor=admin)

    assert outcome.transfer_id is None
    assert (await _transfer(session, sent.transfer.id)).status == "pending"
    assert await balance_of(session, bob.id) == 0


async def test_linked_transfer_already_settled_is_not_credited_again(session, reconciler, parties, admin, make_record):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)
    await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)
    duplicate = await make_record(alice.id, 50_00, transfer_id=sent.transfer.id)

    outcome = await reconciler.settle(SettlementRequest(duplicate, "completed"), actor=admin)

    assert outcome.transfer_id is None
    assert await balance_of(session, bob.id) == 50_00


async def test_reason_note_is_appended_to_existing_note(session, reconciler, parties, admin):
    alice, _ = parties
    sent = await _send(session, alice, "bob", 50_00, note="rent share")

    await reconciler.settle(
        SettlementRequest(sent.transaction_id, "rejected", reason_note="duplicate request"),
        actor=admin,
    )

    record = await TransactionService.with_session(session).require(sent.transaction_id)
    assert record.note == "rent share\nduplicate request"


async def test_settlement_writes_audit_entry(session, reconciler, parties, admin):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)

    await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    entries = await AuditLogService.with_session(session).list_entries(action="settle_transaction")
    assert len(entries) == 1
    entry = entries[0]
    assert entry.admin_id == admin.id
    assert entry.target_id == sent.transaction_id
    assert entry.old_values["status"] == "pending"
    assert entry.new_values["status"] == "completed"
    assert entry.new_values["credited_account_id"] == bob.id


async def test_failed_ledger_effect_rolls_back_and_marks_run(session, reconciler, make_account, make_record, admin):
    alice = await make_account("alice", balance_cents=100_00)
    ghost = await make_account("ghost", with_wallet=False)
    transfer = await SqlTransferRepository(session).create(
        sender_id=alice.id,
        recipient_id=ghost.id,
        amount_cents=30_00,
        currency="USD",
        description=None,
    )
    # The failed settlement rolls the session back, which expires ORM instances.
    transfer_id = transfer.id
    await session.commit()
    record_id = await make_record(alice.id, 30_00, transfer_id=transfer_id)

    with pytest.raises(WalletNotFoundError):
        await reconciler.settle(SettlementRequest(record_id, "completed", reason_note="ok"), actor=admin)

    record = await TransactionService.with_session(session).require(record_id)
    assert record.status == "pending"
    assert record.note is None
    assert (await _transfer(session, transfer_id)).status == "pending"
    assert await balance_of(session, alice.id) == 100_00
    assert await AuditLogService.with_session(session).list_entries() == []

    runs = await reconciler.list_runs()
    assert len(runs) == 1
    run = runs[0]
    assert run.state == SettlementState.FAILED.value
    assert "wallet not found" in run.error
    assert [(event.from_state, event.to_state) for event in run.events] == [
        (None, "initiated"),
        ("initiated", "failed_needs_reconciliation"),
    ]


async def test_notification_failure_does_not_fail_settlement(session, parties, admin):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)
    failing = FailingNotifier()
    reconciler = SettlementReconciler.with_session(session, failing)

    outcome = await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    assert failing.attempts == 1
    assert outcome.notified is False
    assert await balance_of(session, bob.id) == 50_00
    run = await reconciler.get_run(outcome.run_id)
    assert run.state == SettlementState.DONE.value
    assert [event.to_state for event in run.events] == ["initiated", "transfer_matched", "funds_moved", "done"]


async def test_successful_run_records_every_transition(session, reconciler, parties, admin):
    alice, _ = parties
    sent = await _send(session, alice, "bob", 50_00)

    outcome = await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    run = await reconciler.get_run(outcome.run_id)
    assert run.actor_id == admin.id
    assert run.transfer_id == sent.transfer.id
    assert run.match_strategy == "linked"
    assert [event.to_state for event in run.events] == [
        "initiated",
        "transfer_matched",
        "funds_moved",
        "notified",
        "done",
    ]


async def test_unknown_run_raises_not_found(reconciler):
    with pytest.raises(SettlementRunNotFoundError):
        await reconciler.get_run("missing")


def test_saga_transitions_are_forward_only():
    assert can_transition(SettlementState.INITIATED, SettlementState.TRANSFER_MATCHED)
    assert can_transition(SettlementState.FUNDS_MOVED, SettlementState.DONE)
    assert not can_transition(SettlementState.FUNDS_MOVED, SettlementState.FAILED)
    assert not can_transition(SettlementState.DONE, SettlementState.INITIATED)
    assert not can_transition(SettlementState.FAILED, SettlementState.DONE)


class _InterruptAfterLoad:
    """Runs ``callback`` once, right after the first record lookup."""

    def __init__(self, transactions: TransactionService, callback) -> None:
        self._transactions = transactions
        self._callback = callback

    def __getattr__(self, name):
        return getattr(self._transactions, name)

    async def require(self, transaction_id: str):
        record = await self._transactions.require(transaction_id)
        if self._callback is not None:
            callback, self._callback = self._callback, None
            await callback()
        return record


async def test_interleaved_settlements_of_one_record_move_funds_once(
    session, session_factory, reconciler, parties, admin, make_record
):
    alice, bob = parties
    older = await _send(session, alice, "bob", 50_00)
    newer = await _send(session, alice, "bob", 50_00)
    unlinked = await make_record(alice.id, 50_00)

    async def settle_first():
        await reconciler.settle(SettlementRequest(unlinked, "completed"), actor=admin)

    async with session_factory() as other_session:
        second = SettlementReconciler.with_session(other_session, RecordingNotifier())
        second.transactions = _InterruptAfterLoad(second.transactions, settle_first)

        with pytest.raises(TransactionStatusConflictError) as excinfo:
            await second.settle(SettlementRequest(unlinked, "completed"), actor=admin)
        assert isinstance(excinfo.value, StoreWriteError)

        failed = await second.list_runs(state=SettlementState.FAILED.value)
        assert [run.transaction_id for run in failed] == [unlinked]

    assert await balance_of(session, bob.id) == 50_00
    assert (await _transfer(session, newer.transfer.id)).status == "completed"
    assert (await _transfer(session, older.transfer.id)).status == "pending"
    record = await TransactionService.with_session(session).require(unlinked)
    assert record.status == "completed"


async def test_refused_webhook_keeps_failed_notification_row(session, session_factory, parties, admin):
    alice, bob = parties
    sent = await _send(session, alice, "bob", 50_00)
    reconciler = SettlementReconciler.with_session(session, refusing_webhook_notifier(session))

    outcome = await reconciler.settle(SettlementRequest(sent.transaction_id, "completed"), actor=admin)

    assert outcome.notified is False
    assert await balance_of(session, bob.id) == 50_00
    assert await committed_notifications(session_factory, "alice@example.com") == [
        ("transaction_approved", "failed")
    ]
    run = await reconciler.get_run(outcome.run_id)
    assert run.state == SettlementState.DONE.value
    assert run.events[-1].detail.startswith("notification failed")


async def test_notification_goes_to_transfer_sender_without_email(
    session, reconciler, make_account, make_record, admin, notifier
):
    alice = await make_account("alice", balance_cents=100_00)
    await make_account("bob")
    carol = await make_account("carol", email="carol@example.com")
    await _send(session, alice, "bob", 40_00)
    unlinked = await make_record(carol.id, 40_00)

    outcome = await reconciler.settle(SettlementRequest(unlinked, "completed"), actor=admin)

    assert outcome.match_strategy is MatchStrategy.AMOUNT
    assert [(address, kind) for address, kind, _ in notifier.sent] == [(alice.id, "transaction_approved")]
