import pytest

from walletdesk.modules.admin import (
    AdjustBalance,
    AdminCommandService,
    DeleteTransaction,
    FreezeWallet,
    SettleTransaction,
    UnfreezeWallet,
    VerifyAccount,
)
from walletdesk.modules.accounts import AccountNotFoundError, AccountService
from walletdesk.modules.audit import AuditLogService
from walletdesk.modules.common.exceptions import ValidationError
from walletdesk.modules.transactions import TransactionNotFoundError, TransactionService
from walletdesk.modules.transfers import TransferService
from walletdesk.modules.wallets import InsufficientFundsError, WalletService

from .support import balance_of, committed_notifications, refusing_webhook_notifier


@pytest.fixture
def commands(session, notifier) -> AdminCommandService:
    return AdminCommandService.with_session(session, notifier)


async def _audit(session, action: str):
    return await AuditLogService.with_session(session).list_entries(action=action)


async def test_adjust_balance_credit_books_income_record(session, commands, make_account, admin, notifier):
    alice = await make_account("alice", email="alice@example.com", balance_cents=10_00)

    result = await commands.execute(AdjustBalance(alice.id, 5_00, "goodwill credit"), actor=admin)

    assert result.data["balance_cents"] == 15_00
    assert await balance_of(session, alice.id) == 15_00
    record = await TransactionService.with_session(session).require(result.data["transaction_id"])
    assert record.type == "income"
    assert record.category == "Adjustment"
    assert record.status == "completed"
    assert record.amount_cents == 5_00
    assert record.name == "Admin adjustment: goodwill credit"

    [entry] = await _audit(session, "adjust_balance")
    assert entry.admin_id == admin.id
    assert entry.old_values == {"balance_cents": 10_00}
    assert entry.new_values["balance_cents"] == 15_00
    assert notifier.sent[0][:2] == ("alice@example.com", "balance_adjusted")


async def test_adjust_balance_debit_books_expense_record(session, commands, make_account, admin):
    alice = await make_account("alice", balance_cents=10_00)

    result = await commands.execute(AdjustBalance(alice.id, -4_00, "chargeback"), actor=admin)

    assert await balance_of(session, alice.id) == 6_00
    record = await TransactionService.with_session(session).require(result.data["transaction_id"])
    assert record.type == "expense"
    assert record.amount_cents == 4_00


async def test_adjust_balance_refuses_to_go_negative(session, commands, make_account, admin):
    alice = await make_account("alice", balance_cents=3_00)

    with pytest.raises(InsufficientFundsError):
        await commands.execute(AdjustBalance(alice.id, -3_01, "correction"), actor=admin)

    await session.rollback()
    assert await balance_of(session, alice.id) == 3_00
    assert await _audit(session, "adjust_balance") == []


async def test_adjust_balance_validates_input(commands, make_account, admin):
    alice = await make_account("alice", balance_cents=3_00)

    with pytest.raises(ValidationError):
        await commands.execute(AdjustBalance(alice.id, 0, "nothing"), actor=admin)
    with pytest.raises(ValidationError):
        await commands.execute(AdjustBalance(alice.id, 1_00, "   "), actor=admin)


async def test_freeze_and_unfreeze_wallet(session, commands, make_account, admin, notifier):
    alice = await make_account("alice", email="alice@example.com")

    frozen = await commands.execute(FreezeWallet(alice.id, reason="fraud review"), actor=admin)
    assert frozen.data == {"is_frozen": True}
    assert (await WalletService.with_session(session).get_wallet(alice.id)).is_frozen is True

    await commands.execute(UnfreezeWallet(alice.id), actor=admin)
    assert (await WalletService.with_session(session).get_wallet(alice.id)).is_frozen is False

    [freeze_entry] = await _audit(session, "freeze_wallet")
    assert freeze_entry.old_values == {"is_frozen": False}
    assert freeze_entry.new_values == {"is_frozen": True, "reason": "fraud review"}
    assert [kind for _, kind, _ in notifier.sent] == ["wallet_frozen", "wallet_unfrozen"]


async def test_freezing_frozen_wallet_sends_no_notification(commands, make_account, admin, notifier):
    alice = await make_account("alice")
    await commands.execute(FreezeWallet(alice.id), actor=admin)
    await commands.execute(FreezeWallet(alice.id), actor=admin)

    assert len(notifier.sent) == 1


async def test_refused_webhook_keeps_failed_notification_row(session, session_factory, make_account, admin):
    alice = await make_account("alice", email="alice@example.com")
    commands = AdminCommandService.with_session(session, refusing_webhook_notifier(session))

    await commands.execute(FreezeWallet(alice.id, reason="fraud review"), actor=admin)

    assert (await WalletService.with_session(session).get_wallet(alice.id)).is_frozen is True
    assert await committed_notifications(session_factory, "alice@example.com") == [("wallet_frozen", "failed")]


async def test_delete_transaction_keeps_old_values_in_audit(session, commands, make_account, make_record, admin):
    alice = await make_account("alice")
    record_id = await make_record(alice.id, 9_99, name="Coffee", type="expense")

    await commands.execute(DeleteTransaction(record_id), actor=admin)

    assert await TransactionService.with_session(session).get(record_id) is None
    [entry] = await _audit(session, "delete_transaction")
    assert entry.target_id == record_id
    assert entry.old_values["amount_cents"] == 9_99
    assert entry.old_values["name"] == "Coffee"


async def test_delete_missing_transaction(commands, admin):
    with pytest.raises(TransactionNotFoundError):
        await commands.execute(DeleteTransaction("missing"), actor=admin)


async def test_settle_command_runs_reconciler(session, commands, make_account, admin):
    alice = await make_account("alice", balance_cents=20_00)
    bob = await make_account("bob")
    sent = await TransferService.with_session(session).send_money(alice, "bob", 20_00)
    await session.commit()

    result = await commands.execute(SettleTransaction(sent.transaction_id, "completed"), actor=admin)

    assert result.target_id == sent.transaction_id
    assert result.data["status"] == "completed"
    assert result.data["match_strategy"] == "linked"
    assert result.data["credited_account_id"] == bob.id
    assert await balance_of(session, bob.id) == 20_00


async def test_unregistered_command_type_is_a_programming_error(commands, admin):
    with pytest.raises(TypeError):
        await commands.execute(object(), actor=admin)


async def test_verify_account_sets_flag_and_audits(session, commands, make_account, admin):
    alice = await make_account("alice")
    assert alice.is_verified is False

    result = await commands.execute(VerifyAccount(alice.id), actor=admin)

    assert result.target_id == alice.id
    assert result.data == {"is_verified": True}
    assert (await AccountService.with_session(session).require(alice.id)).is_verified is True
    [entry] = await _audit(session, "verify_account")
    assert entry.admin_id == admin.id
    assert entry.target_table == "accounts"
    assert entry.old_values == {"is_verified": False}
    assert entry.new_values == {"is_verified": True}


async def test_verify_missing_account(session, commands, admin):
    with pytest.raises(AccountNotFoundError):
        await commands.execute(VerifyAccount("missing"), actor=admin)
    assert await _audit(session, "verify_account") == []
