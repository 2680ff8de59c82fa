import pytest

from walletdesk.modules.common.exceptions import ValidationError
from walletdesk.modules.wallets import (
    InsufficientFundsError,
    WalletFrozenError,
    WalletNotFoundError,
    WalletService,
)


@pytest.fixture
def wallets(session) -> WalletService:
    return WalletService.with_session(session)


async def test_new_wallet_starts_empty(wallets, make_account):
    account = await make_account("alice", with_wallet=False)

    wallet = await wallets.ensure_wallet(account.id)

    assert wallet.balance_cents == 0
    assert wallet.currency == "USD"
    assert wallet.is_frozen is False
    assert (await wallets.ensure_wallet(account.id)).balance_cents == 0


async def test_credit_and_debit_are_applied_in_place(wallets, make_account):
    account = await make_account("alice")

    await wallets.credit(account.id, 10_00)
    await wallets.credit(account.id, 2_50)
    wallet = await wallets.debit(account.id, 3_00)

    assert wallet.balance_cents == 9_50


async def test_debit_never_goes_negative(wallets, make_account):
    account = await make_account("alice", balance_cents=5_00)

    with pytest.raises(InsufficientFundsError):
        await wallets.debit(account.id, 5_01)

    assert (await wallets.get_wallet(account.id)).balance_cents == 5_00


async def test_frozen_wallet_refuses_debit_unless_allowed(wallets, make_account):
    account = await make_account("alice", balance_cents=5_00)
    await wallets.set_frozen(account.id, True)

    with pytest.raises(WalletFrozenError):
        await wallets.debit(account.id, 1_00)

    wallet = await wallets.debit(account.id, 1_00, allow_frozen=True)
    assert wallet.balance_cents == 4_00
    assert wallet.is_frozen is True


async def test_frozen_wallet_still_accepts_credit(wallets, make_account):
    account = await make_account("alice")
    await wallets.set_frozen(account.id, True)

    wallet = await wallets.credit(account.id, 1_00)

    assert wallet.balance_cents == 1_00


async def test_amounts_must_be_positive(wallets, make_account):
    account = await make_account("alice", balance_cents=5_00)

    with pytest.raises(ValidationError):
        await wallets.credit(account.id, 0)
    with pytest.raises(ValidationError):
        await wallets.debit(account.id, -1)


async def test_missing_wallet(wallets):
    with pytest.raises(WalletNotFoundError):
        await wallets.get_wallet("missing")
    with pytest.raises(WalletNotFoundError):
        await wallets.credit("missing", 1_00)
    with pytest.raises(WalletNotFoundError):
        await wallets.set_frozen("missing", True)


async def test_total_balance(wallets, make_account):
    await make_account("alice", balance_cents=3_00)
    await make_account("bob", balance_cents=4_00)

    assert await wallets.total_balance() == 7_00
