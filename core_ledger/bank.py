"""
Bank Coordinator Module

The Bank owns every client and account, issues account numbers, and runs the
operations that span more than one account: atomic transfers and the monthly
commission/interest cycle.

Locking:
    - The registry lock guards the client/account maps and the account number
      counter. It is never held while an account is being mutated.
    - Each account has its own lock. Transfers take both account locks in
      account-number order, whichever side is the source.
    - The monthly cycle holds its own lock so two runs never overlap, and works
      on a snapshot of the account map taken when the run starts.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
import threading

from .currency import Money, Currency, MoneyLike, to_money
from .errors import (
    InvalidAmount, AccountNotFound, ClientNotFound, DuplicateClientId,
    SameAccountTransfer
)
from .products import AccountType, ProductPolicy, policies_from_config
from .accounts import Account, AccountState, Clock, utc_now
from .clients import Client, ClientTier
from .transactions import TransactionRecord, SequenceGenerator
from .reporting import AccountReport
from .config import LedgerConfig, get_config
from .logging_config import get_logger, log_action


@dataclass
class TransferResult:
    """Records produced by a completed transfer"""
    from_account: str
    to_account: str
    amount: Money
    withdrawal: TransactionRecord
    deposit: TransactionRecord
    source_memo: TransactionRecord
    destination_memo: TransactionRecord


@dataclass
class MonthlyCycleResult:
    """Outcome of one monthly commission/interest run"""
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    records_created: int = 0

    def to_dict(self) -> dict:
        return {
            "processed": list(self.processed),
            "skipped": list(self.skipped),
            "failed": dict(self.failed),
            "records_created": self.records_created,
        }


class Bank:
    """
    Registry of clients and accounts, created once and held by whatever owns
    the process lifetime.
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        clock: Clock = utc_now,
        policies: Optional[Dict[AccountType, ProductPolicy]] = None,
        seed_demo: Optional[bool] = None
    ):
        self.config = config or get_config()
        self.currency = Currency[self.config.currency]
        self.policies = policies or policies_from_config(self.config, self.currency)
        self.clock = clock
        self.logger = get_logger("core_ledger.bank")

        self._clients: Dict[str, Client] = {}
        self._accounts: Dict[str, Account] = {}
        self._next_account_sequence = self.config.first_account_sequence
        self._sequence = SequenceGenerator()

        self._registry_lock = threading.RLock()
        self._cycle_lock = threading.Lock()

        if seed_demo if seed_demo is not None else self.config.seed_demo_data:
            self.seed_demo_data()

    # Clients

    def register_client(
        self,
        client_id: str,
        name: str,
        email: str,
        tier: Union[ClientTier, str] = ClientTier.REGULAR
    ) -> Client:
        """
        Register a new client.

        Raises:
            DuplicateClientId: If client_id is already registered
        """
        client = Client(client_id=client_id, name=name, email=email, tier=ClientTier.parse(tier))

        with self._registry_lock:
            if client_id in self._clients:
                raise DuplicateClientId(f"Client {client_id} already exists")
            self._clients[client_id] = client

        log_action(
            self.logger, "info", "Client registered",
            action="register_client", resource=f"client:{client_id}",
            extra={"tier": client.tier.value}
        )
        return client

    def find_client(self, client_id: str) -> Optional[Client]:
        with self._registry_lock:
            return self._clients.get(client_id)

    def get_client(self, client_id: str) -> Client:
        client = self.find_client(client_id)
        if client is None:
            raise ClientNotFound(f"Client {client_id} not found")
        return client

    def list_clients(self) -> List[Client]:
        with self._registry_lock:
            return list(self._clients.values())

    def client_accounts(self, client_id: str) -> List[Account]:
        """Resolve a client's account references, in opening order"""
        client = self.get_client(client_id)
        with self._registry_lock:
            return [self._accounts[number] for number in client.account_numbers]

    # Accounts

    def create_account(
        self,
        client: Union[Client, str],
        account_type: Union[AccountType, str],
        initial_balance: MoneyLike = 0
    ) -> str:
        """
        Open a new account for a client.

        Args:
            client: Client or client id
            account_type: AccountType or its name ("savings", "checking", "investment")
            initial_balance: Opening balance, zero or more

        Returns:
            The new account number

        Raises:
            InvalidVariant: If account_type names no known product
            ClientNotFound: If the client is not registered with this bank
            InvalidAmount: If the opening balance is negative or not a number
        """
        account_type = AccountType.parse(account_type)
        client_id = client.client_id if isinstance(client, Client) else client
        owner = self.get_client(client_id)
        opening_balance = self._to_money(initial_balance)
        if opening_balance.is_negative():
            raise InvalidAmount("Initial balance cannot be negative")

        with self._registry_lock:
            account_number = self._allocate_account_number()
            account = Account(
                account_number=account_number,
                client_id=owner.client_id,
                policy=self.policies[account_type],
                opening_balance=opening_balance,
                clock=self.clock,
                sequence=self._sequence,
            )
            self._accounts[account_number] = account
            owner._link_account(account_number)

        log_action(
            self.logger, "info", f"Account created: {account_type.value}",
            action="create_account", resource=f"account:{account_number}",
            extra={
                "client_id": owner.client_id,
                "account_type": account_type.value,
                "opening_balance": opening_balance.to_string()
            }
        )
        return account_number

    def find_account(self, account_number: str) -> Optional[Account]:
        with self._registry_lock:
            return self._accounts.get(account_number)

    def get_account(self, account_number: str) -> Account:
        account = self.find_account(account_number)
        if account is None:
            raise AccountNotFound(f"Account {account_number} not found")
        return account

    def list_accounts(self) -> List[Account]:
        with self._registry_lock:
            return list(self._accounts.values())

    def change_account_state(self, account_number: str, state: Union[AccountState, str],
                             reason: str = "") -> Account:
        """Administrative lifecycle change (block, suspend, reactivate, close)"""
        account = self.get_account(account_number)
        account.change_state(AccountState.parse(state), reason)
        return account

    def account_report(self, account_number: str, recent: Optional[int] = None) -> AccountReport:
        account = self.get_account(account_number)
        owner = self.find_client(account.client_id)
        if recent is None:
            recent = self.config.report_recent_transactions
        return account.generate_report(recent=recent, client_name=owner.name if owner else None)

    # Money movements

    def deposit(self, account_number: str, amount: MoneyLike) -> TransactionRecord:
        return self.get_account(account_number).deposit(amount)

    def withdraw(self, account_number: str, amount: MoneyLike) -> TransactionRecord:
        return self.get_account(account_number).withdraw(amount)

    def transfer(
        self,
        from_account_number: str,
        to_account_number: str,
        amount: MoneyLike,
        description: Optional[str] = None
    ) -> TransferResult:
        """
        Move money between two accounts, all or nothing.

        The source withdrawal runs first; if it is rejected nothing has changed
        and its error propagates as is. If the destination then rejects the
        deposit for any reason, the source is credited back to its prior position
        before the error propagates. On success each account also gets a TRANSFER record
        naming the counterparty.

        Raises:
            AccountNotFound: If either account number is unknown
            SameAccountTransfer: If both numbers name the same account
            BankingError: Any rejection from the withdrawal or deposit
        """
        source = self.get_account(from_account_number)
        destination = self.get_account(to_account_number)
        if source is destination:
            raise SameAccountTransfer(f"Cannot transfer from account {from_account_number} to itself")

        first, second = sorted((source, destination), key=lambda account: account.account_number)
        with first.lock, second.lock:
            checkpoint = source._checkpoint()
            withdrawal = source.withdraw(amount, f"Transfer to {to_account_number}")
            try:
                deposit = destination.deposit(withdrawal.amount, f"Transfer from {from_account_number}")
            except Exception as e:
                source._reverse_withdrawal(
                    withdrawal.amount, checkpoint,
                    f"Reversal of failed transfer to {to_account_number}"
                )
                log_action(
                    self.logger, "warning", "Transfer rolled back",
                    action="transfer", resource=f"account:{from_account_number}",
                    extra={"to_account": to_account_number, "amount": withdrawal.amount.to_string(),
                           "reason": str(e)}
                )
                raise

            memo = description or ""
            source_memo = source._record_transfer(
                withdrawal.amount, f"Transfer to {to_account_number}" + (f": {memo}" if memo else "")
            )
            destination_memo = destination._record_transfer(
                withdrawal.amount, f"Transfer from {from_account_number}" + (f": {memo}" if memo else "")
            )

        log_action(
            self.logger, "info", "Transfer completed",
            action="transfer", resource=f"account:{from_account_number}",
            extra={"to_account": to_account_number, "amount": withdrawal.amount.to_string()}
        )
        return TransferResult(
            from_account=from_account_number,
            to_account=to_account_number,
            amount=withdrawal.amount,
            withdrawal=withdrawal,
            deposit=deposit,
            source_memo=source_memo,
            destination_memo=destination_memo,
        )

    # Batch processing

    def process_monthly_cycle(self) -> MonthlyCycleResult:
        """
        Apply commissions then interest to every ACTIVE account.

        Accounts registered after the run starts are not part of it. Accounts
        that are not ACTIVE are skipped entirely. A failure on one account is
        logged and reported in the result; the run carries on with the rest.
        """
        with self._cycle_lock:
            accounts = self.list_accounts()
            result = MonthlyCycleResult()

            for account in accounts:
                with account.lock:
                    if not account.is_active:
                        result.skipped.append(account.account_number)
                        continue
                    try:
                        commissions = account.apply_commission()
                        interest = account.apply_interest()
                    except Exception as e:
                        result.failed[account.account_number] = str(e)
                        log_action(
                            self.logger, "error", "Monthly cycle failed for account",
                            action="process_monthly_cycle", resource=f"account:{account.account_number}",
                            extra={"error": str(e)}, exc_info=True
                        )
                        continue

                result.processed.append(account.account_number)
                result.records_created += len(commissions) + (1 if interest else 0)

        log_action(
            self.logger, "info", "Monthly cycle completed",
            action="process_monthly_cycle",
            extra={
                "processed": len(result.processed),
                "skipped": len(result.skipped),
                "failed": len(result.failed),
                "records_created": result.records_created
            }
        )
        return result

    def seed_demo_data(self) -> None:
        """Two sample clients with one account each"""
        juan = self.register_client("DNI001", "Juan Pérez", "juan@email.com", ClientTier.PREMIUM)
        maria = self.register_client("DNI002", "María García", "maria@email.com", ClientTier.REGULAR)
        self.create_account(juan, AccountType.SAVINGS, 1000)
        self.create_account(maria, AccountType.CHECKING, 500)

    def _allocate_account_number(self) -> str:
        # Caller holds the registry lock
        sequence = self._next_account_sequence
        self._next_account_sequence += 1
        return f"{self.config.account_number_prefix}{sequence:0{self.config.account_number_width}d}"

    def _to_money(self, value: MoneyLike) -> Money:
        try:
            return to_money(value, self.currency)
        except ValueError as e:
            raise InvalidAmount(str(e)) from e
