"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the persistent backend because the user
can open the spreadsheet and see their own data, with no database to run.

TRADEOFFS:
- No transactions across sheets. Compound writes are ordered
  record-first, balance-second, and the record write is undone if the
  balance write fails. Combined with the owner lock held by the
  transaction store, callers never see one without the other.
- Limited query capabilities (we filter in Python)
- Only reads and the initial connection are retried. A mutation is
  never retried, so it can never be applied twice.
"""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import GoogleSheetsSettings, get_settings
from src.errors import ConflictError, NotFoundError
from src.models.finance import (
    Balances,
    Transaction,
    TransactionMode,
    TransactionType,
    UserProfile,
)
from src.services.storage.interface import (
    FinanceStorageInterface,
    StorageConnectionError,
    StorageError,
)


# Column mappings for Users sheet
USER_COLUMNS = [
    "id",
    "name",
    "cash_balance",
    "online_balance",
    "created_at",
]

# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "owner_id",
    "date",
    "mode",
    "application",
    "amount",
    "type",
    "category",
    "description",
    "created_at",
]

CASH_COLUMN = USER_COLUMNS.index("cash_balance") + 1
ONLINE_COLUMN = USER_COLUMNS.index("online_balance") + 1


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_users_sheet(self) -> gspread.Worksheet:
        """Get or create the Users worksheet."""
        return self._get_or_create(self._settings.users_sheet_name, USER_COLUMNS, 100)

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create(
            self._settings.transactions_sheet_name, TRANSACTION_COLUMNS, 5000
        )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
def _all_values(sheet: gspread.Worksheet) -> list[list[str]]:
    """Every row of the sheet, header included."""
    try:
        return sheet.get_all_values()
    except Exception as e:
        raise StorageError(f"Failed to read sheet: {e}") from e


def _read_rows(sheet: gspread.Worksheet) -> list[list[str]]:
    """All data rows (header excluded), skipping blank ones."""
    return [row for row in _all_values(sheet)[1:] if row and row[0]]


def _find_row_index(sheet: gspread.Worksheet, row_id: UUID) -> Optional[int]:
    """1-based sheet row number of the row whose first cell is `row_id`."""
    for idx, row in enumerate(_all_values(sheet)[1:], start=2):  # row 1 is header
        if row and row[0] == str(row_id):
            return idx
    return None


class GoogleSheetsFinanceStorage(FinanceStorageInterface):
    """
    Google Sheets implementation of finance storage.

    One row per user profile and one row per transaction.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        super().__init__()
        self._client = client or GoogleSheetsClient()
        self._setup_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    def _user_to_row(self, user: UserProfile) -> list:
        return [
            str(user.id),
            user.name,
            str(user.cash_balance),
            str(user.online_balance),
            user.created_at.isoformat(),
        ]

    def _row_to_user(self, row: list) -> UserProfile:
        return UserProfile(
            id=UUID(row[0]),
            name=row[1],
            cash_balance=Decimal(row[2]),
            online_balance=Decimal(row[3]),
            created_at=datetime.fromisoformat(row[4]),
        )

    def _transaction_to_row(self, txn: Transaction) -> list:
        return [
            str(txn.id),
            str(txn.owner_id),
            txn.date,
            txn.mode.value,
            txn.application,
            str(txn.amount),
            txn.type.value,
            txn.category or "",
            txn.description or "",
            txn.created_at.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        # Trailing empty cells may be dropped by the API
        def safe_get(index: int) -> str:
            return row[index] if index < len(row) else ""

        return Transaction(
            id=UUID(safe_get(0)),
            owner_id=UUID(safe_get(1)),
            date=safe_get(2),
            mode=TransactionMode(safe_get(3)),
            application=safe_get(4),
            amount=Decimal(safe_get(5)),
            type=TransactionType(safe_get(6)),
            category=safe_get(7) or None,
            description=safe_get(8) or None,
            created_at=datetime.fromisoformat(safe_get(9)),
        )

    def _write_balances(self, sheet: gspread.Worksheet, row_index: int, balances: Balances) -> None:
        sheet.update(
            range_name=f"{rowcol_to_a1(row_index, CASH_COLUMN)}:{rowcol_to_a1(row_index, ONLINE_COLUMN)}",
            values=[[str(balances.cash), str(balances.online)]],
            value_input_option="RAW",
        )

    def _require_user_row(self, sheet: gspread.Worksheet, owner_id: UUID) -> int:
        row_index = _find_row_index(sheet, owner_id)
        if row_index is None:
            raise NotFoundError("User profile not found")
        return row_index

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(self, user: UserProfile, exclusive: bool = False) -> None:
        with self._setup_lock:
            sheet = self._client.get_users_sheet()
            if exclusive and _read_rows(sheet):
                raise ConflictError("A user profile already exists")
            if _find_row_index(sheet, user.id) is not None:
                raise ConflictError(f"User profile already exists: {user.id}")
            try:
                sheet.append_row(self._user_to_row(user), value_input_option="RAW")
            except Exception as e:
                raise StorageError(f"Failed to save user profile: {e}") from e

    def get_user(self, user_id: UUID) -> Optional[UserProfile]:
        try:
            rows = _read_rows(self._client.get_users_sheet())
            for row in rows:
                if row[0] == str(user_id):
                    return self._row_to_user(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get user profile: {e}") from e

    def list_users(self) -> list[UserProfile]:
        try:
            users = [self._row_to_user(row) for row in _read_rows(self._client.get_users_sheet())]
        except Exception as e:
            raise StorageError(f"Failed to list user profiles: {e}") from e
        users.sort(key=lambda u: u.created_at)
        return users

    # -------------------------------------------------------------------------
    # Transactions (reads)
    # -------------------------------------------------------------------------

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        try:
            for row in _read_rows(self._client.get_transactions_sheet()):
                if row[0] == str(transaction_id):
                    return self._row_to_transaction(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get transaction: {e}") from e

    def list_transactions(
        self,
        owner_id: UUID,
        mode: Optional[TransactionMode] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Transaction]:
        try:
            rows = _read_rows(self._client.get_transactions_sheet())
            transactions = [
                self._row_to_transaction(row)
                for row in rows
                if len(row) > 1 and row[1] == str(owner_id)
            ]
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}") from e

        return [
            txn for txn in transactions
            if (mode is None or txn.mode == mode)
            and (date_from is None or txn.date >= date_from)
            and (date_to is None or txn.date <= date_to)
        ]

    # -------------------------------------------------------------------------
    # Transactions (compound writes)
    # -------------------------------------------------------------------------

    def insert_transaction(
        self,
        transaction: Transaction,
        balances: Balances,
    ) -> None:
        users = self._client.get_users_sheet()
        txns = self._client.get_transactions_sheet()

        user_row = self._require_user_row(users, transaction.owner_id)
        if _find_row_index(txns, transaction.id) is not None:
            raise ConflictError(f"Transaction already exists: {transaction.id}")

        try:
            txns.append_row(self._transaction_to_row(transaction), value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}") from e

        try:
            self._write_balances(users, user_row, balances)
        except Exception as e:
            try:
                row_index = _find_row_index(txns, transaction.id)
                if row_index is not None:
                    txns.delete_rows(row_index)
            except Exception as rollback_error:
                raise StorageError(
                    f"Rollback failed after balance update error; transaction "
                    f"{transaction.id} is saved without its balance change: {rollback_error}"
                ) from e
            raise StorageError(f"Failed to update balances, transaction not saved: {e}") from e

    def delete_transaction(
        self,
        transaction: Transaction,
        balances: Balances,
    ) -> None:
        users = self._client.get_users_sheet()
        txns = self._client.get_transactions_sheet()

        user_row = self._require_user_row(users, transaction.owner_id)
        row_index = _find_row_index(txns, transaction.id)
        if row_index is None:
            raise NotFoundError("Transaction not found")

        try:
            txns.delete_rows(row_index)
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}") from e

        try:
            self._write_balances(users, user_row, balances)
        except Exception as e:
            try:
                txns.append_row(self._transaction_to_row(transaction), value_input_option="RAW")
            except Exception as rollback_error:
                raise StorageError(
                    f"Rollback failed after balance update error; transaction "
                    f"{transaction.id} is deleted but its balance change is not: {rollback_error}"
                ) from e
            raise StorageError(f"Failed to update balances, transaction kept: {e}") from e

    def clear_transactions(
        self,
        owner_id: UUID,
        balances: Balances,
    ) -> int:
        users = self._client.get_users_sheet()
        txns = self._client.get_transactions_sheet()

        user_row = self._require_user_row(users, owner_id)

        owned = [
            (idx, row)
            for idx, row in enumerate(_all_values(txns)[1:], start=2)
            if len(row) > 1 and row[1] == str(owner_id)
        ]

        removed: list[list] = []
        try:
            # Bottom-up so earlier row numbers stay valid
            for idx, row in reversed(owned):
                txns.delete_rows(idx)
                removed.append(row)
            self._write_balances(users, user_row, balances)
        except Exception as e:
            restoring = None
            try:
                for row in reversed(removed):
                    restoring = row[0]
                    txns.append_row(row, value_input_option="RAW")
            except Exception as rollback_error:
                raise StorageError(
                    f"Rollback failed while clearing transactions of {owner_id}; "
                    f"could not restore transaction {restoring}: {rollback_error}"
                ) from e
            raise StorageError(f"Failed to clear transactions: {e}") from e

        return len(owned)
