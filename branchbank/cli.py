"""Menu-driven console front end for BranchBank.

The front end only reads typed input, calls the BankEngine facade and prints
each Result. Any other front end can drive the engine the same way.
"""
import os

from branchbank.config import CURRENCY_LABEL, DEFAULT_LOG_LEVEL, LOG_JSON_ENV, LOG_LEVEL_ENV
from branchbank.data_structures import InterestKind, LoanStatus
from branchbank.engine import BankEngine
from branchbank.logging_config import setup_logging

MAIN_MENU = """
========== Banking Transaction Management System ==========
1. Account Management
2. Transaction Management
3. Undo / Redo
4. Transaction Tracking & Reporting
5. Loan Services
6. Exit"""

ACCOUNT_MENU = """
--- Account Management ---
1. Create New Account
2. Search Account
3. Delete Account
4. Update Account
5. Back to Main Menu"""

TRANSACTION_MENU = """
--- Transaction Management ---
1. Deposit
2. Withdraw
3. Transfer
4. Back to Main Menu"""

UNDO_MENU = """
--- Undo / Redo ---
1. Undo Last Operation
2. Redo Last Undone Operation
3. Back to Main Menu"""

REPORT_MENU = """
--- Tracking & Reporting ---
1. Print Account Details
2. Print All Accounts (sorted)
3. Back to Main Menu"""

LOAN_MENU = """
--- Loan Services ---
1. Apply for Loan
2. Pay Loan
3. Check Loan Status (by Acc No)
4. Show Repayment Schedule
5. Back to Main Menu"""


class ConsoleApp:
    """Interactive loop over a BankEngine.

    input_func and output are injectable so the loop can be scripted.
    """

    def __init__(self, engine=None, input_func=None, output=None):
        self.engine = engine or BankEngine()
        self._input = input_func or input
        self._output = output or print

    def say(self, message):
        self._output(message)

    def ask(self, prompt):
        return self._input(prompt).strip()

    def ask_int(self, prompt):
        """Read an integer, or None (after a message) if the input is not one."""
        try:
            return int(self.ask(prompt))
        except ValueError:
            self.say("Invalid input.")
            return None

    def ask_float(self, prompt):
        try:
            return float(self.ask(prompt))
        except ValueError:
            self.say("Invalid input.")
            return None

    def report(self, result, success_message):
        """Print the success message (formatted with the value) or the error."""
        if result:
            self.say(success_message.format(value=result.value))
        else:
            self.say(result.error)
        return result

    def run(self):
        while True:
            self.say(MAIN_MENU)
            choice = self.ask_int("Enter choice: ")
            if choice == 1:
                self.account_menu()
            elif choice == 2:
                self.transaction_menu()
            elif choice == 3:
                self.undo_menu()
            elif choice == 4:
                self.report_menu()
            elif choice == 5:
                self.loan_menu()
            elif choice == 6:
                self.say("Exiting... Goodbye!")
                return 0
            elif choice is not None:
                self.say("Invalid choice.")

    def _submenu(self, menu, actions):
        back = len(actions) + 1
        while True:
            self.say(menu)
            choice = self.ask_int("Enter choice: ")
            if choice == back:
                return
            if choice in actions:
                actions[choice]()
            elif choice is not None:
                self.say("Invalid choice.")

    # -- Accounts --------------------------------------------------------

    def account_menu(self):
        self._submenu(ACCOUNT_MENU, {
            1: self.create_account,
            2: self.search_account,
            3: self.delete_account,
            4: self.update_account,
        })

    def create_account(self):
        acc_no = self.ask_int("Enter New Account Number: ")
        if acc_no is None:
            return
        name = self.ask("Enter Account Holder Name: ")
        self.report(self.engine.create_account(acc_no, name),
                    f"Account created successfully! Initial balance: {{value.balance}} {CURRENCY_LABEL} (Mandatory)")

    def search_account(self):
        acc_no = self.ask_int("Enter account number to search: ")
        if acc_no is None:
            return
        self.print_statement(acc_no)

    def delete_account(self):
        acc_no = self.ask_int("Enter account number to delete: ")
        if acc_no is None:
            return
        self.report(self.engine.delete_account(acc_no), "Account deleted successfully.")

    def update_account(self):
        acc_no = self.ask_int("Enter account number to update: ")
        if acc_no is None:
            return
        account = self.engine.get_account(acc_no)
        if not account:
            self.say(account.error)
            return
        self.say(f"Current name: {account.value.name}")
        name = self.ask("Enter new name: ")
        self.report(self.engine.rename_account(acc_no, name), "Account updated successfully.")

    # -- Cash ------------------------------------------------------------

    def transaction_menu(self):
        self._submenu(TRANSACTION_MENU, {
            1: self.deposit,
            2: self.withdraw,
            3: self.transfer,
        })

    def deposit(self):
        acc_no = self.ask_int("Enter account number: ")
        amount = self.ask_int("Enter amount to deposit: ") if acc_no is not None else None
        if amount is None:
            return
        self.report(self.engine.deposit(acc_no, amount), "Deposit successful. New balance: {value}")

    def withdraw(self):
        acc_no = self.ask_int("Enter account number: ")
        amount = self.ask_int("Enter amount to withdraw: ") if acc_no is not None else None
        if amount is None:
            return
        self.report(self.engine.withdraw(acc_no, amount), "Withdraw successful. New balance: {value}")

    def transfer(self):
        from_acc = self.ask_int("Enter FROM account number: ")
        to_acc = self.ask_int("Enter TO account number: ") if from_acc is not None else None
        amount = self.ask_int("Enter amount to transfer: ") if to_acc is not None else None
        if amount is None:
            return
        self.report(self.engine.transfer(from_acc, to_acc, amount), "Transfer successful.")

    # -- Undo / Redo -----------------------------------------------------

    def undo_menu(self):
        self._submenu(UNDO_MENU, {
            1: lambda: self.report(self.engine.undo(), "Undo successful: {value.description}"),
            2: lambda: self.report(self.engine.redo(), "Redo successful: {value.description}"),
        })

    # -- Reporting -------------------------------------------------------

    def report_menu(self):
        self._submenu(REPORT_MENU, {
            1: self.search_account,
            2: lambda: self.say(self.engine.reports.render_accounts()),
        })

    def print_statement(self, acc_no):
        statement = self.engine.get_statement(acc_no)
        if statement:
            self.say(self.engine.reports.render_statement(statement.value))
        else:
            self.say(statement.error)

    # -- Loans -----------------------------------------------------------

    def loan_menu(self):
        self._submenu(LOAN_MENU, {
            1: self.apply_loan,
            2: self.pay_loan,
            3: self.loan_status,
            4: self.loan_schedule,
        })

    def apply_loan(self):
        acc_no = self.ask_int("Enter account number to apply loan: ")
        if acc_no is None:
            return
        if not self.engine.get_account(acc_no):
            self.say("Account not found.")
            return
        loan_type = self.ask("Enter loan type (e.g., Personal, Auto): ")
        principal = self.ask_int("Enter principal amount: ")
        if principal is None:
            return
        rate = self.ask_float("Enter annual interest rate (e.g., 0.10 for 10%): ")
        if rate is None:
            return
        kind = self.ask_int("Choose interest calculation type: 0 -> Simple, 1 -> Compound (amortized EMI): ")
        if kind is None:
            return
        term = self.ask_int("Enter term in months (e.g., 12 for 1 year): ")
        if term is None:
            return

        result = self.engine.apply_loan(acc_no, loan_type, principal, rate, kind, term)
        if not result:
            self.say(result.error)
            return
        loan = result.value
        balance = self.engine.get_account(acc_no).value.balance
        self.say(f"Loan approved! Loan ID: {loan.loan_id}")
        self.say(f"Principal credited to account. New balance: {balance}")
        if loan.interest_kind == InterestKind.SIMPLE:
            self.say(f"Simple interest. Total payable (approx): {loan.remaining:.2f} {CURRENCY_LABEL} "
                     f"over {loan.term_months} months. Monthly (approx): {loan.remaining / loan.term_months:.2f}")
        else:
            self.say(f"EMI loan. Monthly EMI: {loan.emi:.2f} {CURRENCY_LABEL} for {loan.term_months} months. "
                     f"Total payable (approx): {loan.remaining:.2f}")

    def pay_loan(self):
        acc_no = self.ask_int("Enter account number: ")
        if acc_no is None:
            return
        if not self.loan_status(acc_no):
            return
        loan_id = self.ask_int("Enter Loan ID to pay: ")
        if loan_id is None:
            return
        amount = self.ask_float("Enter payment amount: ")
        if amount is None:
            return

        result = self.engine.pay_loan(acc_no, loan_id, amount)
        if not result:
            self.say(result.error)
            return
        loan = result.value
        self.say(f"Payment applied. Loan ID {loan.loan_id} remaining amount: {loan.remaining:.2f}")
        if loan.status == LoanStatus.CLOSED:
            self.say(f"Loan {loan.loan_id} fully paid and closed.")

    def loan_status(self, acc_no=None):
        """Print an account's loans. Returns True when there is at least one."""
        if acc_no is None:
            acc_no = self.ask_int("Enter account number: ")
            if acc_no is None:
                return False
        loans = self.engine.get_loans(acc_no)
        if not loans:
            self.say(loans.error)
            return False
        if loans.value.empty:
            self.say("No loans found for this account.")
            return False
        self.say(f"  Loans for Account {acc_no}:")
        for _, loan in loans.value.iterrows():
            self.say(" " + self.engine.reports.render_loan(loan))
        return True

    def loan_schedule(self):
        acc_no = self.ask_int("Enter account number: ")
        loan_id = self.ask_int("Enter Loan ID: ") if acc_no is not None else None
        if loan_id is None:
            return
        schedule = self.engine.get_schedule(acc_no, loan_id)
        if schedule:
            self.say(schedule.value.to_string(index=False))
        else:
            self.say(schedule.error)


def main():
    json_format = os.environ.get(LOG_JSON_ENV, "").lower() in ("1", "true", "yes")
    setup_logging(os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL), json_format=json_format)
    try:
        return ConsoleApp().run()
    except (EOFError, KeyboardInterrupt):
        return 0
