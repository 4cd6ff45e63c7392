"""Scripted runs of the console front end."""
import os
import sys
import unittest
from unittest.mock import patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from branchbank import cli
from branchbank.cli import ConsoleApp
from branchbank.engine import BankEngine


class ConsoleTestCase(unittest.TestCase):

    def run_app(self, *inputs, engine=None):
        """Drive a ConsoleApp with the given inputs and return (engine, output)."""
        engine = engine or BankEngine()
        feed = iter(inputs)
        output = []
        app = ConsoleApp(engine, input_func=lambda prompt: next(feed), output=output.append)
        self.assertEqual(app.run(), 0)
        return engine, "\n".join(output)


class TestAccountMenu(ConsoleTestCase):

    def test_create_and_list(self):
        engine, out = self.run_app("1", "1", "101", "Alice", "5", "4", "2", "3", "6")

        self.assertIn("Account created successfully! Initial balance: 700 Tk (Mandatory)", out)
        self.assertIn("AccNo: 101 | Name: Alice | Balance: 700", out)
        self.assertIn("Exiting... Goodbye!", out)
        self.assertEqual(engine.get_account(101).value.name, "Alice")

    def test_duplicate_account_is_reported(self):
        _, out = self.run_app("1", "1", "101", "Alice", "1", "101", "Bob", "5", "6")
        self.assertIn("Account 101 already exists", out)

    def test_update_and_search(self):
        engine, out = self.run_app("1", "1", "101", "Alice", "4", "101", "Alicia", "2", "101", "5", "6")

        self.assertIn("Current name: Alice", out)
        self.assertIn("Account updated successfully.", out)
        self.assertIn("Name       : Alicia", out)

    def test_delete(self):
        engine, out = self.run_app("1", "1", "101", "Alice", "3", "101", "5", "6")

        self.assertIn("Account deleted successfully.", out)
        self.assertFalse(engine.get_account(101))


class TestTransactionMenu(ConsoleTestCase):

    def test_deposit_withdraw_transfer(self):
        engine = BankEngine()
        engine.create_account(101, "Alice")
        engine.create_account(202, "Bob")

        _, out = self.run_app(
            "2", "1", "101", "1300",
            "2", "101", "500",
            "3", "101", "202", "100",
            "4", "6",
            engine=engine,
        )

        self.assertIn("Deposit successful. New balance: 2000", out)
        self.assertIn("Withdraw successful. New balance: 1500", out)
        self.assertIn("Transfer successful.", out)
        self.assertEqual(engine.get_account(202).value.balance, 800)

    def test_rejections_are_printed(self):
        engine = BankEngine()
        engine.create_account(101, "Alice")

        _, out = self.run_app("2", "2", "101", "300", "2", "101", "500", "4", "6", engine=engine)

        self.assertIn("Minimum withdraw amount is 500", out)
        self.assertIn("You must keep at least 700 in your account", out)

    def test_bad_input(self):
        _, out = self.run_app("x", "9", "2", "1", "abc", "4", "6")

        self.assertIn("Invalid input.", out)
        self.assertIn("Invalid choice.", out)


class TestUndoMenu(ConsoleTestCase):

    def test_undo_redo(self):
        engine = BankEngine()
        engine.create_account(101, "Alice")
        engine.deposit(101, 200)

        _, out = self.run_app("3", "1", "2", "3", "6", engine=engine)

        self.assertIn("Undo successful: Deposit 200 (101)", out)
        self.assertIn("Redo successful: Deposit 200 (101)", out)
        self.assertEqual(engine.get_account(101).value.balance, 900)

    def test_nothing_to_redo(self):
        _, out = self.run_app("3", "2", "3", "6")
        self.assertIn("Nothing to redo", out)


class TestLoanMenu(ConsoleTestCase):

    def test_apply_pay_and_status(self):
        engine = BankEngine()
        engine.create_account(101, "Alice")

        _, out = self.run_app(
            "5", "1", "101", "Personal", "1200", "0", "0", "12",
            "2", "101", "1000", "1200",
            "3", "101",
            "5", "6",
            engine=engine,
        )

        self.assertIn("Loan approved! Loan ID: 1000", out)
        self.assertIn("Principal credited to account. New balance: 1900", out)
        self.assertIn("Payment applied. Loan ID 1000 remaining amount: 0.00", out)
        self.assertIn("Loan 1000 fully paid and closed.", out)
        self.assertIn("Status: Closed", out)
        self.assertEqual(engine.get_account(101).value.balance, 700)

    def test_apply_for_unknown_account(self):
        _, out = self.run_app("5", "1", "999", "5", "6")
        self.assertIn("Account not found.", out)

    def test_no_loans(self):
        engine = BankEngine()
        engine.create_account(101, "Alice")

        _, out = self.run_app("5", "3", "101", "5", "6", engine=engine)

        self.assertIn("No loans found for this account.", out)

    def test_schedule(self):
        engine = BankEngine()
        engine.create_account(101, "Alice")
        loan = engine.apply_loan(101, "Auto", 1200, 0.0, 1, 12).value

        _, out = self.run_app("5", "4", "101", str(loan.loan_id), "5", "6", engine=engine)

        self.assertIn("installment", out)
        self.assertIn("due_date", out)


class TestMain(unittest.TestCase):

    @patch("branchbank.cli.setup_logging")
    @patch("builtins.input", side_effect=EOFError)
    def test_main_exits_cleanly_on_eof(self, mock_input, mock_setup):
        self.assertEqual(cli.main(), 0)
        mock_setup.assert_called_once()


if __name__ == "__main__":
    unittest.main()
