"""Tests for the BankEngine facade: Result envelopes, scenarios and reports."""
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from branchbank.data_structures import InterestKind, StatementData
from branchbank.engine import BankEngine
from branchbank.result import ErrorType, Result
from branchbank.services.undo_manager import ActionKind


class TestResult(unittest.TestCase):

    def test_ok_and_fail(self):
        ok = Result.ok(5)
        fail = Result.fail("nope", ErrorType.NOT_FOUND)

        self.assertTrue(ok)
        self.assertFalse(fail)
        self.assertEqual(ok.unwrap(), 5)
        self.assertEqual(fail.unwrap_or(0), 0)
        with self.assertRaises(ValueError):
            fail.unwrap()


class TestEngineScenarios(unittest.TestCase):

    def setUp(self):
        self.engine = BankEngine()

    def test_create_deposit_withdraw_scenario(self):
        self.assertEqual(self.engine.create_account(101, "Alice").value.balance, 700)
        self.assertEqual(self.engine.deposit(101, 300).value, 1000)

        rejected = self.engine.withdraw(101, 500)
        self.assertFalse(rejected)
        self.assertEqual(rejected.error_type, ErrorType.POLICY_VIOLATION)

        rejected = self.engine.withdraw(101, 300)
        self.assertFalse(rejected)
        self.assertEqual(rejected.error_type, ErrorType.INVALID_AMOUNT)
        self.assertIn("500", rejected.error)

        self.assertEqual(self.engine.deposit(101, 1000).value, 2000)
        self.assertEqual(self.engine.withdraw(101, 1000).value, 1000)
        self.assertEqual(self.engine.get_account(101).value.balance, 1000)

    def test_compound_loan_scenario(self):
        self.engine.create_account(101, "Alice")

        loan = self.engine.apply_loan(101, "Personal", 12000, 0.12, InterestKind.COMPOUND, 12).value

        self.assertEqual(self.engine.get_account(101).value.balance, 12700)
        self.assertEqual(round(loan.emi, 2), 1066.19)
        self.assertAlmostEqual(loan.remaining, loan.emi * 12)

    def test_undo_deposit_scenario(self):
        self.engine.create_account(101, "Alice")
        self.engine.undo_manager.clear()
        self.engine.deposit(101, 200)

        self.assertTrue(self.engine.undo())
        self.assertEqual(self.engine.get_account(101).value.balance, 700)
        self.assertTrue(self.engine.redo())
        self.assertEqual(self.engine.get_account(101).value.balance, 900)
        self.assertTrue(self.engine.undo())

        empty = self.engine.undo()
        self.assertFalse(empty)
        self.assertEqual(empty.error_type, ErrorType.EMPTY_LOG)
        self.assertEqual(empty.error, "Nothing to undo")
        self.assertEqual(self.engine.get_account(101).value.balance, 700)

    def test_redo_on_empty_log(self):
        result = self.engine.redo()
        self.assertEqual(result.error_type, ErrorType.EMPTY_LOG)

    def test_every_mutation_clears_redo(self):
        self.engine.create_account(101, "Alice")
        self.engine.create_account(202, "Bob")
        self.engine.deposit(101, 5000)
        loan = self.engine.apply_loan(101, "Auto", 1000, 0.1, 0, 12).value

        operations = [
            lambda: self.engine.deposit(101, 10),
            lambda: self.engine.withdraw(101, 500),
            lambda: self.engine.transfer(101, 202, 10),
            lambda: self.engine.create_account(303, "Carol"),
            lambda: self.engine.delete_account(303),
            lambda: self.engine.apply_loan(101, "Auto", 1000, 0.1, 1, 12),
            lambda: self.engine.pay_loan(101, loan.loan_id, 10),
        ]
        for operation in operations:
            self.engine.deposit(101, 1)
            self.engine.undo()
            self.assertTrue(self.engine.can_redo())
            self.assertTrue(operation())
            self.assertFalse(self.engine.can_redo())

    def test_error_types(self):
        self.engine.create_account(101, "Alice")
        loan = self.engine.apply_loan(101, "Auto", 100, 0.0, 0, 1).value
        self.engine.pay_loan(101, loan.loan_id, 100)

        cases = [
            (self.engine.create_account(101, "Again"), ErrorType.DUPLICATE_KEY),
            (self.engine.deposit(999, 10), ErrorType.NOT_FOUND),
            (self.engine.deposit(101, -1), ErrorType.INVALID_AMOUNT),
            (self.engine.transfer(101, 999, 1), ErrorType.NOT_FOUND),
            (self.engine.pay_loan(101, 4242, 1), ErrorType.NOT_FOUND),
            (self.engine.pay_loan(101, loan.loan_id, 1), ErrorType.ALREADY_CLOSED),
            (self.engine.delete_account(999), ErrorType.NOT_FOUND),
            (self.engine.get_history(999), ErrorType.NOT_FOUND),
            (self.engine.get_schedule(101, 4242), ErrorType.NOT_FOUND),
        ]
        for result, error_type in cases:
            with self.subTest(error_type=error_type):
                self.assertFalse(result)
                self.assertEqual(result.error_type, error_type)

    def test_non_numeric_loan_input_becomes_failed_result(self):
        self.engine.create_account(101, "Alice")
        loan = self.engine.apply_loan(101, "Auto", 1000, 0.1, 0, 12).value

        for result in (self.engine.pay_loan(101, loan.loan_id, "100"),
                       self.engine.apply_loan(101, "Auto", 1000, "0.1", 0, 12)):
            self.assertFalse(result)
            self.assertEqual(result.error_type, ErrorType.INVALID_AMOUNT)
        self.assertEqual(self.engine.get_account(101).value.balance, 1700)

    def test_transfer_result_balances(self):
        self.engine.create_account(101, "Alice")
        self.engine.create_account(202, "Bob")

        self.assertEqual(self.engine.transfer(101, 202, 200).value, (500, 900))

    def test_rename_is_not_logged(self):
        self.engine.create_account(101, "Alice")
        actions_before = len(self.engine.undo_manager.undo_actions())

        self.assertEqual(self.engine.rename_account(101, " Alicia ").value.name, "Alicia")
        self.assertEqual(len(self.engine.undo_manager.undo_actions()), actions_before)

    def test_engines_do_not_share_state(self):
        other = BankEngine()
        self.engine.create_account(101, "Alice")
        first = self.engine.apply_loan(101, "Auto", 100, 0.1, 0, 12).value
        other.create_account(101, "Alice")
        second = other.apply_loan(101, "Auto", 100, 0.1, 0, 12).value

        self.assertEqual(first.loan_id, second.loan_id)
        self.assertFalse(other.get_account(999))
        self.assertEqual(len(other.undo_manager.undo_actions()), 2)

    def test_quote_emi(self):
        self.assertEqual(self.engine.quote_emi(1200, 0, 12), 100.0)


class TestEngineReports(unittest.TestCase):

    def setUp(self):
        self.engine = BankEngine()
        for acc_no, name in ((300, "Carol"), (100, "Alice"), (200, "Bob")):
            self.engine.create_account(acc_no, name)
        self.engine.transfer(100, 200, 250)

    def test_list_accounts_in_key_order(self):
        df = self.engine.list_accounts()

        self.assertEqual(df["acc_no"].tolist(), [100, 200, 300])
        self.assertEqual(df["balance"].tolist(), [450, 950, 700])

    def test_history_in_insertion_order(self):
        df = self.engine.get_history(200).value

        self.assertEqual(df["kind"].tolist(), ["Initial Deposit (Mandatory)", "Transfer from 100"])
        self.assertEqual(df["amount"].tolist(), [700, 250])
        self.assertTrue(df["other_acc"].isna().iloc[0])
        self.assertEqual(df["other_acc"].iloc[1], 100)

    def test_loans_and_statement(self):
        loan = self.engine.apply_loan(100, "Auto", 1200, 0.1, 0, 12).value

        loans = self.engine.get_loans(100).value
        self.assertEqual(loans["loan_id"].tolist(), [loan.loan_id])
        self.assertEqual(loans["status"].tolist(), ["Active"])

        statement = self.engine.get_statement(100).value
        self.assertIsInstance(statement, StatementData)
        text = self.engine.reports.render_statement(statement)
        self.assertIn("Account No : 100", text)
        self.assertIn("Transfer to 200 | Amount: 250 | Other Acc: 200", text)
        self.assertIn(f"LoanID: {loan.loan_id} | Type: Auto", text)

    def test_empty_loans_statement(self):
        text = self.engine.reports.render_statement(self.engine.get_statement(300).value)
        self.assertIn("No loans for this account.", text)

    def test_schedule(self):
        loan = self.engine.apply_loan(100, "Auto", 1200, 0.0, 1, 12).value

        schedule = self.engine.get_schedule(100, loan.loan_id, "2026-03-01").value

        self.assertEqual(len(schedule), 12)
        self.assertEqual(schedule.iloc[0]["due_date"], "2026-04-01")

    def test_undo_actions_describe_themselves(self):
        self.assertEqual(self.engine.undo_manager.get_undo_description(), "Transfer 250 from 100 to 200")
        self.assertEqual(self.engine.undo_manager.undo_actions()[0].kind, ActionKind.CREATE_ACCOUNT)


if __name__ == "__main__":
    unittest.main()
