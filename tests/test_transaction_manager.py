"""Tests for deposit, withdraw and transfer rules."""
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from branchbank.engine import BankEngine
from branchbank.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    PolicyViolationError,
)
from branchbank.services.transaction_manager import whole_amount
from branchbank.services.undo_manager import ActionKind


class TestWholeAmount(unittest.TestCase):

    def test_accepts_whole_numbers(self):
        self.assertEqual(whole_amount(5), 5)
        self.assertEqual(whole_amount(5.0), 5)
        self.assertIsInstance(whole_amount(5.0), int)

    def test_rejects_bad_values(self):
        for value in (0, -1, 2.5, float("nan"), float("inf"), "10", None, True):
            with self.subTest(value=value):
                with self.assertRaises(InvalidAmountError):
                    whole_amount(value)


class TestDepositWithdraw(unittest.TestCase):

    def setUp(self):
        self.engine = BankEngine()
        self.tm = self.engine.transaction_manager
        self.engine.account_service.create_account(101, "Alice")

    def test_deposit(self):
        account = self.tm.deposit(101, 300)

        self.assertEqual(account.balance, 1000)
        self.assertEqual(account.history[-1].kind, "Deposit")
        action = self.engine.undo_manager.undo_actions()[-1]
        self.assertEqual(action.kind, ActionKind.DEPOSIT)
        self.assertEqual(action.balance_snapshot, 700)

    def test_deposit_invalid(self):
        with self.assertRaises(InvalidAmountError):
            self.tm.deposit(101, 0)
        with self.assertRaises(AccountNotFoundError):
            self.tm.deposit(999, 10)
        self.assertEqual(self.engine.store.get(101).balance, 700)

    def test_withdraw_floors(self):
        """Withdrawals below 500 or leaving less than 700 are rejected."""
        self.tm.deposit(101, 300)  # 1000

        with self.assertRaises(PolicyViolationError):
            self.tm.withdraw(101, 500)
        with self.assertRaises(InvalidAmountError):
            self.tm.withdraw(101, 300)
        with self.assertRaises(InvalidAmountError):
            self.tm.withdraw(101, -5)
        self.assertEqual(self.engine.store.get(101).balance, 1000)

        self.tm.deposit(101, 1000)  # 2000
        account = self.tm.withdraw(101, 1000)
        self.assertEqual(account.balance, 1000)

    def test_successful_withdrawals_keep_floor(self):
        self.tm.deposit(101, 5000)
        for amount in (500, 600, 1000, 2000, 900):
            before = self.engine.store.get(101).balance
            try:
                after = self.tm.withdraw(101, amount).balance
            except PolicyViolationError:
                continue
            self.assertEqual(after, before - amount)
            self.assertGreaterEqual(after, 700)

    def test_rejected_operation_does_not_touch_redo(self):
        self.tm.deposit(101, 300)
        self.engine.undo_manager.undo()
        with self.assertRaises(InvalidAmountError):
            self.tm.withdraw(101, 100)
        self.assertTrue(self.engine.undo_manager.can_redo())


class TestTransfer(unittest.TestCase):

    def setUp(self):
        self.engine = BankEngine()
        self.tm = self.engine.transaction_manager
        self.engine.account_service.create_account(101, "Alice")
        self.engine.account_service.create_account(202, "Bob")

    def test_transfer_conserves_balance(self):
        source, target = self.tm.transfer(101, 202, 250)

        self.assertEqual(source.balance + target.balance, 1400)
        self.assertEqual(source.balance, 450)
        self.assertEqual(target.balance, 950)
        self.assertEqual(source.history[-1].kind, "Transfer to 202")
        self.assertEqual(source.history[-1].other_acc, 202)
        self.assertEqual(target.history[-1].kind, "Transfer from 101")
        self.assertEqual(target.history[-1].other_acc, 101)

    def test_single_action_for_both_legs(self):
        self.tm.transfer(101, 202, 250)

        action = self.engine.undo_manager.undo_actions()[-1]
        self.assertEqual(action.kind, ActionKind.TRANSFER)
        self.assertEqual((action.acc_no, action.other_acc_no, action.amount), (101, 202, 250))

    def test_transfer_may_empty_source(self):
        source, _ = self.tm.transfer(101, 202, 700)
        self.assertEqual(source.balance, 0)

    def test_transfer_rejections(self):
        with self.assertRaises(InvalidAmountError):
            self.tm.transfer(101, 101, 10)
        with self.assertRaises(AccountNotFoundError):
            self.tm.transfer(101, 999, 10)
        with self.assertRaises(InvalidAmountError):
            self.tm.transfer(101, 202, 0)
        with self.assertRaises(InsufficientFundsError):
            self.tm.transfer(101, 202, 701)

        self.assertEqual(self.engine.store.get(101).balance, 700)
        self.assertEqual(self.engine.store.get(202).balance, 700)


if __name__ == "__main__":
    unittest.main()
