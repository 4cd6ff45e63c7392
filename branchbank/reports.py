"""
Report generation module for BranchBank.
Builds the tabular views of the ledger and renders plain-text statements.
"""
import pandas as pd

from branchbank.config import CURRENCY_LABEL
from branchbank.data_structures import StatementData

HISTORY_COLUMNS = ["date", "kind", "amount", "other_acc"]
LOAN_COLUMNS = ["loan_id", "loan_type", "principal", "annual_rate", "interest_kind",
                "term_months", "emi", "remaining", "status"]
ACCOUNT_COLUMNS = ["acc_no", "name", "balance", "loans", "active_loans"]


class ReportGenerator:
    def __init__(self, store):
        self.store = store

    def accounts_df(self):
        """All accounts in account-number order."""
        rows = []
        for account in self.store.accounts():
            rows.append({
                "acc_no": account.acc_no,
                "name": account.name,
                "balance": account.balance,
                "loans": len(account.loans),
                "active_loans": sum(1 for l in account.loans if not l.is_closed),
            })
        return pd.DataFrame(rows, columns=ACCOUNT_COLUMNS)

    def history_df(self, acc_no):
        """Transaction history of one account, oldest first."""
        account = self.store.get(acc_no)
        rows = [{
            "date": tx.timestamp,
            "kind": tx.kind,
            "amount": tx.amount,
            "other_acc": tx.other_acc,
        } for tx in account.history]
        df = pd.DataFrame(rows, columns=HISTORY_COLUMNS)
        # Keep account numbers integral when some rows have no counterparty
        df["other_acc"] = df["other_acc"].astype("Int64")
        return df

    def loans_df(self, acc_no):
        account = self.store.get(acc_no)
        return pd.DataFrame([l.to_dict() for l in account.loans], columns=LOAN_COLUMNS)

    def statement(self, acc_no):
        account = self.store.get(acc_no)
        return StatementData(
            acc_no=account.acc_no,
            name=account.name,
            balance=account.balance,
            history_df=self.history_df(acc_no),
            loans_df=self.loans_df(acc_no),
        )

    def render_statement(self, data: StatementData):
        """Render a statement as the text shown by the console front end."""
        lines = [
            "----- Account Details -----",
            f"Account No : {data.acc_no}",
            f"Name       : {data.name}",
            f"Balance    : {data.balance} {CURRENCY_LABEL}",
            "Transaction History:",
        ]
        if data.history_df.empty:
            lines.append("  No transactions yet.")
        else:
            for _, row in data.history_df.iterrows():
                line = f"  {row['kind']} | Amount: {row['amount']}"
                if not pd.isna(row['other_acc']):
                    line += f" | Other Acc: {int(row['other_acc'])}"
                lines.append(line)

        lines.append("Loans:")
        if data.loans_df.empty:
            lines.append("  No loans for this account.")
        else:
            for _, loan in data.loans_df.iterrows():
                lines.append(self.render_loan(loan))
        lines.append("----------------------------")
        return "\n".join(lines)

    @staticmethod
    def render_loan(loan):
        """One-line summary of a loan dict or a row of loans_df."""
        return (
            f"  LoanID: {loan['loan_id']} | Type: {loan['loan_type']} | Principal: {loan['principal']}"
            f" | InterestRate: {loan['annual_rate']:.4f} | Term: {loan['term_months']} months"
            f" | EMI: {loan['emi']:.2f} | Remaining: {loan['remaining']:.2f}"
            f" | Status: {loan['status']} | InterestCalc: {loan['interest_kind']}"
        )

    def render_accounts(self):
        df = self.accounts_df()
        if df.empty:
            return "No accounts."
        return "\n".join(
            f"AccNo: {row['acc_no']} | Name: {row['name']} | Balance: {row['balance']}"
            for _, row in df.iterrows()
        )
