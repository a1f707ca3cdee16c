import unittest

from lendadmin.calculations import (
    to_amount, monthly_interest, monthly_pending,
    interest_collection_preview, pre_close_preview,
)


class TestToAmount(unittest.TestCase):

    def test_parses_numbers_and_strings(self):
        self.assertEqual(to_amount(1500), 1500.0)
        self.assertEqual(to_amount("2500.50"), 2500.5)
        self.assertEqual(to_amount(" 1,00,000 "), 100000.0)

    def test_garbage_becomes_zero(self):
        for value in (None, "", "abc", "nan", "inf", True, [1]):
            self.assertEqual(to_amount(value), 0.0, value)


class TestMonthlyInterest(unittest.TestCase):

    def test_rate_is_percent_per_month(self):
        self.assertEqual(monthly_interest(100000, 3), 3000.0)
        self.assertEqual(monthly_interest("250000", "1.5"), 3750.0)

    def test_blank_inputs(self):
        self.assertEqual(monthly_interest("", ""), 0.0)


class TestMonthlyPending(unittest.TestCase):

    def test_partially_collected_month(self):
        loan = {"status": "active", "monthlyInterest": 3000, "totalCollected": 4500}
        self.assertEqual(monthly_pending(loan), 1500.0)

    def test_fully_collected_month_has_nothing_pending(self):
        loan = {"status": "active", "monthlyInterest": 3000, "totalCollected": 6000}
        self.assertEqual(monthly_pending(loan), 0.0)

    def test_closed_loan(self):
        loan = {"status": "closed", "monthlyInterest": 3000, "totalCollected": 4500}
        self.assertEqual(monthly_pending(loan), 0.0)

    def test_zero_interest(self):
        loan = {"status": "active", "monthlyInterest": 0, "totalCollected": 100}
        self.assertEqual(monthly_pending(loan), 0.0)


class TestInterestCollectionPreview(unittest.TestCase):

    def test_partial_collection_leaves_pending(self):
        p = interest_collection_preview(3000, 4500, 1000)
        self.assertEqual(p["current_month_pending"], 1500.0)
        self.assertEqual(p["pending_amount"], 500.0)
        self.assertEqual(p["extra_amount"], 0.0)
        self.assertEqual(p["total_collected"], 5500.0)
        self.assertEqual(p["months_collected"], 1)
        self.assertEqual(p["status"], "pending")

    def test_exact_collection_completes_month(self):
        p = interest_collection_preview(3000, 4500, 1500)
        self.assertEqual(p["pending_amount"], 0.0)
        self.assertEqual(p["extra_amount"], 0.0)
        self.assertEqual(p["months_collected"], 2)
        self.assertEqual(p["status"], "complete")

    def test_overflow_goes_to_extra(self):
        p = interest_collection_preview(3000, 4500, 2000)
        self.assertEqual(p["pending_amount"], 0.0)
        self.assertEqual(p["extra_amount"], 500.0)
        self.assertEqual(p["total_collected"], 6500.0)
        self.assertEqual(p["months_collected"], 2)
        self.assertEqual(p["status"], "extra")

    def test_month_already_settled_starts_a_new_one(self):
        p = interest_collection_preview(3000, 6000, 3000)
        self.assertEqual(p["current_month_pending"], 3000.0)
        self.assertEqual(p["pending_amount"], 0.0)
        self.assertEqual(p["months_collected"], 3)

    def test_float_remainder_is_rounded(self):
        p = interest_collection_preview(333.33, 999.99, 0)
        self.assertEqual(p["current_month_pending"], 333.33)
        self.assertEqual(p["months_collected"], 3)

    def test_zero_monthly_interest(self):
        p = interest_collection_preview(0, 0, 500)
        self.assertEqual(p["current_month_pending"], 0.0)
        self.assertEqual(p["pending_amount"], 0.0)
        self.assertEqual(p["extra_amount"], 500.0)
        self.assertEqual(p["months_collected"], 0)

    def test_form_strings_are_accepted(self):
        p = interest_collection_preview("3000", "0", "")
        self.assertEqual(p["collected_amount"], 0.0)
        self.assertEqual(p["pending_amount"], 3000.0)


class TestPreClosePreview(unittest.TestCase):

    def test_penalty_and_discount(self):
        p = pre_close_preview(100000, 2000, 500)
        self.assertEqual(p["total_outstanding"], 102000.0)
        self.assertEqual(p["final_settlement"], 101500.0)
        self.assertEqual(p["savings"], 500.0)

    def test_settlement_floored_at_zero(self):
        p = pre_close_preview(1000, 0, 5000)
        self.assertEqual(p["final_settlement"], 0.0)
        self.assertEqual(p["discount_applied"], 5000.0)

    def test_blank_adjustments(self):
        p = pre_close_preview("75000", "", None)
        self.assertEqual(p["final_settlement"], 75000.0)
        self.assertEqual(p["penalty_applied"], 0.0)


if __name__ == "__main__":
    unittest.main()
