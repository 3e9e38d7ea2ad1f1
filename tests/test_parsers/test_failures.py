"""Tests for the failed-transaction filter."""

import pytest

from pesalog.parsers.base import normalize_message
from pesalog.parsers.failures import is_failed_transaction
from tests.conftest import INSUFFICIENT_FUNDS_MSG, RECEIVED_MSG, SENT_MSG, WRONG_PIN_MSG


class TestFailurePatterns:
    @pytest.mark.parametrize("text", [
        "You do not have sufficient funds to complete this transaction",
        "Insufficient funds in your M-PESA account to send Ksh500.00",
        "You have entered the wrong PIN.",
        "Incorrect M-PESA PIN. Please try again.",
        "Invalid PIN entered",
        "Your transaction could not be processed. Please try again later.",
        "Unable to process your request.",
        "Failed. Ksh200.00 sent to JOHN DOE",
        "Your payment was not successful.",
        "Transaction unsuccessful",
        "You do not have enough money to complete this transaction",
    ])
    def test_matches_failure_wording(self, text):
        assert is_failed_transaction(normalize_message(text)) is True

    def test_case_insensitive(self):
        assert is_failed_transaction("INSUFFICIENT FUNDS") is True

    @pytest.mark.parametrize("text", [RECEIVED_MSG, SENT_MSG, "Your airtime balance is low."])
    def test_successful_messages_pass(self, text):
        assert is_failed_transaction(normalize_message(text)) is False

    def test_conftest_failure_samples(self):
        assert is_failed_transaction(normalize_message(WRONG_PIN_MSG)) is True
        assert is_failed_transaction(normalize_message(INSUFFICIENT_FUNDS_MSG)) is True

    def test_failed_not_matched_inside_word(self):
        assert is_failed_transaction("unfailedness") is False


class TestExtraPhrases:
    def test_extra_phrase_matches(self):
        text = "Your request has been cancelled. Ksh100.00 sent to JOHN"
        assert is_failed_transaction(text) is False
        assert is_failed_transaction(text, ["Request has been CANCELLED"]) is True

    def test_extra_phrases_extend_builtins(self):
        assert is_failed_transaction("wrong PIN", ["something else"]) is True

    def test_empty_phrase_ignored(self):
        assert is_failed_transaction("Your airtime balance is low.", [""]) is False
