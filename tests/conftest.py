"""Shared test fixtures."""

from pathlib import Path

# Test fixture config directory with synthetic data
FIXTURE_CONFIG_DIR = Path(__file__).parent / "fixtures" / "config"

# Synthetic M-Pesa messages, one per template
RECEIVED_MSG = (
    "QAB1X2Y3 Confirmed. You have received Ksh500.00 from JOHN DOE 0712345678 "
    "on 11/9/25 at 2:30 PM. New M-PESA balance is Ksh1,500.00."
)
SENT_MSG = (
    "QAB2Y4Z5 Confirmed. Ksh200.00 sent to SAFARICOM DATA BUNDLES for account "
    "0798765432 on 11/9/25 at 9:00 AM. Transaction cost, Ksh0.00. "
    "New M-PESA balance is Ksh1,300.00."
)
INTERNAL_MSG = (
    "Ksh100.00 has been moved from your M-PESA account to your Business account. "
    "New M-PESA balance is Ksh900.00. New Business balance is Ksh100.00."
)
WRONG_PIN_MSG = "You have entered the wrong PIN. Unable to process your request."
OTHER_MSG = "Your airtime balance is low."

PAYBILL_MSG = (
    "PB1ABC23 Confirmed. Ksh1,200.00 sent to KPLC PREPAID for account "
    "KPLC PREPAID 54201234567 on 10/9/25 at 6:45 PM New M-PESA balance is "
    "Ksh3,400.00. Transaction cost, Ksh23.00."
)
PAID_TO_MSG = (
    "PAY9QRS1 Confirmed. Ksh150.00 paid to JAVA HOUSE. on 11/9/25 at 1:05 PM."
    "New M-PESA balance is Ksh850.00. Transaction cost, Ksh0.00."
)
POCHI_RECEIVED_MSG = (
    "PCH1XYZ9 Confirmed. You have received Ksh250.00 from MARY WANJIKU 0722000111 "
    "on 12/9/25 at 8:15 AM. New Business balance is Ksh750.00."
)
POCHI_SENT_MSG = (
    "PCH2XYZ8 Confirmed. Ksh300.00 sent to PETER KAMAU 0733111222 on 12/9/25 "
    "at 9:00 AM. New Business balance is Ksh450.00. Transaction cost, Ksh0.00."
)
TO_MSHWARI_MSG = (
    "SAV1ABC2 Confirmed. Ksh1,000.00 transferred to M-Shwari account on 5/3/24 "
    "at 10:00 AM. M-PESA balance is Ksh2,000.00 .New M-Shwari saving account "
    "balance is Ksh5,000.00. Transaction cost Ksh.0.00"
)
FROM_MSHWARI_MSG = (
    "SAV2DEF3 Confirmed. Ksh500.00 transferred from M-Shwari account on 5/3/24 "
    "at 11:00 AM. M-Shwari balance is Ksh4,500.00 .M-PESA balance is "
    "Ksh2,500.00 .Transaction cost Ksh.0.00"
)
INSUFFICIENT_FUNDS_MSG = (
    "Failed. You do not have sufficient funds to complete this transaction. "
    "Ksh5,000.00 sent to JOHN DOE 0712345678. M-PESA balance is Ksh120.00."
)
