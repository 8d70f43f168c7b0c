"""
Daraja constants
Base URLs, endpoint paths and the lookup tables used to build payloads.
"""

from typing import Dict

# Daraja base URLs
BASE_URLS: Dict[str, str] = {
    "sandbox":    "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}
PRODUCTION = "production"

CERTIFICATE_FILES: Dict[str, str] = {
    "sandbox":    "SandboxCertificate.cer",
    "production": "ProductionCertificate.cer",
}

DEFAULT_TIMEOUT = 30

# Endpoint paths, relative to the base URL
EP_AUTH              = "oauth/v1/generate?grant_type=client_credentials"
EP_STK_PUSH          = "mpesa/stkpush/v1/processrequest"
EP_STK_QUERY         = "mpesa/stkpushquery/v1/query"
EP_ORG_INFO          = "sfcverify/v1/query/info"
EP_QR_CODE           = "mpesa/qrcode/v1/generate"
EP_C2B_REGISTER      = "mpesa/c2b/v2/registerurl"
EP_B2C               = "mpesa/b2c/v1/paymentrequest"
EP_TX_STATUS         = "mpesa/transactionstatus/v1/query"
EP_BALANCE           = "mpesa/accountbalance/v1/query"
EP_REVERSAL          = "mpesa/reversal/v1/request"
EP_TAX_REMITTANCE    = "mpesa/b2b/v1/remittax"
EP_B2B               = "mpesa/b2b/v1/paymentrequest"
EP_B2B_EXPRESS       = "v1/ussdpush/get-msisdn"
EP_STANDING_ORDER    = "mpesa/standingorders/v1/create"

# Organisation lookup: shortcode type → IdentifierType
ORG_IDENTIFIER_TYPES: Dict[str, int] = {
    "till":    2,
    "paybill": 4,
}

# Administrative queries (status, balance, Ratiba): shortcode type → IdentifierType
PARTY_IDENTIFIER_TYPES: Dict[str, str] = {
    "till":    "2",
    "paybill": "4",
}
DEFAULT_PARTY_IDENTIFIER_TYPE = "2"

# QR code transaction codes
QR_TRX_CODES: Dict[str, str] = {
    "paybill": "PB",
    "till":    "BG",
}
DEFAULT_QR_TRX_CODE = "BG"

# Ratiba transaction types
STANDING_ORDER_TYPES: Dict[str, str] = {
    "paybill": "Standing Order Customer Pay Bill",
    "till":    "Standing Order Customer Pay Marchant",
}
DEFAULT_STANDING_ORDER_TYPE = "Standing Order Customer Pay Marchant"

# B2B payment type → CommandID
B2B_COMMAND_IDS: Dict[str, str] = {
    "PaybillToPaybill": "BusinessPayBill",
    "PaybillToTill":    "BusinessBuyGoods",
    "B2BAccountTopUp":  "BusinessPayToBulk",
}

B2C_COMMAND_IDS = ("SalaryPayment", "BusinessPayment", "PromotionPayment")

STK_TRANSACTION_TYPE = "CustomerPayBillOnline"
KRA_SHORTCODE = "572572"
REVERSAL_RECEIVER_IDENTIFIER_TYPE = "11"
SHORTCODE_IDENTIFIER_TYPE = "4"
