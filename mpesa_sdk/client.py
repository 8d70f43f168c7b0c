"""
M-Pesa Daraja client

Supported flows
---------------
STK Push (Lipa na M-Pesa Online)
    POST /mpesa/stkpush/v1/processrequest
    POST /mpesa/stkpushquery/v1/query

Organisation lookup / QR codes
    POST /sfcverify/v1/query/info
    POST /mpesa/qrcode/v1/generate

C2B URL registration
    POST /mpesa/c2b/v2/registerurl

B2C, B2B, B2B express checkout, tax remittance
    POST /mpesa/b2c/v1/paymentrequest
    POST /mpesa/b2b/v1/paymentrequest
    POST /v1/ussdpush/get-msisdn
    POST /mpesa/b2b/v1/remittax

Transaction status, account balance, reversal
    POST /mpesa/transactionstatus/v1/query
    POST /mpesa/accountbalance/v1/query
    POST /mpesa/reversal/v1/request

Standing orders (Ratiba)
    POST /mpesa/standingorders/v1/create

Authentication
    GET  /oauth/v1/generate?grant_type=client_credentials  (Basic auth)
    A new token is requested before every business call.

The timestamp, STK password and security credential are derived once, when
the client is built. Long-lived clients therefore keep sending the
construction-time timestamp; build a new client when Daraja starts
rejecting it.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Union

from mpesa_sdk.config import config_from_env
from mpesa_sdk.constants import (
    B2B_COMMAND_IDS,
    B2C_COMMAND_IDS,
    BASE_URLS,
    DEFAULT_PARTY_IDENTIFIER_TYPE,
    DEFAULT_QR_TRX_CODE,
    DEFAULT_STANDING_ORDER_TYPE,
    EP_B2B,
    EP_B2B_EXPRESS,
    EP_B2C,
    EP_BALANCE,
    EP_C2B_REGISTER,
    EP_ORG_INFO,
    EP_QR_CODE,
    EP_REVERSAL,
    EP_STANDING_ORDER,
    EP_STK_PUSH,
    EP_STK_QUERY,
    EP_TAX_REMITTANCE,
    EP_TX_STATUS,
    KRA_SHORTCODE,
    ORG_IDENTIFIER_TYPES,
    PARTY_IDENTIFIER_TYPES,
    PRODUCTION,
    QR_TRX_CODES,
    REVERSAL_RECEIVER_IDENTIFIER_TYPE,
    SHORTCODE_IDENTIFIER_TYPE,
    STANDING_ORDER_TYPES,
    STK_TRANSACTION_TYPE,
)
from mpesa_sdk.errors import RequestError, ValidationError
from mpesa_sdk.schemas import MpesaConfig, load_config
from mpesa_sdk.services import (
    DarajaResponse,
    HttpTransport,
    RequestDispatcher,
    TokenProvider,
    create_transport,
)
from mpesa_sdk.utils import (
    format_phone_number,
    generate_password,
    generate_reference,
    generate_security_credential,
    generate_timestamp,
    get_logger,
    require,
)

logger = get_logger(__name__)

Amount = Union[int, float, str]
PhoneNumber = Union[str, int]

# Operation-specific error fields consulted, in order, when a call does not
# return HTTP 200. ResponseDescription is the last resort for every call.
_DEFAULT_ERROR_FIELDS = ('ResponseMessage', 'errorMessage')
_ERROR_MESSAGE_ONLY = ('errorMessage',)


class Mpesa:
    """Daraja API client. One method per M-Pesa operation."""

    def __init__(
            self,
            config: Union[Mapping[str, Any], MpesaConfig],
            transport: Optional[HttpTransport] = None
    ):
        self.config = load_config(config)

        self.environment = self.config.env
        self.requester = self.config.requester
        self.short_code_type = self.config.short_code_type
        self.business_short_code = self.config.business_short_code
        self.initiator_name = self.config.initiator_name
        self._base_url = BASE_URLS[PRODUCTION] if self.environment == PRODUCTION else BASE_URLS['sandbox']

        self._timestamp = generate_timestamp()
        self._password = generate_password(
            self.business_short_code, self.config.pass_key, self._timestamp
        )
        self._security_credential = generate_security_credential(
            self.config.initiator_pass, self.environment, self.config.certificates_dir
        )

        transport = transport if transport is not None else create_transport()
        token_provider = TokenProvider(
            transport,
            self._base_url,
            self.config.consumer_key,
            self.config.consumer_secret,
            self.config.timeout,
        )
        self._dispatcher = RequestDispatcher(
            transport, self._base_url, token_provider, self.config.timeout
        )

        logger.debug(
            "Mpesa client ready (env=%s, shortcode=%s, type=%s)",
            self.environment, self.business_short_code, self.short_code_type,
        )

    @classmethod
    def from_env(
            cls,
            transport: Optional[HttpTransport] = None,
            dotenv_path: Optional[str] = None
    ) -> 'Mpesa':
        """Build a client from MPESA_* environment variables (and an optional .env file)."""
        return cls(config_from_env(dotenv_path), transport=transport)

    # Derived values

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timestamp(self) -> str:
        return self._timestamp

    @property
    def password(self) -> str:
        return self._password

    @property
    def security_credential(self) -> str:
        return self._security_credential

    # Organisation info / QR

    def get_business_name(self) -> str:
        """Registered organisation name of this client's own shortcode."""
        org_info = self.query_org_info(self.short_code_type, self.business_short_code)
        if not isinstance(org_info, dict):
            raise RequestError("Unexpected organisation info response", status_code=200,
                               response_data=org_info)
        return org_info.get('OrganizationName')

    def query_org_info(self, identifier_type: str, short_code: str) -> Dict[str, Any]:
        """
        Look up the organisation behind a till or paybill number.

        Args:
            identifier_type: "till" or "paybill"
            short_code: Shortcode to look up
        """
        if identifier_type not in ORG_IDENTIFIER_TYPES:
            raise ValidationError("Identifier type is not supported")

        payload = {
            "IdentifierType": ORG_IDENTIFIER_TYPES[identifier_type],
            "Identifier":     short_code,
        }
        return self._call(EP_ORG_INFO, payload)

    def generate_qr_code(
            self,
            amount: Amount,
            account_number: Optional[str] = None,
            size: int = 300
    ) -> Dict[str, Any]:
        """Generate a dynamic M-Pesa QR code for this shortcode."""
        require(amount, "Amount is required")

        payload = {
            "MerchantName": self.get_business_name(),
            "RefNo":        account_number,
            "Amount":       amount,
            "TrxCode":      QR_TRX_CODES.get(self.short_code_type, DEFAULT_QR_TRX_CODE),
            "CPI":          self.business_short_code,
            "Size":         size,
        }
        return self._call(EP_QR_CODE, payload)

    # STK Push

    def stk_push(
            self,
            amount: Amount,
            phone_number: PhoneNumber,
            account_number: str,
            callback_url: str,
            description: str = "STK Push Request"
    ) -> Dict[str, Any]:
        """
        Prompt a customer's phone to authorise a payment to this shortcode.

        The result is delivered asynchronously to ``callback_url``; poll with
        stk_push_query() using the returned CheckoutRequestID.
        """
        require(phone_number, "Phone number is required")
        require(amount, "Amount is required")
        require(account_number, "Account Number is required")
        require(callback_url, "Callback url is required")

        phone = format_phone_number(phone_number)
        payload = {
            "Amount":            amount,
            "PartyA":            phone,
            "CallBackURL":       callback_url,
            "Timestamp":         self._timestamp,
            "TransactionDesc":   description,
            "PhoneNumber":       phone,
            "PartyB":            self.business_short_code,
            "AccountReference":  account_number,
            "TransactionType":   STK_TRANSACTION_TYPE,
            "BusinessShortCode": self.business_short_code,
            "Password":          self._password,
        }
        return self._call(EP_STK_PUSH, payload)

    def stk_push_query(self, checkout_request_id: str) -> Dict[str, Any]:
        """Query the state of an STK Push by its CheckoutRequestID."""
        require(checkout_request_id, "Checkout request code is required")

        payload = {
            "BusinessShortCode": self.business_short_code,
            "Password":          self._password,
            "Timestamp":         self._timestamp,
            "CheckoutRequestID": checkout_request_id,
        }
        return self._call(EP_STK_QUERY, payload)

    # C2B

    def register_url(
            self,
            response_type: str,
            confirmation_url: str,
            validation_url: str
    ) -> Dict[str, Any]:
        """
        Register C2B confirmation and validation URLs for this shortcode.

        response_type: "Completed" (auto-accept) | "Cancelled" (reject when
        the validation URL is unreachable).
        """
        require(confirmation_url, "Confirmation url is required")
        require(validation_url, "Validation url is required")

        payload = {
            "ShortCode":       self.business_short_code,
            "ResponseType":    response_type,
            "ConfirmationURL": confirmation_url,
            "ValidationURL":   validation_url,
        }
        return self._call(EP_C2B_REGISTER, payload)

    # B2C

    def initiate_b2c(
            self,
            amount: Amount,
            phone_number: PhoneNumber,
            command_id: str,
            result_url: str,
            queue_timeout_url: Optional[str] = None,
            remarks: str = "Business Payment"
    ) -> Dict[str, Any]:
        """
        Send money from this shortcode to a customer.

        command_id options:
            "SalaryPayment"    – Salary / payroll
            "BusinessPayment"  – Ad-hoc business payment
            "PromotionPayment" – Promotions / rewards
        """
        require(amount, "Amount is required")
        require(phone_number, "Phone number is required")
        require(result_url, "Result URL is required")
        if command_id not in B2C_COMMAND_IDS:
            raise ValidationError("Command ID is not supported")

        payload = {
            "InitiatorName":      self.initiator_name,
            "SecurityCredential": self._security_credential,
            "CommandID":          command_id,
            "Amount":             amount,
            "PartyA":             self.business_short_code,
            "PartyB":             format_phone_number(phone_number),
            "Remarks":            remarks,
            "QueueTimeOutURL":    queue_timeout_url or result_url,
            "ResultURL":          result_url,
            "Occasion":           "",
        }
        return self._call(EP_B2C, payload)

    # Administrative queries

    def transaction_status(
            self,
            transaction_id: str,
            result_url: str,
            queue_timeout_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Query any M-Pesa transaction by TransactionID; the result goes to ``result_url``."""
        require(transaction_id, "Transaction ID is required")
        require(result_url, "Result Url is required")

        payload = {
            "Initiator":          self.initiator_name,
            "SecurityCredential": self._security_credential,
            "CommandID":          "TransactionStatusQuery",
            "TransactionID":      transaction_id,
            "PartyA":             self.business_short_code,
            "IdentifierType":     self._party_identifier_type(),
            "ResultURL":          result_url,
            "QueueTimeOutURL":    queue_timeout_url or result_url,
            "Remarks":            "Transaction Status Query",
            "Occasion":           "",
        }
        return self._call(EP_TX_STATUS, payload)

    def account_balance(
            self,
            result_url: str,
            queue_timeout_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Request the shortcode's account balances; delivered to ``result_url``."""
        require(result_url, "Result Url is required")

        payload = {
            "Initiator":          self.initiator_name,
            "SecurityCredential": self._security_credential,
            "CommandID":          "AccountBalance",
            "PartyA":             self.business_short_code,
            "IdentifierType":     self._party_identifier_type(),
            "ResultURL":          result_url,
            "QueueTimeOutURL":    queue_timeout_url or result_url,
            "Remarks":            "Account Balance Query",
            "Occasion":           "",
        }
        return self._call(EP_BALANCE, payload)

    def reverse_transaction(
            self,
            amount: Amount,
            transaction_id: str,
            result_url: str,
            queue_timeout_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Reverse a completed transaction received by this shortcode."""
        require(transaction_id, "Transaction ID is required")
        require(amount, "Amount is required")
        require(result_url, "Result Url is required")

        payload = {
            "Initiator":              self.initiator_name,
            "SecurityCredential":     self._security_credential,
            "CommandID":              "TransactionReversal",
            "TransactionID":          transaction_id,
            "Amount":                 amount,
            "ReceiverParty":          self.business_short_code,
            "RecieverIdentifierType": REVERSAL_RECEIVER_IDENTIFIER_TYPE,
            "ResultURL":              result_url,
            "QueueTimeOutURL":        queue_timeout_url or result_url,
            "Remarks":                "Transaction Reversal",
            "Occasion":               "",
        }
        return self._call(EP_REVERSAL, payload)

    # B2B

    def tax_remittance(
            self,
            amount: Amount,
            payment_registration_no: str,
            result_url: str,
            queue_timeout_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Remit tax to KRA against a payment registration number."""
        require(payment_registration_no, "Payment Registration No is required")
        require(amount, "Amount is required")
        require(result_url, "Result Url is required")

        payload = {
            "Initiator":              self.initiator_name,
            "SecurityCredential":     self._security_credential,
            "CommandID":              "PayTaxToKRA",
            "SenderIdentifierType":   SHORTCODE_IDENTIFIER_TYPE,
            "RecieverIdentifierType": SHORTCODE_IDENTIFIER_TYPE,
            "Amount":                 amount,
            "PartyA":                 self.business_short_code,
            "PartyB":                 KRA_SHORTCODE,
            "AccountReference":       payment_registration_no,
            "Remarks":                "Tax Remittance",
            "QueueTimeOutURL":        queue_timeout_url or result_url,
            "ResultURL":              result_url,
        }
        return self._call(EP_TAX_REMITTANCE, payload)

    def initiate_b2b(
            self,
            amount: Amount,
            payment_type: str,
            short_code: str,
            account_number: str,
            result_url: str,
            queue_timeout_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Pay another business from this shortcode.

        payment_type options:
            "PaybillToPaybill" – BusinessPayBill
            "PaybillToTill"    – BusinessBuyGoods
            "B2BAccountTopUp"  – BusinessPayToBulk
        """
        require(short_code, "Short code is required")
        require(amount, "Amount is required")
        require(result_url, "Result Url is required")
        if payment_type not in B2B_COMMAND_IDS:
            raise ValidationError("Payment type is not supported")

        payload = {
            "Initiator":              self.initiator_name,
            "SecurityCredential":     self._security_credential,
            "CommandID":              B2B_COMMAND_IDS[payment_type],
            "SenderIdentifierType":   SHORTCODE_IDENTIFIER_TYPE,
            "RecieverIdentifierType": SHORTCODE_IDENTIFIER_TYPE,
            "Amount":                 amount,
            "PartyA":                 self.business_short_code,
            "PartyB":                 short_code,
            "AccountReference":       account_number,
            "Requester":              self.requester,
            "Remarks":                "OK",
            "QueueTimeOutURL":        queue_timeout_url or result_url,
            "ResultURL":              result_url,
        }
        return self._call(EP_B2B, payload)

    def initiate_b2b_express_checkout(
            self,
            amount: Amount,
            receiver_short_code: str,
            callback_url: str,
            partner_name: str,
            payment_ref: Optional[str] = None,
            request_ref: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Push a USSD payment prompt to the receiving merchant's till.

        References are generated when not supplied.
        """
        require(amount, "Amount is required")
        require(receiver_short_code, "Short code is required")
        require(partner_name, "Partner Name is required")
        require(callback_url, "Callback Url is required")

        payload = {
            "PrimaryPartyCode":  self.business_short_code,
            "ReceiverPartyCode": receiver_short_code,
            "Amount":            amount,
            "CallBackUrl":       callback_url,
            "RequestRefID":      request_ref or generate_reference("B2B"),
            "PaymentRef":        payment_ref or generate_reference("PAYREFID"),
            "PartnerName":       partner_name,
        }
        return self._call(EP_B2B_EXPRESS, payload, error_fields=_ERROR_MESSAGE_ONLY)

    # Ratiba

    def mpesa_ratiba(
            self,
            amount: Amount,
            phone_number: PhoneNumber,
            account_reference: str,
            start_date: str,
            end_date: str,
            standing_order_name: str,
            callback_url: str,
            frequency: str = "2"
    ) -> Dict[str, Any]:
        """
        Create a standing order (M-Pesa Ratiba) for a customer.

        Dates are ``YYYYMMDD`` strings. frequency: "1" one-off, "2" daily,
        "3" weekly, "4" monthly, "5" bi-monthly, "6" quarterly,
        "7" half-yearly, "8" yearly.
        """
        require(amount, "Amount is required")
        require(phone_number, "Phone number is required")
        require(account_reference, "Account reference is required")
        require(callback_url, "Callback Url is required")
        require(start_date, "Start Date is required")
        require(end_date, "End Date is required")
        require(standing_order_name, "Standing Order Name is required")

        payload = {
            "StandingOrderName":           standing_order_name,
            "StartDate":                   start_date,
            "EndDate":                     end_date,
            "BusinessShortCode":           self.business_short_code,
            "TransactionType":             STANDING_ORDER_TYPES.get(
                                               self.short_code_type, DEFAULT_STANDING_ORDER_TYPE
                                           ),
            "ReceiverPartyIdentifierType": self._party_identifier_type(),
            "Amount":                      amount,
            "PartyA":                      format_phone_number(phone_number),
            "CallBackURL":                 callback_url,
            "AccountReference":            account_reference,
            "TransactionDesc":             f"Payment to {self.business_short_code}",
            "Frequency":                   frequency,
            "Password":                    self._password,
            "Timestamp":                   self._timestamp,
        }
        return self._call(EP_STANDING_ORDER, payload, error_fields=_ERROR_MESSAGE_ONLY)

    # Private – HTTP helpers

    def _party_identifier_type(self) -> str:
        return PARTY_IDENTIFIER_TYPES.get(self.short_code_type, DEFAULT_PARTY_IDENTIFIER_TYPE)

    def _call(
            self,
            endpoint: str,
            payload: Dict[str, Any],
            error_fields: Iterable[str] = _DEFAULT_ERROR_FIELDS
    ) -> Dict[str, Any]:
        """Dispatch ``payload`` and return the body of a successful response."""
        response = self._dispatcher.send(endpoint, payload)
        return self._ensure_success(endpoint, response, error_fields)

    @staticmethod
    def _ensure_success(
            endpoint: str,
            response: DarajaResponse,
            error_fields: Iterable[str]
    ) -> Dict[str, Any]:
        """Raise unless Daraja answered HTTP 200 with a body."""
        body = response.body
        if body is None or body == "":
            raise RequestError("No response received", status_code=response.status_code)

        if response.status_code != 200:
            message = None
            if isinstance(body, dict):
                message = next((body[f] for f in error_fields if body.get(f)), None)
                message = message or body.get('ResponseDescription')
            message = message or f"Request failed with status {response.status_code}"
            logger.warning("%s failed with HTTP %s: %s", endpoint, response.status_code, message)
            raise RequestError(message, status_code=response.status_code, response_data=body)

        return body
