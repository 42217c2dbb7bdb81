# storefront/services/payment_providers.py
import hashlib
import hmac
from decimal import Decimal
from typing import Any, Dict

import requests
from requests import RequestException

from storefront.domain.errors import PaymentProviderError, ValidationError
from storefront.domain.pricing import to_minor_units
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry
from storefront.utils import settings

logger = get_logger(__name__)


class PaymentProvider:
    """
    Wspolny kontrakt dostawcow platnosci:
    - initiate: tworzy obiekt platnosci u dostawcy dla zamowienia
    - verify: potwierdza sukces platnosci, zwraca transaction id albo rzuca
    Kwoty w domenie sa w jednostkach glownych, do dostawcy idzie x100.
    """

    name = "provider"
    # pole z odpowiedzi initiate zapisywane na zamowieniu
    reference_field = "reference"

    def __init__(self, base_url: str, timeout: float | None = None, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.PAYMENT_HTTP_TIMEOUT
        self.http = session or requests.Session()

    def initiate(self, order_id: int, user_id: int, amount: Decimal) -> Dict[str, Any]:
        raise NotImplementedError

    def verify(self, order_id: int, payload: Dict[str, Any], reference: str | None = None) -> str:
        raise NotImplementedError

    def _require_secret(self, secret: str | None):
        if not secret:
            logger.error(f"{self.name} credentials are not configured")
            raise PaymentProviderError(self.name, "credentials are not configured")

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.info(f"{self.name} {method} {url}")
        try:
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except RequestException as e:
            logger.error(f"{self.name} {method} {url} failed: {e}")
            raise PaymentProviderError(self.name, str(e)) from e


class RazorpayProvider(PaymentProvider):
    """Signature based: the client returns order id, payment id and an HMAC we recompute."""

    name = "razorpay"
    reference_field = "provider_order_id"

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        base_url: str | None = None,
        currency: str | None = None,
        **kwargs,
    ):
        super().__init__(base_url or settings.RAZORPAY_API_URL, **kwargs)
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.currency = currency or settings.PAYMENT_CURRENCY

    def initiate(self, order_id: int, user_id: int, amount: Decimal) -> Dict[str, Any]:
        self._require_secret(self.key_secret)
        # bez retry: tworzenie zamowienia u dostawcy nie jest idempotentne
        created = self._call(
            "POST",
            "/orders",
            json={
                "amount": to_minor_units(amount),
                "currency": self.currency,
                "receipt": str(order_id),
                "notes": {"orderId": str(order_id), "userId": str(user_id)},
            },
            auth=(self.key_id, self.key_secret),
        )
        return {
            "provider_order_id": created["id"],
            "amount": created["amount"],
            "currency": created["currency"],
            "key_id": self.key_id,
        }

    def signature_for(self, provider_order_id: str, provider_payment_id: str) -> str:
        body = f"{provider_order_id}|{provider_payment_id}"
        return hmac.new(self.key_secret.encode(), body.encode(), hashlib.sha256).hexdigest()

    def verify(self, order_id: int, payload: Dict[str, Any], reference: str | None = None) -> str:
        self._require_secret(self.key_secret)

        provider_order_id = payload["provider_order_id"]
        if reference is None or provider_order_id != reference:
            logger.warning(f"Razorpay order {provider_order_id} was not issued for order {order_id}")
            raise ValidationError("Payment does not belong to this order")

        expected = self.signature_for(provider_order_id, payload["provider_payment_id"])
        if not hmac.compare_digest(expected.encode(), payload["signature"].encode()):
            logger.warning(f"Invalid razorpay signature for order {order_id}")
            raise ValidationError("Invalid payment signature")
        return payload["provider_payment_id"]


class StripeProvider(PaymentProvider):
    """Intent based: the intent is re-read from the provider and must report 'succeeded'."""

    name = "stripe"
    reference_field = "payment_intent_id"

    def __init__(
        self,
        secret_key: str | None = None,
        base_url: str | None = None,
        currency: str | None = None,
        **kwargs,
    ):
        super().__init__(base_url or settings.STRIPE_API_URL, **kwargs)
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.currency = (currency or settings.PAYMENT_CURRENCY).lower()

    def initiate(self, order_id: int, user_id: int, amount: Decimal) -> Dict[str, Any]:
        self._require_secret(self.secret_key)
        intent = self._call(
            "POST",
            "/payment_intents",
            data={
                "amount": to_minor_units(amount),
                "currency": self.currency,
                "metadata[orderId]": str(order_id),
                "metadata[userId]": str(user_id),
                "automatic_payment_methods[enabled]": "true",
            },
            auth=(self.secret_key, ""),
        )
        return {
            "payment_intent_id": intent["id"],
            "client_secret": intent["client_secret"],
        }

    @http_retry()
    def _fetch_intent(self, intent_id: str) -> Dict[str, Any]:
        # GET jest idempotentny, tu retry jest bezpieczny
        url = f"{self.base_url}/payment_intents/{intent_id}"
        logger.info(f"{self.name} GET {url}")
        resp = self.http.request("GET", url, timeout=self.timeout, auth=(self.secret_key, ""))
        resp.raise_for_status()
        return resp.json()

    def retrieve_intent(self, intent_id: str) -> Dict[str, Any]:
        try:
            return self._fetch_intent(intent_id)
        except RequestException as e:
            logger.error(f"stripe intent {intent_id} lookup failed: {e}")
            raise PaymentProviderError(self.name, str(e)) from e

    def verify(self, order_id: int, payload: Dict[str, Any], reference: str | None = None) -> str:
        self._require_secret(self.secret_key)
        intent = self.retrieve_intent(payload["payment_intent_id"])

        metadata_order = (intent.get("metadata") or {}).get("orderId")
        if metadata_order is not None and metadata_order != str(order_id):
            logger.warning(f"Intent {intent.get('id')} belongs to order {metadata_order}, not {order_id}")
            raise ValidationError("Payment does not belong to this order")

        if intent.get("status") != "succeeded":
            logger.info(f"Intent {intent.get('id')} status {intent.get('status')}")
            raise ValidationError("Payment not completed")
        return intent["id"]


def build_providers() -> Dict[str, PaymentProvider]:
    return {
        RazorpayProvider.name: RazorpayProvider(),
        StripeProvider.name: StripeProvider(),
    }
