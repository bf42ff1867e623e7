"""
Public facade for the Vektopay payment client.

The most useful pieces are re-exported here so integrators can
``from vektopay import ...`` without navigating the package.
"""

from .api import create_client, pay
from .core import (
    AuthMode,
    BrowserSurface,
    ChallengeHandle,
    ChallengePresenter,
    ClientConfig,
    ClientParameters,
    ConfigError,
    GatewayError,
    PollError,
    PresentationError,
    PresentationSurface,
    ProtocolError,
    TransportError,
    VektopayClient,
    VektopayError,
    generate_idempotency_key,
    load_client_config,
    load_env_file,
)
from .core.models import (
    CardCaptureSession,
    CardCaptureSessionRequest,
    CardRequest,
    CardResult,
    Challenge,
    ChallengeMethod,
    ChargeRequest,
    ChargeResult,
    CheckoutSession,
    CheckoutSessionRequest,
    CompleteCardCaptureRequest,
    CustomerInput,
    CustomerListParams,
    CustomerRecord,
    CustomerUpdate,
    DocumentType,
    PaymentCustomer,
    PaymentItem,
    PaymentMethod,
    PaymentMethodStatus,
    PaymentMethodType,
    PaymentMode,
    PaymentRequest,
    PaymentResult,
    PaymentStatus,
    PaymentStatusResult,
    ProviderTokenResult,
    TransactionPaymentMethod,
    TransactionRequest,
    TransactionResult,
)

__all__ = (
    "AuthMode",
    "BrowserSurface",
    "CardCaptureSession",
    "CardCaptureSessionRequest",
    "CardRequest",
    "CardResult",
    "Challenge",
    "ChallengeHandle",
    "ChallengeMethod",
    "ChallengePresenter",
    "ChargeRequest",
    "ChargeResult",
    "CheckoutSession",
    "CheckoutSessionRequest",
    "ClientConfig",
    "ClientParameters",
    "CompleteCardCaptureRequest",
    "ConfigError",
    "CustomerInput",
    "CustomerListParams",
    "CustomerRecord",
    "CustomerUpdate",
    "DocumentType",
    "GatewayError",
    "PaymentCustomer",
    "PaymentItem",
    "PaymentMethod",
    "PaymentMethodStatus",
    "PaymentMethodType",
    "PaymentMode",
    "PaymentRequest",
    "PaymentResult",
    "PaymentStatus",
    "PaymentStatusResult",
    "PollError",
    "PresentationError",
    "PresentationSurface",
    "ProtocolError",
    "ProviderTokenResult",
    "TransactionPaymentMethod",
    "TransactionRequest",
    "TransactionResult",
    "TransportError",
    "VektopayClient",
    "VektopayError",
    "create_client",
    "generate_idempotency_key",
    "load_client_config",
    "load_env_file",
    "pay",
)
