from .gateway import GatewayRejected, ProvisionOutcome, Provisioned, StripeGateway
from .provisioning import PaymentMethodProvisioner

__all__ = [
    "GatewayRejected",
    "PaymentMethodProvisioner",
    "ProvisionOutcome",
    "Provisioned",
    "StripeGateway",
]
