from typing import Optional

from db.enums import DebridProvider
from streaming_providers.alldebrid.gateway import AllDebridGateway
from streaming_providers.debridlink.gateway import DebridLinkGateway
from streaming_providers.exceptions import UnsupportedProviderError
from streaming_providers.gateway import ProviderGateway
from streaming_providers.offcloud.gateway import OffCloudGateway
from streaming_providers.premiumize.gateway import PremiumizeGateway
from streaming_providers.realdebrid.gateway import RealDebridGateway
from streaming_providers.torbox.gateway import TorboxGateway

# Define provider gateways
PROVIDER_GATEWAYS: dict[DebridProvider, ProviderGateway] = {
    DebridProvider.ALLDEBRID: AllDebridGateway(),
    DebridProvider.DEBRIDLINK: DebridLinkGateway(),
    DebridProvider.OFFCLOUD: OffCloudGateway(),
    DebridProvider.PREMIUMIZE: PremiumizeGateway(),
    DebridProvider.REALDEBRID: RealDebridGateway(),
    DebridProvider.TORBOX: TorboxGateway(),
}


def normalize_provider_name(name: Optional[str]) -> str:
    return (name or "").strip().lower().replace("-", "")


def get_provider_gateway(name: Optional[str]) -> ProviderGateway:
    """Resolve a configured provider name, case-insensitively, to its gateway."""
    try:
        return PROVIDER_GATEWAYS[DebridProvider(normalize_provider_name(name))]
    except ValueError:
        raise UnsupportedProviderError(name)
