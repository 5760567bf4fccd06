"""Token issuance interfaces."""
from .token_issuer import TokenIssuer

__all__ = ["TokenIssuer"]
