"""Interfaces for the services that sign and register attestations.

Signing and on-chain submission live outside this package. ``LocationModule``
hands an ``AttestationRequest`` to whichever implementation the caller
supplies and returns its result unchanged.
"""

from __future__ import annotations

from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from geoattest.schemas.records import AttestationRequest


class _Result(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SignedAttestation(_Result):
    uid: str
    signature: str
    signer: str
    request: Optional[AttestationRequest] = None


class RegistrationReceipt(_Result):
    uid: str
    tx_hash: str
    chain_id: Optional[int] = None
    block_number: Optional[int] = Field(default=None, ge=0)


class OffchainSigner(Protocol):
    """Signs an attestation request without submitting it anywhere."""

    def sign(self, request: AttestationRequest) -> SignedAttestation:
        ...


class OnchainRegistrar(Protocol):
    """Submits an attestation request as a transaction."""

    def register(self, request: AttestationRequest) -> RegistrationReceipt:
        ...
