"""
Remote verifier and record store clients.
"""

from gardien.infrastructure.verifier.ownership_record_client import (
    OwnershipRecordClient,
)
from gardien.infrastructure.verifier.remote_verifier_client import (
    RemoteVerifierClient,
)

__all__ = ["OwnershipRecordClient", "RemoteVerifierClient"]
