"""
Application use cases.
"""

from gardien.application.use_cases.consistency_monitor import (
    ConsistencyMonitor,
    MonitorState,
)
from gardien.application.use_cases.sign_in_orchestrator import SignInOrchestrator
from gardien.application.use_cases.sign_out import SignOut
from gardien.application.use_cases.verify_wallet_ownership import (
    OwnershipVerificationResult,
    VerifyWalletOwnership,
)

__all__ = [
    "ConsistencyMonitor",
    "MonitorState",
    "OwnershipVerificationResult",
    "SignInOrchestrator",
    "SignOut",
    "VerifyWalletOwnership",
]
