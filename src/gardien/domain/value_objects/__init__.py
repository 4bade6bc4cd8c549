"""
Domain value objects.
"""

from gardien.domain.value_objects.challenge import Challenge, ChallengePurpose
from gardien.domain.value_objects.orchestrator_state import OrchestratorState
from gardien.domain.value_objects.session_change import (
    SessionChange,
    SessionChangeKind,
    next_stamp,
)
from gardien.domain.value_objects.verifier_result import (
    Attested,
    Authenticated,
    Rejected,
    VerifierResult,
)
from gardien.domain.value_objects.wallet_address import WalletAddress
from gardien.domain.value_objects.wallet_signal import WalletConnectionSignal

__all__ = [
    "Challenge",
    "ChallengePurpose",
    "OrchestratorState",
    "SessionChange",
    "SessionChangeKind",
    "next_stamp",
    "Attested",
    "Authenticated",
    "Rejected",
    "VerifierResult",
    "WalletAddress",
    "WalletConnectionSignal",
]
