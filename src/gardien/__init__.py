"""
Gardien - wallet session guardian.

Keeps a wallet-authenticated session consistent with the connected wallet
and runs the challenge/response flows that prove wallet ownership.
"""

__version__ = "0.1.0"
