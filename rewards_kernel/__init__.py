"""
Rewards Kernel

Goal completion and reward computation core for sector goal tracking:
- Cent-exact currency arithmetic
- Goal catalog and submission ledger adapters
- Contestation lifecycle
- One submission per collaborator per day, enforced by the store
"""

__version__ = "0.1.0"
