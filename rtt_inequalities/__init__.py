"""Waiting-time inequality analysis for referral-to-treatment (RTT) data.

Submodules are imported on demand so that loading the package does not pull in
matplotlib.
"""

__version__ = '0.1.0'
