"""
Synthetic data generation module for binary test responses.

This module produces response data from known 1PL, 2PL or 3PL item
parameters for parameter recovery checks and offline evaluation.

It is NOT intended for production inference.
"""
