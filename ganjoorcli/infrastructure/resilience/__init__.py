"""API Resilience Implementations.

Contains the retry policy and the resilient client that absorbs upstream
rate limiting (429) with exponential backoff.
Bounded Context: API Resilience
"""
