"""Rate limiting adapters.

The contact path depends on ``AbstractRateLimiter`` only; the default
implementation derives counts from the inquiry records themselves, so no
separate counter has to be maintained or cleaned up.
"""
