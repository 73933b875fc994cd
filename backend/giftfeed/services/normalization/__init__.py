"""
Gift name normalization utilities.
"""

from giftfeed.services.normalization.slug import gift_lookup_slug, slugify

__all__ = ["gift_lookup_slug", "slugify"]
