"""MediaBuzz referral, share-earning and withdraw bookkeeping service."""

__version__ = "1.0.0"
