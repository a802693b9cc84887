"""
Medgate utilities.
"""

from .logging import disable_logging, enable_logging
from .supabase import MedgateSupabaseClient, create_supabase_client

__all__ = [
    "MedgateSupabaseClient",
    "create_supabase_client",
    "enable_logging",
    "disable_logging",
]
