"""
AI Gateway Module

Provisions, stores and revokes API keys on a user's Vercel team so the
application can proxy AI Gateway calls without the user pasting secrets.
"""

from .router import router
from .service import ConsentService

__all__ = ["router", "ConsentService"]
