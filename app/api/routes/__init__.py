"""
API Routes Package
"""
from . import (
    health,
    users,
    humanize,
    checkout,
    webhooks,
)
