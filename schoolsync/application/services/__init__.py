"""Application services built on the mirrors."""

from schoolsync.application.services.account_seeding import DefaultAccountSeeder
from schoolsync.application.services.aggregate_store import (
    AggregateStore,
    DashboardSnapshot,
)
from schoolsync.application.services.setup_check import SetupStatus, check_store_setup

__all__ = [
    "AggregateStore",
    "DashboardSnapshot",
    "DefaultAccountSeeder",
    "SetupStatus",
    "check_store_setup",
]
