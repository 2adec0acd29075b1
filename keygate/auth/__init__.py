from .linking import IdentityMigrationError, MigrationReport, on_link_account

__all__ = ["IdentityMigrationError", "MigrationReport", "on_link_account"]
