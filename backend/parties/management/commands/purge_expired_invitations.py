# parties/management/commands/purge_expired_invitations.py
"""
Management command to delete expired invitations.

Usage:
    # Delete expired, never-accepted invitations of every party type
    python manage.py purge_expired_invitations

    # Report what would be deleted without deleting
    python manage.py purge_expired_invitations --dry-run
"""

from django.core.management.base import BaseCommand

from parties.tokens import purge_expired_invitations


class Command(BaseCommand):
    """Delete expired, never-accepted party invitations."""

    help = "Delete expired, never-accepted party invitations"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without deleting",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        counts = purge_expired_invitations(dry_run=dry_run)

        verb = "Would delete" if dry_run else "Deleted"
        for party_type, count in counts.items():
            self.stdout.write(f"  {party_type}: {count}")

        total = sum(counts.values())
        self.stdout.write(self.style.SUCCESS(f"{verb} {total} expired invitation(s)."))
