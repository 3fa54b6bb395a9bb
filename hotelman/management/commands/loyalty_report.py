"""Management command to print the loyalty programme report."""

from django.core.management.base import BaseCommand, CommandError

from hotelman.exceptions import HotelmanError
from hotelman.loyalty.service import LoyaltyService


class Command(BaseCommand):
    help = "Print member counts per tier and programme statistics"

    def add_arguments(self, parser):
        parser.add_argument(
            "--branch",
            default=None,
            help="Only guests of this branch code",
        )
        parser.add_argument(
            "--tier",
            default=None,
            help="Only guests in this tier",
        )

    def handle(self, *args, **options):
        try:
            listing = LoyaltyService.list_members(
                branch_code=options["branch"],
                tier=options["tier"],
                include_stats=True,
            )
        except HotelmanError as exc:
            raise CommandError(exc.message)

        for tier, count in listing.tier_stats.items():
            self.stdout.write(f"{tier:<10} {count}")

        stats = listing.stats
        self.stdout.write(f"Members: {stats.total_members}")
        self.stdout.write(f"Points in circulation: {stats.total_points}")
        self.stdout.write(f"Expiring points: {stats.expiring_points}")
        self.stdout.write(f"Tier upgrades (recent): {stats.recent_tier_changes}")

        if listing.top_spenders:
            self.stdout.write("Top spenders:")
            for guest in listing.top_spenders:
                self.stdout.write(f"  {guest.code} {guest.name} {guest.total_spent}")

        self.stdout.write(self.style.SUCCESS("Loyalty report complete."))
