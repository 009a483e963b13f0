# PATH: apps/domains/points/management/commands/award_week_points.py
"""
Fill lifecycle points the live flow missed (same sweep as POST /points/award/weekN/).

usage:
  python manage.py award_week_points --week=1
  python manage.py award_week_points --week=2 --modules=3,4
  python manage.py award_week_points --all
"""
from django.core.management.base import BaseCommand, CommandError

from apps.domains.points.services.backfill import SWEEPS, award_week


class Command(BaseCommand):
    help = "Award missing question lifecycle points for week 1/2/3 (idempotent, caps respected)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--week",
            type=int,
            choices=sorted(SWEEPS),
            help="Lifecycle week to sweep (1 creation, 2 validation, 3 reparation)",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Sweep weeks 1, 2 and 3",
        )
        parser.add_argument(
            "--modules",
            type=str,
            default="",
            help="Comma-separated module ids (default: every module)",
        )

    def handle(self, *args, **options):
        if options["all"]:
            weeks = sorted(SWEEPS)
        elif options["week"]:
            weeks = [options["week"]]
        else:
            raise CommandError("pass --week=N or --all")

        try:
            module_ids = [int(x) for x in options["modules"].split(",") if x.strip()]
        except ValueError:
            raise CommandError("--modules must be a comma-separated list of integers")

        total = 0
        for week in weeks:
            created = award_week(week, module_ids=module_ids or None)
            total += len(created)
            self.stdout.write(f"week {week}: {len(created)} point(s) awarded")

        self.stdout.write(self.style.SUCCESS(f"done, {total} point(s) awarded"))
