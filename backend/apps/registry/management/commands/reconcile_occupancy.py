"""
Occupancy reconciliation management command.

Verifies that every event's and volunteer opportunity's stored occupancy equals
its number of active registrations and never exceeds capacity.
Run: python manage.py reconcile_occupancy [--fix]
"""

from django.core.management.base import BaseCommand, CommandError

from apps.audit.context import AuditContext
from core.exceptions import IntegrityViolationError


def _registries():
    from apps.events.services import event_registry
    from apps.volunteers.services import volunteer_registry

    return [event_registry, volunteer_registry]


class Command(BaseCommand):
    help = "Reconcile registration occupancy counters with active registrations"

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Reset drifted counters to the active-registration count",
        )

    def handle(self, *args, **options):
        fix = options["fix"]
        self.stdout.write("Starting occupancy reconciliation...")

        errors = []
        fixed = []

        for index, registry in enumerate(_registries(), start=1):
            label = registry.spec.label
            self.stdout.write(f"\n[{index}] Checking {label} occupancy...")

            discrepancies = registry.find_discrepancies()
            if not discrepancies:
                self.stdout.write(self.style.SUCCESS(f"  ✓ All {label} counters correct"))
                continue

            for row in discrepancies:
                self.stdout.write(
                    self.style.ERROR(
                        f"  {label} {row['subjectId']}: occupancy={row['occupancy']}, "
                        f"active={row['activeCount']}, capacity={row['capacity']}"
                    )
                )
                if not fix:
                    errors.append(f"{label} {row['subjectId']} out of step")
                    continue
                try:
                    result = registry.repair(
                        row["subjectId"], context=AuditContext.system()
                    )
                except IntegrityViolationError as exc:
                    errors.append(f"{label} {row['subjectId']}: {exc.message}")
                    continue
                if result is not None:
                    fixed.append(result)
                    self.stdout.write(
                        self.style.WARNING(
                            f"    fixed: {result['from']} -> {result['to']}"
                        )
                    )

        self.stdout.write("\n" + "=" * 50)
        if fixed:
            self.stdout.write(self.style.WARNING(f"\nFIXED: {len(fixed)}"))
        if errors:
            for error in errors:
                self.stdout.write(self.style.ERROR(f"  - {error}"))
            raise CommandError(f"Reconciliation found {len(errors)} problem(s)")

        self.stdout.write(self.style.SUCCESS("\n✅ RECONCILIATION PASSED"))
