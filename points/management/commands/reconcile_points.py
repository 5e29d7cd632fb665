from django.core.management.base import BaseCommand

from points.audit import AuditTrailStore
from points.engine import ACTIVE, build_engine, phase_for
from submissions.models import Submission


class Command(BaseCommand):
    help = "Re-run points synchronization for every submission and report what changed."

    def add_arguments(self, parser):
        parser.add_argument("--category", help="Only reconcile submissions of this category.")
        parser.add_argument("--dry-run", action="store_true",
                            help="Report items whose balance is out of date without touching the ledger.")

    def handle(self, *args, **opts):
        engine = build_engine()
        audits = AuditTrailStore()

        qs = Submission.objects.select_related("owner").order_by("pk")
        if opts["category"]:
            qs = qs.filter(category=opts["category"])

        changed = unchanged = failed = 0

        for item in qs:
            audit = audits.peek(item)
            before = audit.last_awarded_points if audit else 0

            if opts["dry_run"]:
                computed = engine.compute_points(item)
                if computed is None:
                    failed += 1
                    continue
                target = computed if phase_for(item.status) == ACTIVE else 0
                if target != before:
                    changed += 1
                    self.stdout.write(f"{item}: {before} → {target}")
                else:
                    unchanged += 1
                continue

            try:
                ok = engine.synchronize(item)
            except Exception as exc:
                # one bad row must not stop the run
                self.stderr.write(f"Submission {item.pk}: {exc}")
                failed += 1
                continue

            if not ok:
                failed += 1
                self.stderr.write(f"Submission {item.pk}: synchronization failed")
                continue

            after = audits.peek(item).last_awarded_points
            if after != before:
                changed += 1
                self.stdout.write(f"{item}: {before} → {after}")
            else:
                unchanged += 1

        verb = "would change" if opts["dry_run"] else "changed"
        self.stdout.write(self.style.SUCCESS(
            f"Checked {changed + unchanged + failed} submissions: {changed} {verb}, "
            f"{unchanged} unchanged, {failed} failed."
        ))
