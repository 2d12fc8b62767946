from django.conf import settings
from django.core.management.base import BaseCommand

from portal.services.accounts import ensure_admin


class Command(BaseCommand):
    help = "Ensure the portal administrator account exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=settings.CLINIC_ADMIN_USERNAME)
        parser.add_argument("--password", default=settings.CLINIC_ADMIN_PASSWORD)
        parser.add_argument("--full-name", default="Administrator")

    def handle(self, *args, **opts):
        user, created = ensure_admin(opts["username"], opts["password"], full_name=opts["full_name"])
        verb = "created" if created else "already present"
        self.stdout.write(self.style.SUCCESS(f"admin {user.username}: {verb}"))
