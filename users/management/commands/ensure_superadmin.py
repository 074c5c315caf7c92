import os

from django.core.management.base import BaseCommand, CommandError

from users.models import Account


class Command(BaseCommand):
    help = "Create the bootstrap superadmin account if no superadmin exists yet."

    def add_arguments(self, parser):
        parser.add_argument("--student-id", default=os.getenv("PORTAL_ADMIN_ID", "00000001"))
        parser.add_argument("--email", default=os.getenv("PORTAL_ADMIN_EMAIL", "admin@example.edu"))
        parser.add_argument("--name", default=os.getenv("PORTAL_ADMIN_NAME", "System Administrator"))
        parser.add_argument("--password", default=os.getenv("PORTAL_ADMIN_PASSWORD"))

    def handle(self, *args, **options):
        if Account.objects.filter(role=Account.ROLE_SUPERADMIN).exists():
            self.stdout.write("Superadmin already exists, nothing to do.")
            return

        if not options["password"]:
            raise CommandError("Provide --password or set PORTAL_ADMIN_PASSWORD.")

        account = Account.objects.create_superuser(
            student_id=options["student_id"],
            email=options["email"],
            password=options["password"],
            name=options["name"],
        )
        self.stdout.write(self.style.SUCCESS(f"Superadmin created: {account.student_id}"))
