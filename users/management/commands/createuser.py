"""Management command to create an identity with email."""

from typing import Any

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandParser

from users.models import AccessLevel, CustomUser, InvalidEmailError


class Command(BaseCommand):
    """
    Django command to create an identity.

    The identity will not have a password set, following the application's authentication model.
    """

    help = "Create an identity with the specified email address"

    def add_arguments(self, parser: CommandParser) -> None:
        """
        Add command line arguments.

        Args:
            parser: The command argument parser

        """
        parser.add_argument(
            "--email",
            type=str,
            required=True,
            help="Email address for the new identity",
        )
        parser.add_argument(
            "--name",
            type=str,
            default="",
            help="Display name (defaults to the email address)",
        )
        parser.add_argument(
            "--access-level",
            type=str,
            choices=AccessLevel.values,
            default=AccessLevel.L0,
            help="Initial access tier",
        )

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: ARG002
        """Create the identity and report the outcome."""
        User = get_user_model()
        email = options["email"]

        try:
            user: CustomUser = User.objects.create_user(
                email=email,
                name=options["name"] or email,
                access_level=options["access_level"],
            )
            self.stdout.write(
                self.style.SUCCESS(
                    f"Successfully created identity {user.email} ({user.access_level})",
                ),
            )
        except InvalidEmailError:
            self.stdout.write(
                self.style.ERROR(f"Invalid email format: {email}"),
            )
            raise
        except ValidationError as e:
            self.stdout.write(
                self.style.ERROR(f"Validation error: {e}"),
            )
            raise
