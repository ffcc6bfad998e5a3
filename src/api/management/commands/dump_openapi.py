"""Write the OpenAPI schema of the check-in API to a JSON file."""

import json
import typing as t
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandParser
from ninja.responses import NinjaJSONEncoder

from api.api import api


class Command(BaseCommand):
    help = "Write the OpenAPI schema to a JSON file (default: .artifacts/openapi.json)."

    def add_arguments(self, parser: CommandParser) -> None:
        """Accept an optional output path."""
        parser.add_argument("--output", type=Path, default=None)

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Render the schema and write it out."""
        output_file: Path = options["output"] or settings.BASE_DIR.parent / ".artifacts" / "openapi.json"
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(json.dumps(api.get_openapi_schema(), indent=2, cls=NinjaJSONEncoder))
        self.stdout.write(self.style.SUCCESS(f"OpenAPI schema written to {output_file}"))
