from decimal import Decimal

from django.core.management.base import BaseCommand

from registrations.models import ProgramConfig
from registrations.pricing import PricingMode

DEFAULT_HALF_DAY = Decimal("1500")
DEFAULT_FULL_DAY = Decimal("2500")

PROGRAMS = [
    ("day-camps", "Day Camps", PricingMode.SESSION, False),
    ("easter", "Easter Camp", PricingMode.SESSION, False),
    ("summer", "Summer Camp", PricingMode.SESSION, False),
    ("end-year", "End Year Camp", PricingMode.SESSION, False),
    ("mid-term-feb-march", "Mid-Term Camp (Feb/March)", PricingMode.SESSION, False),
    ("mid-term-may-june", "Mid-Term Camp (May/June)", PricingMode.SESSION, False),
    ("mid-term-october", "Mid-Term Camp (October)", PricingMode.SESSION, False),
    ("little-forest", "Little Forest Explorers", PricingMode.FLAT, False),
    ("homeschooling", "Homeschooling Outdoor Experiences", PricingMode.FLAT, True),
    ("kenyan-experiences", "Kenyan Experiences", PricingMode.FLAT, True),
    ("school-experience", "School Experience", PricingMode.FLAT, True),
    ("team-building", "Team Building", PricingMode.FLAT, True),
    ("parties", "Parties", PricingMode.FLAT, True),
]


class Command(BaseCommand):
    help = "Create the default program configurations. Existing rows are left untouched."

    def add_arguments(self, parser):
        parser.add_argument("--reset-rates", action="store_true",
                            help="Overwrite rates on existing programs with the defaults.")

    def handle(self, *args, **options):
        created_count = 0
        for program_type, title, pricing_mode, creates_invoice in PROGRAMS:
            defaults = {
                "title": title,
                "pricing_mode": pricing_mode,
                "half_day_rate": DEFAULT_HALF_DAY,
                "full_day_rate": DEFAULT_FULL_DAY,
                "creates_invoice": creates_invoice,
            }
            program, created = ProgramConfig.objects.get_or_create(program_type=program_type, defaults=defaults)
            if created:
                created_count += 1
            elif options["reset_rates"]:
                program.half_day_rate = DEFAULT_HALF_DAY
                program.full_day_rate = DEFAULT_FULL_DAY
                program.save(update_fields=["half_day_rate", "full_day_rate", "updated_at"])

        self.stdout.write(self.style.SUCCESS(f"{created_count} program(s) created, {len(PROGRAMS)} configured."))
