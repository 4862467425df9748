from datetime import date
from decimal import Decimal

from django.core.cache import cache
from rest_framework.test import APIClient

from portal.models import Role, User
from registrations.models import ProgramConfig, Registration


class BaseTestCase:
    """Factories shared by the app test suites. Mix into django.test.TestCase."""

    def setUp(self):
        super().setUp()
        # throttle counters live in the cache
        cache.clear()
        self.client = APIClient()

    def get_program(self, program_type="summer", half="2000", full="3500", **kwargs):
        defaults = {
            "title": program_type.replace("-", " ").title(),
            "half_day_rate": Decimal(half),
            "full_day_rate": Decimal(full),
        }
        defaults.update(kwargs)
        program, _ = ProgramConfig.objects.update_or_create(program_type=program_type, defaults=defaults)
        return program

    def get_user(self, role=Role.ADMIN, email=None, password="pass1234!"):
        email = email or f"{role.lower()}@amusekenya.co.ke"
        return User.objects.create_user(username=email.split("@")[0], email=email, password=password, role=role)

    def login_as(self, role=Role.ADMIN):
        user = self.get_user(role=role)
        self.client.force_authenticate(user=user)
        return user

    def get_registration(self, program=None, children=None, total="7000", **kwargs):
        program = program or self.get_program()
        children = children if children is not None else [
            {"child_name": "Wanjiru", "age_range": "7-10", "number_of_days": 2,
             "selected_sessions": ["full", "full"], "price": "7000"},
        ]
        defaults = {
            "parent_name": "Achieng Otieno",
            "email": "achieng@example.com",
            "phone": "0712345678",
            "children": children,
            "total_amount": Decimal(total),
            "consent_given": True,
        }
        defaults.update(kwargs)
        return Registration.objects.create(program=program, **defaults)

    def registration_payload(self, **overrides):
        payload = {
            "parent_name": "Achieng Otieno",
            "email": "achieng@example.com",
            "phone": "0712345678",
            "emergency_contact": "Baraka 0722000000",
            "consent": True,
            "children": [
                {
                    "child_name": "Wanjiru",
                    "date_of_birth": date(2016, 3, 14).isoformat(),
                    "number_of_days": 3,
                    "selected_sessions": ["full", "full", "full"],
                },
            ],
        }
        payload.update(overrides)
        return payload
