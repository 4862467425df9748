from types import SimpleNamespace

from django.test import TestCase

from content.faq import FALLBACK_ANSWER, count_matches, find_best_match
from content.models import FAQItem
from core.tests.base import BaseTestCase


def faq(question, answer):
    return SimpleNamespace(question=question, answer=answer)


FAQS = [
    faq("What should my child bring to camp", "Pack a water bottle, sunscreen and a change of clothes."),
    faq("How do I pay for registration", "Pay by M-Pesa or card once the registration is confirmed."),
]


class TestCountMatches:
    def test_short_words_are_ignored(self):
        assert count_matches("do I go to it", "do I go to it", "") == 0

    def test_substring_of_a_faq_word_counts(self):
        # "bottle" appears in the answer, "bring" in the question
        assert count_matches("bring bottle", FAQS[0].question, FAQS[0].answer) == 2

    def test_case_insensitive(self):
        assert count_matches("SUNSCREEN CLOTHES", FAQS[0].question, FAQS[0].answer) == 2


class TestFindBestMatch:
    def test_needs_two_keywords(self):
        assert find_best_match("sunscreen", FAQS) is None

    def test_first_qualifying_faq_wins(self):
        assert find_best_match("what should child bring", FAQS) is FAQS[0]
        assert find_best_match("registration by card", FAQS) is FAQS[1]

    def test_no_match(self):
        assert find_best_match("weather tomorrow morning", FAQS) is None


class TestFAQApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.packing = FAQItem.objects.create(question=FAQS[0].question, answer=FAQS[0].answer, is_popular=True)
        FAQItem.objects.create(question=FAQS[1].question, answer=FAQS[1].answer)
        FAQItem.objects.create(question="Draft question about camp", answer="Hidden", status="draft")

    def test_ask_returns_answer(self):
        response = self.client.post("/api/content/faq/ask/", {"question": "What should my child bring?"},
                                    format="json")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "answered"
        assert body["data"] == {"answer": self.packing.answer, "faq_id": self.packing.id}

    def test_ask_falls_back(self):
        response = self.client.post("/api/content/faq/ask/", {"question": "Is there parking nearby"},
                                    format="json")

        assert response.json()["status"] == "fallback"
        assert response.json()["data"]["answer"] == FALLBACK_ANSWER

    def test_ask_requires_question(self):
        assert self.client.post("/api/content/faq/ask/", {}, format="json").status_code == 400

    def test_list_hides_drafts_and_filters_popular(self):
        everything = self.client.get("/api/content/faq/").json()["data"]
        popular = self.client.get("/api/content/faq/?popular=1").json()["data"]

        assert len(everything) == 2
        assert [item["id"] for item in popular] == [self.packing.id]

    def test_manage_requires_content_role(self):
        self.login_as("COACH")
        assert self.client.get("/api/content/manage/faqs/").status_code == 403

        self.login_as("MARKETING")
        response = self.client.post("/api/content/manage/faqs/",
                                    {"question": "Do you run birthday parties", "answer": "Yes."}, format="json")
        assert response.status_code == 201
