from datetime import timedelta
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from content.models import Announcement, BlogPost, Category, NewsletterSubscriber, Testimonial
from core.tests.base import BaseTestCase
from core.utils import EmailResult


class TestBlogApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.category = Category.objects.create(name="Forest Stories")
        self.post = BlogPost.objects.create(title="Tracking in Karura", content="<p>Spoor</p>",
                                            category=self.category, status="published")
        BlogPost.objects.create(title="Unfinished", content="<p>draft</p>", category=self.category)

    def test_list_hides_drafts(self):
        body = self.client.get("/api/content/blogs/").json()

        assert body["status"] == "success"
        assert [post["slug"] for post in body["data"]["results"]] == [self.post.slug]

    def test_search_and_category_filters(self):
        found = self.client.get("/api/content/blogs/?search=karura").json()["data"]["results"]
        other = self.client.get("/api/content/blogs/?category=nothing").json()["data"]["results"]

        assert len(found) == 1
        assert other == []

    def test_detail_by_slug(self):
        response = self.client.get(f"/api/content/blogs/{self.post.slug}/")

        assert response.json()["data"]["content"] == "<p>Spoor</p>"

    def test_category_counts_published_posts(self):
        data = self.client.get("/api/content/categories/").json()["data"]

        assert data == [{"id": self.category.id, "name": "Forest Stories", "slug": "forest-stories",
                         "blog_count": 1}]

    def test_publishing_sets_published_at(self):
        assert self.post.published_at is not None
        assert BlogPost.objects.get(title="Unfinished").published_at is None


@mock.patch("content.signals.send_email_via_sendgrid", return_value=EmailResult(success=True))
class TestBlogNotification(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        NewsletterSubscriber.objects.create(email="reader@example.com")
        NewsletterSubscriber.objects.create(email="gone@example.com", is_active=False)

    def test_draft_does_not_notify(self, send_email):
        BlogPost.objects.create(title="Draft", content="x")

        send_email.assert_not_called()

    def test_first_publish_notifies_active_subscribers_once(self, send_email):
        post = BlogPost.objects.create(title="Draft", content="x")

        post.status = "published"
        post.save()
        post.title = "Edited after publishing"
        post.save()

        send_email.assert_called_once()
        assert send_email.call_args[0][2] == "reader@example.com"
        post.refresh_from_db()
        assert post.subscribers_notified_at is not None


class TestSiteContent(BaseTestCase, TestCase):
    def test_announcements_respect_window(self):
        now = timezone.now()
        Announcement.objects.create(title="Open", body="x", status="published")
        Announcement.objects.create(title="Current", body="x", status="published",
                                    starts_at=now - timedelta(days=1), ends_at=now + timedelta(days=1))
        Announcement.objects.create(title="Expired", body="x", status="published",
                                    ends_at=now - timedelta(days=1))
        Announcement.objects.create(title="Upcoming", body="x", status="published",
                                    starts_at=now + timedelta(days=1))
        Announcement.objects.create(title="Draft", body="x")

        data = self.client.get("/api/content/announcements/").json()["data"]

        assert sorted(item["title"] for item in data) == ["Current", "Open"]

    def test_testimonials_filter_by_program(self):
        Testimonial.objects.create(author_name="Njeri", quote="Loved it", program_type="summer")
        Testimonial.objects.create(author_name="Otieno", quote="Great", program_type="easter")
        Testimonial.objects.create(author_name="Hidden", quote="Draft", program_type="summer", status="draft")

        data = self.client.get("/api/content/testimonials/?program_type=summer").json()["data"]

        assert [item["author_name"] for item in data] == ["Njeri"]


@mock.patch("content.views.send_email_via_sendgrid", return_value=EmailResult(success=True))
class TestNewsletter(BaseTestCase, TestCase):
    url = "/api/content/newsletter/subscribe/"

    def test_subscribe(self, send_email):
        response = self.client.post(self.url, {"email": " Reader@Example.com "}, format="json")

        assert response.status_code == 201
        assert response.json()["status"] == "subscribed"
        assert NewsletterSubscriber.objects.get().email == "reader@example.com"
        send_email.assert_called_once()

    def test_already_subscribed(self, send_email):
        NewsletterSubscriber.objects.create(email="reader@example.com")

        response = self.client.post(self.url, {"email": "reader@example.com"}, format="json")

        assert response.json()["status"] == "exists"
        send_email.assert_not_called()

    def test_resubscribe(self, send_email):
        NewsletterSubscriber.objects.create(email="reader@example.com", is_active=False)

        response = self.client.post(self.url, {"email": "reader@example.com"}, format="json")

        assert response.status_code == 200
        assert response.json()["status"] == "resubscribed"
        assert NewsletterSubscriber.objects.get().is_active is True

    def test_email_required(self, send_email):
        assert self.client.post(self.url, {}, format="json").status_code == 400

    def test_unsubscribe_renders_page(self, send_email):
        NewsletterSubscriber.objects.create(email="reader@example.com")

        response = self.client.get("/api/content/unsubscribe/reader@example.com/")

        assert response.status_code == 200
        assert b"unsubscribed successfully" in response.content
        assert NewsletterSubscriber.objects.get().is_active is False

    def test_unsubscribe_unknown_email(self, send_email):
        response = self.client.get("/api/content/unsubscribe/nobody@example.com/")

        assert b"Email not found." in response.content
        send_email.assert_not_called()
