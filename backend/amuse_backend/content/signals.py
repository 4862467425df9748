import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

from core.utils import build_email_html, send_email_via_sendgrid
from .models import BlogPost, NewsletterSubscriber

logger = logging.getLogger(__name__)


@receiver(post_save, sender=BlogPost)
def send_blog_notification(sender, instance, **kwargs):
    """Tell active subscribers about a post the first time it is published."""
    if instance.status != "published" or instance.subscribers_notified_at is not None:
        return

    # stamp first so a re-save while mailing does not notify twice
    instance.subscribers_notified_at = timezone.now()
    BlogPost.objects.filter(pk=instance.pk).update(subscribers_notified_at=instance.subscribers_notified_at)

    post_url = f"{settings.SITE_URL}/blog/{instance.slug}"
    failures = 0
    for subscriber in NewsletterSubscriber.objects.filter(is_active=True):
        html_message = build_email_html(
            title=f"New on the blog: {instance.title}",
            greeting=subscriber.email,
            message=f"We've just published a new story! 🌳<br><br>"
                    f"<strong>{instance.title}</strong><br>{instance.excerpt}<br><br>"
                    f"<a href='{post_url}' "
                    f"style='display:inline-block; padding:10px 20px; background:#2f6b3a; color:#fff; "
                    f"border-radius:5px; text-decoration:none;'>Read Full Article</a>",
            footer=f"If you no longer wish to receive these updates, you can unsubscribe anytime:<br>"
                   f"<a href='{settings.SITE_URL}/api/content/unsubscribe/{subscriber.email}/'>Unsubscribe</a>",
        )
        if not send_email_via_sendgrid(f"📢 New Blog Post: {instance.title}", html_message, subscriber.email).success:
            failures += 1

    if failures:
        logger.warning("Blog notification for '%s' failed for %s subscriber(s)", instance.title, failures)
