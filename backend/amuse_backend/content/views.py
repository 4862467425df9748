import logging

from django.conf import settings
from django.db.models import Count, Q
from django.shortcuts import render
from django.utils import timezone
from rest_framework import generics, status, viewsets
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from core.pagination import StandardResultsSetPagination
from core.utils import api_response, build_email_html, send_email_via_sendgrid
from portal.permissions import HasPortalPermission
from portal.roles import Permission
from .faq import FALLBACK_ANSWER, find_best_match
from .models import Announcement, BlogPost, Category, FAQItem, NewsletterSubscriber, Testimonial
from .serializers import (
    AnnouncementSerializer,
    BlogDetailSerializer,
    BlogListSerializer,
    CategorySerializer,
    FAQItemSerializer,
    FAQQuestionSerializer,
    TestimonialSerializer,
)

logger = logging.getLogger(__name__)


def unsubscribe_link(email):
    return f"{settings.SITE_URL}/api/content/unsubscribe/{email}/"


# ---------------- BLOG VIEWS ----------------

class BlogListView(generics.ListAPIView):
    serializer_class = BlogListSerializer
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        qs = BlogPost.objects.published().select_related("category")
        search = self.request.query_params.get("search")
        category = self.request.query_params.get("category")

        if search:
            qs = qs.filter(
                Q(title__icontains=search)
                | Q(content__icontains=search)
                | Q(excerpt__icontains=search)
                | Q(author__icontains=search)
            )
        if category:
            qs = qs.filter(category__slug=category)
        return qs

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        return api_response("success", "Blogs retrieved successfully", response.data)


class BlogDetailView(generics.RetrieveAPIView):
    queryset = BlogPost.objects.published().select_related("category")
    serializer_class = BlogDetailSerializer
    lookup_field = "slug"

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return api_response("success", "Blog retrieved successfully", serializer.data)


class CategoryListView(APIView):
    def get(self, request):
        cats = Category.objects.annotate(
            blog_count=Count("posts", filter=Q(posts__status="published"))
        ).order_by("name")
        return api_response("success", "Categories retrieved successfully",
                            CategorySerializer(cats, many=True).data)


# ---------------- SITE CONTENT ----------------

class TestimonialListView(APIView):
    def get(self, request):
        testimonials = Testimonial.objects.published()
        program_type = request.query_params.get("program_type")
        if program_type:
            testimonials = testimonials.filter(program_type=program_type)
        return api_response("success", "Testimonials retrieved successfully",
                            TestimonialSerializer(testimonials, many=True).data)


class AnnouncementListView(APIView):
    """Published announcements whose display window includes now."""

    def get(self, request):
        current = timezone.now()
        announcements = Announcement.objects.published().filter(
            Q(starts_at__isnull=True) | Q(starts_at__lte=current),
            Q(ends_at__isnull=True) | Q(ends_at__gte=current),
        )
        return api_response("success", "Announcements retrieved successfully",
                            AnnouncementSerializer(announcements, many=True).data)


class FAQListView(APIView):
    def get(self, request):
        faqs = FAQItem.objects.published()
        if request.query_params.get("popular"):
            faqs = faqs.filter(is_popular=True)
        return api_response("success", "FAQs retrieved successfully", FAQItemSerializer(faqs, many=True).data)


class FAQAskView(APIView):
    def post(self, request):
        serializer = FAQQuestionSerializer(data=request.data)
        if not serializer.is_valid():
            return api_response("error", "Please type a question.", serializer.errors,
                                status.HTTP_400_BAD_REQUEST)

        match = find_best_match(serializer.validated_data["question"], FAQItem.objects.published())
        if match is None:
            return api_response("fallback", FALLBACK_ANSWER, {"answer": FALLBACK_ANSWER, "faq_id": None})
        return api_response("answered", "Answer found", {"answer": match.answer, "faq_id": match.id})


class FAQAdminViewSet(viewsets.ModelViewSet):
    """Marketing-side FAQ management, drafts included."""
    queryset = FAQItem.objects.all()
    serializer_class = FAQItemSerializer
    permission_classes = [HasPortalPermission]
    required_permission = Permission.MANAGE_CONTENT


# ---------------- NEWSLETTER VIEWS ----------------

class NewsletterSubscribeView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "newsletter"

    def post(self, request):
        email = (request.data.get("email") or "").strip().lower()
        if not email:
            return api_response("error", "Email is required.", http_status=status.HTTP_400_BAD_REQUEST)

        subscriber, created = NewsletterSubscriber.objects.get_or_create(email=email)

        if not created and subscriber.is_active:
            return api_response("exists", "You are already subscribed.")

        subscriber.is_active = True
        subscriber.save()

        html_message = build_email_html(
            title="Welcome to the Amuse Kenya Newsletter",
            greeting=subscriber.email,
            message="Thank you for subscribing 🌿. You'll now hear from us whenever we announce new camps, "
                    "programs and stories from the forest.",
            footer=f"If you wish to unsubscribe anytime, click here:<br>"
                   f"<a href='{unsubscribe_link(subscriber.email)}'>Unsubscribe</a>",
        )
        result = send_email_via_sendgrid("🎉 Welcome to the Amuse Kenya Newsletter!", html_message, subscriber.email)
        if not result.success:
            logger.warning("Welcome email failed for %s: %s", subscriber.email, result.error)

        return api_response(
            "subscribed" if created else "resubscribed",
            "Subscription successful! A confirmation email has been sent.",
            http_status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class NewsletterUnsubscribeView(APIView):
    def get(self, request, email):
        subscriber = NewsletterSubscriber.objects.filter(email=email.lower()).first()
        if subscriber is None:
            message = "Email not found."
        elif not subscriber.is_active:
            message = "You are already unsubscribed."
        else:
            subscriber.is_active = False
            subscriber.save()

            html_message = build_email_html(
                title="You Have Unsubscribed",
                greeting=subscriber.email,
                message="You have successfully unsubscribed from our newsletter. We're sorry to see you go.",
                footer="If you ever change your mind, you can subscribe again from our website.",
            )
            send_email_via_sendgrid("You Have Unsubscribed", html_message, subscriber.email)
            message = "You have unsubscribed successfully. A confirmation email has been sent."

        return render(request, "newsletter/unsubscribe.html", {"message": message})
