from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r"manage/faqs", views.FAQAdminViewSet, basename="faq-admin")

urlpatterns = [
    path("blogs/", views.BlogListView.as_view(), name="api-blogs"),
    path("blogs/<slug:slug>/", views.BlogDetailView.as_view(), name="api-blog-detail"),
    path("categories/", views.CategoryListView.as_view(), name="api-categories"),
    path("testimonials/", views.TestimonialListView.as_view(), name="api-testimonials"),
    path("announcements/", views.AnnouncementListView.as_view(), name="api-announcements"),
    path("faq/", views.FAQListView.as_view(), name="api-faq"),
    path("faq/ask/", views.FAQAskView.as_view(), name="api-faq-ask"),
    path("newsletter/subscribe/", views.NewsletterSubscribeView.as_view(), name="newsletter-subscribe"),
    path("unsubscribe/<str:email>/", views.NewsletterUnsubscribeView.as_view(), name="unsubscribe"),
    path("", include(router.urls)),
]
