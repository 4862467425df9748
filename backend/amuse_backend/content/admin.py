from django.contrib import admin

from .models import Announcement, BlogPost, Category, FAQItem, NewsletterSubscriber, Testimonial


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug")


@admin.register(BlogPost)
class BlogPostAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "status", "published_at")
    list_filter = ("status", "category")
    search_fields = ("title", "content", "author")
    prepopulated_fields = {"slug": ("title",)}
    readonly_fields = ("subscribers_notified_at",)


@admin.register(Testimonial)
class TestimonialAdmin(admin.ModelAdmin):
    list_display = ("author_name", "author_role", "rating", "program_type", "display_order", "status")
    list_filter = ("status", "program_type")
    list_editable = ("display_order", "status")


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("title", "status", "starts_at", "ends_at")
    list_filter = ("status",)


@admin.register(FAQItem)
class FAQItemAdmin(admin.ModelAdmin):
    list_display = ("question", "is_popular", "display_order", "status")
    list_filter = ("status", "is_popular")
    list_editable = ("display_order", "is_popular")
    search_fields = ("question", "answer")


@admin.register(NewsletterSubscriber)
class NewsletterSubscriberAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "is_active", "subscribed_at")
    list_filter = ("is_active", "subscribed_at")
    search_fields = ("email",)
    ordering = ("-subscribed_at",)
