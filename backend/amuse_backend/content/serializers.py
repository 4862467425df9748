from django.conf import settings
from rest_framework import serializers

from .models import Announcement, BlogPost, Category, FAQItem, Testimonial

# Optional fallback placeholder for missing images
PLACEHOLDER_IMAGE = getattr(settings, "PLACEHOLDER_IMAGE", "https://via.placeholder.com/400x300.png?text=Amuse+Kenya")


class CategorySerializer(serializers.ModelSerializer):
    blog_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Category
        fields = ("id", "name", "slug", "blog_count")


class BlogListSerializer(serializers.ModelSerializer):
    image = serializers.SerializerMethodField()
    category = CategorySerializer(read_only=True)

    class Meta:
        model = BlogPost
        fields = ("id", "title", "slug", "author", "excerpt", "image", "published_at", "category")

    def get_image(self, obj):
        if not obj.image:
            return PLACEHOLDER_IMAGE
        request = self.context.get("request")
        return request.build_absolute_uri(obj.image.url) if request else obj.image.url


class BlogDetailSerializer(BlogListSerializer):
    class Meta(BlogListSerializer.Meta):
        fields = BlogListSerializer.Meta.fields + ("content", "updated_at")


class TestimonialSerializer(serializers.ModelSerializer):
    class Meta:
        model = Testimonial
        fields = ("id", "author_name", "author_role", "quote", "rating", "program_type", "display_order")


class AnnouncementSerializer(serializers.ModelSerializer):
    class Meta:
        model = Announcement
        fields = ("id", "title", "body", "link_url", "starts_at", "ends_at", "created_at")


class FAQItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = FAQItem
        fields = ("id", "question", "answer", "is_popular", "display_order", "status")


class FAQQuestionSerializer(serializers.Serializer):
    question = serializers.CharField(max_length=500, trim_whitespace=True)
