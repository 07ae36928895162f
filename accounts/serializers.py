# ----------------------------------
# SERIALIZERS - accounts/serializers.py
# ----------------------------------
from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Collective, Member

User = get_user_model()


class CollectiveSerializer(serializers.ModelSerializer):
    class Meta:
        model = Collective
        fields = ("id", "slug", "name", "type", "currency")


class MemberSerializer(serializers.ModelSerializer):
    collective = CollectiveSerializer(read_only=True)

    class Meta:
        model = Member
        fields = ("id", "collective", "role")


class UserSerializer(serializers.ModelSerializer):
    collective = CollectiveSerializer(read_only=True)

    class Meta:
        model = User
        fields = ("id", "email", "username", "collective")
