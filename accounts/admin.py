from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Collective, Member, User


class MemberInline(admin.TabularInline):
    model = Member
    fk_name = "collective"
    extra = 0
    autocomplete_fields = ("member_collective",)


@admin.register(Collective)
class CollectiveAdmin(admin.ModelAdmin):
    list_display = ("slug", "name", "type", "currency", "created_at")
    list_filter = ("type", "currency")
    search_fields = ("slug", "name")
    inlines = [MemberInline]


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ("member_collective", "role", "collective", "created_at")
    list_filter = ("role",)
    search_fields = ("member_collective__slug", "collective__slug")
    autocomplete_fields = ("member_collective", "collective")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "username", "collective", "is_staff")
    search_fields = ("email", "username", "collective__slug")
    autocomplete_fields = ("collective",)
    fieldsets = BaseUserAdmin.fieldsets + (("Collective", {"fields": ("collective",)}),)
