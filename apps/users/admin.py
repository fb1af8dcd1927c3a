# apps/users/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from .models import Profile, Role, User
from .services import IdentityBridge


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = _('Profile')
    fields = ('full_name', 'role', 'email', 'mobile_number', 'course', 'joining_date')


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.
    """
    list_display = ('email', 'full_name', 'role', 'is_active', 'is_staff', 'last_login', 'date_joined')
    list_filter = ('is_active', 'is_staff', 'is_superuser', 'profile__role')
    search_fields = ('email', 'first_name', 'last_name', 'mobile')
    ordering = ('-date_joined',)
    readonly_fields = ('last_login', 'date_joined')

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        (_('Personal Info'), {
            'fields': ('first_name', 'last_name', 'mobile')
        }),
        (_('Sign-up Metadata'), {
            'fields': ('user_metadata',),
            'classes': ('collapse',)
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'first_name', 'last_name', 'mobile', 'user_metadata'),
        }),
    )

    inlines = [ProfileInline]

    def full_name(self, obj):
        return obj.full_name
    full_name.short_description = _('Full Name')

    def role(self, obj):
        return obj.role
    role.short_description = _('Role')

    def get_inline_instances(self, request, obj=None):
        # The identity bridge creates the profile once the user is saved
        if obj is None:
            return []
        return super().get_inline_instances(request, obj)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'role', 'course', 'joining_date', 'created_at')
    list_filter = ('role', 'course')
    search_fields = ('full_name', 'email', 'mobile_number')
    readonly_fields = ('user', 'created_at', 'updated_at')

    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            super().save_model(request, obj, form, change)
            if obj.role == Role.STUDENT:
                IdentityBridge.link_student(obj)
