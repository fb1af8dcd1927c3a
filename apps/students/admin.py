from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'course', 'contact', 'current_room_number', 'created_at')
    list_filter = ('course',)
    search_fields = ('full_name', 'email', 'contact')
    readonly_fields = ('id', 'created_at', 'updated_at')
    raw_id_fields = ('profile',)

    fieldsets = (
        (_('Student'), {
            'fields': ('id', 'full_name', 'email', 'course', 'contact')
        }),
        (_('Account'), {
            'fields': ('profile',)
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def current_room_number(self, obj):
        room = obj.current_room
        return room.room_number if room else '-'
    current_room_number.short_description = _('Room')
