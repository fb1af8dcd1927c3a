# apps/attendance/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import AttendanceRecord, AttendanceSession, Leave


class AttendanceRecordInline(admin.TabularInline):
    model = AttendanceRecord
    extra = 0
    fields = ('student', 'status', 'late_minutes', 'note', 'marked_at', 'marked_by')
    readonly_fields = ('marked_at', 'marked_by')
    raw_id_fields = ('student',)


@admin.register(AttendanceSession)
class AttendanceSessionAdmin(admin.ModelAdmin):
    list_display = ('session_date', 'session_type', 'block', 'room', 'course', 'year', 'record_count')
    list_filter = ('session_type', 'session_date', 'block')
    search_fields = ('block', 'course', 'room__room_number')
    readonly_fields = ('scope_key', 'created_by', 'created_at', 'updated_at')
    raw_id_fields = ('room',)
    date_hierarchy = 'session_date'
    inlines = [AttendanceRecordInline]

    fieldsets = (
        (_('Session'), {
            'fields': ('session_date', 'session_type')
        }),
        (_('Scope'), {
            'fields': ('block', 'room', 'course', 'year', 'scope_key')
        }),
        (_('Audit'), {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def record_count(self, obj):
        return obj.records.count()
    record_count.short_description = _('Marked')

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ('student', 'session', 'status', 'late_minutes', 'marked_at', 'marked_by')
    list_filter = ('status', 'session__session_type', 'session__session_date')
    search_fields = ('student__full_name', 'student__email', 'note')
    readonly_fields = ('marked_at', 'marked_by')
    raw_id_fields = ('session', 'student')


@admin.register(Leave)
class LeaveAdmin(admin.ModelAdmin):
    list_display = ('student', 'start_date', 'end_date', 'total_days', 'approved_by')
    list_filter = ('start_date',)
    search_fields = ('student__full_name', 'reason')
    readonly_fields = ('approved_by', 'created_at', 'updated_at')
    raw_id_fields = ('student',)
    actions = ['approve_leaves']

    def approve_leaves(self, request, queryset):
        updated = queryset.filter(approved_by__isnull=True).update(approved_by=request.user)
        self.message_user(request, _('Approved %(count)d leaves.') % {'count': updated})
    approve_leaves.short_description = _('Approve selected leaves')
