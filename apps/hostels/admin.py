# apps/hostels/admin.py
from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from .models import MaintenanceRequest, Room, RoomAllocation, Visitor
from .services import AllocationService, update_room_occupancy


class RoomAllocationInline(admin.TabularInline):
    model = RoomAllocation
    extra = 0
    fields = ('student', 'start_date', 'end_date', 'is_active', 'allocated_by')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('room_number', 'room_type', 'capacity', 'occupants', 'status')
    list_filter = ('room_type', 'status')
    search_fields = ('room_number',)
    readonly_fields = ('occupants', 'created_at', 'updated_at')
    inlines = [RoomAllocationInline]
    actions = ['recalculate_occupancy']

    fieldsets = (
        (_('Room'), {
            'fields': ('room_number', 'room_type', 'capacity')
        }),
        (_('Occupancy'), {
            'fields': ('occupants', 'status')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        update_room_occupancy(obj)

    def recalculate_occupancy(self, request, queryset):
        for room in queryset:
            update_room_occupancy(room)
        self.message_user(request, _('Occupancy recalculated for %(count)d rooms.') % {'count': queryset.count()})
    recalculate_occupancy.short_description = _('Recalculate occupancy')


@admin.register(RoomAllocation)
class RoomAllocationAdmin(admin.ModelAdmin):
    list_display = ('student', 'room', 'start_date', 'end_date', 'is_active', 'allocated_by')
    list_filter = ('is_active', 'room')
    search_fields = ('student__full_name', 'student__email', 'room__room_number')
    readonly_fields = ('start_date', 'end_date', 'is_active', 'allocated_by', 'created_at', 'updated_at')
    raw_id_fields = ('student', 'room')
    actions = ['release_allocations']

    def save_model(self, request, obj, form, change):
        if change:
            super().save_model(request, obj, form, change)
            return
        # New allocations go through the capacity checks
        allocation = AllocationService.allocate_room(obj.student_id, obj.room_id, allocated_by=request.user)
        obj.pk = allocation.pk
        obj._state.adding = False

    def release_allocations(self, request, queryset):
        released = 0
        for allocation in queryset.filter(is_active=True):
            AllocationService.release_allocation(allocation.pk)
            released += 1
        self.message_user(request, _('Released %(count)d allocations.') % {'count': released}, messages.SUCCESS)
    release_allocations.short_description = _('Release selected allocations')


@admin.register(Visitor)
class VisitorAdmin(admin.ModelAdmin):
    list_display = ('visitor_name', 'student', 'check_in_time', 'check_out_time', 'status')
    list_filter = ('status', 'check_in_time')
    search_fields = ('visitor_name', 'student__full_name')
    readonly_fields = ('check_out_time', 'status')
    raw_id_fields = ('student',)
    date_hierarchy = 'check_in_time'


@admin.register(MaintenanceRequest)
class MaintenanceRequestAdmin(admin.ModelAdmin):
    list_display = ('issue', 'room', 'reported_by', 'status', 'created_at', 'resolved_at')
    list_filter = ('status',)
    search_fields = ('issue', 'room__room_number', 'reported_by__full_name')
    readonly_fields = ('status', 'resolved_at', 'created_at', 'updated_at')
    raw_id_fields = ('room', 'reported_by')
    actions = ['advance_requests']

    def advance_requests(self, request, queryset):
        advanced = 0
        for maintenance_request in queryset.exclude(status=MaintenanceRequest.Status.RESOLVED):
            maintenance_request.advance()
            advanced += 1
        self.message_user(request, _('Advanced %(count)d requests.') % {'count': advanced}, messages.SUCCESS)
    advance_requests.short_description = _('Advance status of selected requests')
