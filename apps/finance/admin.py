# apps/finance/admin.py
from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import AlreadyPaid

from .models import Fee, Payment
from .services import PaymentService


class PaymentInline(admin.StackedInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ('student', 'amount', 'paid_on', 'received_by')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Fee)
class FeeAdmin(admin.ModelAdmin):
    list_display = ('student', 'amount', 'due_date', 'status', 'payment_date')
    list_filter = ('status', 'due_date')
    search_fields = ('student__full_name', 'student__email')
    readonly_fields = ('status', 'payment_date', 'created_at', 'updated_at')
    raw_id_fields = ('student',)
    date_hierarchy = 'due_date'
    inlines = [PaymentInline]
    actions = ['record_payment', 'flag_overdue']

    def record_payment(self, request, queryset):
        paid = 0
        for fee in queryset:
            try:
                PaymentService.process_fee_payment(fee.pk, actor=request.user)
                paid += 1
            except AlreadyPaid:
                self.message_user(request, _('Fee %(fee)s was already paid.') % {'fee': fee}, messages.WARNING)
        self.message_user(request, _('Recorded %(count)d payments.') % {'count': paid}, messages.SUCCESS)
    record_payment.short_description = _('Record payment for selected fees')

    def flag_overdue(self, request, queryset):
        updated = PaymentService.mark_overdue_fees()
        self.message_user(request, _('Marked %(count)d fees overdue.') % {'count': updated}, messages.SUCCESS)
    flag_overdue.short_description = _('Mark past-due fees overdue')


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('fee', 'student', 'amount', 'paid_on', 'received_by')
    search_fields = ('student__full_name', 'student__email')
    readonly_fields = ('fee', 'student', 'amount', 'paid_on', 'received_by', 'created_at', 'updated_at')
    date_hierarchy = 'paid_on'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
