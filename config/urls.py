from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Admin site
    path('admin/', admin.site.urls),

    # Identity: profiles, signup, own role
    path('api/users/', include('apps.users.urls')),

    # Student records
    path('api/', include('apps.students.urls')),

    # Rooms, allocations, visitors, maintenance
    path('api/hostels/', include('apps.hostels.urls')),

    # Fees and payments
    path('api/finance/', include('apps.finance.urls')),

    # Attendance sessions, records, leaves, calendar
    path('api/attendance/', include('apps.attendance.urls')),

    # Notices
    path('api/communication/', include('apps.communication.urls')),

    # Universal search
    path('api/', include('apps.core.urls')),

    # Browsable API login
    path('api-auth/', include('rest_framework.urls')),
]

# Admin site customization
admin.site.site_header = 'Hostel Management Administration'
admin.site.site_title = 'Hostel Admin'
admin.site.index_title = 'Welcome to Hostel Management'
