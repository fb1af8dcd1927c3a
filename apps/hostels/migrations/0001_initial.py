import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('room_number', models.CharField(max_length=20, unique=True, verbose_name='room number')),
                ('room_type', models.CharField(choices=[('Single', 'Single'), ('Double', 'Double'), ('Triple', 'Triple')], default='Single', max_length=20, verbose_name='room type')),
                ('capacity', models.PositiveIntegerField(blank=True, help_text='Defaults from the room type when left empty', validators=[django.core.validators.MinValueValidator(1)], verbose_name='capacity')),
                ('occupants', models.PositiveIntegerField(default=0, editable=False, verbose_name='occupants')),
                ('status', models.CharField(choices=[('Vacant', 'Vacant'), ('Occupied', 'Occupied'), ('Maintenance', 'Maintenance')], db_index=True, default='Vacant', max_length=20, verbose_name='status')),
            ],
            options={
                'verbose_name': 'Room',
                'verbose_name_plural': 'Rooms',
                'ordering': ['room_number'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('capacity__gte', 1)), name='room_capacity_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RoomAllocation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('start_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='start date')),
                ('end_date', models.DateTimeField(blank=True, null=True, verbose_name='end date')),
                ('is_active', models.BooleanField(default=True, verbose_name='is active')),
                ('allocated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='room_allocations_made', to=settings.AUTH_USER_MODEL, verbose_name='allocated by')),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='hostels.room', verbose_name='room')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='students.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'Room Allocation',
                'verbose_name_plural': 'Room Allocations',
                'ordering': ['-start_date'],
                'indexes': [
                    models.Index(fields=['room', 'is_active'], name='allocation_room_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('student',), name='unique_active_allocation_per_student'),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('end_date__isnull', True), ('is_active', True)),
                            models.Q(('end_date__isnull', False), ('is_active', False)),
                            _connector='OR',
                        ),
                        name='allocation_active_iff_open',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Visitor',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('visitor_name', models.CharField(max_length=100, verbose_name='visitor name')),
                ('check_in_time', models.DateTimeField(default=django.utils.timezone.now, verbose_name='check in time')),
                ('check_out_time', models.DateTimeField(blank=True, null=True, verbose_name='check out time')),
                ('status', models.CharField(choices=[('In', 'In'), ('Out', 'Out')], default='In', max_length=5, verbose_name='status')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='visitors', to='students.student', verbose_name='visiting student')),
            ],
            options={
                'verbose_name': 'Visitor',
                'verbose_name_plural': 'Visitors',
                'ordering': ['-check_in_time'],
                'indexes': [
                    models.Index(fields=['student', 'check_in_time'], name='visitor_student_checkin_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MaintenanceRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('issue', models.TextField(verbose_name='issue')),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('In Progress', 'In Progress'), ('Resolved', 'Resolved')], db_index=True, default='Pending', max_length=20, verbose_name='status')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='resolved at')),
                ('reported_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='maintenance_requests', to='students.student', verbose_name='reported by')),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='maintenance_requests', to='hostels.room', verbose_name='room')),
            ],
            options={
                'verbose_name': 'Maintenance Request',
                'verbose_name_plural': 'Maintenance Requests',
                'ordering': ['-created_at'],
            },
        ),
    ]
