import uuid

import django.db.models.deletion
import django.db.models.expressions
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('hostels', '0001_initial'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AttendanceSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('session_date', models.DateField(db_index=True, verbose_name='session date')),
                ('session_type', models.CharField(choices=[('NightRoll', 'Night Roll'), ('Morning', 'Morning'), ('Evening', 'Evening'), ('Custom', 'Custom')], default='NightRoll', max_length=20, verbose_name='session type')),
                ('block', models.CharField(blank=True, max_length=50, verbose_name='block')),
                ('course', models.CharField(blank=True, max_length=150, verbose_name='course')),
                ('year', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='year')),
                ('scope_key', models.CharField(default='', editable=False, max_length=255, verbose_name='scope key')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='attendance_sessions_created', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='attendance_sessions', to='hostels.room', verbose_name='room')),
            ],
            options={
                'verbose_name': 'Attendance Session',
                'verbose_name_plural': 'Attendance Sessions',
                'ordering': ['-session_date', 'session_type'],
                'constraints': [
                    models.UniqueConstraint(fields=('session_date', 'session_type', 'scope_key'), name='unique_attendance_session_scope'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AttendanceRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('status', models.CharField(choices=[('Present', 'Present'), ('Absent', 'Absent'), ('Late', 'Late'), ('Excused', 'Excused'), ('Holiday', 'Holiday')], default='Present', max_length=10, verbose_name='status')),
                ('late_minutes', models.PositiveIntegerField(default=0, verbose_name='late minutes')),
                ('note', models.TextField(blank=True, verbose_name='note')),
                ('marked_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='marked at')),
                ('marked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='attendance_marked', to=settings.AUTH_USER_MODEL, verbose_name='marked by')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='records', to='attendance.attendancesession', verbose_name='session')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance_records', to='students.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'Attendance Record',
                'verbose_name_plural': 'Attendance Records',
                'ordering': ['session', 'student__full_name'],
                'indexes': [
                    models.Index(fields=['student', 'marked_at'], name='attendance_student_marked_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('session', 'student'), name='unique_attendance_per_session'),
                    models.CheckConstraint(condition=models.Q(('late_minutes__gte', 0)), name='attendance_late_minutes_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Leave',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('start_date', models.DateField(db_index=True, verbose_name='start date')),
                ('end_date', models.DateField(db_index=True, verbose_name='end date')),
                ('reason', models.TextField(blank=True, verbose_name='reason for leave')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_leaves', to=settings.AUTH_USER_MODEL, verbose_name='approved by')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leaves', to='students.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'Leave',
                'verbose_name_plural': 'Leaves',
                'ordering': ['-start_date'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('end_date__gte', django.db.models.expressions.F('start_date'))), name='leave_end_after_start'),
                ],
            },
        ),
    ]
