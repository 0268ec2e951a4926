from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('SUPER_ADMIN', 'Super Administrator'), ('ADMINISTRATOR', 'School Administrator'), ('DIRECTOR_STUDIES', 'Director of Studies'), ('REGISTRAR', 'Registrar'), ('HEAD_TEACHER', 'Head Teacher'), ('DEPUTY_HEAD', 'Deputy Head Teacher'), ('HOD', 'Head of Department'), ('TEACHER', 'Teacher'), ('ACCOUNTANT', 'Accountant'), ('RECEPTIONIST', 'Receptionist'), ('SUPPORT_STAFF', 'Support Staff')], default='TEACHER', max_length=30, verbose_name='Role')),
                ('employee_id', models.CharField(blank=True, max_length=30, verbose_name='Employee ID')),
                ('is_active', models.BooleanField(default=True, verbose_name='Is Active')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'User Profile',
                'verbose_name_plural': 'User Profiles',
                'db_table': 'user_profiles',
                'indexes': [models.Index(fields=['role'], name='user_profile_role_idx')],
            },
        ),
    ]
