from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    dependencies = [
        ('academics', '0001_initial'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StudentProgression',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text='When this record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text='When this record was last updated', verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, help_text='IP address from which this record was created', null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, help_text='IP address from which this record was last updated', null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('progression_type', models.CharField(choices=[('PROMOTED', 'Promoted'), ('RETAINED', 'Retained')], db_index=True, max_length=10, verbose_name='Progression Type')),
                ('reason', models.TextField(blank=True, verbose_name='Reason')),
                ('effective_date', models.DateTimeField(db_index=True, verbose_name='Effective Date')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='progressions', to='students.student', verbose_name='Student')),
                ('from_academic_session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='progressions_out', to='academics.academicsession', verbose_name='From Academic Session')),
                ('from_academic_level', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='progressions_out', to='academics.academiclevel', verbose_name='From Academic Level')),
                ('from_class', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='progressions_out', to='academics.class', verbose_name='From Class')),
                ('to_academic_session', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='progressions_in', to='academics.academicsession', verbose_name='To Academic Session')),
                ('to_academic_level', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='progressions_in', to='academics.academiclevel', verbose_name='To Academic Level')),
                ('to_class', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='progressions_in', to='academics.class', verbose_name='To Class')),
                ('processed_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='processed_progressions', to=settings.AUTH_USER_MODEL, verbose_name='Processed By')),
            ],
            options={
                'verbose_name': 'Student Progression',
                'verbose_name_plural': 'Student Progressions',
                'ordering': ['-effective_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['student', 'to_academic_session'], name='progression_student_idx'),
                    models.Index(fields=['to_academic_session', 'progression_type'], name='progression_session_type_idx'),
                ],
            },
        ),
    ]
