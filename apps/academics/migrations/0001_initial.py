from django.db import migrations, models
import django.db.models.deletion
import uuid


def audit_fields():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('created_at', models.DateTimeField(db_index=True, editable=False, help_text='When this record was created', verbose_name='Created At')),
        ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text='When this record was last updated', verbose_name='Updated At')),
        ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
        ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
        ('created_from_ip', models.GenericIPAddressField(blank=True, help_text='IP address from which this record was created', null=True, verbose_name='Created From IP')),
        ('updated_from_ip', models.GenericIPAddressField(blank=True, help_text='IP address from which this record was last updated', null=True, verbose_name='Updated From IP')),
        ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AcademicSession',
            fields=audit_fields() + [
                ('year_name', models.CharField(help_text="E.g., '2024', '2024-2025', '2024/2025'", max_length=20, verbose_name='Academic Year')),
                ('start_date', models.DateField(db_index=True, verbose_name='Start Date')),
                ('end_date', models.DateField(db_index=True, verbose_name='End Date')),
                ('is_current', models.BooleanField(db_index=True, default=False, help_text='Only one session can be current at a time', verbose_name='Is Current')),
                ('is_active', models.BooleanField(db_index=True, default=True, verbose_name='Is Active')),
            ],
            options={
                'verbose_name': 'Academic Session',
                'verbose_name_plural': 'Academic Sessions',
                'ordering': ['-start_date'],
                'indexes': [models.Index(fields=['start_date', 'end_date'], name='session_dates_idx')],
            },
        ),
        migrations.CreateModel(
            name='AcademicLevel',
            fields=audit_fields() + [
                ('name', models.CharField(max_length=50, verbose_name='Level Name')),
                ('code', models.CharField(max_length=10, unique=True, verbose_name='Level Code')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('order', models.PositiveIntegerField(help_text='Numeric level used for ordering', verbose_name='Order')),
                ('is_active', models.BooleanField(default=True, verbose_name='Is Active')),
                ('is_graduation_level', models.BooleanField(default=False, help_text='Whether completing this level constitutes graduation', verbose_name='Is Graduation Level')),
                ('next_level', models.ForeignKey(blank=True, help_text='The level students progress to after completing this one', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='previous_levels', to='academics.academiclevel', verbose_name='Next Level')),
            ],
            options={
                'verbose_name': 'Academic Level',
                'verbose_name_plural': 'Academic Levels',
                'ordering': ['order'],
            },
        ),
        migrations.CreateModel(
            name='Class',
            fields=audit_fields() + [
                ('name', models.CharField(help_text="Stays the same across sessions for the same group, e.g. 'Blue'", max_length=50, verbose_name='Class Name')),
                ('section', models.CharField(blank=True, help_text='E.g., A, B, C (leave blank if no sections)', max_length=10, null=True, verbose_name='Section')),
                ('capacity', models.PositiveIntegerField(blank=True, help_text='Maximum number of students in this class', null=True, verbose_name='Capacity')),
                ('is_active', models.BooleanField(db_index=True, default=True, verbose_name='Is Active')),
                ('academic_level', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='classes', to='academics.academiclevel', verbose_name='Academic Level')),
                ('academic_session', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='classes', to='academics.academicsession', verbose_name='Academic Session')),
            ],
            options={
                'verbose_name': 'Class',
                'verbose_name_plural': 'Classes',
                'ordering': ['academic_level__order', 'name', 'section'],
                'indexes': [models.Index(fields=['academic_level', 'academic_session'], name='class_level_session_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(section__isnull=False), fields=('academic_level', 'academic_session', 'name', 'section'), name='unique_class_with_section'),
                    models.UniqueConstraint(condition=models.Q(section__isnull=True), fields=('academic_level', 'academic_session', 'name'), name='unique_class_without_section'),
                ],
            },
        ),
    ]
